"""Batch driver: runs matches through a fixed-size worker pool.

Each worker processes a chunk of matches with private state, reduces the
chunk to a partial CorpusStats and hands back only that partial plus the
per-match outcomes; the driver performs one final merge. A failed match is
recorded as skipped with its error kind and never aborts the batch.
"""

import logging
import math
import os
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Executor, ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from slippi_moves.aggregator import process_match
from slippi_moves.errors import MatchErrorKind, SlippiMovesError
from slippi_moves.models import Match, MatchResult
from slippi_moves.reducer import CorpusStats, merge, merge_skipped, reduce_results
from slippi_moves.scanner import load_match
from slippi_moves.techniques.registry import TechniqueRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProgressCallback = Callable[[int, int], None]


@dataclass
class MatchOutcome:
    """Result of one match: either processed stats or the reason it was skipped."""

    match_id: str
    path: str | None = None
    result: MatchResult | None = None
    stage_id: int | None = None
    duration_frames: int = 0
    error_kind: MatchErrorKind | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None


@dataclass
class BatchReport:
    """Merged corpus statistics plus every per-match outcome."""

    corpus: CorpusStats = field(default_factory=CorpusStats)
    outcomes: list[MatchOutcome] = field(default_factory=list)

    @property
    def processed(self) -> list[MatchOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def skipped(self) -> list[MatchOutcome]:
        return [o for o in self.outcomes if not o.ok]


def process_one(
    match: Match,
    registry: TechniqueRegistry | None = None,
    keep_events: bool = False,
) -> MatchOutcome:
    """Process a decoded match, converting match errors into a skip."""
    outcome = MatchOutcome(
        match_id=match.match_id,
        path=match.path,
        stage_id=match.stage_id,
        duration_frames=match.duration_frames,
    )
    try:
        outcome.result = process_match(
            match.frames,
            match.roster,
            match_id=match.match_id,
            registry=registry,
            keep_events=keep_events,
            stage_id=match.stage_id,
            duration_frames=match.duration_frames,
        )
    except SlippiMovesError as e:
        outcome.error_kind = e.kind
        outcome.error = str(e)
    return outcome


def analyze_replay(
    replay_path: Path,
    registry: TechniqueRegistry | None = None,
    keep_events: bool = False,
    match_id: str | None = None,
) -> MatchOutcome:
    """Decode and process one replay file."""
    try:
        match = load_match(replay_path, match_id=match_id)
    except SlippiMovesError as e:
        return MatchOutcome(
            match_id=match_id or replay_path.stem,
            path=str(replay_path),
            error_kind=e.kind,
            error=str(e),
        )
    return process_one(match, registry, keep_events)


def reduce_outcomes(outcomes: Iterable[MatchOutcome]) -> CorpusStats:
    """Partial corpus statistics for a set of outcomes."""
    outcomes = list(outcomes)
    corpus = reduce_results(o.result for o in outcomes if o.result is not None)
    skipped = merge_skipped(*(
        {o.match_id: o.error_kind}
        for o in outcomes
        if o.result is None and o.error_kind is not None
    ))
    return CorpusStats(
        characters=corpus.characters,
        match_ids=corpus.match_ids,
        skipped=skipped,
    )


def _match_chunk(
    matches: list[Match], registry: TechniqueRegistry | None, keep_events: bool
) -> tuple[CorpusStats, list[MatchOutcome]]:
    outcomes = [process_one(match, registry, keep_events) for match in matches]
    return reduce_outcomes(outcomes), outcomes


def _replay_chunk(
    replays: list[tuple[Path, str | None]],
    registry: TechniqueRegistry | None,
    keep_events: bool,
) -> tuple[CorpusStats, list[MatchOutcome]]:
    outcomes = [
        analyze_replay(path, registry, keep_events, match_id)
        for path, match_id in replays
    ]
    return reduce_outcomes(outcomes), outcomes


def default_worker_count() -> int:
    """CPU count, capped at 8."""
    return min(os.cpu_count() or 4, 8)


def chunked(items: Sequence[T], chunk_size: int) -> list[list[T]]:
    return [list(items[i:i + chunk_size]) for i in range(0, len(items), chunk_size)]


def _run_chunks(
    worker: Callable[..., tuple[CorpusStats, list[MatchOutcome]]],
    items: Sequence[T],
    registry: TechniqueRegistry | None,
    keep_events: bool,
    max_workers: int | None,
    chunk_size: int | None,
    executor_cls: type[Executor],
    progress_callback: ProgressCallback | None,
) -> BatchReport:
    if not items:
        return BatchReport()

    workers = max_workers or default_worker_count()
    size = chunk_size or max(1, math.ceil(len(items) / (workers * 4)))
    chunks = chunked(items, size)

    partials: list[CorpusStats] = []
    outcomes: list[MatchOutcome] = []
    completed = 0

    with executor_cls(max_workers=workers) as executor:
        futures = {
            executor.submit(worker, chunk, registry, keep_events): len(chunk)
            for chunk in chunks
        }
        for future in as_completed(futures):
            partial, chunk_outcomes = future.result()
            partials.append(partial)
            outcomes.extend(chunk_outcomes)
            completed += futures[future]

            for outcome in chunk_outcomes:
                if not outcome.ok:
                    logger.warning(
                        f"Skipped {outcome.match_id} ({outcome.error_kind}): {outcome.error}"
                    )
            if progress_callback is not None:
                progress_callback(completed, len(items))

    outcomes.sort(key=lambda o: o.match_id)
    logger.info(f"Processed {len(items)} matches in {len(chunks)} chunks with {workers} workers")
    return BatchReport(corpus=merge(*partials), outcomes=outcomes)


def analyze_matches(
    matches: Sequence[Match],
    registry: TechniqueRegistry | None = None,
    keep_events: bool = False,
    max_workers: int | None = None,
    chunk_size: int | None = None,
    executor_cls: type[Executor] = ProcessPoolExecutor,
    progress_callback: ProgressCallback | None = None,
) -> BatchReport:
    """Process already-decoded matches in parallel.

    Args:
        matches: Decoded matches
        registry: Technique definitions (defaults to the built-in set)
        keep_events: Keep raw move events on each MatchResult
        max_workers: Pool size (default: CPU count, max 8)
        chunk_size: Matches per worker task (default: about four tasks per worker)
        executor_cls: concurrent.futures executor to use
        progress_callback: Called with (completed, total) after each chunk

    Returns:
        BatchReport with merged CorpusStats and per-match outcomes
    """
    return _run_chunks(
        _match_chunk, list(matches), registry, keep_events,
        max_workers, chunk_size, executor_cls, progress_callback,
    )


def analyze_replays(
    replay_paths: Sequence[Path],
    registry: TechniqueRegistry | None = None,
    keep_events: bool = False,
    max_workers: int | None = None,
    chunk_size: int | None = None,
    executor_cls: type[Executor] = ProcessPoolExecutor,
    progress_callback: ProgressCallback | None = None,
    root: Path | None = None,
) -> BatchReport:
    """Decode and process replay files in parallel.

    Match ids are paths relative to ``root`` when given (so equally named
    files in different folders stay distinct), otherwise file stems.
    """
    items = [
        (path, path.relative_to(root).as_posix() if root is not None else None)
        for path in replay_paths
    ]
    return _run_chunks(
        _replay_chunk, items, registry, keep_events,
        max_workers, chunk_size, executor_cls, progress_callback,
    )
