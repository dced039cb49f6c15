"""CLI interface for slippi-moves."""

import logging
from pathlib import Path

import click

from slippi_moves.aggregator import process_match
from slippi_moves.batch import MatchOutcome, analyze_replays, default_worker_count
from slippi_moves.config import Config, build_registry, get_default_config_path, load_config
from slippi_moves.database import MatchDatabase
from slippi_moves.errors import SlippiMovesError
from slippi_moves.report import FORMATS, render_corpus, render_match
from slippi_moves.scanner import find_replays, load_match


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--config",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to config file",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """Slippi-moves: Extract and aggregate move usage from Slippi replays."""
    ctx.ensure_object(dict)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config_path = config or get_default_config_path()
    ctx.obj["config"] = load_config(config_path)


def _emit(text: str, output: Path | None) -> None:
    if output is None:
        click.echo(text, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text)
    click.echo(f"Output saved to {output}")


def _store_outcome(database: MatchDatabase, outcome: MatchOutcome, mtime: float) -> None:
    path = Path(outcome.path) if outcome.path else None
    if outcome.result is None:
        if outcome.error_kind is not None:
            database.store_skipped(outcome.match_id, outcome.error_kind, outcome.error, path, mtime)
        return

    roster_details = {
        port: (entry.stocks, entry.costume, entry.team)
        for port, entry in outcome.result.roster.items()
    }
    database.store_match(
        outcome.match_id,
        outcome.result.stats,
        roster_details=roster_details,
        path=path,
        mtime=mtime,
        stage=outcome.stage_id,
        duration_frames=outcome.duration_frames,
    )


@main.command()
@click.argument("replay_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--full-rescan", is_flag=True, help="Re-process all files, ignoring cache")
@click.option(
    "--db",
    type=click.Path(path_type=Path),
    default=None,
    help="Database path",
)
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of parallel workers (default: CPU count, max 8)",
)
@click.pass_context
def analyze(
    ctx: click.Context,
    replay_dir: Path,
    full_rescan: bool,
    db: Path | None,
    workers: int | None,
) -> None:
    """Extract move statistics from every replay in a directory."""
    cfg: Config = ctx.obj["config"]

    db_path = db or cfg.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    click.echo(f"Scanning {replay_dir}...")
    click.echo(f"Database: {db_path}")

    database = MatchDatabase(db_path)
    database.initialize()

    if full_rescan:
        click.echo("Full rescan enabled")

    replay_files = find_replays(replay_dir)
    click.echo(f"Found {len(replay_files)} replay files")

    mtimes: dict[str, float] = {}
    to_process: list[Path] = []
    for replay_path in replay_files:
        mtime = replay_path.stat().st_mtime
        if not full_rescan and not database.needs_scan(replay_path, mtime):
            continue
        mtimes[str(replay_path)] = mtime
        to_process.append(replay_path)

    if not to_process:
        click.echo("All replays already processed")
        return

    max_workers = workers or cfg.workers or default_worker_count()
    click.echo(f"Processing {len(to_process)} replays with {max_workers} workers...")

    def progress_callback(completed: int, total: int) -> None:
        click.echo(f"  Progress: {completed}/{total}")

    report = analyze_replays(
        to_process,
        registry=build_registry(cfg),
        max_workers=max_workers,
        chunk_size=cfg.chunk_size,
        progress_callback=progress_callback,
        root=replay_dir,
    )

    for outcome in report.outcomes:
        _store_outcome(database, outcome, mtimes.get(outcome.path or "", 0.0))
    database.close()

    click.echo(f"Processed {len(report.processed)} matches, skipped {len(report.skipped)}")
    for outcome in report.skipped:
        kind = outcome.error_kind.value if outcome.error_kind else "unknown"
        click.echo(f"  Skipped {outcome.match_id}: {kind}", err=True)


@main.command()
@click.option(
    "--db",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Database path",
)
@click.option("--format", "fmt", type=click.Choice(FORMATS), default=None, help="Output format")
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None, help="Output file")
@click.pass_context
def stats(ctx: click.Context, db: Path | None, fmt: str | None, output: Path | None) -> None:
    """Show corpus-wide move statistics from processed matches."""
    cfg: Config = ctx.obj["config"]
    db_path = db or cfg.db_path
    if not db_path.exists():
        raise click.ClickException(f"Database not found: {db_path}")

    database = MatchDatabase(db_path)
    corpus = database.load_corpus()
    database.close()

    _emit(render_corpus(corpus, fmt or cfg.output_format), output)


@main.command()
@click.argument("replay", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", type=click.Choice(FORMATS), default=None, help="Output format")
@click.option("--events", is_flag=True, help="Include raw move events")
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None, help="Output file")
@click.pass_context
def parse(
    ctx: click.Context,
    replay: Path,
    fmt: str | None,
    events: bool,
    output: Path | None,
) -> None:
    """Extract per-player move counts from a single replay."""
    cfg: Config = ctx.obj["config"]

    try:
        match = load_match(replay)
        result = process_match(
            match.frames,
            match.roster,
            match_id=match.match_id,
            registry=build_registry(cfg),
            keep_events=events or cfg.keep_events,
            stage_id=match.stage_id,
            duration_frames=match.duration_frames,
        )
    except SlippiMovesError as e:
        raise click.ClickException(str(e)) from e

    _emit(render_match(result, fmt or cfg.output_format), output)


if __name__ == "__main__":
    main()
