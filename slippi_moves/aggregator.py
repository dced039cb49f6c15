"""Per-match pipeline: frames -> move events -> per-player move counts."""

from collections.abc import Iterable, Mapping, Sequence

from slippi.id import CSSCharacter

from slippi_moves.errors import OutOfOrderFramesError, UnknownPortError
from slippi_moves.models import FrameRecord, MatchResult, MoveEvent, PlayerMoveStats, RosterEntry
from slippi_moves.techniques.matcher import TechniqueMatcher
from slippi_moves.techniques.registry import TechniqueRegistry
from slippi_moves.transitions import detect_transitions


def normalize_roster(
    roster: Mapping[int, RosterEntry | CSSCharacter],
) -> dict[int, RosterEntry]:
    """Accept either bare characters or full roster entries per port."""
    return {
        port: entry if isinstance(entry, RosterEntry) else RosterEntry(character=entry)
        for port, entry in roster.items()
    }


def aggregate_events(
    events: Iterable[MoveEvent],
    roster: Mapping[int, RosterEntry],
    match_id: str = "",
) -> dict[int, PlayerMoveStats]:
    """Count events per port and move id, regardless of event duration.

    Every roster port gets an entry, even without events. Raises
    UnknownPortError if an event references a port outside the roster.
    """
    stats = {
        port: PlayerMoveStats(match_id=match_id, port=port, character=entry.character)
        for port, entry in roster.items()
    }
    for event in events:
        player_stats = stats.get(event.port)
        if player_stats is None:
            raise UnknownPortError(event.port, list(roster), match_id)
        player_stats.increment(event.move_id)
    return stats


def group_frames(
    frames: Mapping[int, Sequence[FrameRecord]] | Iterable[FrameRecord],
    roster: Mapping[int, RosterEntry],
    match_id: str = "",
) -> dict[int, list[FrameRecord]]:
    """Group records by their own port and validate ordering.

    Raises UnknownPortError for records outside the roster and
    OutOfOrderFramesError when frame indices do not strictly increase.
    """
    if isinstance(frames, Mapping):
        records: Iterable[FrameRecord] = (r for records in frames.values() for r in records)
    else:
        records = frames

    grouped: dict[int, list[FrameRecord]] = {}
    for record in records:
        if record.port not in roster:
            raise UnknownPortError(record.port, list(roster), match_id)
        player_frames = grouped.setdefault(record.port, [])
        if player_frames and record.frame_index <= player_frames[-1].frame_index:
            raise OutOfOrderFramesError(
                record.port, player_frames[-1].frame_index, record.frame_index, match_id
            )
        player_frames.append(record)
    return grouped


def process_match(
    frames: Mapping[int, Sequence[FrameRecord]] | Iterable[FrameRecord],
    roster: Mapping[int, RosterEntry | CSSCharacter],
    match_id: str = "",
    registry: TechniqueRegistry | None = None,
    keep_events: bool = False,
    stage_id: int | None = None,
    duration_frames: int | None = None,
) -> MatchResult:
    """Classify, detect transitions and techniques, and count moves for one match.

    Args:
        frames: Frame records per port (or a flat iterable of records), each
            player's records ordered by frame index
        roster: Port -> character (or RosterEntry)
        match_id: Identifier carried into the stats
        registry: Technique definitions (defaults to the built-in set)
        keep_events: Return the raw move events alongside the counts
        stage_id: Stage the match was played on, if known
        duration_frames: Length of the replay; defaults to the number of
            distinct frame indices observed

    Returns:
        MatchResult with a PlayerMoveStats per roster port

    Raises:
        UnknownPortError: a record references a port absent from the roster
        OutOfOrderFramesError: a player's frame indices do not strictly increase
    """
    entries = normalize_roster(roster)
    grouped = group_frames(frames, entries, match_id)
    matcher = TechniqueMatcher(registry)

    events: list[MoveEvent] = []
    for port, player_frames in sorted(grouped.items()):
        character = entries[port].character
        transitions = detect_transitions(player_frames, port, character)
        techniques = matcher.match(player_frames, transitions, port, character)
        events.extend(transitions)
        events.extend(techniques)

    events.sort(key=lambda e: (e.start_frame, e.port, e.move_id))
    stats = aggregate_events(events, entries, match_id)

    if duration_frames is None:
        duration_frames = len({r.frame_index for records in grouped.values() for r in records})

    return MatchResult(
        match_id=match_id,
        roster=entries,
        stats=stats,
        events=events if keep_events else [],
        stage_id=stage_id,
        duration_frames=duration_frames,
    )
