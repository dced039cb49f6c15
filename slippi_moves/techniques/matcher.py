"""Sliding-window matcher for composite techniques.

Each definition is matched independently with a greedy, earliest-start
scan: a candidate window opens on an element satisfying the first step and
is extended with the earliest element satisfying each following step; the
window is abandoned as soon as the next element is further away than the
step's ``max_gap``. Candidates from all definitions are then resolved so
that a stretch of frames backs at most one technique instance: longer
definitions win, then registry priority, then the earlier start.
"""

from bisect import bisect_right
from collections.abc import Sequence

from slippi.id import CSSCharacter

from slippi_moves.action_states import ActionState
from slippi_moves.models import FrameRecord, MoveEvent
from slippi_moves.techniques.base import (
    JUMP_BUTTONS,
    TAP_JUMP_MIN_Y,
    ElementRun,
    Step,
    TechniqueDefinition,
    TechniqueMatch,
)
from slippi_moves.techniques.registry import TechniqueRegistry


def event_elements(
    step: Step, frames: Sequence[FrameRecord], events: Sequence[MoveEvent]
) -> list[ElementRun]:
    """Element runs for a move step, one per qualifying transition event."""
    positions = {frame.frame_index: pos for pos, frame in enumerate(frames)}
    runs: list[ElementRun] = []
    for event in events:
        if event.move_id not in step.moves or event.end_frame is None:
            continue
        start_pos = positions.get(event.start_frame)
        end_pos = positions.get(event.end_frame)
        if start_pos is None or end_pos is None:
            continue
        if not step.frame_matches(frames[start_pos]):
            continue
        if not _stick_ok(step, frames, start_pos, end_pos):
            continue
        runs.append(ElementRun(event.start_frame, event.end_frame, start_pos, end_pos, event))
    runs.sort(key=lambda run: run.start_frame)
    return runs


def frame_elements(step: Step, frames: Sequence[FrameRecord]) -> list[ElementRun]:
    """Maximal runs of contiguous frames satisfying a frame step.

    With ``split_states`` a run also ends where the action state changes.
    """
    runs: list[ElementRun] = []
    run_start: int | None = None

    for pos, frame in enumerate(frames):
        if step.frame_matches(frame):
            if run_start is None:
                run_start = pos
            elif step.split_states and frame.action_state_id != frames[pos - 1].action_state_id:
                runs.append(_frame_run(frames, run_start, pos - 1))
                run_start = pos
            continue
        if run_start is not None:
            runs.append(_frame_run(frames, run_start, pos - 1))
            run_start = None

    if run_start is not None:
        runs.append(_frame_run(frames, run_start, len(frames) - 1))

    return [run for run in runs if _stick_ok(step, frames, run.start_pos, run.end_pos)]


def _frame_run(frames: Sequence[FrameRecord], start_pos: int, end_pos: int) -> ElementRun:
    return ElementRun(
        start_frame=frames[start_pos].frame_index,
        end_frame=frames[end_pos].frame_index,
        start_pos=start_pos,
        end_pos=end_pos,
    )


def _stick_ok(step: Step, frames: Sequence[FrameRecord], start_pos: int, end_pos: int) -> bool:
    if step.stick is None:
        return True
    last = min(end_pos, start_pos + step.stick_window - 1)
    return any(step.stick.contains(frames[pos].stick) for pos in range(start_pos, last + 1))


def full_hop_before(frames: Sequence[FrameRecord], pos: int) -> bool:
    """Whether the jump that left the ground before ``pos`` was a full hop.

    Hop height is decided on the last jump squat frame: a jump button or
    tap-jump stick still held there gives a full hop. When no jump squat
    precedes the airtime (a fall, or a recording that starts mid-air) the
    hop is not treated as full.
    """
    while pos > 0 and frames[pos - 1].airborne:
        pos -= 1
    if pos == 0:
        return False
    squat = frames[pos - 1]
    if squat.action_state_id != ActionState.KNEE_BEND:
        return False
    return bool(squat.buttons & JUMP_BUTTONS) or squat.stick.y >= TAP_JUMP_MIN_Y


class TechniqueMatcher:
    """Detects composite techniques for one player at a time."""

    def __init__(self, registry: TechniqueRegistry | None = None) -> None:
        if registry is None:
            registry = TechniqueRegistry.with_default_techniques()
        self.registry = registry

    def find_candidates(
        self,
        definition: TechniqueDefinition,
        frames: Sequence[FrameRecord],
        events: Sequence[MoveEvent],
        port: int,
    ) -> list[TechniqueMatch]:
        """All non-overlapping instances of one definition, earliest first."""
        elements = [
            event_elements(step, frames, events) if step.matches_events
            else frame_elements(step, frames)
            for step in definition.steps
        ]
        starts = [[run.start_frame for run in runs] for runs in elements]

        matches: list[TechniqueMatch] = []
        last_end: int | None = None

        for first in elements[0]:
            if last_end is not None and first.start_frame <= last_end:
                continue

            chain = [first]
            for step_idx in range(1, len(definition.steps)):
                step = definition.steps[step_idx]
                previous = chain[-1]
                # Earliest element starting after the previous one ended
                nxt = bisect_right(starts[step_idx], previous.end_frame)
                if nxt >= len(elements[step_idx]):
                    break
                candidate = elements[step_idx][nxt]
                if candidate.gap_after(previous) > step.max_gap:
                    break
                chain.append(candidate)

            if len(chain) != len(definition.steps):
                continue
            if definition.stay_airborne and not all(
                frames[pos].airborne
                for pos in range(chain[0].start_pos, chain[-1].end_pos + 1)
            ):
                continue
            if definition.short_hop and full_hop_before(frames, chain[0].start_pos):
                continue

            matches.append(TechniqueMatch(definition, port, tuple(chain)))
            last_end = chain[-1].end_frame

        return matches

    def find_matches(
        self,
        frames: Sequence[FrameRecord],
        events: Sequence[MoveEvent],
        port: int,
        character: CSSCharacter,
    ) -> list[TechniqueMatch]:
        """Resolved technique instances for one player, ordered by start frame."""
        player_events = [event for event in events if event.port == port]
        priority = {name: idx for idx, name in enumerate(self.registry.technique_names)}

        candidates: list[TechniqueMatch] = []
        for definition in self.registry.definitions:
            if not definition.applies_to(character):
                continue
            candidates.extend(self.find_candidates(definition, frames, player_events, port))

        candidates.sort(key=lambda m: (
            -len(m.definition.steps),
            priority[m.definition.move_id],
            m.start_frame,
        ))

        accepted: list[TechniqueMatch] = []
        for candidate in candidates:
            if any(candidate.conflicts_with(match) for match in accepted):
                continue
            accepted.append(candidate)

        accepted.sort(key=lambda m: (m.start_frame, m.definition.move_id))
        return accepted

    def match(
        self,
        frames: Sequence[FrameRecord],
        events: Sequence[MoveEvent],
        port: int,
        character: CSSCharacter,
    ) -> list[MoveEvent]:
        """Composite technique events for one player."""
        return [m.to_event() for m in self.find_matches(frames, events, port, character)]
