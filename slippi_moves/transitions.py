"""Transition detector: turns a classified frame stream into move events."""

from collections.abc import Iterable

from slippi.id import CSSCharacter

from slippi_moves.classifier import category_of, classify_frame
from slippi_moves.models import FrameRecord, MoveEvent


class TransitionTracker:
    """Per-player transition state.

    An event opens on the first frame whose classified move differs from the
    previous frame's and closes on the frame before the classification
    changes again, so a move held for 40 frames is one event.
    """

    def __init__(self, port: int, character: CSSCharacter) -> None:
        self.port = port
        self.character = character
        self.last_action_state_id: int | None = None
        self.last_move_id: str | None = None
        self.last_frame_index: int | None = None
        self.current_open_event: MoveEvent | None = None
        self.events: list[MoveEvent] = []

    def feed(self, frame: FrameRecord) -> MoveEvent | None:
        """Consume the next frame. Returns the event opened on this frame, if any."""
        move_id = classify_frame(frame, self.character)
        opened: MoveEvent | None = None

        if self.last_frame_index is None or move_id != self.last_move_id:
            self._close_open_event()
            if move_id is not None:
                opened = MoveEvent(
                    port=self.port,
                    move_id=move_id,
                    category=category_of(move_id),
                    start_frame=frame.frame_index,
                )
                self.current_open_event = opened
                self.events.append(opened)

        self.last_action_state_id = frame.action_state_id
        self.last_move_id = move_id
        self.last_frame_index = frame.frame_index
        return opened

    def finish(self) -> list[MoveEvent]:
        """Close any still-open event at the last observed frame."""
        self._close_open_event()
        return self.events

    def _close_open_event(self) -> None:
        if self.current_open_event is not None and self.last_frame_index is not None:
            self.current_open_event.close(self.last_frame_index)
        self.current_open_event = None


def detect_transitions(
    frames: Iterable[FrameRecord], port: int, character: CSSCharacter
) -> list[MoveEvent]:
    """Run a fresh tracker over one player's ordered frames."""
    tracker = TransitionTracker(port, character)
    for frame in frames:
        tracker.feed(frame)
    return tracker.finish()
