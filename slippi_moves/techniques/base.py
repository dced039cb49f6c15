"""Declarative building blocks for composite technique definitions."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from slippi.id import CSSCharacter

from slippi_moves.models import Button, Flags, FrameRecord, MoveCategory, MoveEvent, Stick


@dataclass(frozen=True)
class StickRegion:
    """Rectangle-ish region of the analog stick.

    ``min_abs_x`` requires a horizontal component in either direction, which
    is how diagonal inputs are expressed without caring about facing.
    """

    min_abs_x: float = 0.0
    min_y: float = -1.0
    max_y: float = 1.0

    def contains(self, stick: Stick) -> bool:
        return abs(stick.x) >= self.min_abs_x and self.min_y <= stick.y <= self.max_y


# Down-left or down-right, e.g. the air dodge angle of a wavedash
DOWN_DIAGONAL = StickRegion(min_abs_x=0.3, max_y=-0.3)

# Jump inputs; still held on the last jump squat frame means a full hop
JUMP_BUTTONS = Button.X | Button.Y
TAP_JUMP_MIN_Y = 0.66


@dataclass(frozen=True)
class Step:
    """One required element of a technique.

    A step either names move ids, matched against transition-level move
    events, or describes a frame predicate (action states, flags, held
    buttons), matched against runs of contiguous frames satisfying it.
    Flag and button constraints of a move step apply to the event's first
    frame. ``max_gap`` is the number of frames allowed strictly between the
    previous element's last frame and this element's first frame; it is
    ignored on the first step. ``split_states`` keeps a frame run to a
    single action state, so a landing does not run on into standing idle.
    """

    moves: frozenset[str] = frozenset()
    states: frozenset[int] = frozenset()
    required_flags: Flags = Flags.NONE
    forbidden_flags: Flags = Flags.NONE
    buttons: Button = Button.NONE
    stick: StickRegion | None = None
    stick_window: int = 1
    max_gap: int = 0
    split_states: bool = False

    def __post_init__(self) -> None:
        if self.moves and self.states:
            raise ValueError("A step matches either move events or action states, not both")
        if not (
            self.moves
            or self.states
            or self.required_flags
            or self.forbidden_flags
            or self.buttons
        ):
            raise ValueError("A step needs at least one condition")
        if self.max_gap < 0:
            raise ValueError("max_gap cannot be negative")
        if self.stick_window < 1:
            raise ValueError("stick_window must be at least one frame")

    @property
    def matches_events(self) -> bool:
        return bool(self.moves)

    def frame_matches(self, frame: FrameRecord) -> bool:
        """Flag and button constraints, plus the state set for frame steps."""
        if self.states and frame.action_state_id not in self.states:
            return False
        if frame.flags & self.required_flags != self.required_flags:
            return False
        if frame.flags & self.forbidden_flags:
            return False
        if self.buttons and not frame.buttons & self.buttons:
            return False
        return True


@dataclass(frozen=True)
class ElementRun:
    """A contiguous stretch of frames that satisfied one step.

    ``start_pos``/``end_pos`` index into the player's frame list.
    """

    start_frame: int
    end_frame: int
    start_pos: int
    end_pos: int
    event: MoveEvent | None = field(default=None, compare=False)

    def gap_after(self, previous: "ElementRun") -> int:
        """Frames strictly between ``previous`` and this run."""
        return self.start_frame - previous.end_frame - 1

    def overlaps(self, other: "ElementRun") -> bool:
        return self.start_frame <= other.end_frame and other.start_frame <= self.end_frame


@dataclass(frozen=True)
class TechniqueDefinition:
    """A composite technique: ordered steps within bounded frame gaps."""

    move_id: str
    steps: tuple[Step, ...]
    characters: frozenset[CSSCharacter] | None = None  # None = every character
    stay_airborne: bool = False
    short_hop: bool = False  # Reject instances whose jump was a full hop
    description: str = ""

    def __post_init__(self) -> None:
        if not self.steps:
            raise ValueError(f"Technique {self.move_id} has no steps")

    def applies_to(self, character: CSSCharacter) -> bool:
        return self.characters is None or character in self.characters

    @property
    def max_gaps(self) -> list[int]:
        """Gap tolerance of every step after the first."""
        return [step.max_gap for step in self.steps[1:]]


@dataclass(frozen=True)
class TechniqueMatch:
    """One detected instance of a technique for one player."""

    definition: TechniqueDefinition
    port: int
    elements: tuple[ElementRun, ...]

    @property
    def start_frame(self) -> int:
        return self.elements[0].start_frame

    @property
    def end_frame(self) -> int:
        return self.elements[-1].end_frame

    def conflicts_with(self, other: "TechniqueMatch") -> bool:
        """True when any underlying element run is shared (overlapping frames)."""
        return any(a.overlaps(b) for a in self.elements for b in other.elements)

    def to_event(self) -> MoveEvent:
        return MoveEvent(
            port=self.port,
            move_id=self.definition.move_id,
            category=MoveCategory.TECHNIQUE,
            start_frame=self.start_frame,
            end_frame=self.end_frame,
        )


def gap_tolerances(max_gaps: int | Sequence[int], step_count: int) -> list[int]:
    """Normalize a scalar or per-step gap setting for ``step_count`` steps."""
    if isinstance(max_gaps, int):
        return [max_gaps] * (step_count - 1)
    gaps = list(max_gaps)
    if len(gaps) != step_count - 1:
        raise ValueError(
            f"Expected {step_count - 1} gap tolerances, got {len(gaps)}"
        )
    return gaps
