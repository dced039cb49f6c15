"""Core data models for slippi-moves."""

from dataclasses import dataclass, field
from enum import Enum, IntFlag

from slippi.id import CSSCharacter, Stage

# Frame index of the first recorded frame of every Slippi replay
FIRST_FRAME_INDEX = -123


class Flags(IntFlag):
    """Per-frame state flags observed on a player."""

    NONE = 0
    AIRBORNE = 1
    HITSTUN = 2
    SHIELDING = 4
    FASTFALL = 8
    INVULNERABLE = 16
    L_CANCEL = 32  # Landing lag of this aerial was cancelled


class Button(IntFlag):
    """Logical controller buttons (same bit values as the decoder)."""

    NONE = 0
    DPAD_LEFT = 0x0001
    DPAD_RIGHT = 0x0002
    DPAD_DOWN = 0x0004
    DPAD_UP = 0x0008
    Z = 0x0010
    R = 0x0020
    L = 0x0040
    A = 0x0100
    B = 0x0200
    X = 0x0400
    Y = 0x0800
    START = 0x1000


class MoveCategory(Enum):
    """Broad grouping of move identities."""

    AERIAL = "aerial"
    GROUND = "ground"
    SPECIAL = "special"
    GRAB = "grab"
    THROW = "throw"
    MOVEMENT = "movement"
    DEFENSIVE = "defensive"
    LEDGE = "ledge"
    TECHNIQUE = "technique"


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Stick:
    """Analog stick, each axis in [-1.0, 1.0]."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class FrameRecord:
    """One player's observable state at one frame."""

    frame_index: int
    port: int  # 1-4
    action_state_id: int
    position: Position = field(default_factory=Position)
    facing: int = 1  # 1 = right, -1 = left
    stick: Stick = field(default_factory=Stick)
    buttons: Button = Button.NONE
    flags: Flags = Flags.NONE

    @property
    def airborne(self) -> bool:
        return bool(self.flags & Flags.AIRBORNE)


@dataclass(frozen=True)
class RosterEntry:
    """A player slot in a match.

    Only ``character`` is interpreted; the rest is carried through for
    downstream reporting.
    """

    character: CSSCharacter
    stocks: int | None = None
    costume: int | None = None
    team: str | None = None


@dataclass
class MoveEvent:
    """A detected, time-bounded instance of a move or technique."""

    port: int
    move_id: str
    category: MoveCategory
    start_frame: int
    end_frame: int | None = None

    @property
    def is_open(self) -> bool:
        return self.end_frame is None

    @property
    def frame_count(self) -> int:
        """Number of frames covered (0 while still open)."""
        if self.end_frame is None:
            return 0
        return self.end_frame - self.start_frame + 1

    def close(self, frame_index: int) -> None:
        """Close the interval at ``frame_index`` (inclusive)."""
        if self.end_frame is not None:
            raise ValueError(f"Event {self.move_id}@{self.start_frame} is already closed")
        if frame_index < self.start_frame:
            raise ValueError(
                f"Cannot close {self.move_id}@{self.start_frame} at earlier frame {frame_index}"
            )
        self.end_frame = frame_index


@dataclass
class PlayerMoveStats:
    """Move counts for one player in one match."""

    match_id: str
    port: int
    character: CSSCharacter
    moves: dict[str, int] = field(default_factory=dict)

    def increment(self, move_id: str, count: int = 1) -> None:
        if count < 0:
            raise ValueError("Move counts cannot be decremented")
        self.moves[move_id] = self.moves.get(move_id, 0) + count

    @property
    def total(self) -> int:
        return sum(self.moves.values())


@dataclass
class MatchResult:
    """Output of processing a single match."""

    match_id: str
    roster: dict[int, RosterEntry]
    stats: dict[int, PlayerMoveStats]
    events: list[MoveEvent] = field(default_factory=list)
    stage_id: int | None = None
    duration_frames: int = 0

    @property
    def player_count(self) -> int:
        return len(self.stats)

    def character_stats(self) -> list[tuple[CSSCharacter, PlayerMoveStats]]:
        """Pairs ready for the cross-match reducer, ordered by port."""
        return [(s.character, s) for _, s in sorted(self.stats.items())]


def character_name(character: CSSCharacter) -> str:
    """Lowercase character name, e.g. CAPTAIN_FALCON -> captainfalcon."""
    return character.name.lower().replace("_", "")


def stage_name(stage_id: int | None) -> str | None:
    """Lowercase stage name, e.g. 31 -> battlefield; None when no stage was recorded."""
    if stage_id is None:
        return None
    try:
        return Stage(stage_id).name.lower()
    except ValueError:
        return f"stage_{stage_id}"


@dataclass
class Match:
    """Decoded match ready for processing."""

    match_id: str
    frames: dict[int, list[FrameRecord]]
    roster: dict[int, RosterEntry]
    stage_id: int | None = None
    duration_frames: int = 0
    path: str | None = None
