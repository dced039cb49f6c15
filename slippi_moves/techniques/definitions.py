"""Default composite technique definitions.

Gap tolerances are in frames (60 per second) and can be overridden per
technique through ``TechniqueRegistry.configure`` or the config file.
"""

from slippi.id import CSSCharacter

from slippi_moves.action_states import (
    AERIAL_LANDING_STATES,
    AIRDODGE_LANDING_STATES,
    DOUBLE_JUMP_STATES,
    FALL_STATES,
    LEDGE_HANG_STATES,
    ActionState,
)
from slippi_moves.models import Flags
from slippi_moves.techniques.base import DOWN_DIAGONAL, Step, TechniqueDefinition

SPACIES = frozenset({CSSCharacter.FOX, CSSCharacter.FALCO})

AERIALS = frozenset({"nair", "fair", "bair", "uair", "dair"})

# Frames allowed between the two lasers of one short hop
SHDL_MAX_GAP = 40

# Airborne frames tolerated before the air dodge input (0 = frame-perfect)
WAVEDASH_MAX_LATE_FRAMES = 5

# Air dodge -> landing; the landing is normally the very next frame
AIRDODGE_LANDING_MAX_GAP = 1

# Shine -> jump squat when jump-cancelling the reflector
SHINE_JUMP_MAX_GAP = 2

# Ledge drop -> double jump for a ledgedash
LEDGEDASH_JUMP_MAX_GAP = 20
LEDGEDASH_AIRDODGE_MAX_GAP = 10

# Aerial animation -> landing lag
L_CANCEL_MAX_GAP = 0

_JUMP_SQUAT = frozenset({ActionState.KNEE_BEND})
_AIRDODGE = frozenset({ActionState.ESCAPE_AIR})

# The landing element covers only the first landing state, not the idle after it
_AIRDODGE_LANDING = Step(
    states=AIRDODGE_LANDING_STATES,
    max_gap=AIRDODGE_LANDING_MAX_GAP,
    split_states=True,
)

SHDL = TechniqueDefinition(
    move_id="shdl",
    steps=(
        Step(moves=frozenset({"laser"}), required_flags=Flags.AIRBORNE),
        Step(moves=frozenset({"laser"}), required_flags=Flags.AIRBORNE, max_gap=SHDL_MAX_GAP),
    ),
    characters=SPACIES,
    stay_airborne=True,
    short_hop=True,
    description="Two lasers fired inside a single short hop",
)

WAVESHINE = TechniqueDefinition(
    move_id="waveshine",
    steps=(
        Step(moves=frozenset({"shine"})),
        Step(states=_JUMP_SQUAT, max_gap=SHINE_JUMP_MAX_GAP),
        Step(
            states=_AIRDODGE,
            stick=DOWN_DIAGONAL,
            stick_window=2,
            max_gap=WAVEDASH_MAX_LATE_FRAMES,
        ),
        _AIRDODGE_LANDING,
    ),
    characters=SPACIES,
    description="Shine, jump-cancelled into a wavedash",
)

MULTISHINE = TechniqueDefinition(
    move_id="multishine",
    steps=(
        Step(moves=frozenset({"shine"})),
        Step(states=_JUMP_SQUAT, max_gap=SHINE_JUMP_MAX_GAP),
        Step(moves=frozenset({"shine"}), max_gap=SHINE_JUMP_MAX_GAP),
    ),
    characters=SPACIES,
    description="Shine, jump-cancelled into another shine",
)

WAVEDASH = TechniqueDefinition(
    move_id="wavedash",
    steps=(
        Step(states=_JUMP_SQUAT),
        Step(
            states=_AIRDODGE,
            stick=DOWN_DIAGONAL,
            stick_window=2,
            max_gap=WAVEDASH_MAX_LATE_FRAMES,
        ),
        _AIRDODGE_LANDING,
    ),
    description="Jump squat into a diagonal air dodge into the ground",
)

WAVELAND = TechniqueDefinition(
    move_id="waveland",
    steps=(
        Step(
            states=_AIRDODGE,
            required_flags=Flags.AIRBORNE,
            stick=DOWN_DIAGONAL,
            stick_window=2,
        ),
        _AIRDODGE_LANDING,
    ),
    description="Diagonal air dodge into the ground from a jump or fall",
)

L_CANCEL = TechniqueDefinition(
    move_id="l_cancel",
    steps=(
        Step(moves=AERIALS),
        Step(
            states=AERIAL_LANDING_STATES,
            required_flags=Flags.L_CANCEL,
            max_gap=L_CANCEL_MAX_GAP,
        ),
    ),
    description="Aerial whose landing lag was cancelled",
)

LEDGEDASH = TechniqueDefinition(
    move_id="ledgedash",
    steps=(
        Step(states=LEDGE_HANG_STATES),
        Step(states=FALL_STATES),
        Step(states=DOUBLE_JUMP_STATES, max_gap=LEDGEDASH_JUMP_MAX_GAP),
        Step(states=_AIRDODGE, max_gap=LEDGEDASH_AIRDODGE_MAX_GAP),
        _AIRDODGE_LANDING,
    ),
    description="Drop from ledge, double jump, air dodge onto stage",
)

# Registration order doubles as priority among equally long definitions
DEFAULT_TECHNIQUES: tuple[TechniqueDefinition, ...] = (
    LEDGEDASH,
    WAVESHINE,
    MULTISHINE,
    WAVEDASH,
    SHDL,
    L_CANCEL,
    WAVELAND,
)
