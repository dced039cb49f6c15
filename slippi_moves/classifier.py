"""Action-state classifier: maps one frame to a move identity.

Lookup is two-level: the character's own table first, then the default
table; anything else is untracked (``None``). Character-specific action
states start at id 341 and reuse the same numbers with different meanings
per character, so special moves live only in the per-character tables.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from slippi.id import CSSCharacter

from slippi_moves.action_states import ActionState
from slippi_moves.models import Flags, FrameRecord, MoveCategory


@dataclass(frozen=True)
class MoveDefinition:
    """Maps an inclusive action state id range to a move id."""

    first_state: int
    last_state: int
    move_id: str
    category: MoveCategory
    required_flags: Flags = Flags.NONE
    forbidden_flags: Flags = Flags.NONE

    def __post_init__(self) -> None:
        if self.last_state < self.first_state:
            raise ValueError(
                f"Empty state range {self.first_state}-{self.last_state} for {self.move_id}"
            )

    def accepts(self, flags: Flags) -> bool:
        """Whether the frame flags satisfy this entry's flag constraints."""
        return (
            flags & self.required_flags == self.required_flags
            and not flags & self.forbidden_flags
        )


def move(
    states: int | tuple[int, int],
    move_id: str,
    category: MoveCategory,
    required_flags: Flags = Flags.NONE,
    forbidden_flags: Flags = Flags.NONE,
) -> MoveDefinition:
    """Shorthand for a table entry covering one state or an inclusive range."""
    if isinstance(states, tuple):
        first, last = states
    else:
        first = last = states
    return MoveDefinition(first, last, move_id, category, required_flags, forbidden_flags)


class MoveTable:
    """Immutable action state id -> move definition index."""

    def __init__(self, definitions: Iterable[MoveDefinition]) -> None:
        index: dict[int, list[MoveDefinition]] = {}
        for definition in definitions:
            for state_id in range(definition.first_state, definition.last_state + 1):
                index.setdefault(state_id, []).append(definition)
        self._index: Mapping[int, tuple[MoveDefinition, ...]] = MappingProxyType(
            {state_id: tuple(defs) for state_id, defs in index.items()}
        )

    def lookup(self, action_state_id: int, flags: Flags = Flags.NONE) -> MoveDefinition | None:
        """First definition for the state whose flag constraints hold."""
        for definition in self._index.get(action_state_id, ()):
            if definition.accepts(flags):
                return definition
        return None

    def definitions(self) -> list[MoveDefinition]:
        seen: dict[int, MoveDefinition] = {}
        for defs in self._index.values():
            for definition in defs:
                seen.setdefault(id(definition), definition)
        return list(seen.values())

    def __contains__(self, action_state_id: int) -> bool:
        return action_state_id in self._index


A = ActionState
C = MoveCategory

DEFAULT_TABLE = MoveTable([
    # Ground attacks
    move((A.ATTACK_11, A.ATTACK_100_END), "jab", C.GROUND),
    move(A.ATTACK_DASH, "dash_attack", C.GROUND),
    move((A.ATTACK_S_3_HI, A.ATTACK_S_3_LW), "ftilt", C.GROUND),
    move(A.ATTACK_HI_3, "utilt", C.GROUND),
    move(A.ATTACK_LW_3, "dtilt", C.GROUND),
    move((A.ATTACK_S_4_HI, A.ATTACK_S_4_LW), "fsmash", C.GROUND),
    move(A.ATTACK_HI_4, "usmash", C.GROUND),
    move(A.ATTACK_LW_4, "dsmash", C.GROUND),
    # Aerials
    move(A.ATTACK_AIR_N, "nair", C.AERIAL),
    move(A.ATTACK_AIR_F, "fair", C.AERIAL),
    move(A.ATTACK_AIR_B, "bair", C.AERIAL),
    move(A.ATTACK_AIR_HI, "uair", C.AERIAL),
    move(A.ATTACK_AIR_LW, "dair", C.AERIAL),
    # Grabs and throws
    move(A.CATCH, "grab", C.GRAB),
    move(A.CATCH_DASH, "dash_grab", C.GRAB),
    move(A.THROW_F, "fthrow", C.THROW),
    move(A.THROW_B, "bthrow", C.THROW),
    move(A.THROW_HI, "uthrow", C.THROW),
    move(A.THROW_LW, "dthrow", C.THROW),
    # Movement
    move(A.DASH, "dash", C.MOVEMENT),
    move((A.JUMP_F, A.JUMP_B), "jump", C.MOVEMENT),
    move((A.JUMP_AERIAL_F, A.JUMP_AERIAL_B), "double_jump", C.MOVEMENT),
    # Defensive
    move((A.GUARD_ON, A.GUARD_REFLECT), "shield", C.DEFENSIVE, forbidden_flags=Flags.HITSTUN),
    move((A.ESCAPE_F, A.ESCAPE_B), "roll", C.DEFENSIVE),
    move(A.ESCAPE, "spotdodge", C.DEFENSIVE),
    move(A.ESCAPE_AIR, "airdodge", C.DEFENSIVE),
    move(A.PASSIVE, "tech", C.DEFENSIVE),
    move((A.PASSIVE_STAND_F, A.PASSIVE_STAND_B), "tech_roll", C.DEFENSIVE),
    move((A.PASSIVE_WALL, A.PASSIVE_CEIL), "wall_tech", C.DEFENSIVE),
    # Ledge options
    move((A.CLIFF_CLIMB_QUICK, A.CLIFF_CLIMB_SLOW), "ledge_getup", C.LEDGE),
    move((A.CLIFF_ATTACK_QUICK, A.CLIFF_ATTACK_SLOW), "ledge_attack", C.LEDGE),
    move((A.CLIFF_ESCAPE_QUICK, A.CLIFF_ESCAPE_SLOW), "ledge_roll", C.LEDGE),
    move((A.CLIFF_JUMP_QUICK_1, A.CLIFF_JUMP_SLOW_2), "ledge_jump", C.LEDGE),
])

_SPACIE_SPECIALS = [
    move((341, 346), "laser", C.SPECIAL),
    move((353, 358), "up_b", C.SPECIAL),
    move((359, 369), "shine", C.SPECIAL),
]

_FIRE_EMBLEM_SPECIALS = [
    move((341, 348), "neutral_b", C.SPECIAL),
    move((349, 366), "side_b", C.SPECIAL),
    move((367, 368), "up_b", C.SPECIAL),
    move((369, 372), "counter", C.SPECIAL),
]

CHARACTER_TABLES: Mapping[CSSCharacter, MoveTable] = MappingProxyType({
    CSSCharacter.FOX: MoveTable(_SPACIE_SPECIALS + [
        move((347, 352), "illusion", C.SPECIAL),
    ]),
    CSSCharacter.FALCO: MoveTable(_SPACIE_SPECIALS + [
        move((347, 352), "phantasm", C.SPECIAL),
    ]),
    CSSCharacter.MARTH: MoveTable(_FIRE_EMBLEM_SPECIALS),
    CSSCharacter.ROY: MoveTable(_FIRE_EMBLEM_SPECIALS),
    CSSCharacter.SHEIK: MoveTable([
        move((341, 346), "needles", C.SPECIAL),
        move((347, 351), "chain", C.SPECIAL),
        move((352, 355), "vanish", C.SPECIAL),
        move((356, 359), "transform", C.SPECIAL),
    ]),
    CSSCharacter.PEACH: MoveTable([
        move(341, "float", C.MOVEMENT, required_flags=Flags.AIRBORNE),
        move((351, 352), "turnip", C.SPECIAL),
        move((353, 359), "peach_bomber", C.SPECIAL),
        move((360, 364), "parasol", C.SPECIAL),
        move((365, 370), "toad", C.SPECIAL),
    ]),
    CSSCharacter.CAPTAIN_FALCON: MoveTable([
        move((347, 348), "falcon_punch", C.SPECIAL),
        move((349, 352), "raptor_boost", C.SPECIAL),
        move((353, 356), "falcon_dive", C.SPECIAL),
        move((357, 362), "falcon_kick", C.SPECIAL),
    ]),
    CSSCharacter.JIGGLYPUFF: MoveTable([
        move((341, 352), "rollout", C.SPECIAL),
        move((353, 354), "pound", C.SPECIAL),
        move((355, 358), "sing", C.SPECIAL),
        move((359, 362), "rest", C.SPECIAL),
    ]),
    CSSCharacter.SAMUS: MoveTable([
        move((341, 346), "charge_shot", C.SPECIAL),
        move((347, 350), "missile", C.SPECIAL),
        move((351, 354), "screw_attack", C.SPECIAL),
        move((355, 356), "bomb", C.SPECIAL),
    ]),
})

del A, C


def _build_categories() -> Mapping[str, MoveCategory]:
    categories: dict[str, MoveCategory] = {}
    for table in [DEFAULT_TABLE, *CHARACTER_TABLES.values()]:
        for definition in table.definitions():
            categories.setdefault(definition.move_id, definition.category)
    return MappingProxyType(categories)


MOVE_CATEGORIES = _build_categories()


def category_of(move_id: str) -> MoveCategory:
    """Category of a move id produced by the classifier tables.

    Ids that no table produces are composite techniques.
    """
    return MOVE_CATEGORIES.get(move_id, MoveCategory.TECHNIQUE)


def lookup_move(
    character: CSSCharacter, action_state_id: int, flags: Flags = Flags.NONE
) -> MoveDefinition | None:
    """Per-character table first, then the default table."""
    table = CHARACTER_TABLES.get(character)
    if table is not None:
        definition = table.lookup(action_state_id, flags)
        if definition is not None:
            return definition
    return DEFAULT_TABLE.lookup(action_state_id, flags)


def classify_frame(frame: FrameRecord, character: CSSCharacter) -> str | None:
    """Move id for a single frame, or None when the state is untracked."""
    definition = lookup_move(character, frame.action_state_id, frame.flags)
    if definition is None:
        return None
    return definition.move_id
