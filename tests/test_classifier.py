"""Tests for the action-state classifier."""

import pytest
from slippi.id import CSSCharacter

from slippi_moves.action_states import ActionState
from slippi_moves.classifier import (
    CHARACTER_TABLES,
    DEFAULT_TABLE,
    MoveDefinition,
    MoveTable,
    category_of,
    classify_frame,
    lookup_move,
    move,
)
from slippi_moves.models import Flags, FrameRecord, MoveCategory


def make_frame(state: int, flags: Flags = Flags.NONE) -> FrameRecord:
    """Helper to create a FrameRecord for tests."""
    return FrameRecord(frame_index=0, port=1, action_state_id=state, flags=flags)


@pytest.mark.parametrize("state", [-1, 9999, 100, ActionState.WAIT, ActionState.FALL])
def test_unknown_states_are_untracked(state: int) -> None:
    """States with no entry in either table classify as None, never raise."""
    assert classify_frame(make_frame(state), CSSCharacter.FOX) is None


def test_default_table_applies_to_every_character() -> None:
    for character in (CSSCharacter.FOX, CSSCharacter.MARIO, CSSCharacter.GANONDORF):
        assert classify_frame(make_frame(ActionState.ATTACK_AIR_N), character) == "nair"
        assert classify_frame(make_frame(ActionState.CATCH), character) == "grab"


def test_state_ranges() -> None:
    """Every state inside a range maps to the same move."""
    for state in range(ActionState.ATTACK_S_4_HI, ActionState.ATTACK_S_4_LW + 1):
        assert classify_frame(make_frame(state), CSSCharacter.MARTH) == "fsmash"


def test_character_specific_specials() -> None:
    """The same special id means different moves per character."""
    assert classify_frame(make_frame(341), CSSCharacter.FOX) == "laser"
    assert classify_frame(make_frame(341), CSSCharacter.SHEIK) == "needles"
    assert classify_frame(make_frame(341), CSSCharacter.SAMUS) == "charge_shot"
    assert classify_frame(make_frame(360), CSSCharacter.FOX) == "shine"
    assert classify_frame(make_frame(360), CSSCharacter.FALCO) == "shine"
    assert classify_frame(make_frame(369), CSSCharacter.MARTH) == "counter"
    assert classify_frame(make_frame(369), CSSCharacter.FOX) == "shine"


def test_specials_untracked_without_character_table() -> None:
    assert classify_frame(make_frame(341), CSSCharacter.MARIO) is None


def test_fox_and_falco_side_b_names() -> None:
    assert classify_frame(make_frame(348), CSSCharacter.FOX) == "illusion"
    assert classify_frame(make_frame(348), CSSCharacter.FALCO) == "phantasm"


def test_required_flags() -> None:
    """Peach's float only counts while airborne."""
    assert classify_frame(make_frame(341, Flags.AIRBORNE), CSSCharacter.PEACH) == "float"
    assert classify_frame(make_frame(341), CSSCharacter.PEACH) is None


def test_forbidden_flags() -> None:
    """Shield states under hitstun are not counted as shielding."""
    assert classify_frame(make_frame(ActionState.GUARD), CSSCharacter.FOX) == "shield"
    assert classify_frame(make_frame(ActionState.GUARD, Flags.HITSTUN), CSSCharacter.FOX) is None


def test_move_table_lookup() -> None:
    """A table returns the first entry whose flag constraints hold."""
    table = MoveTable([
        move(ActionState.ATTACK_AIR_N, "sex_kick", MoveCategory.AERIAL, required_flags=Flags.FASTFALL),
        move(ActionState.ATTACK_AIR_N, "nair", MoveCategory.AERIAL),
    ])

    assert table.lookup(ActionState.ATTACK_AIR_N, Flags.FASTFALL).move_id == "sex_kick"  # type: ignore[union-attr]
    assert table.lookup(ActionState.ATTACK_AIR_N).move_id == "nair"  # type: ignore[union-attr]
    assert table.lookup(ActionState.WAIT) is None
    assert ActionState.ATTACK_AIR_N in table
    assert len(table.definitions()) == 2


def test_character_table_checked_before_default() -> None:
    """States shared by both levels resolve through the character table."""
    definition = lookup_move(CSSCharacter.FOX, 360)
    assert definition is not None
    assert definition.move_id == "shine"

    definition = lookup_move(CSSCharacter.FOX, ActionState.ATTACK_AIR_N)
    assert definition is not None
    assert definition.move_id == "nair"


def test_classification_is_pure() -> None:
    frame = make_frame(360)
    results = {classify_frame(frame, CSSCharacter.FOX) for _ in range(5)}
    assert results == {"shine"}


def test_tables_are_read_only() -> None:
    with pytest.raises(TypeError):
        CHARACTER_TABLES[CSSCharacter.MARIO] = DEFAULT_TABLE  # type: ignore[index]


def test_move_definition_rejects_empty_range() -> None:
    with pytest.raises(ValueError):
        MoveDefinition(50, 40, "broken", MoveCategory.GROUND)


def test_categories() -> None:
    assert category_of("nair") == MoveCategory.AERIAL
    assert category_of("jab") == MoveCategory.GROUND
    assert category_of("shine") == MoveCategory.SPECIAL
    assert category_of("fthrow") == MoveCategory.THROW
    assert category_of("shdl") == MoveCategory.TECHNIQUE
