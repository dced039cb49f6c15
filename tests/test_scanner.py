"""Tests for the replay scanner."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from slippi.event import LCancel, StateFlags
from slippi.id import CSSCharacter

from slippi_moves.errors import MatchErrorKind, ReplayDecodeError
from slippi_moves.models import Button, Flags
from slippi_moves.scanner import (
    find_replays,
    frames_from_game,
    load_match,
    read_game,
    roster_from_game,
    state_flags,
)


def make_post(
    state: int = 14,
    airborne: bool = False,
    flags: StateFlags | None = None,
    l_cancel: LCancel | None = None,
    direction: int = 1,
) -> SimpleNamespace:
    """Helper to create post-frame data shaped like the decoder's."""
    return SimpleNamespace(
        state=state,
        position=SimpleNamespace(x=10.0, y=0.0),
        direction=direction,
        airborne=airborne,
        flags=flags,
        l_cancel=l_cancel,
    )


def make_port(post: SimpleNamespace | None, x: float = 0.0, y: float = 0.0, buttons: int = 0) -> SimpleNamespace:
    pre = SimpleNamespace(
        joystick=SimpleNamespace(x=x, y=y),
        buttons=SimpleNamespace(logical=buttons),
    )
    return SimpleNamespace(leader=SimpleNamespace(pre=pre, post=post))


def make_game(frames: list[SimpleNamespace]) -> SimpleNamespace:
    players = [
        SimpleNamespace(character=CSSCharacter.FOX, stocks=4, costume=1, team=None),
        None,
        SimpleNamespace(character=CSSCharacter.MARTH, stocks=4, costume=0, team=None),
        None,
    ]
    start = SimpleNamespace(players=players, is_teams=False, stage=SimpleNamespace(value=31))
    return SimpleNamespace(start=start, frames=frames)


def sample_game() -> SimpleNamespace:
    frames = [
        SimpleNamespace(index=-123, ports=[
            make_port(make_post(state=14)), None, make_port(make_post(state=14)), None,
        ]),
        SimpleNamespace(index=-122, ports=[
            make_port(make_post(state=65, airborne=True), x=0.5, y=-0.8, buttons=0x0100),
            None,
            make_port(make_post(state=179, flags=StateFlags.SHIELD), buttons=0x0040 | 0x80000000),
            None,
        ]),
        SimpleNamespace(index=-121, ports=[
            make_port(make_post(state=70, l_cancel=LCancel.SUCCESS, direction=-1)),
            None,
            make_port(None),
            None,
        ]),
    ]
    return make_game(frames)


def test_state_flags() -> None:
    assert state_flags(make_post()) == Flags.NONE  # type: ignore[arg-type]
    assert state_flags(make_post(airborne=True, flags=StateFlags.FAST_FALL)) == (  # type: ignore[arg-type]
        Flags.AIRBORNE | Flags.FASTFALL
    )
    assert state_flags(make_post(flags=StateFlags.HIT_STUN | StateFlags.UNTOUCHABLE)) == (  # type: ignore[arg-type]
        Flags.HITSTUN | Flags.INVULNERABLE
    )
    assert state_flags(make_post(l_cancel=LCancel.SUCCESS)) == Flags.L_CANCEL  # type: ignore[arg-type]
    assert state_flags(make_post(l_cancel=LCancel.FAILURE)) == Flags.NONE  # type: ignore[arg-type]


def test_frames_from_game() -> None:
    frames = frames_from_game(sample_game())  # type: ignore[arg-type]

    assert sorted(frames) == [1, 3]
    fox = frames[1]
    assert [f.frame_index for f in fox] == [-123, -122, -121]
    assert [f.action_state_id for f in fox] == [14, 65, 70]
    assert fox[1].airborne
    assert fox[1].stick.x == 0.5
    assert fox[1].buttons == Button.A
    assert fox[2].flags == Flags.L_CANCEL
    assert fox[2].facing == -1

    # Frames without post data are skipped
    marth = frames[3]
    assert [f.frame_index for f in marth] == [-123, -122]
    assert marth[1].flags == Flags.SHIELDING
    assert marth[1].buttons == Button.L


def test_roster_from_game() -> None:
    roster = roster_from_game(sample_game())  # type: ignore[arg-type]

    assert sorted(roster) == [1, 3]
    assert roster[1].character == CSSCharacter.FOX
    assert roster[1].costume == 1
    assert roster[3].character == CSSCharacter.MARTH
    assert roster[3].team is None


def test_load_match(tmp_path: Path) -> None:
    replay = tmp_path / "Game_20240101T120000.slp"

    with patch("slippi_moves.scanner.Game", return_value=sample_game()):
        match = load_match(replay)

    assert match.match_id == "Game_20240101T120000"
    assert match.stage_id == 31
    assert match.duration_frames == 3
    assert match.path == str(replay)
    assert sorted(match.roster) == [1, 3]


def test_read_game_wraps_decoder_errors(tmp_path: Path) -> None:
    replay = tmp_path / "broken.slp"

    with patch("slippi_moves.scanner.Game", side_effect=OSError("truncated")):
        with pytest.raises(ReplayDecodeError) as exc_info:
            read_game(replay)

    assert exc_info.value.kind == MatchErrorKind.DECODE_ERROR
    assert exc_info.value.details["reason"] == "truncated"


def test_read_game_requires_start(tmp_path: Path) -> None:
    with patch("slippi_moves.scanner.Game", return_value=SimpleNamespace(start=None, frames=[])):
        with pytest.raises(ReplayDecodeError):
            read_game(tmp_path / "nostart.slp")


def test_find_replays(tmp_replay_dir: Path) -> None:
    (tmp_replay_dir / "b.slp").touch()
    (tmp_replay_dir / "notes.txt").touch()
    nested = tmp_replay_dir / "2024-01"
    nested.mkdir()
    (nested / "a.slp").touch()

    found = find_replays(tmp_replay_dir)

    assert found == sorted([tmp_replay_dir / "b.slp", nested / "a.slp"])
