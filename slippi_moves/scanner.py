"""Replay scanner: adapts py-slippi games into frame records."""

import logging
from pathlib import Path

from slippi import Game
from slippi.event import Frame, LCancel, StateFlags
from slippi.parse import ParseError

from slippi_moves.errors import ReplayDecodeError
from slippi_moves.models import (
    Button,
    Flags,
    FrameRecord,
    Match,
    Position,
    RosterEntry,
    Stick,
)

logger = logging.getLogger(__name__)

# Logical button bits the engine keeps (analog trigger/stick bits dropped)
BUTTON_MASK = 0x1F7F


def read_game(replay_path: Path) -> Game:
    """Parse a replay, wrapping decoder failures in ReplayDecodeError."""
    try:
        game = Game(replay_path)
    except (ParseError, OSError, ValueError) as e:
        raise ReplayDecodeError(str(replay_path), str(e)) from e

    if game.start is None:
        raise ReplayDecodeError(str(replay_path), "replay has no start data")
    return game


def state_flags(post: Frame.Port.Data.Post) -> Flags:
    """Translate post-frame data into engine flags."""
    flags = Flags.NONE

    if post.airborne:
        flags |= Flags.AIRBORNE

    raw = post.flags
    if raw is not None:
        if raw & StateFlags.HIT_STUN:
            flags |= Flags.HITSTUN
        if raw & StateFlags.SHIELD:
            flags |= Flags.SHIELDING
        if raw & StateFlags.FAST_FALL:
            flags |= Flags.FASTFALL
        if raw & StateFlags.UNTOUCHABLE:
            flags |= Flags.INVULNERABLE

    if post.l_cancel == LCancel.SUCCESS:
        flags |= Flags.L_CANCEL

    return flags


def frames_from_game(game: Game) -> dict[int, list[FrameRecord]]:
    """Build ordered FrameRecords for every occupied port (1-based).

    Uses the leader's data (Nana is ignored for Ice Climbers). Frames where a
    port has no post-frame data are skipped.
    """
    result: dict[int, list[FrameRecord]] = {}

    for frame in game.frames:
        for port_idx, port_data in enumerate(frame.ports):
            if port_data is None:
                continue

            pre = port_data.leader.pre
            post = port_data.leader.post
            if post is None:
                continue

            stick = Stick()
            buttons = Button.NONE
            if pre is not None:
                stick = Stick(pre.joystick.x, pre.joystick.y)
                buttons = Button(int(pre.buttons.logical) & BUTTON_MASK)

            port = port_idx + 1
            result.setdefault(port, []).append(
                FrameRecord(
                    frame_index=frame.index,
                    port=port,
                    action_state_id=int(post.state),
                    position=Position(post.position.x, post.position.y),
                    facing=1 if int(post.direction) > 0 else -1,
                    stick=stick,
                    buttons=buttons,
                    flags=state_flags(post),
                )
            )

    return result


def roster_from_game(game: Game) -> dict[int, RosterEntry]:
    """Port (1-based) -> roster entry for every occupied slot."""
    if game.start is None:
        return {}

    roster: dict[int, RosterEntry] = {}
    for port_idx, player in enumerate(game.start.players):
        if player is None:
            continue
        team = player.team.name.lower() if game.start.is_teams and player.team is not None else None
        roster[port_idx + 1] = RosterEntry(
            character=player.character,
            stocks=player.stocks,
            costume=player.costume,
            team=team,
        )
    return roster


def load_match(replay_path: Path, match_id: str | None = None) -> Match:
    """Decode a replay into a Match (match id defaults to the file stem)."""
    game = read_game(replay_path)
    frames = frames_from_game(game)
    stage_id = game.start.stage.value if game.start is not None else None

    logger.debug(f"Decoded {replay_path}: {len(game.frames)} frames, ports {sorted(frames)}")

    return Match(
        match_id=match_id or replay_path.stem,
        frames=frames,
        roster=roster_from_game(game),
        stage_id=stage_id,
        duration_frames=len(game.frames),
        path=str(replay_path),
    )


def find_replays(replay_dir: Path) -> list[Path]:
    """All .slp files below a directory, sorted for reproducible batches."""
    return sorted(replay_dir.glob("**/*.slp"))
