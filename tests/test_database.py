"""Tests for SQLite database operations."""

import sqlite3
from pathlib import Path

from slippi.id import CSSCharacter

from slippi_moves.errors import MatchErrorKind
from slippi_moves.models import PlayerMoveStats
from slippi_moves.database import MatchDatabase


def make_stats(match_id: str, port: int, character: CSSCharacter, **moves: int) -> PlayerMoveStats:
    """Helper to create PlayerMoveStats for tests."""
    return PlayerMoveStats(match_id=match_id, port=port, character=character, moves=dict(moves))


def test_database_creates_tables(tmp_db_path: Path) -> None:
    """Database initializes with required tables."""
    db = MatchDatabase(tmp_db_path)
    db.initialize()

    conn = sqlite3.connect(tmp_db_path)
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    tables = {row[0] for row in cursor.fetchall()}
    conn.close()

    assert {"matches", "players", "player_moves", "skipped"} <= tables


def test_store_and_load_player_stats(tmp_db_path: Path) -> None:
    db = MatchDatabase(tmp_db_path)
    db.initialize()

    db.store_match(
        "g1",
        {
            1: make_stats("g1", 1, CSSCharacter.FOX, shine=3, laser=2),
            2: make_stats("g1", 2, CSSCharacter.MARTH),
        },
        roster_details={1: (4, 0, None)},
        path=Path("/replays/g1.slp"),
        mtime=100.0,
        stage=31,
        duration_frames=3600,
    )

    loaded = dict((s.port, (c, s)) for c, s in db.load_player_stats())
    db.close()

    assert loaded[1][0] == CSSCharacter.FOX
    assert loaded[1][1].moves == {"shine": 3, "laser": 2}
    assert loaded[2][0] == CSSCharacter.MARTH
    assert loaded[2][1].moves == {}


def test_store_match_replaces_previous(tmp_db_path: Path) -> None:
    db = MatchDatabase(tmp_db_path)
    db.initialize()

    db.store_match("g1", {1: make_stats("g1", 1, CSSCharacter.FOX, shine=3)})
    db.store_match("g1", {1: make_stats("g1", 1, CSSCharacter.FOX, shine=5)})

    stats = db.load_player_stats()
    db.close()

    assert len(stats) == 1
    assert stats[0][1].moves == {"shine": 5}


def test_store_skipped_replaces_match(tmp_db_path: Path) -> None:
    db = MatchDatabase(tmp_db_path)
    db.initialize()

    db.store_match("g1", {1: make_stats("g1", 1, CSSCharacter.FOX, shine=3)})
    db.store_skipped("g1", MatchErrorKind.UNKNOWN_PORT, "Port 3 is not in the roster")

    assert db.load_match_ids() == []
    assert db.load_player_stats() == []
    assert db.load_skipped() == {"g1": MatchErrorKind.UNKNOWN_PORT}
    db.close()


def test_needs_scan(tmp_db_path: Path) -> None:
    """needs_scan compares mtimes of processed and skipped replays."""
    db = MatchDatabase(tmp_db_path)
    db.initialize()
    good = Path("/replays/good.slp")
    bad = Path("/replays/bad.slp")

    assert db.needs_scan(good, 100.0)

    db.store_match("good", {}, path=good, mtime=100.0)
    db.store_skipped("bad", MatchErrorKind.DECODE_ERROR, path=bad, mtime=50.0)

    assert not db.needs_scan(good, 100.0)
    assert db.needs_scan(good, 200.0)
    assert not db.needs_scan(bad, 50.0)
    db.close()


def test_load_corpus(tmp_db_path: Path) -> None:
    db = MatchDatabase(tmp_db_path)
    db.initialize()

    db.store_match("g1", {1: make_stats("g1", 1, CSSCharacter.FOX, shine=3)})
    db.store_match("g2", {1: make_stats("g2", 1, CSSCharacter.FOX, shine=1, laser=4)})
    db.store_match("g3", {})
    db.store_skipped("g4", MatchErrorKind.OUT_OF_ORDER_FRAMES)

    corpus = db.load_corpus()
    db.close()

    assert corpus.matches_processed == 3
    assert corpus.matches_skipped == 1
    assert corpus.characters[CSSCharacter.FOX].moves == {"shine": 4, "laser": 4}
    assert corpus.characters[CSSCharacter.FOX].appearances == 2
