"""SQLite database for per-match move statistics."""

import sqlite3
from pathlib import Path

from slippi.id import CSSCharacter

from slippi_moves.errors import MatchErrorKind
from slippi_moves.models import PlayerMoveStats
from slippi_moves.reducer import CorpusStats, reduce


class MatchDatabase:
    """SQLite database for processed and skipped matches."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def initialize(self) -> None:
        """Create database tables if they don't exist."""
        conn = sqlite3.connect(self.db_path)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS matches (
                match_id TEXT PRIMARY KEY,
                path TEXT,
                mtime REAL NOT NULL DEFAULT 0,
                stage INTEGER,
                duration_frames INTEGER,
                player_count INTEGER
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS players (
                match_id TEXT NOT NULL,
                port INTEGER NOT NULL,
                character INTEGER NOT NULL,
                stocks INTEGER,
                costume INTEGER,
                team TEXT,
                PRIMARY KEY (match_id, port),
                FOREIGN KEY (match_id) REFERENCES matches(match_id)
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS player_moves (
                match_id TEXT NOT NULL,
                port INTEGER NOT NULL,
                move TEXT NOT NULL,
                count INTEGER NOT NULL,
                PRIMARY KEY (match_id, port, move),
                FOREIGN KEY (match_id, port) REFERENCES players(match_id, port)
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS skipped (
                match_id TEXT PRIMARY KEY,
                path TEXT,
                mtime REAL NOT NULL DEFAULT 0,
                error_kind TEXT NOT NULL,
                error TEXT
            )
        """)

        conn.execute("CREATE INDEX IF NOT EXISTS idx_players_character ON players(character)")

        conn.commit()
        conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _delete_match(self, cursor: sqlite3.Cursor, match_id: str) -> None:
        cursor.execute("DELETE FROM player_moves WHERE match_id = ?", (match_id,))
        cursor.execute("DELETE FROM players WHERE match_id = ?", (match_id,))
        cursor.execute("DELETE FROM matches WHERE match_id = ?", (match_id,))
        cursor.execute("DELETE FROM skipped WHERE match_id = ?", (match_id,))

    def store_match(
        self,
        match_id: str,
        stats: dict[int, PlayerMoveStats],
        roster_details: dict[int, tuple[int | None, int | None, str | None]] | None = None,
        path: Path | None = None,
        mtime: float = 0.0,
        stage: int | None = None,
        duration_frames: int = 0,
    ) -> None:
        """Store (or replace) one processed match.

        Args:
            match_id: Match identifier
            stats: Port -> PlayerMoveStats
            roster_details: Port -> (stocks, costume, team), passed through
            path: Replay path
            mtime: Replay modification time for incremental scanning
            stage: Stage id
            duration_frames: Number of frames in the replay
        """
        details = roster_details or {}
        conn = self._get_connection()
        cursor = conn.cursor()
        self._delete_match(cursor, match_id)

        cursor.execute(
            """INSERT INTO matches (match_id, path, mtime, stage, duration_frames, player_count)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (match_id, str(path) if path else None, mtime, stage, duration_frames, len(stats)),
        )

        for port, player_stats in stats.items():
            stocks, costume, team = details.get(port, (None, None, None))
            cursor.execute(
                """INSERT INTO players (match_id, port, character, stocks, costume, team)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (match_id, port, int(player_stats.character), stocks, costume, team),
            )
            for move_id, count in player_stats.moves.items():
                cursor.execute(
                    "INSERT INTO player_moves (match_id, port, move, count) VALUES (?, ?, ?, ?)",
                    (match_id, port, move_id, count),
                )

        conn.commit()

    def store_skipped(
        self,
        match_id: str,
        error_kind: MatchErrorKind,
        error: str | None = None,
        path: Path | None = None,
        mtime: float = 0.0,
    ) -> None:
        """Record a match that was rejected, replacing earlier results for it."""
        conn = self._get_connection()
        cursor = conn.cursor()
        self._delete_match(cursor, match_id)
        cursor.execute(
            "INSERT INTO skipped (match_id, path, mtime, error_kind, error) VALUES (?, ?, ?, ?, ?)",
            (match_id, str(path) if path else None, mtime, error_kind.value, error),
        )
        conn.commit()

    def load_player_stats(self) -> list[tuple[CSSCharacter, PlayerMoveStats]]:
        """All stored per-player stats as reducer input."""
        conn = self._get_connection()
        stats: dict[tuple[str, int], PlayerMoveStats] = {}

        for match_id, port, character in conn.execute(
            "SELECT match_id, port, character FROM players ORDER BY match_id, port"
        ):
            stats[(match_id, port)] = PlayerMoveStats(
                match_id=match_id, port=port, character=CSSCharacter(character)
            )

        for match_id, port, move_id, count in conn.execute(
            "SELECT match_id, port, move, count FROM player_moves"
        ):
            player_stats = stats.get((match_id, port))
            if player_stats is not None:
                player_stats.increment(move_id, count)

        return [(s.character, s) for s in stats.values()]

    def load_match_ids(self) -> list[str]:
        """Ids of all stored processed matches."""
        conn = self._get_connection()
        return [row[0] for row in conn.execute("SELECT match_id FROM matches ORDER BY match_id")]

    def load_skipped(self) -> dict[str, MatchErrorKind]:
        """Match id -> error kind for every stored skip."""
        conn = self._get_connection()
        return {
            match_id: MatchErrorKind(kind)
            for match_id, kind in conn.execute("SELECT match_id, error_kind FROM skipped")
        }

    def needs_scan(self, replay_path: Path, current_mtime: float) -> bool:
        """Check if a replay needs to be (re)processed."""
        conn = self._get_connection()
        row = conn.execute(
            """SELECT mtime FROM matches WHERE path = ?
               UNION ALL
               SELECT mtime FROM skipped WHERE path = ?""",
            (str(replay_path), str(replay_path)),
        ).fetchone()

        if row is None:
            return True  # Not in database

        stored_mtime: float = row[0]
        return current_mtime > stored_mtime

    def load_corpus(self) -> CorpusStats:
        """Reduce every stored match into corpus statistics."""
        corpus = reduce(self.load_player_stats(), skipped=self.load_skipped())
        return CorpusStats(
            characters=corpus.characters,
            match_ids=corpus.match_ids | frozenset(self.load_match_ids()),
            skipped=corpus.skipped,
        )
