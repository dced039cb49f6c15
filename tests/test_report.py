"""Tests for output rendering."""

import json

import pytest
from slippi.id import CSSCharacter

from slippi_moves.errors import MatchErrorKind
from slippi_moves.models import MatchResult, MoveCategory, MoveEvent, PlayerMoveStats, RosterEntry
from slippi_moves.reducer import CharacterStats, CorpusStats
from slippi_moves.report import render_corpus, render_match


def sample_corpus() -> CorpusStats:
    return CorpusStats(
        characters={
            CSSCharacter.FOX: CharacterStats(
                moves={"shine": 30, "laser": 12, "nair": 9, "dair": 7, "uair": 5, "jab": 1},
                appearances=3,
                match_ids=frozenset({"g1", "g2", "g3"}),
            ),
            CSSCharacter.CAPTAIN_FALCON: CharacterStats(
                moves={"knee": 4}, appearances=1, match_ids=frozenset({"g2"})
            ),
        },
        match_ids=frozenset({"g1", "g2", "g3"}),
        skipped={"bad": MatchErrorKind.OUT_OF_ORDER_FRAMES},
    )


def sample_match() -> MatchResult:
    fox = PlayerMoveStats(match_id="g1", port=1, character=CSSCharacter.FOX, moves={"shine": 2, "laser": 3})
    return MatchResult(
        match_id="g1",
        roster={1: RosterEntry(CSSCharacter.FOX, stocks=4, costume=1)},
        stats={1: fox},
        events=[MoveEvent(port=1, move_id="shine", category=MoveCategory.SPECIAL, start_frame=5, end_frame=9)],
        stage_id=32,
        duration_frames=3600,
    )


def test_corpus_json() -> None:
    data = json.loads(render_corpus(sample_corpus(), "json"))

    assert data["total_matches"] == 3
    assert data["skipped_matches"] == 1
    assert data["skipped"] == {"bad": "out_of_order_frames"}
    assert data["aggregated_stats"] == {"most_common_move": "shine", "total_moves": 68}

    fox = data["characters"]["fox"]
    assert fox["matches"] == 3
    assert fox["appearances"] == 3
    assert fox["total_moves"] == 64
    assert fox["average_moves_per_match"] == 21.33
    assert fox["most_common_move"] == "shine"
    assert list(fox["moves"])[:2] == ["shine", "laser"]
    assert "captainfalcon" in data["characters"]


def test_corpus_csv() -> None:
    lines = render_corpus(sample_corpus(), "csv").splitlines()

    assert lines[0] == "character,move,count"
    assert "fox,shine,30" in lines
    assert "captainfalcon,knee,4" in lines


def test_corpus_text_lists_top_five() -> None:
    text = render_corpus(sample_corpus(), "text")

    assert text.startswith("Move Statistics Summary")
    assert "Matches skipped: 1" in text
    assert "out_of_order_frames: 1" in text
    assert "  5. uair: 5" in text
    assert "jab" not in text


def test_empty_corpus_text() -> None:
    text = render_corpus(CorpusStats(), "text")
    assert "Most common move: n/a" in text


def test_match_json_includes_events() -> None:
    data = json.loads(render_match(sample_match(), "json"))

    assert data["match_id"] == "g1"
    assert data["stage"] == "final_destination"
    assert data["duration_frames"] == 3600
    assert data["player_count"] == 1
    assert data["players"][0]["character"] == "fox"
    assert data["players"][0]["stocks"] == 4
    assert data["players"][0]["moves"] == {"laser": 3, "shine": 2}
    assert data["events"] == [
        {"port": 1, "move": "shine", "category": "special", "start_frame": 5, "end_frame": 9}
    ]


def test_match_csv_and_text() -> None:
    csv_lines = render_match(sample_match(), "csv").splitlines()
    assert csv_lines == ["port,character,move,count", "1,fox,laser,3", "1,fox,shine,2"]

    text = render_match(sample_match(), "text")
    assert "Stage: final_destination, 3600 frames, 1 players" in text
    assert "Port 1: fox - 5 total moves" in text
    assert "port 1 shine [5-9]" in text


def test_unknown_format() -> None:
    with pytest.raises(ValueError):
        render_corpus(CorpusStats(), "xml")
    with pytest.raises(ValueError):
        render_match(sample_match(), "xml")


def test_match_json_without_stage() -> None:
    result = MatchResult(match_id="g2", roster={}, stats={})
    data = json.loads(render_match(result, "json"))

    assert data["stage"] is None
    assert data["duration_frames"] == 0
    assert data["player_count"] == 0
    assert data["players"] == []
