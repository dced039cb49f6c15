"""Rendering of move statistics as JSON, CSV or text."""

import csv
import io
import json
from typing import Any

from slippi_moves.models import MatchResult, MoveEvent, character_name, stage_name
from slippi_moves.reducer import CorpusStats

FORMATS = ("json", "csv", "text")

# Moves listed per character/player in the text summary
TOP_MOVES = 5


def corpus_to_dict(corpus: CorpusStats) -> dict[str, Any]:
    """JSON-ready dictionary of corpus statistics."""
    characters: dict[str, Any] = {}
    for character, stats in sorted(corpus.characters.items(), key=lambda item: item[0].name):
        characters[character_name(character)] = {
            "matches": len(stats.match_ids),
            "appearances": stats.appearances,
            "total_moves": stats.total_moves,
            "average_moves_per_match": round(stats.average_moves_per_match, 2),
            "most_common_move": stats.most_common_move,
            "moves": dict(stats.ranking()),
        }

    return {
        "total_matches": corpus.matches_processed,
        "skipped_matches": corpus.matches_skipped,
        "skipped": {
            match_id: kind.value for match_id, kind in sorted(corpus.skipped.items())
        },
        "aggregated_stats": {
            "most_common_move": corpus.most_common_move,
            "total_moves": corpus.total_moves,
        },
        "characters": characters,
    }


def event_to_dict(event: MoveEvent) -> dict[str, Any]:
    return {
        "port": event.port,
        "move": event.move_id,
        "category": event.category.value,
        "start_frame": event.start_frame,
        "end_frame": event.end_frame,
    }


def match_to_dict(result: MatchResult) -> dict[str, Any]:
    """JSON-ready dictionary for one match, roster details passed through."""
    players = []
    for port, stats in sorted(result.stats.items()):
        entry = result.roster[port]
        players.append({
            "port": port,
            "character": character_name(stats.character),
            "stocks": entry.stocks,
            "costume": entry.costume,
            "team": entry.team,
            "total_moves": stats.total,
            "moves": dict(sorted(stats.moves.items(), key=lambda item: (-item[1], item[0]))),
        })

    data: dict[str, Any] = {
        "match_id": result.match_id,
        "stage": stage_name(result.stage_id),
        "duration_frames": result.duration_frames,
        "player_count": result.player_count,
        "players": players,
    }
    if result.events:
        data["events"] = [event_to_dict(e) for e in result.events]
    return data


def render_corpus(corpus: CorpusStats, fmt: str) -> str:
    """Render corpus statistics in one of FORMATS."""
    if fmt == "json":
        return json.dumps(corpus_to_dict(corpus), indent=2)
    if fmt == "csv":
        return _corpus_csv(corpus)
    if fmt == "text":
        return _corpus_text(corpus)
    raise ValueError(f"Unknown format: {fmt}")


def render_match(result: MatchResult, fmt: str) -> str:
    """Render one match's per-player stats in one of FORMATS."""
    if fmt == "json":
        return json.dumps(match_to_dict(result), indent=2)
    if fmt == "csv":
        return _match_csv(result)
    if fmt == "text":
        return _match_text(result)
    raise ValueError(f"Unknown format: {fmt}")


def _corpus_csv(corpus: CorpusStats) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(["character", "move", "count"])
    for character, stats in sorted(corpus.characters.items(), key=lambda item: item[0].name):
        for move_id, count in stats.ranking():
            writer.writerow([character_name(character), move_id, count])
    return output.getvalue()


def _match_csv(result: MatchResult) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(["port", "character", "move", "count"])
    for port, stats in sorted(result.stats.items()):
        for move_id, count in sorted(stats.moves.items(), key=lambda item: (-item[1], item[0])):
            writer.writerow([port, character_name(stats.character), move_id, count])
    return output.getvalue()


def _corpus_text(corpus: CorpusStats) -> str:
    lines = [
        "Move Statistics Summary",
        "=======================",
        f"Total matches processed: {corpus.matches_processed}",
        f"Matches skipped: {corpus.matches_skipped}",
    ]
    for kind, count in sorted(corpus.skipped_by_kind().items(), key=lambda item: item[0].value):
        lines.append(f"  {kind.value}: {count}")

    lines.append("")
    lines.append(f"Most common move: {corpus.most_common_move or 'n/a'}")
    lines.append("")
    lines.append("Character breakdown:")

    for character, stats in sorted(corpus.characters.items(), key=lambda item: item[0].name):
        lines.append(
            f"{character_name(character)}: {len(stats.match_ids)} matches, "
            f"{stats.total_moves} moves ({stats.average_moves_per_match:.1f} per match)"
        )
        for i, (move_id, count) in enumerate(stats.ranking()[:TOP_MOVES], start=1):
            lines.append(f"  {i}. {move_id}: {count}")

    return "\n".join(lines) + "\n"


def _match_text(result: MatchResult) -> str:
    lines = [
        f"Match {result.match_id}",
        f"Stage: {stage_name(result.stage_id) or 'n/a'}, {result.duration_frames} frames, "
        f"{result.player_count} players",
    ]
    for port, stats in sorted(result.stats.items()):
        lines.append(f"Port {port}: {character_name(stats.character)} - {stats.total} total moves")
        ranked = sorted(stats.moves.items(), key=lambda item: (-item[1], item[0]))
        for i, (move_id, count) in enumerate(ranked[:TOP_MOVES], start=1):
            lines.append(f"  {i}. {move_id}: {count}")

    if result.events:
        lines.append("")
        lines.append("Events:")
        for event in result.events:
            lines.append(
                f"  port {event.port} {event.move_id} "
                f"[{event.start_frame}-{event.end_frame}]"
            )

    return "\n".join(lines) + "\n"
