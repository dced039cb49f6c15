"""Cross-match reducer: order-independent merge of per-player move counts.

``merge`` is associative and commutative with the empty CorpusStats as
identity, so workers can reduce their own matches locally and hand back a
single partial result for one final merge.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from slippi.id import CSSCharacter

from slippi_moves.errors import MatchErrorKind
from slippi_moves.models import MatchResult, PlayerMoveStats


@dataclass
class CharacterStats:
    """Corpus-wide move counts for one character."""

    moves: dict[str, int] = field(default_factory=dict)
    appearances: int = 0  # Player-matches played with this character
    match_ids: frozenset[str] = frozenset()  # Matches with at least one such player

    @property
    def total_moves(self) -> int:
        return sum(self.moves.values())

    @property
    def average_moves_per_match(self) -> float:
        """Total moves over the number of matches the character appeared in."""
        if not self.match_ids:
            return 0.0
        return self.total_moves / len(self.match_ids)

    @property
    def most_common_move(self) -> str | None:
        """Highest count; ties go to the alphabetically first move id."""
        ranked = self.ranking()
        return ranked[0][0] if ranked else None

    def ranking(self) -> list[tuple[str, int]]:
        """Moves ordered by count (descending), then move id."""
        return sorted(self.moves.items(), key=lambda item: (-item[1], item[0]))

    def merged(self, other: "CharacterStats") -> "CharacterStats":
        moves = dict(self.moves)
        for move_id, count in other.moves.items():
            moves[move_id] = moves.get(move_id, 0) + count
        return CharacterStats(
            moves=moves,
            appearances=self.appearances + other.appearances,
            match_ids=self.match_ids | other.match_ids,
        )


@dataclass
class CorpusStats:
    """Move statistics across a corpus of matches."""

    characters: dict[CSSCharacter, CharacterStats] = field(default_factory=dict)
    match_ids: frozenset[str] = frozenset()
    skipped: dict[str, MatchErrorKind] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # A match processed anywhere in the corpus is not also skipped
        self.skipped = {
            match_id: kind
            for match_id, kind in self.skipped.items()
            if match_id not in self.match_ids
        }

    @property
    def matches_processed(self) -> int:
        return len(self.match_ids)

    @property
    def matches_skipped(self) -> int:
        return len(self.skipped)

    @property
    def total_moves(self) -> int:
        return sum(stats.total_moves for stats in self.characters.values())

    @property
    def most_common_move(self) -> str | None:
        """Most common move over every character, None for an empty corpus."""
        return combined_moves(self).most_common_move

    def skipped_by_kind(self) -> dict[MatchErrorKind, int]:
        counts: dict[MatchErrorKind, int] = {}
        for kind in self.skipped.values():
            counts[kind] = counts.get(kind, 0) + 1
        return counts

    def merged(self, other: "CorpusStats") -> "CorpusStats":
        characters = dict(self.characters)
        for character, stats in other.characters.items():
            existing = characters.get(character)
            characters[character] = stats if existing is None else existing.merged(stats)
        return CorpusStats(
            characters=characters,
            match_ids=self.match_ids | other.match_ids,
            skipped=merge_skipped(self.skipped, other.skipped),
        )


def merge_skipped(*skipped: Mapping[str, MatchErrorKind]) -> dict[str, MatchErrorKind]:
    """Union of skipped maps; a match skipped with different kinds keeps the
    kind with the smallest value, whatever the merge order."""
    merged: dict[str, MatchErrorKind] = {}
    for entries in skipped:
        for match_id, kind in entries.items():
            existing = merged.get(match_id)
            if existing is None or kind.value < existing.value:
                merged[match_id] = kind
    return merged


def combined_moves(corpus: CorpusStats) -> CharacterStats:
    """All characters folded into one CharacterStats."""
    combined = CharacterStats()
    for stats in corpus.characters.values():
        combined = combined.merged(stats)
    return combined


def merge(*partials: CorpusStats) -> CorpusStats:
    """Merge partial corpus statistics in any order or grouping."""
    result = CorpusStats()
    for partial in partials:
        result = result.merged(partial)
    return result


def reduce(
    stats: Iterable[tuple[CSSCharacter, PlayerMoveStats]],
    skipped: Mapping[str, MatchErrorKind] | None = None,
) -> CorpusStats:
    """Fold (character, per-player stats) pairs into corpus statistics.

    Matches listed in ``skipped`` contribute nothing except their entry in
    the skipped map. An id that also has stats counts as processed.
    """
    characters: dict[CSSCharacter, CharacterStats] = {}
    character_matches: dict[CSSCharacter, set[str]] = {}
    match_ids: set[str] = set()

    for character, player_stats in stats:
        entry = characters.setdefault(character, CharacterStats())
        entry.appearances += 1
        for move_id, count in player_stats.moves.items():
            entry.moves[move_id] = entry.moves.get(move_id, 0) + count
        character_matches.setdefault(character, set()).add(player_stats.match_id)
        match_ids.add(player_stats.match_id)

    for character, ids in character_matches.items():
        characters[character].match_ids = frozenset(ids)

    return CorpusStats(
        characters=characters,
        match_ids=frozenset(match_ids),
        skipped=dict(skipped or {}),
    )


def reduce_results(results: Iterable[MatchResult]) -> CorpusStats:
    """Reduce processed matches (including those with no players)."""
    pairs: list[tuple[CSSCharacter, PlayerMoveStats]] = []
    match_ids: set[str] = set()
    for result in results:
        pairs.extend(result.character_stats())
        match_ids.add(result.match_id)
    corpus = reduce(pairs)
    return CorpusStats(
        characters=corpus.characters,
        match_ids=corpus.match_ids | match_ids,
        skipped=corpus.skipped,
    )
