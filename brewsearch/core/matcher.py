import re
import unicodedata
from dataclasses import dataclass
from typing import Iterable

from rapidfuzz.distance import Levenshtein

from .brew_types import RankedMatch

_SEPARATORS_RE = re.compile(r"[\s\\/\-\[\](){}#!?<>\"'=+*.:,;_@]+")


@dataclass(frozen=True, slots=True, order=True)
class Match:
    """Result of matching a query against a string. Higher scores are better."""

    score: float


def normalize(text: str) -> str:
    """Casefolds the text and strips diacritics."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def split_words(text: str) -> list[str]:
    return [word for word in _SEPARATORS_RE.split(text) if word]


class Matcher:
    """Word-prefix matcher.

    Every query word has to be a prefix of a name word, in order. The score is
    the share of the name covered by the query. In fuzzy mode a query word may
    differ from the word prefix by up to `len(word) // 4` edits; every edit
    lowers the score.
    """

    def __init__(self, query: str, fuzzy: bool = False):
        self._query_words = split_words(normalize(query))
        self._fuzzy = fuzzy

    def _word_distance(self, query_word: str, name_word: str) -> int | None:
        if name_word.startswith(query_word):
            return 0
        if not self._fuzzy:
            return None
        allowed = len(query_word) // 4
        if allowed == 0:
            return None
        distance = Levenshtein.distance(
            query_word, name_word[: len(query_word)], score_cutoff=allowed
        )
        return distance if distance <= allowed else None

    def match(self, name: str) -> Match | None:
        if not self._query_words:
            return None

        normalized = normalize(name)
        name_words = split_words(normalized)
        if not name_words:
            return None

        matched = 0
        position = 0
        for query_word in self._query_words:
            while position < len(name_words):
                name_word = name_words[position]
                distance = self._word_distance(query_word, name_word)
                position += 1
                if distance is not None:
                    # Count covered name characters, so typing past the word end is an edit too.
                    matched += max(0, min(len(query_word), len(name_word)) - distance)
                    break
            else:
                return None

        return Match(score=min(1.0, matched / len(normalized)))


def rank_all(matcher: Matcher, names: Iterable[str]) -> list[RankedMatch]:
    """Scores the names and returns the matching ones, best match first.

    Duplicate names are ranked once. Equal scores are ordered by name.
    """
    ranked: list[RankedMatch] = []
    seen: set[str] = set()
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        match = matcher.match(name)
        if match is not None:
            ranked.append(RankedMatch(name=name, score=match.score))

    ranked.sort(key=lambda r: (-r.score, r.name))
    return ranked
