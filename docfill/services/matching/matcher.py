"""Fuzzy matching of extracted headings against the schema mapping."""

# Module responsibilities:
# - Score heading similarity with the Dice coefficient over character bigrams.
# - Pick the best schema key and accept it only at or above the threshold.

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional

from docfill.config import SchemaMapping

LOGGER = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.9

Scorer = Callable[[str, str], float]

_WHITESPACE_RE = re.compile(r"\s+")


def _bigrams(text: str) -> Counter[str]:
    return Counter(text[idx : idx + 2] for idx in range(len(text) - 1))


def dice_similarity(first: str, second: str) -> float:
    """Return the bigram Dice coefficient of two strings in ``[0, 1]``.

    Whitespace is ignored and comparison is case-sensitive. Identical strings
    score 1.0; a string shorter than two characters scores 0.0 against anything
    else.
    """

    a = _WHITESPACE_RE.sub("", first)
    b = _WHITESPACE_RE.sub("", second)
    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0

    first_bigrams = _bigrams(a)
    second_bigrams = _bigrams(b)
    overlap = sum((first_bigrams & second_bigrams).values())
    return (2.0 * overlap) / (len(a) - 1 + len(b) - 1)


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching one extracted heading."""

    heading: str
    best_heading: Optional[str]
    similarity: float
    cell: Optional[str]

    @property
    def matched(self) -> bool:
        return self.cell is not None


@dataclass(frozen=True)
class SchemaMatcher:
    """Resolve extracted headings to target cells.

    Ties resolve to the first maximal key in schema order.
    """

    schema: SchemaMapping
    threshold: float = DEFAULT_THRESHOLD
    scorer: Scorer = dice_similarity

    def best_match(self, heading: str) -> tuple[Optional[str], float]:
        best_heading: Optional[str] = None
        best_score = 0.0
        for candidate in self.schema:
            score = self.scorer(heading, candidate)
            if best_heading is None or score > best_score:
                best_heading, best_score = candidate, score
        return best_heading, best_score

    def match(self, heading: str) -> MatchResult:
        best_heading, score = self.best_match(heading)
        LOGGER.debug(
            "Matching key: %s, Best Match: %s, Similarity: %.4f", heading, best_heading, score
        )
        if best_heading is not None and score >= self.threshold:
            return MatchResult(heading=heading, best_heading=best_heading, similarity=score, cell=self.schema[best_heading])
        return MatchResult(heading=heading, best_heading=best_heading, similarity=score, cell=None)

    def match_all(self, fields: Mapping[str, str]) -> List[MatchResult]:
        return [self.match(heading) for heading in fields]
