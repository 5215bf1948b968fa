"""Field extraction strategies turning document lines into heading/value pairs."""

# Module responsibilities:
# - Define the abstract extraction strategy and the pluggable heading detector.
# - Provide the accumulating, marker-gated and strict-pair strategies.
# - Build a strategy from an ``ExtractionProfile`` so one is chosen per document type.

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence

from docfill.config import ExtractionProfile

LOGGER = logging.getLogger(__name__)

NO_RESPONSE = "No response"

HeadingDetector = Callable[[str], bool]
FieldMap = Dict[str, str]


def is_uppercase_heading(line: str) -> bool:
    """Return True when ``line`` contains no lower-case characters.

    Digits and punctuation are case-invariant, so ``"123"`` or ``"---"`` count
    as headings too.
    """

    return line == line.upper()


class BaseExtractionStrategy(ABC):
    """Abstract base class for extraction strategies."""

    @abstractmethod
    def extract(self, lines: Sequence[str]) -> FieldMap:
        """Map headings to their captured values for already normalized lines."""


@dataclass(frozen=True)
class UppercaseHeadingStrategy(BaseExtractionStrategy):
    """Accumulate every non-heading line into the most recent heading.

    A repeated heading discards the earlier capture once it is seen again;
    values are never merged across occurrences.
    """

    detector: HeadingDetector = is_uppercase_heading
    empty_value: str = NO_RESPONSE
    skip_headings: FrozenSet[str] = frozenset()

    def _relevant_lines(self, lines: Sequence[str]) -> Iterable[str]:
        return lines

    def extract(self, lines: Sequence[str]) -> FieldMap:
        fields: FieldMap = {}
        current: Optional[str] = None
        parts: List[str] = []

        for line in self._relevant_lines(lines):
            if self.detector(line):
                if current is not None:
                    fields[current] = " ".join(parts).strip() or self.empty_value
                parts = []
                if line in self.skip_headings:
                    LOGGER.debug("Skipping boilerplate heading: %s", line)
                    current = None
                    continue
                current = line
            elif current is not None:
                parts.append(line)

        if current is not None:
            fields[current] = " ".join(parts).strip() or self.empty_value

        LOGGER.debug("Extracted %s fields", len(fields))
        return fields


@dataclass(frozen=True)
class MarkerGatedStrategy(UppercaseHeadingStrategy):
    """Like ``UppercaseHeadingStrategy`` but ignore everything before ``start_marker``.

    The marker line itself is processed normally. No marker, no fields.
    """

    start_marker: str = ""

    def _relevant_lines(self, lines: Sequence[str]) -> Iterable[str]:
        marker = self.start_marker.strip()
        started = False
        for line in lines:
            if not started:
                if line != marker:
                    continue
                started = True
            yield line
        if not started:
            LOGGER.warning("Start marker %r not found; no fields extracted", marker)


@dataclass(frozen=True)
class PairwiseStrategy(BaseExtractionStrategy):
    """Read lines strictly as heading, value, heading, value, ...

    A trailing heading with no value line maps to ``empty_value``.
    """

    empty_value: str = NO_RESPONSE

    def extract(self, lines: Sequence[str]) -> FieldMap:
        fields: FieldMap = {}
        for idx in range(0, len(lines), 2):
            heading = lines[idx]
            value = lines[idx + 1] if idx + 1 < len(lines) else ""
            fields[heading] = value.strip() or self.empty_value
        return fields


def build_strategy(
    profile: ExtractionProfile,
    *,
    empty_value: str = NO_RESPONSE,
    detector: HeadingDetector = is_uppercase_heading,
) -> BaseExtractionStrategy:
    """Create the strategy described by ``profile``."""

    skip = frozenset(h.strip() for h in profile.skip_headings)
    if profile.strategy == "uppercase":
        return UppercaseHeadingStrategy(detector=detector, empty_value=empty_value, skip_headings=skip)
    if profile.strategy == "marker":
        return MarkerGatedStrategy(
            detector=detector,
            empty_value=empty_value,
            skip_headings=skip,
            start_marker=profile.start_marker or "",
        )
    if profile.strategy == "pairs":
        return PairwiseStrategy(empty_value=empty_value)
    raise ValueError(f"unknown extraction strategy: {profile.strategy}")
