"""Document text normalization and field extraction."""

from .extractor import (
    NO_RESPONSE,
    BaseExtractionStrategy,
    MarkerGatedStrategy,
    PairwiseStrategy,
    UppercaseHeadingStrategy,
    build_strategy,
    is_uppercase_heading,
)
from .normalizer import normalize_lines

__all__ = [
    "NO_RESPONSE",
    "BaseExtractionStrategy",
    "MarkerGatedStrategy",
    "PairwiseStrategy",
    "UppercaseHeadingStrategy",
    "build_strategy",
    "is_uppercase_heading",
    "normalize_lines",
]
