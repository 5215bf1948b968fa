"""Schema matching for extracted headings."""

from .matcher import DEFAULT_THRESHOLD, MatchResult, SchemaMatcher, dice_similarity

__all__ = ["DEFAULT_THRESHOLD", "MatchResult", "SchemaMatcher", "dice_similarity"]
