"""Custom exceptions used across docfill."""


class DocFillError(Exception):
    """Base error for the application."""


class ConfigError(DocFillError):
    """Configuration file missing or malformed."""


class MissingInputError(DocFillError):
    """Raised when a required input file is absent."""


class ParseError(DocFillError):
    """Raised when a document or template cannot be parsed."""


class SerializationError(DocFillError):
    """Raised when output artifacts cannot be written."""


class NoMatchWarning(UserWarning):
    """Extracted heading has no schema key above the similarity threshold."""

    def __init__(self, heading: str, best_heading: str | None, similarity: float) -> None:
        super().__init__(
            f"no mapping for heading {heading!r} "
            f"(best={best_heading!r}, similarity={similarity:.3f})"
        )
        self.heading = heading
        self.best_heading = best_heading
        self.similarity = similarity
