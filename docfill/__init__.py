"""`docfill` fills spreadsheet templates from questionnaire-style documents."""

# Module responsibilities:
# - Re-export the pipeline and configuration entry points as a stable API surface.

from __future__ import annotations

from .config import FillContext, build_context, load_context, load_settings
from .core.errors import (
    ConfigError,
    DocFillError,
    MissingInputError,
    NoMatchWarning,
    ParseError,
    SerializationError,
)
from .core.pipeline import FillPipeline, FillResult

__all__ = [
    "ConfigError",
    "DocFillError",
    "FillContext",
    "FillPipeline",
    "FillResult",
    "MissingInputError",
    "NoMatchWarning",
    "ParseError",
    "SerializationError",
    "build_context",
    "load_context",
    "load_settings",
]

__version__ = "0.1.0"
