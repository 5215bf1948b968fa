"""Configuration helpers for docfill runtime files.

Loads the runtime settings file plus the two declarative lookup tables the
fill pipeline relies on: the schema mapping (heading -> cell address) and the
formatting spec (cell address -> style descriptor). Everything is validated up
front so a broken deployment fails at start-up rather than mid-request.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, ItemsView, Iterator, List, Literal, Mapping, Optional, Tuple

import yaml
from openpyxl.utils.cell import column_index_from_string, coordinate_from_string
from openpyxl.utils.exceptions import CellCoordinatesException
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from docfill.core.errors import ConfigError

CONFIG_DIR = Path(__file__).resolve().parent
DEFAULTS_DIR = CONFIG_DIR / "defaults"
DEFAULT_SETTINGS_PATH = DEFAULTS_DIR / "docfill.yaml"
CONFIG_ENV = "DOCFILL_CONFIG"

HORIZONTAL_ALIGNMENTS = {
    "general",
    "left",
    "center",
    "right",
    "fill",
    "justify",
    "centerContinuous",
    "distributed",
}
VERTICAL_ALIGNMENTS = {"top", "center", "bottom", "justify", "distributed"}
# Spreadsheet-API style names that map onto openpyxl names.
_ALIGNMENT_ALIASES = {"middle": "center", "centercontinuous": "centerContinuous"}

StrategyName = Literal["uppercase", "marker", "pairs"]


def normalize_address(address: str) -> str:
    """Return ``address`` as an upper-case A1 coordinate or raise ``ConfigError``."""

    text = str(address).strip().replace("$", "").upper()
    try:
        column, row = coordinate_from_string(text)
    except (CellCoordinatesException, ValueError) as exc:
        raise ConfigError(f"invalid cell address: {address!r}") from exc
    if row < 1:
        raise ConfigError(f"invalid cell address: {address!r}")
    return f"{column}{row}"


def _normalize_alignment(value: Any, allowed: set[str], default: str) -> str:
    if not value:
        return default
    key = str(value).strip().lower()
    text = _ALIGNMENT_ALIASES.get(key, key)
    if text not in allowed:
        raise ValueError(f"unsupported alignment {value!r}; expected one of {sorted(allowed)}")
    return text


class BackgroundColor(BaseModel):
    """RGB colour with components in ``[0, 1]``; a missing component is 0."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    red: float = Field(default=0.0, ge=0.0, le=1.0)
    green: float = Field(default=0.0, ge=0.0, le=1.0)
    blue: float = Field(default=0.0, ge=0.0, le=1.0)


WHITE = BackgroundColor(red=1.0, green=1.0, blue=1.0)


class StyleDescriptor(BaseModel):
    """Visual formatting applied to a single cell."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    font_family: str = Field(default="Arial", alias="fontFamily")
    font_size: float = Field(default=10, alias="fontSize")
    bold: bool = False
    italic: bool = False
    underline: bool = False
    horizontal_alignment: str = Field(default="left", alias="horizontalAlignment")
    vertical_alignment: str = Field(default="center", alias="verticalAlignment")
    background_color: BackgroundColor = Field(default=WHITE, alias="backgroundColor")

    @field_validator("font_family", mode="before")
    @classmethod
    def _default_family(cls, value: Any) -> Any:
        return value or "Arial"

    @field_validator("font_size", mode="before")
    @classmethod
    def _default_size(cls, value: Any) -> Any:
        return value or 10

    @field_validator("bold", "italic", "underline", mode="before")
    @classmethod
    def _default_flag(cls, value: Any) -> Any:
        return bool(value)

    @field_validator("horizontal_alignment", mode="before")
    @classmethod
    def _horizontal(cls, value: Any) -> str:
        return _normalize_alignment(value, HORIZONTAL_ALIGNMENTS, "left")

    @field_validator("vertical_alignment", mode="before")
    @classmethod
    def _vertical(cls, value: Any) -> str:
        return _normalize_alignment(value, VERTICAL_ALIGNMENTS, "center")

    @field_validator("background_color", mode="before")
    @classmethod
    def _default_background(cls, value: Any) -> Any:
        return WHITE if value is None else value


class ExtractionProfile(BaseModel):
    """Extraction strategy used for one document type."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: StrategyName = "uppercase"
    start_marker: Optional[str] = None
    skip_headings: Tuple[str, ...] = ()

    @model_validator(mode="after")
    def _marker_required(self) -> "ExtractionProfile":
        if self.strategy == "marker" and not (self.start_marker or "").strip():
            raise ValueError("strategy 'marker' requires start_marker")
        return self


class ExtractionSettings(ExtractionProfile):
    """Default extraction profile plus per-suffix overrides (``.pdf``, ``.docx``)."""

    empty_value: str = "No response"
    by_suffix: Dict[str, ExtractionProfile] = Field(default_factory=dict)

    @field_validator("by_suffix", mode="before")
    @classmethod
    def _normalize_suffixes(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {_normalize_suffix(key): item for key, item in value.items()}

    def profile_for(self, suffix: str) -> ExtractionProfile:
        """Return the profile configured for ``suffix`` or the default one."""

        override = self.by_suffix.get(_normalize_suffix(suffix))
        if override is not None:
            return override
        return ExtractionProfile(
            strategy=self.strategy,
            start_marker=self.start_marker,
            skip_headings=self.skip_headings,
        )


class ParserSettings(BaseModel):
    """Optional out-of-process document parser."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    command: Optional[List[str]] = None
    timeout_seconds: float = Field(default=60.0, gt=0)
    suffixes: Tuple[str, ...] = ()

    @field_validator("suffixes", mode="before")
    @classmethod
    def _normalize_suffixes(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return tuple(_normalize_suffix(item) for item in value)
        return value

    def handles(self, suffix: str) -> bool:
        if not self.command:
            return False
        return not self.suffixes or _normalize_suffix(suffix) in self.suffixes


class FillSettings(BaseModel):
    """Runtime settings for the fill pipeline."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    mapping_path: Path = Path("mappings.json")
    formatting_path: Path = Path("formatting_details.json")
    work_dir: Path = Path.home() / "DocFill" / "work"
    sheet: Optional[str] = None
    match_threshold: float = Field(default=0.9, ge=0.0, le=1.0)
    preserve_template_styles: bool = False
    column_widths: Dict[str, float] = Field(default_factory=dict)
    write_csv: bool = True
    log_dir: Optional[Path] = None
    log_level: str = "INFO"
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    parser: ParserSettings = Field(default_factory=ParserSettings)

    @field_validator("column_widths", mode="before")
    @classmethod
    def _validate_columns(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        normalized: Dict[str, Any] = {}
        for column, width in value.items():
            letter = str(column).strip().upper()
            try:
                column_index_from_string(letter)
            except ValueError as exc:
                raise ValueError(f"invalid column letter: {column!r}") from exc
            normalized[letter] = width
        return normalized

    def resolve_paths(self, base: Path) -> "FillSettings":
        """Return a copy with relative paths anchored at ``base``."""

        updates: Dict[str, Path] = {}
        for name in ("mapping_path", "formatting_path", "work_dir", "log_dir"):
            value = getattr(self, name)
            if value is not None and not value.is_absolute():
                updates[name] = base / value
        return self.model_copy(update=updates)


def _normalize_suffix(suffix: str) -> str:
    text = str(suffix).strip().lower()
    return text if text.startswith(".") else f".{text}"


@dataclass(frozen=True)
class SchemaMapping:
    """Read-only mapping of canonical heading -> target cell address."""

    entries: Mapping[str, str]

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SchemaMapping":
        entries = {str(heading): normalize_address(address) for heading, address in payload.items()}
        return cls(entries=MappingProxyType(entries))

    def __getitem__(self, heading: str) -> str:
        return self.entries[heading]

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class FormattingSpec:
    """Read-only mapping of cell address -> style descriptor."""

    entries: Mapping[str, StyleDescriptor]

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "FormattingSpec":
        entries: Dict[str, StyleDescriptor] = {}
        for address, raw in payload.items():
            cell = normalize_address(address)
            if not isinstance(raw, Mapping):
                raise ConfigError(f"style for {address!r} must be a mapping")
            try:
                entries[cell] = StyleDescriptor.model_validate(dict(raw))
            except ValidationError as exc:
                raise ConfigError(f"invalid style for {address!r}: {exc}") from exc
        return cls(entries=MappingProxyType(entries))

    def items(self) -> ItemsView[str, StyleDescriptor]:
        return self.entries.items()

    def __contains__(self, address: object) -> bool:
        return address in self.entries

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class FillContext:
    """Immutable configuration bundle shared by every request."""

    settings: FillSettings
    schema: SchemaMapping
    formatting: FormattingSpec


def _load_document(path: Path) -> Any:
    if not path.exists():
        raise ConfigError(f"configuration file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as fh:
            if path.suffix.lower() == ".json":
                return json.load(fh)
            return yaml.safe_load(fh)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to parse {path}: {exc}") from exc


def _load_mapping_document(path: Path) -> Mapping[str, Any]:
    payload = _load_document(path)
    if not isinstance(payload, dict):
        raise ConfigError(f"invalid structure in {path} (expected mapping)")
    return payload


def load_settings(path: str | Path | None = None) -> FillSettings:
    """Load runtime settings from YAML.

    Resolution order: explicit ``path``, then ``$DOCFILL_CONFIG``, then the
    bundled defaults. Relative paths inside the file resolve against its folder.
    """

    if path is None:
        env_value = os.environ.get(CONFIG_ENV)
        path = Path(env_value) if env_value else DEFAULT_SETTINGS_PATH
    settings_path = Path(path).expanduser()
    payload = _load_document(settings_path) or {}
    if not isinstance(payload, dict):
        raise ConfigError(f"invalid structure in {settings_path} (expected mapping)")
    try:
        settings = FillSettings.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"invalid settings in {settings_path}: {exc}") from exc
    return settings.resolve_paths(settings_path.resolve().parent)


def load_schema_mapping(path: str | Path) -> SchemaMapping:
    """Load the heading -> cell address table."""

    return SchemaMapping.from_dict(_load_mapping_document(Path(path)))


def load_formatting_spec(path: str | Path) -> FormattingSpec:
    """Load the cell address -> style descriptor table."""

    return FormattingSpec.from_dict(_load_mapping_document(Path(path)))


def build_context(settings: FillSettings) -> FillContext:
    """Load both lookup tables referenced by ``settings``; fail fast on errors."""

    return FillContext(
        settings=settings,
        schema=load_schema_mapping(settings.mapping_path),
        formatting=load_formatting_spec(settings.formatting_path),
    )


def load_context(path: str | Path | None = None) -> FillContext:
    """Load settings and lookup tables in one step."""

    return build_context(load_settings(path))


__all__ = [
    "BackgroundColor",
    "ExtractionProfile",
    "ExtractionSettings",
    "FillContext",
    "FillSettings",
    "FormattingSpec",
    "ParserSettings",
    "SchemaMapping",
    "StyleDescriptor",
    "build_context",
    "load_context",
    "load_formatting_spec",
    "load_schema_mapping",
    "load_settings",
    "normalize_address",
]
