"""I/O helpers for source documents and spreadsheet templates."""

from .document_reader import (
    DocumentReader,
    LocalDocumentReader,
    RoutingDocumentReader,
    SubprocessDocumentReader,
    extract_text,
    reader_from_settings,
)
from .workbook import load_template, select_sheet

__all__ = [
    "DocumentReader",
    "LocalDocumentReader",
    "RoutingDocumentReader",
    "SubprocessDocumentReader",
    "extract_text",
    "load_template",
    "reader_from_settings",
    "select_sheet",
]
