"""Worksheet population and styling."""

from .populator import apply_column_widths, apply_formatting, populate_sheet, rgb_to_hex, style_cell, write_values

__all__ = [
    "apply_column_widths",
    "apply_formatting",
    "populate_sheet",
    "rgb_to_hex",
    "style_cell",
    "write_values",
]
