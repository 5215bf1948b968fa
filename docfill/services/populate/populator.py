"""Write matched values into a worksheet and apply configured cell styles."""

# Module responsibilities:
# - Place matched values into their target cells as fresh value cells.
# - Apply the formatting spec (font, alignment, solid fill) to existing cells.
# - Optionally fix column widths for the output layout.

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Mapping, Optional, Tuple

from openpyxl.cell.cell import Cell
from openpyxl.styles import Alignment, Border, Font, PatternFill
from openpyxl.utils.cell import coordinate_to_tuple
from openpyxl.worksheet.worksheet import Worksheet

from docfill.config import BackgroundColor, FormattingSpec, StyleDescriptor

LOGGER = logging.getLogger(__name__)

CellAssignment = Tuple[str, str]


def _channel_to_hex(value: float) -> str:
    scaled = int(math.floor(value * 255 + 0.5))
    return f"{max(0, min(255, scaled)):02X}"


def rgb_to_hex(color: BackgroundColor) -> str:
    """Encode a ``[0, 1]`` RGB colour as ``RRGGBB`` (upper-case hex)."""

    return _channel_to_hex(color.red) + _channel_to_hex(color.green) + _channel_to_hex(color.blue)


def _existing_cell(ws: Worksheet, address: str) -> Optional[Cell]:
    row, column = coordinate_to_tuple(address)
    cell = ws._cells.get((row, column))  # noqa: SLF001 - no public lookup without creating
    if cell is None or cell.value is None:
        return None
    return cell


def _reset_style(cell: Cell) -> None:
    cell.font = Font()
    cell.fill = PatternFill()
    cell.border = Border()
    cell.alignment = Alignment()
    cell.number_format = "General"


def write_values(
    ws: Worksheet,
    assignments: Iterable[CellAssignment],
    *,
    preserve_styles: bool = False,
) -> List[str]:
    """Write ``(address, value)`` pairs; returns the addresses written in order."""

    written: List[str] = []
    for address, value in assignments:
        cell = ws[address]
        if not preserve_styles:
            _reset_style(cell)
        cell.value = value
        written.append(address)
        LOGGER.debug("Wrote %s -> %s", address, value)
    return written


def style_cell(cell: Cell, style: StyleDescriptor) -> None:
    """Apply one style descriptor to ``cell``."""

    cell.font = Font(
        name=style.font_family,
        size=style.font_size,
        bold=style.bold,
        italic=style.italic,
        underline="single" if style.underline else None,
    )
    cell.alignment = Alignment(
        horizontal=style.horizontal_alignment,
        vertical=style.vertical_alignment,
    )
    colour = rgb_to_hex(style.background_color)
    cell.fill = PatternFill(fill_type="solid", start_color=colour, end_color=colour)


def apply_formatting(ws: Worksheet, formatting: FormattingSpec) -> List[str]:
    """Style every formatting-spec address present in ``ws``; returns styled addresses."""

    styled: List[str] = []
    for address, style in formatting.items():
        cell = _existing_cell(ws, address)
        if cell is None:
            continue
        style_cell(cell, style)
        styled.append(address)
    return styled


def apply_column_widths(ws: Worksheet, widths: Mapping[str, float]) -> None:
    for column, width in widths.items():
        ws.column_dimensions[column].width = width


def populate_sheet(
    ws: Worksheet,
    assignments: Iterable[CellAssignment],
    formatting: FormattingSpec,
    *,
    column_widths: Optional[Mapping[str, float]] = None,
    preserve_styles: bool = False,
) -> List[str]:
    """Write values, then styles, then column widths. Returns the written addresses."""

    written = write_values(ws, assignments, preserve_styles=preserve_styles)
    styled = apply_formatting(ws, formatting)
    if column_widths:
        apply_column_widths(ws, column_widths)
    LOGGER.info(
        "Worksheet populated",
        extra={"sheet": ws.title, "written": len(written), "styled": len(styled)},
    )
    return written
