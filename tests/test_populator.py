"""Unit tests for worksheet population and styling."""

# Module responsibilities:
# - Validate colour encoding and per-cell style application.
# - Ensure values survive a save/reload cycle and untouched cells stay untouched.

from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font

from docfill.config import BackgroundColor, FormattingSpec
from docfill.services.populate import apply_formatting, populate_sheet, rgb_to_hex, write_values


@pytest.mark.parametrize(
    "color,expected",
    [
        (BackgroundColor(red=1, green=0, blue=0), "FF0000"),
        (BackgroundColor(red=0, green=0, blue=0), "000000"),
        (BackgroundColor(red=1, green=1, blue=1), "FFFFFF"),
        (BackgroundColor(red=0.5, green=0.2, blue=0.8), "8033CC"),
        (BackgroundColor(blue=1), "0000FF"),
    ],
)
def test_rgb_to_hex(color: BackgroundColor, expected: str) -> None:
    assert rgb_to_hex(color) == expected


def test_formatting_applies_font_alignment_and_fill() -> None:
    wb = Workbook()
    ws = wb.active
    ws["B2"] = "John Smith"
    spec = FormattingSpec.from_dict(
        {
            "B2": {
                "fontFamily": "Verdana",
                "fontSize": 12,
                "bold": True,
                "italic": True,
                "underline": True,
                "horizontalAlignment": "CENTER",
                "verticalAlignment": "TOP",
                "backgroundColor": {"red": 1, "green": 0, "blue": 0},
            }
        }
    )

    assert apply_formatting(ws, spec) == ["B2"]

    cell = ws["B2"]
    assert cell.font.name == "Verdana"
    assert cell.font.size == 12
    assert cell.font.bold and cell.font.italic
    assert cell.font.underline == "single"
    assert cell.alignment.horizontal == "center"
    assert cell.alignment.vertical == "top"
    assert cell.fill.fill_type == "solid"
    assert cell.fill.fgColor.rgb.endswith("FF0000")


def test_formatting_defaults() -> None:
    wb = Workbook()
    ws = wb.active
    ws["A1"] = "value"
    apply_formatting(ws, FormattingSpec.from_dict({"A1": {}}))

    cell = ws["A1"]
    assert cell.font.name == "Arial"
    assert cell.font.size == 10
    assert not cell.font.bold
    assert cell.font.underline is None
    assert cell.alignment.horizontal == "left"
    assert cell.alignment.vertical == "center"
    assert cell.fill.fgColor.rgb.endswith("FFFFFF")


def test_formatting_skips_cells_without_values() -> None:
    wb = Workbook()
    ws = wb.active
    ws["A1"] = "present"
    spec = FormattingSpec.from_dict({"A1": {"bold": True}, "C9": {"bold": True}})

    assert apply_formatting(ws, spec) == ["A1"]
    assert (ws.max_row, ws.max_column) == (1, 1)
    assert ws["C9"].fill.fill_type is None
    assert not ws["C9"].font.bold


def test_write_values_resets_or_preserves_template_style() -> None:
    wb = Workbook()
    ws = wb.active
    ws["B2"] = "placeholder"
    ws["B2"].font = Font(bold=True, name="Courier New")
    ws["B3"] = "placeholder"
    ws["B3"].font = Font(bold=True, name="Courier New")

    write_values(ws, [("B2", "fresh")])
    write_values(ws, [("B3", "kept")], preserve_styles=True)

    assert ws["B2"].value == "fresh"
    assert not ws["B2"].font.bold
    assert ws["B3"].value == "kept"
    assert ws["B3"].font.bold
    assert ws["B3"].font.name == "Courier New"


def test_populate_round_trip_and_untouched_cells(tmp_path: Path) -> None:
    wb = Workbook()
    ws = wb.active
    ws["A1"] = "Heading"
    ws["D5"] = "leave me"
    ws["D5"].font = Font(italic=True)

    written = populate_sheet(
        ws,
        [("B2", "John Smith"), ("B3", "34")],
        FormattingSpec.from_dict({"B2": {"bold": True}}),
        column_widths={"A": 30, "B": 50, "C": 40},
    )
    assert written == ["B2", "B3"]

    out = tmp_path / "out.xlsx"
    wb.save(out)
    reloaded = load_workbook(out).active
    assert reloaded["B2"].value == "John Smith"
    assert reloaded["B2"].font.bold
    assert reloaded["B3"].value == "34"
    assert not reloaded["B3"].font.bold
    assert reloaded["D5"].value == "leave me"
    assert reloaded["D5"].font.italic
    assert reloaded["A1"].value == "Heading"
    assert reloaded.column_dimensions["A"].width == 30
    assert reloaded.column_dimensions["B"].width == 50
    assert reloaded.column_dimensions["C"].width == 40
