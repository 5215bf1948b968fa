"""Unit tests for artifact serialization."""

# Module responsibilities:
# - Check unique naming and CSV quoting for awkward values.
# - Ensure failures leave no partial files behind.

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest
from openpyxl import Workbook, load_workbook

from docfill.core.errors import SerializationError
from docfill.services.artifacts import write_artifacts


def _workbook() -> Workbook:
    wb = Workbook()
    wb.active["B2"] = "John Smith"
    return wb


def test_write_artifacts_names_and_content(tmp_path: Path) -> None:
    fields = {"NAME": "John Smith", "ADDRESS": '12 Main St, Springfield\n"Unit 4"'}
    paths = write_artifacts(_workbook(), fields, tmp_path / "out", stamp="fixed")

    assert paths.workbook == tmp_path / "out" / "updated_fixed.xlsx"
    assert paths.csv == tmp_path / "out" / "results_fixed.csv"
    assert load_workbook(paths.workbook).active["B2"].value == "John Smith"

    frame = pd.read_csv(paths.csv, keep_default_na=False)
    assert list(frame.columns) == ["Heading", "Value"]
    assert frame.to_dict("records") == [
        {"Heading": "NAME", "Value": "John Smith"},
        {"Heading": "ADDRESS", "Value": '12 Main St, Springfield\n"Unit 4"'},
    ]
    assert not list((tmp_path / "out").glob(".*partial"))


def test_write_artifacts_unique_names(tmp_path: Path) -> None:
    first = write_artifacts(_workbook(), {}, tmp_path)
    second = write_artifacts(_workbook(), {}, tmp_path)
    assert first.workbook != second.workbook
    assert first.csv != second.csv


def test_write_artifacts_without_csv(tmp_path: Path) -> None:
    paths = write_artifacts(_workbook(), {"NAME": "x"}, tmp_path, write_csv=False)
    assert paths.csv is None
    assert [p.name for p in tmp_path.iterdir()] == [paths.workbook.name]


def test_failed_workbook_write_removes_csv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    wb = _workbook()

    def _boom(*_: object, **__: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(wb, "save", _boom)
    with pytest.raises(SerializationError):
        write_artifacts(wb, {"NAME": "x"}, tmp_path / "out")
    assert list((tmp_path / "out").iterdir()) == []


def test_unwritable_output_dir(tmp_path: Path) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file", encoding="utf-8")
    with pytest.raises(SerializationError):
        write_artifacts(_workbook(), {}, blocker / "out")
