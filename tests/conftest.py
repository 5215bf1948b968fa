from __future__ import annotations

import faulthandler
import json
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional

import pytest
from docx import Document
from openpyxl import Workbook

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

faulthandler.enable()  # Ensure crashes emit tracebacks.
# Keep log files out of the home directory while testing.
os.environ.setdefault("DOCFILL_LOG_DIR", tempfile.mkdtemp(prefix="docfill_test_logs_"))

from docfill.config import FillContext, FillSettings, build_context  # noqa: E402

ContextFactory = Callable[..., FillContext]


def build_docx(path: Path, lines: Iterable[str]) -> Path:
    document = Document()
    for line in lines:
        document.add_paragraph(line)
    path.parent.mkdir(parents=True, exist_ok=True)
    document.save(str(path))
    return path


def build_pdf(path: Path, lines: Iterable[str]) -> Path:
    """Write a minimal one-page PDF with one text line per entry."""

    ops = ["BT", "/F1 14 Tf", "16 TL", "72 720 Td"]
    for line in lines:
        escaped = line.replace("\\", "\\\\").replace("(", r"\(").replace(")", r"\)")
        ops.append(f"({escaped}) Tj")
        ops.append("T*")
    ops.append("ET")
    stream = ("\n".join(ops) + "\n").encode("latin-1")

    objects = [
        b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n",
        b"2 0 obj\n<< /Type /Pages /Kids [3 0 R] /Count 1 >>\nendobj\n",
        (
            b"3 0 obj\n"
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792]"
            b" /Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>\n"
            b"endobj\n"
        ),
        f"4 0 obj\n<< /Length {len(stream)} >>\nstream\n".encode("latin-1")
        + stream
        + b"endstream\nendobj\n",
        b"5 0 obj\n<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>\nendobj\n",
    ]

    data = bytearray(b"%PDF-1.4\n")
    offsets = []
    for obj in objects:
        offsets.append(len(data))
        data.extend(obj)
    xref_offset = len(data)
    data.extend(f"xref\n0 {len(objects) + 1}\n".encode("latin-1"))
    data.extend(b"0000000000 65535 f \n")
    for offset in offsets:
        data.extend(f"{offset:010d} 00000 n \n".encode("latin-1"))
    data.extend(f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n".encode("latin-1"))
    data.extend(f"startxref\n{xref_offset}\n%%EOF\n".encode("latin-1"))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(bytes(data))
    return path


def build_template(path: Path, values: Optional[Mapping[str, Any]] = None, title: str = "Sheet1") -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for address, value in (values or {}).items():
        ws[address] = value
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


@pytest.fixture()
def make_context(tmp_path: Path) -> ContextFactory:
    """Write schema/formatting JSON under ``tmp_path`` and build a context."""

    def _factory(
        schema: Mapping[str, str],
        formatting: Optional[Mapping[str, Any]] = None,
        **overrides: Any,
    ) -> FillContext:
        config_dir = tmp_path / "config"
        config_dir.mkdir(parents=True, exist_ok=True)
        mapping_path = config_dir / "mappings.json"
        formatting_path = config_dir / "formatting_details.json"
        mapping_path.write_text(json.dumps(dict(schema)), encoding="utf-8")
        formatting_path.write_text(json.dumps(dict(formatting or {})), encoding="utf-8")
        payload: dict[str, Any] = {
            "mapping_path": mapping_path,
            "formatting_path": formatting_path,
            "work_dir": tmp_path / "work",
        }
        payload.update(overrides)
        return build_context(FillSettings.model_validate(payload))

    return _factory
