"""Spreadsheet template loading."""

# Module responsibilities:
# - Open a template workbook with openpyxl, keeping its styles intact.
# - Resolve the target worksheet by name or fall back to the first sheet.

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Optional

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from docfill.core.errors import MissingInputError, ParseError

LOGGER = logging.getLogger(__name__)


def load_template(path: Path) -> Workbook:
    """Load the template workbook.

    Raises:
        MissingInputError: When the template file is absent.
        ParseError: When the file is not a readable xlsx/xlsm workbook.
    """

    if not path.is_file():
        raise MissingInputError(f"Template workbook not found: {path}")
    try:
        workbook = load_workbook(path)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        raise ParseError(f"Failed to open template {path.name}: {exc}") from exc
    LOGGER.info("Template loaded", extra={"path": str(path), "sheets": workbook.sheetnames})
    return workbook


def select_sheet(workbook: Workbook, sheet: Optional[str] = None) -> Worksheet:
    """Return the named worksheet, or the first one when ``sheet`` is None."""

    if sheet is None:
        if not workbook.worksheets:
            raise ParseError("Template has no worksheets")
        return workbook.worksheets[0]
    if sheet not in workbook.sheetnames:
        raise ParseError(f"Sheet '{sheet}' not found in template")
    return workbook[sheet]
