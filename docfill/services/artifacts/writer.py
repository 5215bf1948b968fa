"""Serialize the populated workbook and the extracted pairs to output files."""

# Module responsibilities:
# - Write the workbook and the Heading/Value CSV under collision-resistant names.
# - Stage each file under a temporary name and rename it into place.
# - Remove everything written for the request when any step fails.

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

import pandas as pd
from openpyxl import Workbook

from docfill.core.errors import SerializationError
from docfill.core.paths import unique_stamp

LOGGER = logging.getLogger(__name__)

CSV_COLUMNS = ["Heading", "Value"]


@dataclass(frozen=True)
class ArtifactPaths:
    """Files produced for one request."""

    workbook: Path
    csv: Optional[Path] = None


def fields_to_frame(fields: Mapping[str, str]) -> pd.DataFrame:
    return pd.DataFrame(list(fields.items()), columns=CSV_COLUMNS)


def _staging_path(final: Path) -> Path:
    return final.with_name(f".{final.name}.partial")


def _discard(paths: List[Path]) -> None:
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.warning("Could not remove partial artifact %s: %s", path, exc)


def write_artifacts(
    workbook: Workbook,
    fields: Mapping[str, str],
    output_dir: Path,
    *,
    write_csv: bool = True,
    stamp: Optional[str] = None,
) -> ArtifactPaths:
    """Write ``updated_<stamp>.xlsx`` and, optionally, ``results_<stamp>.csv``.

    Args:
        workbook: Populated workbook.
        fields: Extracted heading/value pairs, matched or not.
        output_dir: Destination directory, created when missing.
        write_csv: Whether to emit the tabular diagnostics file.
        stamp: Name suffix; a fresh unique stamp by default.

    Returns:
        Paths of the files written.

    Raises:
        SerializationError: When any file cannot be written. No output files are
            left behind in that case.
    """

    stamp = stamp or unique_stamp()
    workbook_path = output_dir / f"updated_{stamp}.xlsx"
    csv_path = output_dir / f"results_{stamp}.csv" if write_csv else None

    touched: List[Path] = []
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        if csv_path is not None:
            staged_csv = _staging_path(csv_path)
            touched.append(staged_csv)
            fields_to_frame(fields).to_csv(staged_csv, index=False, encoding="utf-8")
            touched.append(csv_path)
            os.replace(staged_csv, csv_path)

        staged_wb = _staging_path(workbook_path)
        touched.append(staged_wb)
        workbook.save(staged_wb)
        touched.append(workbook_path)
        os.replace(staged_wb, workbook_path)
    except (OSError, ValueError, TypeError) as exc:
        _discard(touched)
        LOGGER.error("Failed to write artifacts", extra={"output_dir": str(output_dir), "error": str(exc)})
        raise SerializationError(f"failed to write output files: {exc}") from exc

    LOGGER.info(
        "Artifacts written",
        extra={"workbook": str(workbook_path), "csv": str(csv_path) if csv_path else None},
    )
    return ArtifactPaths(workbook=workbook_path, csv=csv_path)
