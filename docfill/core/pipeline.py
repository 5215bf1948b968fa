"""Fill pipeline: document -> fields -> matched cells -> styled workbook -> files."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from openpyxl import Workbook
from pydantic import BaseModel, ConfigDict

from docfill.config import FillContext
from docfill.core.errors import MissingInputError, NoMatchWarning
from docfill.core.paths import ensure_work_dirs
from docfill.io.document_reader import DocumentReader, reader_from_settings
from docfill.io.workbook import load_template, select_sheet
from docfill.services.artifacts import write_artifacts
from docfill.services.extraction import build_strategy, is_uppercase_heading, normalize_lines
from docfill.services.extraction.extractor import HeadingDetector
from docfill.services.matching import MatchResult, SchemaMatcher
from docfill.services.populate import populate_sheet

LOGGER = logging.getLogger(__name__)

ProgressCB = Callable[[str, str], None]


class FillResult(BaseModel):
    """Outcome returned to callers."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    workbook_path: str
    csv_path: Optional[str] = None
    fields: Dict[str, str]
    written_cells: Dict[str, str]
    matches: List[MatchResult]

    @property
    def unmatched(self) -> List[str]:
        return [m.heading for m in self.matches if not m.matched]


class FillPipeline:
    """Coordinates Read -> Extract -> Match -> Populate -> Write for one request.

    The ``FillContext`` is shared read-only; each call works on its own
    workbook and output names.
    """

    def __init__(
        self,
        context: FillContext,
        reader: DocumentReader | None = None,
        detector: HeadingDetector = is_uppercase_heading,
    ) -> None:
        self.context = context
        self.settings = context.settings
        self.detector = detector
        self.reader = reader or reader_from_settings(
            self.settings.parser, tmp_dir=self.settings.work_dir / "tmp"
        )
        self.matcher = SchemaMatcher(schema=context.schema, threshold=self.settings.match_threshold)

    @staticmethod
    def _require_inputs(document: Optional[Path], template: Optional[Path]) -> Tuple[Path, Path]:
        missing: List[str] = []
        if document is None or not Path(document).is_file():
            missing.append("document")
        if template is None or not Path(template).is_file():
            missing.append("template")
        if missing:
            raise MissingInputError(f"Missing required files: {', '.join(missing)}")
        return Path(document), Path(template)  # type: ignore[arg-type]

    def extract_fields(self, text: str, suffix: str) -> Dict[str, str]:
        """Normalize ``text`` and run the strategy configured for ``suffix``."""

        extraction = self.settings.extraction
        profile = extraction.profile_for(suffix)
        strategy = build_strategy(profile, empty_value=extraction.empty_value, detector=self.detector)
        fields = strategy.extract(normalize_lines(text))
        LOGGER.info("Extracted %s fields using %s strategy", len(fields), profile.strategy)
        return fields

    def plan_cells(self, fields: Dict[str, str]) -> Tuple[List[Tuple[str, str]], List[MatchResult]]:
        """Match every heading; returns ``(cell, value)`` assignments and all match results."""

        assignments: List[Tuple[str, str]] = []
        matches = self.matcher.match_all(fields)
        for match in matches:
            if match.cell is None:
                LOGGER.warning("%s", NoMatchWarning(match.heading, match.best_heading, match.similarity))
                continue
            value = fields[match.heading]
            assignments.append((match.cell, value))
            LOGGER.info("Mapped: %s -> %s -> %s", match.heading, value, match.cell)
        return assignments, matches

    def populate_template(self, template: Path, assignments: List[Tuple[str, str]]) -> Workbook:
        """Load a fresh copy of ``template`` and write the planned cells into it."""

        workbook = load_template(template)
        worksheet = select_sheet(workbook, self.settings.sheet)
        populate_sheet(
            worksheet,
            assignments,
            self.context.formatting,
            column_widths=self.settings.column_widths,
            preserve_styles=self.settings.preserve_template_styles,
        )
        return workbook

    async def run_async(
        self,
        document: Optional[Path],
        template: Optional[Path],
        out_dir: Optional[Path] = None,
        progress_cb: ProgressCB | None = None,
    ) -> FillResult:
        def progress(stage: str, detail: str = "") -> None:
            if progress_cb:
                progress_cb(stage, detail)
            LOGGER.info("%s - %s", stage, detail)

        document_path, template_path = self._require_inputs(document, template)
        out_dir = out_dir or ensure_work_dirs(self.settings.work_dir)["out"]

        progress("read", document_path.name)
        raw_text = await self.reader.read_text(document_path)

        progress("extract", document_path.suffix.lower())
        fields = self.extract_fields(raw_text, document_path.suffix)

        progress("match", f"{len(fields)} headings")
        assignments, matches = self.plan_cells(fields)

        # openpyxl and pandas block; keep them off the event loop.
        progress("populate", template_path.name)
        workbook = await asyncio.to_thread(self.populate_template, template_path, assignments)

        progress("write", str(out_dir))
        artifacts = await asyncio.to_thread(
            write_artifacts, workbook, fields, out_dir, write_csv=self.settings.write_csv
        )

        written = {match.cell: match.heading for match in matches if match.cell is not None}
        return FillResult(
            workbook_path=str(artifacts.workbook),
            csv_path=str(artifacts.csv) if artifacts.csv else None,
            fields=fields,
            written_cells=written,
            matches=matches,
        )

    def run(
        self,
        document: Optional[Path],
        template: Optional[Path],
        out_dir: Optional[Path] = None,
        progress_cb: ProgressCB | None = None,
    ) -> FillResult:
        """Synchronous wrapper around ``run_async``."""

        return asyncio.run(self.run_async(document, template, out_dir=out_dir, progress_cb=progress_cb))
