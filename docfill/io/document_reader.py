"""Document readers turning DOCX/PDF files into plain text."""

# Module responsibilities:
# - Extract text in-process with python-docx (DOCX) and pdfplumber (PDF).
# - Run an external parser command as an awaited subprocess with a timeout.
# - Route each document to the configured reader by file suffix.

from __future__ import annotations

import asyncio
import logging
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

import pdfplumber
from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from docx.table import Table
from pdfminer.pdfparser import PDFSyntaxError
from pdfplumber.utils.exceptions import PdfminerException

from docfill.config import ParserSettings
from docfill.core.errors import MissingInputError, ParseError

LOGGER = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = {".docx", ".pdf"}


class DocumentReader(Protocol):
    """Anything that can turn a document file into raw text."""

    async def read_text(self, path: Path) -> str:  # pragma: no cover - interface definition
        ...


def _require_file(path: Path) -> None:
    if not path.is_file():
        raise MissingInputError(f"Document not found: {path}")


def _table_lines(table: Table) -> List[str]:
    lines: List[str] = []
    for row in table.rows:
        previous = None
        for cell in row.cells:
            # Merged cells are repeated once per grid column.
            if cell._tc is previous:  # noqa: SLF001
                continue
            previous = cell._tc  # noqa: SLF001
            lines.append(cell.text)
    return lines


def extract_docx_text(path: Path) -> str:
    """Return paragraph and table text of a DOCX file in body order."""

    try:
        document = Document(str(path))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
        raise ParseError(f"Failed to open DOCX {path.name}: {exc}") from exc

    lines: List[str] = []
    for block in document.iter_inner_content():
        if isinstance(block, Table):
            lines.extend(_table_lines(block))
        else:
            lines.append(block.text)
    LOGGER.info("DOCX text extracted", extra={"path": str(path), "blocks": len(lines)})
    return "\n".join(lines)


def extract_pdf_text(path: Path) -> str:
    """Return the text of every PDF page joined by newlines."""

    pages: List[str] = []
    try:
        with pdfplumber.open(path) as pdf:
            for idx, page in enumerate(pdf.pages, start=1):
                text = page.extract_text() or ""
                pages.append(text)
                LOGGER.debug("Extracted text from page %s (%s chars)", idx, len(text))
    except (PdfminerException, PDFSyntaxError, ValueError) as exc:
        raise ParseError(f"Failed to read PDF {path.name}: {exc}") from exc
    LOGGER.info("PDF text extracted", extra={"path": str(path), "pages": len(pages)})
    return "\n".join(pages)


def extract_text(path: Path) -> str:
    """Extract text from a DOCX or PDF file, dispatching on suffix."""

    _require_file(path)
    suffix = path.suffix.lower()
    if suffix == ".docx":
        return extract_docx_text(path)
    if suffix == ".pdf":
        return extract_pdf_text(path)
    raise ParseError(f"Unsupported document type: {path.suffix or path.name}")


class LocalDocumentReader:
    """In-process reader; blocking extraction runs in a worker thread."""

    async def read_text(self, path: Path) -> str:
        return await asyncio.to_thread(extract_text, path)


@dataclass(frozen=True)
class SubprocessDocumentReader:
    """Delegate parsing to an external command.

    ``command`` items may contain ``{input}`` and ``{output}`` placeholders. The
    command must write the text to ``{output}``, exit with status 0 and keep
    stderr empty; any other outcome, or exceeding ``timeout_seconds``, is a
    ``ParseError``. Each call gets its own temporary output path.
    """

    command: Sequence[str]
    timeout_seconds: float = 60.0
    tmp_dir: Optional[Path] = None

    def _argv(self, source: Path, output: Path) -> List[str]:
        return [
            part.replace("{input}", str(source)).replace("{output}", str(output))
            for part in self.command
        ]

    async def read_text(self, path: Path) -> str:
        _require_file(path)
        if not self.command:
            raise ParseError("No parser command configured")

        if self.tmp_dir is not None:
            self.tmp_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(prefix="docfill_parse_", dir=self.tmp_dir) as workdir:
            output_path = Path(workdir) / "parsed.txt"
            argv = self._argv(path, output_path)
            LOGGER.info("Starting external parser", extra={"argv": argv})
            try:
                proc = await asyncio.create_subprocess_exec(
                    *argv,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as exc:
                raise ParseError(f"Failed to start parser {argv[0]!r}: {exc}") from exc

            try:
                stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout_seconds)
            except asyncio.TimeoutError as exc:
                if proc.returncode is None:
                    proc.kill()
                await proc.wait()
                raise ParseError(
                    f"Parser timed out after {self.timeout_seconds:g}s for {path.name}"
                ) from exc

            error_text = stderr.decode("utf-8", errors="replace")
            if proc.returncode != 0:
                raise ParseError(
                    f"Parser exited with status {proc.returncode}: {error_text.strip()}"
                )
            if stderr:
                raise ParseError(f"Parser reported errors: {error_text.strip()}")
            if stdout:
                LOGGER.debug("Parser stdout: %s", stdout.decode("utf-8", errors="replace").strip())
            if not output_path.is_file():
                raise ParseError(f"Parser did not produce {output_path.name}")
            try:
                return output_path.read_text(encoding="utf-8")
            except (UnicodeDecodeError, OSError) as exc:
                raise ParseError(f"Parser output for {path.name} is unreadable: {exc}") from exc


@dataclass(frozen=True)
class RoutingDocumentReader:
    """Send suffixes handled by the external parser there, everything else in-process."""

    parser: ParserSettings
    local: DocumentReader
    external: Optional[DocumentReader] = None

    async def read_text(self, path: Path) -> str:
        if self.external is not None and self.parser.handles(path.suffix):
            return await self.external.read_text(path)
        return await self.local.read_text(path)


def reader_from_settings(parser: ParserSettings, tmp_dir: Optional[Path] = None) -> DocumentReader:
    """Build the document reader described by ``parser`` settings."""

    local = LocalDocumentReader()
    if not parser.command:
        return local
    external = SubprocessDocumentReader(
        command=tuple(parser.command),
        timeout_seconds=parser.timeout_seconds,
        tmp_dir=tmp_dir,
    )
    return RoutingDocumentReader(parser=parser, local=local, external=external)
