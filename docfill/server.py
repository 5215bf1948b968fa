"""
FastAPI upload service

POST /upload takes a questionnaire (``docxFile``) and a spreadsheet template
(``excelFile``), runs the fill pipeline and returns download links served
under /uploads.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from docfill.config import FillContext, load_context
from docfill.core.errors import DocFillError, MissingInputError
from docfill.core.logger import get_logger
from docfill.core.paths import ensure_work_dirs
from docfill.core.pipeline import FillPipeline

LOGGER = logging.getLogger(__name__)

MISSING_FILES_MESSAGE = "Missing required files!"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


async def _stage_upload(upload: UploadFile, directory: Path, stem: str) -> Path:
    content = await upload.read()
    if not content:
        raise MissingInputError(f"Uploaded file '{upload.filename}' is empty")
    suffix = Path(upload.filename or "").suffix.lower()
    target = directory / f"{stem}{suffix}"
    target.write_bytes(content)
    return target


def create_app(context: FillContext, pipeline: FillPipeline | None = None) -> FastAPI:
    """Build the HTTP app around an already loaded, read-only ``FillContext``."""

    dirs = ensure_work_dirs(context.settings.work_dir)
    pipeline = pipeline or FillPipeline(context)

    app = FastAPI(
        title="docfill",
        description="Fill spreadsheet templates from DOCX/PDF questionnaires",
        version="0.1.0",
    )
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.state.context = context
    app.state.pipeline = pipeline
    app.mount("/uploads", StaticFiles(directory=str(dirs["out"])), name="uploads")

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "docfill"}

    @app.post("/upload")
    async def upload(
        docx_file: Optional[UploadFile] = File(None, alias="docxFile"),
        excel_file: Optional[UploadFile] = File(None, alias="excelFile"),
    ):
        """Fill the uploaded template from the uploaded document"""
        if docx_file is None or excel_file is None:
            return _error(400, MISSING_FILES_MESSAGE)

        staging = Path(tempfile.mkdtemp(prefix="request_", dir=str(dirs["uploads"])))
        try:
            document_path = await _stage_upload(docx_file, staging, "document")
            template_path = await _stage_upload(excel_file, staging, "template")
            result = await pipeline.run_async(document_path, template_path, out_dir=dirs["out"])
        except MissingInputError as exc:
            LOGGER.warning("Rejected upload: %s", exc)
            return _error(400, str(exc))
        except DocFillError as exc:
            LOGGER.error("Upload processing failed: %s", exc)
            return _error(500, str(exc))
        except Exception as exc:
            LOGGER.exception("Unexpected error while processing upload")
            return _error(500, f"Error processing files: {exc}")
        finally:
            shutil.rmtree(staging, ignore_errors=True)

        LOGGER.info("Excel saved at: %s", result.workbook_path)
        return {
            "status": "success",
            "downloadExcel": f"/uploads/{Path(result.workbook_path).name}",
            "downloadCsv": f"/uploads/{Path(result.csv_path).name}" if result.csv_path else None,
            "unmatched": result.unmatched,
        }

    return app


def app_from_env() -> FastAPI:
    """Factory for ``uvicorn docfill.server:app_from_env --factory``; reads ``$DOCFILL_CONFIG``."""

    context = load_context()
    get_logger(log_dir=context.settings.log_dir, level=context.settings.log_level)
    return create_app(context)
