"""Typer based command line entry points for docfill."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer

from docfill.config import build_context, load_settings
from docfill.core.errors import ConfigError, DocFillError, MissingInputError
from docfill.core.logger import get_logger
from docfill.core.pipeline import FillPipeline

app = typer.Typer(help="Fill spreadsheet templates from DOCX/PDF questionnaires.")

_STATE: dict[str, Optional[str]] = {"log_level": None}


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    _STATE["log_level"] = None
    if log_level is None:
        return
    if not isinstance(getattr(logging, log_level.upper(), None), int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")
    _STATE["log_level"] = log_level.upper()


def _load_pipeline(config: Optional[Path]) -> FillPipeline:
    try:
        settings = load_settings(config)
        context = build_context(settings)
    except ConfigError as exc:
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc
    get_logger(log_dir=settings.log_dir, level=_STATE["log_level"] or settings.log_level)
    return FillPipeline(context)


@app.command("fill")
def fill_command(
    document: Path = typer.Argument(..., help="Source DOCX or PDF questionnaire."),
    template: Path = typer.Argument(..., help="Spreadsheet template (.xlsx)."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings YAML file."),
    out_dir: Optional[Path] = typer.Option(None, "--out-dir", "-o", help="Directory for output files."),
) -> None:
    """Extract fields from DOCUMENT and write them into a copy of TEMPLATE."""

    pipeline = _load_pipeline(config)

    def _progress(stage: str, detail: str) -> None:
        typer.secho(f"{stage:>9} {detail}", err=True)

    try:
        result = pipeline.run(document, template, out_dir=out_dir, progress_cb=_progress)
    except MissingInputError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc
    except DocFillError as exc:
        typer.secho(f"Processing failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Excel saved at: {result.workbook_path}")
    if result.csv_path:
        typer.echo(f"CSV saved at: {result.csv_path}")
    if result.unmatched:
        typer.secho(f"Unmapped headings: {', '.join(result.unmatched)}", fg=typer.colors.YELLOW)


@app.command("extract")
def extract_command(
    document: Path = typer.Argument(..., help="Source DOCX or PDF questionnaire."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings YAML file."),
) -> None:
    """Print the heading/value pairs found in DOCUMENT as JSON."""

    pipeline = _load_pipeline(config)
    try:
        text = asyncio.run(pipeline.reader.read_text(document))
    except DocFillError as exc:
        typer.secho(f"Processing failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    fields = pipeline.extract_fields(text, document.suffix)
    typer.echo(json.dumps(fields, ensure_ascii=False, indent=2))


@app.command("serve")
def serve_command(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings YAML file."),
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(5000, "--port"),
) -> None:
    """Run the HTTP upload service."""

    import uvicorn

    from docfill.server import create_app

    pipeline = _load_pipeline(config)
    uvicorn.run(create_app(pipeline.context), host=host, port=port)


def main() -> None:  # pragma: no cover - console script
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
