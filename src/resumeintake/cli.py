"""Typer CLI entrypoint for the intake pipeline."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import create_container
from .errors import ResumeIntakeError
from .extraction import resolve_response, to_extraction
from .logging import configure_logging
from .pipeline import AuditLogger, OutputWriter, build_output, read_plain_text
from .schemas import RawDocument
from .schemas.config import load_config

app = typer.Typer(help="Resume ingestion and extraction verification CLI.")


def _load_settings(config: Path | None, **overrides: Any) -> dict[str, Any]:
    raw: Any = None
    try:
        if config:
            with config.open("r", encoding="utf-8") as handle:
                raw = yaml.safe_load(handle)
        settings = load_config(raw).to_settings()
    except (yaml.YAMLError, ValidationError) as exc:
        raise typer.BadParameter(f"Invalid config file: {exc}", param_hint="--config") from exc

    remote = {key: value for key, value in overrides.items() if value is not None}
    if remote:
        settings.setdefault("remote", {}).update(remote)
    return settings


def _fail(exc: ResumeIntakeError) -> typer.Exit:
    typer.echo(f"{exc.kind}: {exc}\n{exc.remediation}", err=True)
    return typer.Exit(code=1)


@app.command()
def extract(
    file: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Resume file."),
    mime_type: Optional[str] = typer.Option(None, help="Declared MIME type of the file."),
    pdf_endpoint: Optional[str] = typer.Option(None, help="Remote PDF extractor base URL."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Extract human-readable text from a resume file."""
    settings = _load_settings(config, pdf_endpoint=pdf_endpoint)
    configure_logging(log_level)

    pipeline = create_container(settings=settings).pipeline()
    document = RawDocument(data=file.read_bytes(), mime_type=mime_type, file_name=file.name)
    try:
        extracted = pipeline.extract_text(document)
    except ResumeIntakeError as exc:
        raise _fail(exc) from exc

    typer.echo(json.dumps(extracted.model_dump(mode="json"), ensure_ascii=False))


@app.command()
def verify(
    source: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Resume text file."),
    extraction: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, help="Extraction service answer (JSON, fences allowed)."
    ),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Drop every extracted field that cannot be found in the resume text."""
    settings = _load_settings(config)
    configure_logging(log_level)

    pipeline = create_container(settings=settings).pipeline()
    try:
        source_text = read_plain_text(source.read_bytes())
        answer = extraction.read_bytes().decode("utf-8", errors="replace")
        parsed = to_extraction(resolve_response(answer))
        verified, report = pipeline.verify(source_text, parsed)
    except ResumeIntakeError as exc:
        raise _fail(exc) from exc

    OutputWriter().write(output, build_output(verified, report))
    if audit_log:
        AuditLogger(audit_log).append(
            {"source": source.name, "received": report.received, "kept": report.kept}
        )
    typer.echo(f"Kept {sum(report.kept.values())} of {sum(report.received.values())} items. Results saved to {output}.")


@app.command()
def run(
    file: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Resume file."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    mime_type: Optional[str] = typer.Option(None, help="Declared MIME type of the file."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    pdf_endpoint: Optional[str] = typer.Option(None, help="Remote PDF extractor base URL."),
    extraction_endpoint: Optional[str] = typer.Option(None, help="Structured extraction API endpoint."),
    api_key: Optional[str] = typer.Option(None, help="API key for the remote services."),
) -> None:
    """Extract, parse and verify a resume file end to end."""
    settings = _load_settings(
        config,
        pdf_endpoint=pdf_endpoint,
        extraction_endpoint=extraction_endpoint,
        api_key=api_key,
    )
    configure_logging(log_level)

    container = create_container(settings=settings)
    pipeline = container.pipeline()
    extractor = container.structured_extractor()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    document = RawDocument(data=file.read_bytes(), mime_type=mime_type, file_name=file.name)
    try:
        result = pipeline.run(document, extractor, audit_logger=audit_logger)
    except ResumeIntakeError as exc:
        raise _fail(exc) from exc

    OutputWriter().write(output, build_output(result.verified, result.report))
    typer.echo(
        f"Kept {sum(result.report.kept.values())} of {sum(result.report.received.values())} items. "
        f"Results saved to {output}."
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
