"""Intake pipeline assembly and execution."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pendulum
import structlog

from . import __version__
from .core import (
    ContentValidator,
    DocxTextReader,
    ExtractionVerifier,
    FileFormat,
    FormatSniffer,
    VerificationReport,
)
from .errors import BinaryContentDetected, TextTooShort, UnsupportedFormat
from .extraction import StructuredExtractor, build_prompt, resolve_response, to_extraction
from .remote import HTTPPdfExtractorClient
from .schemas import (
    ExtractedText,
    Provenance,
    RawDocument,
    StructuredExtraction,
    VerifiedExtraction,
)

MAX_FILE_SIZE = 10 * 1024 * 1024


@dataclass(slots=True)
class IntakeResult:
    """Everything one pipeline invocation produced."""

    extracted: ExtractedText
    extraction: StructuredExtraction
    verified: VerifiedExtraction
    report: VerificationReport


class IntakePipeline:
    """Résumé bytes in, grounded structured profile data out."""

    def __init__(
        self,
        *,
        sniffer: FormatSniffer,
        docx_reader: DocxTextReader,
        validator: ContentValidator,
        verifier: ExtractionVerifier,
        pdf_client: HTTPPdfExtractorClient | None = None,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        self._sniffer = sniffer
        self._docx = docx_reader
        self._validator = validator
        self._verifier = verifier
        self._pdf = pdf_client or HTTPPdfExtractorClient(None)
        self._max_file_size = max_file_size
        self._logger = structlog.get_logger(__name__)

    def extract_text(self, document: RawDocument) -> ExtractedText:
        """Turn an upload into validated, human-readable text."""
        size = len(document.data)
        if size == 0:
            raise TextTooShort("The uploaded file is empty.")
        if size > self._max_file_size:
            raise UnsupportedFormat(
                f"File is too large ({size} bytes).",
                remediation=f"Please upload a file smaller than {self._max_file_size // (1024 * 1024)} MB.",
            )

        file_format = self._sniffer.classify(document.mime_type, document.file_name, document.head)
        self._sniffer.ensure_supported(file_format)
        self._logger.info(
            "intake.extract_started",
            format=file_format.value,
            size=size,
            mime_type=document.mime_type,
        )

        if file_format is FileFormat.PDF:
            text = self._pdf.extract(document.data, document.file_name)
            provenance = Provenance.REMOTE_PDF
        elif file_format is FileFormat.DOCX:
            text = self._docx.extract(document.data)
            provenance = Provenance.LOCAL_DOCX
        else:
            text = read_plain_text(document.data)
            provenance = Provenance.LOCAL_TXT

        self._validator.check_extracted_text(text)
        self._logger.info("intake.extracted", provenance=provenance.value, length=len(text))
        return ExtractedText(text=text, provenance=provenance)

    def parse(self, source_text: str, extractor: StructuredExtractor) -> StructuredExtraction:
        """Gate the text, call the extraction service and parse its answer."""
        self._validator.validate_before_parsing(source_text)
        raw = extractor.generate(build_prompt(source_text))
        return to_extraction(resolve_response(raw))

    def verify(
        self,
        source_text: str,
        extraction: StructuredExtraction,
    ) -> tuple[VerifiedExtraction, VerificationReport]:
        return self._verifier.verify_with_report(source_text, extraction)

    def run(
        self,
        document: RawDocument,
        extractor: StructuredExtractor,
        *,
        audit_logger: "AuditLogger | None" = None,
    ) -> IntakeResult:
        extracted = self.extract_text(document)
        extraction = self.parse(extracted.text, extractor)
        verified, report = self.verify(extracted.text, extraction)

        if audit_logger:
            audit_logger.append(
                {
                    "file_name": document.file_name,
                    "provenance": extracted.provenance.value,
                    "text_length": len(extracted.text),
                    "received": report.received,
                    "kept": report.kept,
                    "dropped": report.dropped,
                }
            )

        return IntakeResult(
            extracted=extracted,
            extraction=extraction,
            verified=verified,
            report=report,
        )


def read_plain_text(data: bytes) -> str:
    """Decode a text upload; ``utf-8-sig`` drops a leading BOM."""
    try:
        content = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise BinaryContentDetected(
            "The text file is not valid UTF-8 text.",
            remediation="Please save the resume as UTF-8 text, DOCX or PDF.",
        ) from exc
    text = content.strip()
    if not text:
        raise TextTooShort("The text file appears to be empty.")
    return text


class OutputWriter:
    """Persist verification results."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


def build_output(verified: VerifiedExtraction, report: VerificationReport) -> dict[str, Any]:
    return {
        "metadata": {
            "timestamp": pendulum.now().to_iso8601_string(),
            "app_version": __version__,
            "received": report.received,
            "kept": report.kept,
            "dropped": report.dropped,
        },
        "verified": verified.model_dump(mode="json", by_alias=True),
    }


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        entry = {"timestamp": pendulum.now().to_iso8601_string(), **record}
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, ensure_ascii=False))
            handle.write("\n")
