"""Checks that text is really text.

The same detectors run twice: right after extraction, where a hit means an
extraction path leaked raw file bytes, and again right before the text is sent
to the structured extraction service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import structlog

from ..errors import (
    BinaryContentDetected,
    DocxStructureDetected,
    PDFStructureDetected,
    TextTooShort,
)

Stage = Literal["extraction", "pre_parse"]

PDF_MARKERS: tuple[str, ...] = (
    "%PDF-",
    " obj <</",
    "/Title (",
    "/Producer (",
    "/Creator (",
    "endobj",
    "/Type /Catalog",
    "/Type /Page",
    "%%EOF",
)

DOCX_MARKERS: tuple[str, ...] = (
    "PK\x03\x04",
    "word/document.xml",
    "[Content_Types].xml",
    "_rels/.rels",
)

_ALLOWED_CONTROL = {"\t", "\n", "\r"}


def find_pdf_marker(text: str, window: int = 1000) -> str | None:
    preview = text[:window]
    return next((marker for marker in PDF_MARKERS if marker in preview), None)


def find_docx_marker(text: str, window: int = 1000) -> str | None:
    preview = text[:window]
    return next((marker for marker in DOCX_MARKERS if marker in preview), None)


def is_probably_binary(text: str, window: int = 500, control_ratio: float = 0.1) -> bool:
    """NUL anywhere in the preview, or too many non-whitespace control chars."""
    preview = text[:window]
    if "\x00" in preview:
        return True
    control = sum(1 for char in preview if ord(char) < 32 and char not in _ALLOWED_CONTROL)
    return control > len(preview) * control_ratio


@dataclass
class ValidatorConfig:
    """Configuration for content validation."""

    marker_window: int = 1000
    binary_window: int = 500
    control_ratio: float = 0.1
    min_text_length: int = 50


_MESSAGES: dict[Stage, dict[str, str]] = {
    "extraction": {
        "pdf": "Invalid extracted text: PDF structure detected. "
        "This indicates a bug in the extraction process.",
        "docx": "Invalid extracted text: Word document structure detected. "
        "This indicates a bug in the extraction process.",
        "binary": "Invalid extracted text: Binary content detected. "
        "This indicates a bug in the extraction process.",
    },
    "pre_parse": {
        "pdf": "Invalid input: PDF structure or metadata detected. "
        "Resume text must be extracted first, not raw file bytes.",
        "docx": "Invalid input: Word document structure detected. "
        "Resume text must be extracted first, not raw file bytes.",
        "binary": "Invalid input: Binary content detected. "
        "Only human-readable text is allowed.",
    },
}


class ContentValidator:
    """Reject text buffers that look like PDF, DOCX or binary structure."""

    def __init__(self, *, config: ValidatorConfig | None = None) -> None:
        self._config = config or ValidatorConfig()
        self._logger = structlog.get_logger(__name__)

    def check_extracted_text(self, text: str) -> None:
        """Sanity check run immediately after any extraction path."""
        self._inspect(text, "extraction")

    def validate_before_parsing(self, text: str) -> None:
        """Gate run immediately before calling the extraction service."""
        self._inspect(text, "pre_parse")
        length = len(text.strip())
        if length < self._config.min_text_length:
            self._logger.error("validator.text_too_short", stage="pre_parse", length=length)
            raise TextTooShort(
                f"Resume text is too short (less than {self._config.min_text_length} characters).",
                remediation="Please provide a complete resume.",
            )
        self._logger.debug("validator.passed", stage="pre_parse", length=len(text))

    def _inspect(self, text: str, stage: Stage) -> None:
        config = self._config
        messages = _MESSAGES[stage]

        marker = find_pdf_marker(text, config.marker_window)
        if marker is not None:
            self._logger.error("validator.pdf_structure", stage=stage, marker=marker)
            raise PDFStructureDetected(messages["pdf"])

        marker = find_docx_marker(text, config.marker_window)
        if marker is not None:
            self._logger.error("validator.docx_structure", stage=stage, marker=repr(marker))
            raise DocxStructureDetected(messages["docx"])

        if is_probably_binary(text, config.binary_window, config.control_ratio):
            self._logger.error("validator.binary_content", stage=stage)
            raise BinaryContentDetected(messages["binary"])


__all__ = [
    "ContentValidator",
    "DOCX_MARKERS",
    "PDF_MARKERS",
    "ValidatorConfig",
    "find_docx_marker",
    "find_pdf_marker",
    "is_probably_binary",
]
