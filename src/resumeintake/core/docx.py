"""Local text extraction for Word 2007+ (.docx) résumés."""

from __future__ import annotations

import io
import re
import zipfile
import zlib
from dataclasses import dataclass
from typing import Any, Iterable

import structlog
from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from docx.oxml import parse_xml
from docx.oxml.ns import qn

from ..errors import CorruptedArchive, PDFStructureDetected, TextTooShort
from .sniffer import has_zip_signature
from .validation import find_pdf_marker

DOCUMENT_PART = "word/document.xml"

_HEADER_PART_RE = re.compile(r"^/word/header(\d*)\.xml$")
_FOOTER_PART_RE = re.compile(r"^/word/footer(\d*)\.xml$")

_P = qn("w:p")
_T = qn("w:t")
_TAB = qn("w:tab")
_BREAKS = frozenset({qn("w:br"), qn("w:cr")})
# Paragraph and run properties hold tab stops and styling, never visible text.
_PROPERTIES = frozenset({qn("w:pPr"), qn("w:rPr")})

# python-docx raises these for packages it cannot open or parse;
# lxml.etree.XMLSyntaxError is a SyntaxError subclass.
_PACKAGE_ERRORS = (
    PackageNotFoundError,
    zipfile.BadZipFile,
    KeyError,
    ValueError,
    SyntaxError,
    OSError,
    RuntimeError,
    NotImplementedError,
    zlib.error,
)

_MANY_NEWLINES_RE = re.compile(r"\n{3,}")
_MANY_BLANKS_RE = re.compile(r"[ \t]{2,}")


def clean_text(text: str) -> str:
    text = _MANY_NEWLINES_RE.sub("\n\n", text)
    text = _MANY_BLANKS_RE.sub(" ", text)
    return text.strip()


def element_text(element: Any) -> str:
    """Visible text of a WordprocessingML element, in document order.

    Only ``w:t`` run text is kept; paragraph ends and explicit breaks become
    newlines and run-level ``w:tab`` becomes a tab.
    """
    parts: list[str] = []
    _collect(element, parts)
    return clean_text("".join(parts))


def wordml_to_text(xml: str | bytes) -> str:
    """Parse a WordprocessingML part and return its visible text."""
    if isinstance(xml, str):
        xml = xml.encode("utf-8")
    return element_text(parse_xml(xml))


def _collect(element: Any, parts: list[str]) -> None:
    for child in element.iterchildren():
        tag = child.tag
        if tag == _T:
            parts.append(child.text or "")
        elif tag == _TAB:
            parts.append("\t")
        elif tag in _BREAKS:
            parts.append("\n")
        elif tag == _P:
            _collect(child, parts)
            parts.append("\n")
        elif tag not in _PROPERTIES:
            _collect(child, parts)


@dataclass
class DocxReaderConfig:
    """Configuration for local DOCX extraction."""

    min_text_length: int = 200
    marker_window: int = 1000


class DocxTextReader:
    """Read visible text out of a DOCX package with python-docx."""

    def __init__(self, *, config: DocxReaderConfig | None = None) -> None:
        self._config = config or DocxReaderConfig()
        self._logger = structlog.get_logger(__name__)

    def extract(self, data: bytes) -> str:
        """Return header, body and footer text, rejecting near-empty documents."""
        text = self.read(data)

        marker = find_pdf_marker(text, self._config.marker_window)
        if marker is not None:
            self._logger.error("docx.pdf_marker_detected", marker=marker)
            raise PDFStructureDetected(
                "Invalid extracted text: PDF structure detected. "
                "This indicates a bug in the extraction process."
            )

        if len(text) < self._config.min_text_length:
            self._logger.warning(
                "docx.text_too_short",
                length=len(text),
                minimum=self._config.min_text_length,
            )
            raise TextTooShort("Extracted text is too short.")

        return text

    def read(self, data: bytes) -> str:
        """Return the document text without applying the length floor."""
        if not has_zip_signature(data):
            self._logger.error("docx.invalid_signature", first_bytes=data[:4].hex(" "))
            raise CorruptedArchive("This file isn't a valid .docx (Word 2007+) document.")

        self._check_package(data)

        try:
            document = Document(io.BytesIO(data))
            body = document.element.body
            body_text = element_text(body) if body is not None else ""
            parts = list(document.part.package.iter_parts())
            headers = self._read_parts(parts, _HEADER_PART_RE)
            footers = self._read_parts(parts, _FOOTER_PART_RE)
        except _PACKAGE_ERRORS as exc:
            self._logger.error("docx.unreadable", error=type(exc).__name__)
            raise CorruptedArchive(
                f"This file isn't a valid .docx Word document ({exc})."
            ) from exc

        segments = [segment for segment in (headers, body_text, footers) if segment]
        text = "\n".join(segments).strip()
        self._logger.info(
            "docx.extracted",
            length=len(text),
            header_chars=len(headers),
            footer_chars=len(footers),
        )
        return text

    def _check_package(self, data: bytes) -> None:
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                names = archive.namelist()
        except (zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
            raise CorruptedArchive(
                f"This file isn't a valid .docx Word document ({exc})."
            ) from exc

        self._logger.debug("docx.opened", entries=len(names))
        if DOCUMENT_PART not in names:
            self._logger.error("docx.missing_document_part")
            raise CorruptedArchive(
                "This DOCX file appears to be corrupted (missing document.xml).",
                remediation="Please re-save it and try again.",
            )

    @staticmethod
    def _read_parts(parts: Iterable[Any], pattern: re.Pattern[str]) -> str:
        matched: list[tuple[int, Any]] = []
        for part in parts:
            found = pattern.match(str(part.partname))
            if found:
                matched.append((int(found.group(1) or 0), part))

        texts: list[str] = []
        for _, part in sorted(matched, key=lambda item: item[0]):
            element = getattr(part, "element", None)
            if element is None:
                element = parse_xml(part.blob)
            text = element_text(element)
            if text:
                texts.append(text)
        return "\n".join(texts)


__all__ = [
    "DOCUMENT_PART",
    "DocxReaderConfig",
    "DocxTextReader",
    "clean_text",
    "element_text",
    "wordml_to_text",
]
