"""File format detection from declared metadata and byte signatures."""

from __future__ import annotations

from enum import Enum

import structlog

from ..errors import UnsupportedFormat

ZIP_SIGNATURE = b"PK\x03\x04"
PDF_SIGNATURE = b"%PDF-"
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class FileFormat(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    DOC = "doc"
    TXT = "txt"
    UNKNOWN = "unknown"


MIME_TYPES: dict[str, FileFormat] = {
    "application/pdf": FileFormat.PDF,
    DOCX_MIME_TYPE: FileFormat.DOCX,
    "application/msword": FileFormat.DOC,
    "text/plain": FileFormat.TXT,
}

EXTENSIONS: tuple[tuple[str, FileFormat], ...] = (
    (".pdf", FileFormat.PDF),
    (".docx", FileFormat.DOCX),
    (".doc", FileFormat.DOC),
    (".txt", FileFormat.TXT),
)


def has_zip_signature(data: bytes) -> bool:
    return data[:4] == ZIP_SIGNATURE


class FormatSniffer:
    """Classify an upload as pdf, docx, doc, txt or unknown.

    Precedence is declared MIME type, then file name extension, then byte
    signature. A ``docx`` answer is provisional: the archive reader checks the
    ZIP signature again before opening the file.
    """

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__)

    def classify(
        self,
        mime_type: str | None = None,
        file_name: str | None = None,
        first_bytes: bytes = b"",
    ) -> FileFormat:
        detected = self._from_mime_type(mime_type)
        source = "mime_type"
        if detected is None:
            detected = self._from_file_name(file_name)
            source = "file_name"
        if detected is None:
            detected = self._from_signature(first_bytes)
            source = "signature"

        if detected is FileFormat.DOCX and first_bytes and not has_zip_signature(first_bytes):
            self._logger.warning(
                "sniffer.docx_signature_mismatch",
                first_bytes=first_bytes[:4].hex(" "),
            )
        self._logger.debug("sniffer.classified", format=detected.value, source=source)
        return detected

    def ensure_supported(self, file_format: FileFormat) -> FileFormat:
        """Raise ``UnsupportedFormat`` for formats the pipeline cannot read."""
        if file_format is FileFormat.DOC:
            raise UnsupportedFormat(
                "Old Word format (.doc) is not supported.",
                remediation="Please save as .docx or .txt and try again.",
            )
        if file_format is FileFormat.UNKNOWN:
            raise UnsupportedFormat("Unsupported file format.")
        return file_format

    @staticmethod
    def _from_mime_type(mime_type: str | None) -> FileFormat | None:
        if not mime_type:
            return None
        return MIME_TYPES.get(mime_type.strip().lower())

    @staticmethod
    def _from_file_name(file_name: str | None) -> FileFormat | None:
        if not file_name:
            return None
        # Accept bare names, paths and URIs.
        name = file_name.rsplit("/", 1)[-1].lower()
        for extension, file_format in EXTENSIONS:
            if name.endswith(extension):
                return file_format
        return None

    @staticmethod
    def _from_signature(first_bytes: bytes) -> FileFormat:
        if first_bytes.startswith(PDF_SIGNATURE):
            return FileFormat.PDF
        if has_zip_signature(first_bytes):
            return FileFormat.DOCX
        if first_bytes.startswith(OLE2_SIGNATURE):
            return FileFormat.DOC
        return FileFormat.UNKNOWN


__all__ = [
    "DOCX_MIME_TYPE",
    "FileFormat",
    "FormatSniffer",
    "ZIP_SIGNATURE",
    "has_zip_signature",
]
