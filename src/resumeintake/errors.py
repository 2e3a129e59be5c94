"""Error taxonomy for the intake pipeline.

Every error carries a ``kind`` (stable identifier, useful for API responses
and tests) and a user-facing ``remediation`` message. Errors are raised where
the problem is detected and propagated unchanged.
"""

from __future__ import annotations


class ResumeIntakeError(Exception):
    """Base class for all intake failures."""

    kind = "ResumeIntakeError"
    default_remediation = "Please check the file and try again."

    def __init__(self, message: str, *, remediation: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.remediation = remediation or self.default_remediation

    def __str__(self) -> str:
        return self.message


class UnsupportedFormat(ResumeIntakeError):
    kind = "UnsupportedFormat"
    default_remediation = "Supported formats: PDF, DOCX, TXT."


class CorruptedArchive(ResumeIntakeError):
    kind = "CorruptedArchive"
    default_remediation = "Please export/save as .docx (Word 2007+) and try again."


class PDFStructureDetected(ResumeIntakeError):
    kind = "PDFStructureDetected"
    default_remediation = "Resume text must be extracted first, not raw file bytes."


class DocxStructureDetected(ResumeIntakeError):
    kind = "DocxStructureDetected"
    default_remediation = "Resume text must be extracted first, not raw file bytes."


class BinaryContentDetected(ResumeIntakeError):
    kind = "BinaryContentDetected"
    default_remediation = "Only human-readable text is allowed. Try saving the resume as .txt."


class TextTooShort(ResumeIntakeError):
    kind = "TextTooShort"
    default_remediation = "Please ensure your resume has content."


class RemoteServiceUnavailable(ResumeIntakeError):
    kind = "RemoteServiceUnavailable"
    default_remediation = "The extraction service could not be reached. Try again later."


class RemoteServiceError(ResumeIntakeError):
    """Non-2xx answer from a remote collaborator."""

    kind = "RemoteServiceError"
    default_remediation = "The extraction service rejected the file. Try DOCX or TXT instead."

    def __init__(self, status_code: int, message: str, *, remediation: str | None = None) -> None:
        super().__init__(message, remediation=remediation)
        self.status_code = status_code

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.message}"


class SchemaMismatch(ResumeIntakeError):
    kind = "SchemaMismatch"
    default_remediation = "The resume could not be read into a profile. Please try again."


__all__ = [
    "ResumeIntakeError",
    "UnsupportedFormat",
    "CorruptedArchive",
    "PDFStructureDetected",
    "DocxStructureDetected",
    "BinaryContentDetected",
    "TextTooShort",
    "RemoteServiceUnavailable",
    "RemoteServiceError",
    "SchemaMismatch",
]
