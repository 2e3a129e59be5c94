"""Core ingestion and verification components."""

from __future__ import annotations

from .docx import DocxReaderConfig, DocxTextReader, wordml_to_text
from .normalize import ContainmentMatcher, normalize_text, resume_contains
from .sniffer import FileFormat, FormatSniffer, has_zip_signature
from .validation import ContentValidator, ValidatorConfig
from .verifier import ExtractionVerifier, VerificationReport, VerifierConfig

__all__ = [
    "ContainmentMatcher",
    "ContentValidator",
    "DocxReaderConfig",
    "DocxTextReader",
    "ExtractionVerifier",
    "FileFormat",
    "FormatSniffer",
    "ValidatorConfig",
    "VerificationReport",
    "VerifierConfig",
    "has_zip_signature",
    "normalize_text",
    "resume_contains",
    "wordml_to_text",
]
