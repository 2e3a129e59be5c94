"""Pydantic schema definitions for documents and extraction payloads."""

from __future__ import annotations

from .document import ExtractedText, Provenance, RawDocument
from .extraction import (
    CATEGORIES,
    CertificationItem,
    ExperienceItem,
    ProjectItem,
    SkillItem,
    StructuredExtraction,
    ToolItem,
    VerifiedExtraction,
)

__all__ = [
    "CATEGORIES",
    "CertificationItem",
    "ExperienceItem",
    "ExtractedText",
    "ProjectItem",
    "Provenance",
    "RawDocument",
    "SkillItem",
    "StructuredExtraction",
    "ToolItem",
    "VerifiedExtraction",
]
