"""Structured résumé extraction payloads.

The extraction collaborator is an inference service, so every payload is
treated as untrusted: ``None`` collapses to empty values, unknown keys are
ignored, and the camelCase keys it emits are accepted alongside snake_case.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _coerce_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _coerce_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [_coerce_str(item) for item in value]


class _Item(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ExperienceItem(_Item):
    """Employment history entry."""

    title: str = ""
    company: str = ""
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    current: bool = False
    description: str = ""
    achievements: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _bare_title(cls, value: Any) -> Any:
        return {"title": value} if isinstance(value, str) else value

    @field_validator("title", "company", "start_date", "end_date", "description", mode="before")
    @classmethod
    def _strings(cls, value: Any) -> str:
        return _coerce_str(value)

    @field_validator("current", mode="before")
    @classmethod
    def _current(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in {"true", "yes", "1"}
        return bool(value)

    @field_validator("achievements", mode="before")
    @classmethod
    def _achievements(cls, value: Any) -> list[str]:
        return _coerce_str_list(value)


class SkillItem(_Item):
    name: str = ""
    category: str = ""

    @model_validator(mode="before")
    @classmethod
    def _bare_name(cls, value: Any) -> Any:
        # Models often answer ["Python", "SQL"] instead of objects.
        return {"name": value} if isinstance(value, str) else value

    @field_validator("name", "category", mode="before")
    @classmethod
    def _strings(cls, value: Any) -> str:
        return _coerce_str(value)


class ToolItem(SkillItem):
    pass


class CertificationItem(_Item):
    name: str = ""
    issuer: str = ""
    date: str = ""

    @model_validator(mode="before")
    @classmethod
    def _bare_name(cls, value: Any) -> Any:
        return {"name": value} if isinstance(value, str) else value

    @field_validator("name", "issuer", "date", mode="before")
    @classmethod
    def _strings(cls, value: Any) -> str:
        return _coerce_str(value)


class ProjectItem(_Item):
    title: str = ""
    description: str = ""
    technologies: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _bare_title(cls, value: Any) -> Any:
        return {"title": value} if isinstance(value, str) else value

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strings(cls, value: Any) -> str:
        return _coerce_str(value)

    @field_validator("technologies", mode="before")
    @classmethod
    def _technologies(cls, value: Any) -> list[str]:
        return _coerce_str_list(value)


class StructuredExtraction(BaseModel):
    """Six-category extraction result as returned by the collaborator."""

    experience: list[ExperienceItem] = Field(default_factory=list)
    skills: list[SkillItem] = Field(default_factory=list)
    tools: list[ToolItem] = Field(default_factory=list)
    certifications: list[CertificationItem] = Field(default_factory=list)
    projects: list[ProjectItem] = Field(default_factory=list)
    domain_experience: list[str] = Field(default_factory=list, alias="domainExperience")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator(
        "experience", "skills", "tools", "certifications", "projects", mode="before"
    )
    @classmethod
    def _lists(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            # Null or scalar entries become empty items for the verifier to drop.
            return [item if isinstance(item, (Mapping, str)) else {} for item in value]
        return value

    @field_validator("domain_experience", mode="before")
    @classmethod
    def _domains(cls, value: Any) -> list[str]:
        return _coerce_str_list(value)

    def counts(self) -> dict[str, int]:
        return {name: len(getattr(self, name)) for name in CATEGORIES}

    def is_empty(self) -> bool:
        return not any(self.counts().values())


class VerifiedExtraction(StructuredExtraction):
    """Extraction whose every item is grounded in the source document."""


CATEGORIES: tuple[str, ...] = (
    "experience",
    "skills",
    "tools",
    "certifications",
    "projects",
    "domain_experience",
)


__all__ = [
    "CATEGORIES",
    "ExperienceItem",
    "SkillItem",
    "ToolItem",
    "CertificationItem",
    "ProjectItem",
    "StructuredExtraction",
    "VerifiedExtraction",
]
