"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class VerifierSettings(BaseModel):
    min_needle_length: int | None = Field(default=None, ge=0)
    nontrivial_length: int | None = Field(default=None, ge=0)
    match_mode: Literal["substring", "fuzzy"] | None = None
    fuzzy_threshold: float | None = Field(default=None, ge=0.0, le=100.0)

    model_config = ConfigDict(extra="forbid")


class ValidationSettings(BaseModel):
    marker_window: int | None = Field(default=None, gt=0)
    binary_window: int | None = Field(default=None, gt=0)
    control_ratio: float | None = Field(default=None, ge=0.0, le=1.0)
    min_text_length: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


class DocxSettings(BaseModel):
    min_text_length: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


class RemoteSettings(BaseModel):
    pdf_endpoint: str | None = None
    extraction_endpoint: str | None = None
    api_key: str | None = None
    timeout: float | None = Field(default=None, gt=0)

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    verifier: VerifierSettings = Field(default_factory=VerifierSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    docx: DocxSettings = Field(default_factory=DocxSettings)
    remote: RemoteSettings = Field(default_factory=RemoteSettings)

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        """Return only the sections that override a default."""
        settings: dict[str, Any] = {}
        for section in ("verifier", "validation", "docx", "remote"):
            values = getattr(self, section).model_dump(exclude_none=True)
            if values:
                settings[section] = values
        return settings


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)


__all__ = [
    "AppConfig",
    "DocxSettings",
    "RemoteSettings",
    "ValidationSettings",
    "VerifierSettings",
    "load_config",
]
