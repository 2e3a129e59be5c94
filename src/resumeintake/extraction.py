"""Contract with the structured extraction (inference) service.

Whatever the service answers is resolved once, here, into a tagged response
and then parsed into a ``StructuredExtraction``. Downstream code never looks
at the raw answer.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Protocol, Union, runtime_checkable

import structlog
from pydantic import ValidationError

from .errors import SchemaMismatch
from .schemas import StructuredExtraction

_logger = structlog.get_logger(__name__)

_OPENING_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_CLOSING_FENCE_RE = re.compile(r"\n?```\s*$")
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

_STRUCTURED_KEYS = frozenset(
    {
        "experience",
        "skills",
        "tools",
        "certifications",
        "projects",
        "domainExperience",
        "domain_experience",
    }
)

SCHEMA_DESCRIPTION = """{
  "experience": [{ "title": "", "company": "", "startDate": "", "endDate": "", "current": false, "description": "", "achievements": [] }],
  "skills": [{ "name": "", "category": "" }],
  "certifications": [{ "name": "", "issuer": "", "date": "" }],
  "tools": [{ "name": "", "category": "" }],
  "projects": [{ "title": "", "description": "", "technologies": [""] }],
  "domainExperience": [""]
}"""


@runtime_checkable
class StructuredExtractor(Protocol):
    """Structured extraction service contract."""

    def generate(self, prompt: str) -> Any:
        """Return the service answer for ``prompt`` (string or mapping)."""


@dataclass(frozen=True, slots=True)
class PlainTextResponse:
    value: str
    kind: Literal["plainText"] = "plainText"


@dataclass(frozen=True, slots=True)
class StructuredResponse:
    value: dict[str, Any]
    kind: Literal["structured"] = "structured"


ExtractorResponse = Union[PlainTextResponse, StructuredResponse]


def build_prompt(source_text: str, *, schema: str = SCHEMA_DESCRIPTION) -> str:
    return (
        "Extract all information from this resume and return ONLY valid JSON "
        f"that matches the schema:\n{schema}\n\n"
        "Be thorough. Only include information that is written in the resume. "
        "If a field is missing, return an empty array or sensible defaults. "
        "Return ONLY the JSON object, with no explanation, no surrounding text "
        "and no markdown fences.\n\n"
        f"Resume text:\n{source_text}\n"
    )


def resolve_response(raw: Any) -> ExtractorResponse:
    """Tag a raw service answer as plain text or already-structured data."""
    if isinstance(raw, (PlainTextResponse, StructuredResponse)):
        return raw
    if isinstance(raw, str):
        return PlainTextResponse(raw)
    if isinstance(raw, Mapping):
        if _STRUCTURED_KEYS.intersection(raw.keys()):
            return StructuredResponse(dict(raw))
        for key in ("text", "content"):
            value = raw.get(key)
            if isinstance(value, str) and value.strip():
                return PlainTextResponse(value)
            if isinstance(value, Mapping):
                return StructuredResponse(dict(value))
    _logger.error("extraction.unrecognized_response", type=type(raw).__name__)
    raise SchemaMismatch("The extraction service returned no usable content.")


def strip_code_fences(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = _OPENING_FENCE_RE.sub("", stripped, count=1)
        stripped = _CLOSING_FENCE_RE.sub("", stripped, count=1)
    return stripped.strip()


def parse_json_payload(text: str) -> dict[str, Any]:
    """Parse the service text as a JSON object, tolerating chatter around it."""
    cleaned = strip_code_fences(text)
    if not cleaned:
        raise SchemaMismatch("The extraction service returned an empty answer.")
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _JSON_OBJECT_RE.search(cleaned)
        if match is None:
            _logger.error("extraction.no_json", length=len(cleaned))
            raise SchemaMismatch("The extraction service did not return JSON.") from None
        try:
            payload = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            _logger.error("extraction.invalid_json", error=str(exc))
            raise SchemaMismatch("Failed to parse JSON from the extraction service.") from exc
    if not isinstance(payload, dict):
        raise SchemaMismatch("The extraction service returned JSON that is not an object.")
    return payload


def to_extraction(response: ExtractorResponse) -> StructuredExtraction:
    payload = (
        parse_json_payload(response.value)
        if isinstance(response, PlainTextResponse)
        else response.value
    )
    try:
        extraction = StructuredExtraction.model_validate(payload)
    except ValidationError as exc:
        _logger.error("extraction.schema_invalid", errors=exc.error_count())
        raise SchemaMismatch("Parsed resume does not match the expected schema.") from exc
    _logger.info("extraction.parsed", kind=response.kind, counts=extraction.counts())
    return extraction


__all__ = [
    "ExtractorResponse",
    "PlainTextResponse",
    "SCHEMA_DESCRIPTION",
    "StructuredExtractor",
    "StructuredResponse",
    "build_prompt",
    "parse_json_payload",
    "resolve_response",
    "strip_code_fences",
    "to_extraction",
]
