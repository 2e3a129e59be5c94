"""Source-of-truth verification for structured résumé extraction.

An extraction service can assert almost anything about a résumé. Every item
it returns is kept only when its identifying field can be found in the source
text after normalization; the rest is dropped and counted. Verification never
adds items and never edits them beyond trimming.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, TypeVar

import structlog

from ..errors import SchemaMismatch
from ..schemas import (
    CertificationItem,
    ExperienceItem,
    ProjectItem,
    SkillItem,
    StructuredExtraction,
    VerifiedExtraction,
)
from .normalize import ContainmentMatcher, MatchMode, normalize_text

DEFAULT_CATEGORY = "General"

_NamedItem = TypeVar("_NamedItem", bound=SkillItem)


@dataclass
class VerifierConfig:
    """Configuration for extraction verification."""

    min_needle_length: int = 3
    nontrivial_length: int = 400
    match_mode: MatchMode = "substring"
    fuzzy_threshold: float = 90.0


@dataclass(slots=True)
class VerificationReport:
    """Per-category item counts before and after verification."""

    received: dict[str, int]
    kept: dict[str, int]
    dropped_incomplete: dict[str, int] = field(default_factory=dict)
    dropped_ungrounded: dict[str, int] = field(default_factory=dict)
    duplicates: dict[str, int] = field(default_factory=dict)

    @property
    def dropped(self) -> dict[str, int]:
        return {name: self.received[name] - self.kept[name] for name in self.received}


class ExtractionVerifier:
    """Filter a ``StructuredExtraction`` down to what the source supports."""

    def __init__(self, *, config: VerifierConfig | None = None) -> None:
        self._config = config or VerifierConfig()
        self._logger = structlog.get_logger(__name__)

    def verify(self, source_text: str, extraction: StructuredExtraction) -> VerifiedExtraction:
        verified, _ = self.verify_with_report(source_text, extraction)
        return verified

    def verify_with_report(
        self,
        source_text: str,
        extraction: StructuredExtraction,
    ) -> tuple[VerifiedExtraction, VerificationReport]:
        config = self._config
        matcher = ContainmentMatcher(
            source_text,
            min_length=config.min_needle_length,
            mode=config.match_mode,
            fuzzy_threshold=config.fuzzy_threshold,
        )
        report = VerificationReport(received=extraction.counts(), kept={})

        verified = VerifiedExtraction(
            experience=self._experience(extraction.experience, matcher, report),
            skills=self._named(extraction.skills, matcher, report, "skills"),
            tools=self._named(extraction.tools, matcher, report, "tools"),
            certifications=self._certifications(extraction.certifications, matcher, report),
            projects=self._projects(extraction.projects, matcher, report),
            domain_experience=self._domains(extraction.domain_experience, matcher, report),
        )
        report.kept = verified.counts()

        self._logger.info(
            "verifier.completed",
            source_length=len(source_text),
            received=report.received,
            kept=report.kept,
            dropped_ungrounded=report.dropped_ungrounded,
            dropped_incomplete=report.dropped_incomplete,
            duplicates=report.duplicates,
        )

        source_length = len(source_text.strip())
        if source_length > config.nontrivial_length and verified.is_empty():
            self._logger.error(
                "verifier.nothing_grounded",
                source_length=source_length,
                received=report.received,
            )
            raise SchemaMismatch(
                "No extracted field could be found in the resume text."
            )

        return verified, report

    def _experience(
        self,
        items: Iterable[ExperienceItem],
        matcher: ContainmentMatcher,
        report: VerificationReport,
    ) -> list[ExperienceItem]:
        kept: list[ExperienceItem] = []
        for item in items:
            trimmed = item.model_copy(
                update={
                    "title": item.title.strip(),
                    "company": item.company.strip(),
                    "start_date": item.start_date.strip(),
                    "end_date": item.end_date.strip(),
                    "description": item.description.strip(),
                    "achievements": _trimmed(item.achievements),
                }
            )
            if not trimmed.title or not trimmed.company:
                _bump(report.dropped_incomplete, "experience")
                continue
            if not (matcher.contains(trimmed.company) or matcher.contains(trimmed.title)):
                _bump(report.dropped_ungrounded, "experience")
                continue
            kept.append(trimmed)
        return kept

    def _named(
        self,
        items: Iterable[_NamedItem],
        matcher: ContainmentMatcher,
        report: VerificationReport,
        category: str,
    ) -> list[_NamedItem]:
        kept: list[_NamedItem] = []
        seen: set[str] = set()
        for item in items:
            name = item.name.strip()
            if not name:
                _bump(report.dropped_incomplete, category)
                continue
            if not matcher.contains(name):
                _bump(report.dropped_ungrounded, category)
                continue
            key = normalize_text(name)
            if key in seen:
                _bump(report.duplicates, category)
                continue
            seen.add(key)
            kept.append(
                item.model_copy(
                    update={
                        "name": name,
                        "category": item.category.strip() or DEFAULT_CATEGORY,
                    }
                )
            )
        return kept

    def _certifications(
        self,
        items: Iterable[CertificationItem],
        matcher: ContainmentMatcher,
        report: VerificationReport,
    ) -> list[CertificationItem]:
        kept: list[CertificationItem] = []
        for item in items:
            name = item.name.strip()
            if not name:
                _bump(report.dropped_incomplete, "certifications")
                continue
            if not matcher.contains(name):
                _bump(report.dropped_ungrounded, "certifications")
                continue
            kept.append(
                item.model_copy(
                    update={"name": name, "issuer": item.issuer.strip(), "date": item.date.strip()}
                )
            )
        return kept

    def _projects(
        self,
        items: Iterable[ProjectItem],
        matcher: ContainmentMatcher,
        report: VerificationReport,
    ) -> list[ProjectItem]:
        kept: list[ProjectItem] = []
        for item in items:
            title = item.title.strip()
            technologies = _trimmed(item.technologies)
            if not title:
                _bump(report.dropped_incomplete, "projects")
                continue
            grounded = matcher.contains(title) or any(
                matcher.contains(tech) for tech in technologies
            )
            if not grounded:
                _bump(report.dropped_ungrounded, "projects")
                continue
            kept.append(
                item.model_copy(
                    update={
                        "title": title,
                        "description": item.description.strip(),
                        "technologies": technologies,
                    }
                )
            )
        return kept

    def _domains(
        self,
        items: Iterable[str],
        matcher: ContainmentMatcher,
        report: VerificationReport,
    ) -> list[str]:
        kept: list[str] = []
        for value in items:
            domain = value.strip()
            if not domain:
                _bump(report.dropped_incomplete, "domain_experience")
                continue
            if not matcher.contains(domain):
                _bump(report.dropped_ungrounded, "domain_experience")
                continue
            kept.append(domain)
        return kept


def _trimmed(values: Iterable[str]) -> list[str]:
    return [value.strip() for value in values if value and value.strip()]


def _bump(counter: dict[str, int], category: str) -> None:
    counter[category] = counter.get(category, 0) + 1


__all__ = [
    "DEFAULT_CATEGORY",
    "ExtractionVerifier",
    "VerificationReport",
    "VerifierConfig",
]
