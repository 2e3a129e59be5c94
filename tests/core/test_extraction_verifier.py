from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from resumeintake.core.verifier import ExtractionVerifier, VerifierConfig
from resumeintake.errors import SchemaMismatch
from resumeintake.schemas import CATEGORIES, StructuredExtraction

SKILLS_SOURCE = "Worked at Acme Corp as Senior Engineer. Skills: Python, Go."
ACME_SOURCE = "Jane Doe worked at Acme Inc building billing systems."


def extraction(**categories) -> StructuredExtraction:
    return StructuredExtraction.model_validate(categories)


@pytest.fixture
def verifier() -> ExtractionVerifier:
    return ExtractionVerifier()


def test_skills_are_grounded_and_short_names_dropped(verifier: ExtractionVerifier) -> None:
    claimed = extraction(skills=[{"name": "Python"}, {"name": "Go"}, {"name": "Rust"}])

    verified = verifier.verify(SKILLS_SOURCE, claimed)

    # "Go" is in the text but shorter than the minimum needle length.
    assert [skill.name for skill in verified.skills] == ["Python"]


def test_skills_differing_only_by_case_are_deduplicated(verifier: ExtractionVerifier) -> None:
    claimed = extraction(
        skills=[
            {"name": "Python", "category": "Languages"},
            {"name": "python", "category": "Other"},
            {"name": " PYTHON. "},
        ]
    )

    verified = verifier.verify(SKILLS_SOURCE, claimed)

    assert len(verified.skills) == 1
    assert verified.skills[0].name == "Python"
    assert verified.skills[0].category == "Languages"


def test_missing_category_defaults_to_general(verifier: ExtractionVerifier) -> None:
    claimed = extraction(
        skills=[{"name": "Python", "category": "  "}],
        tools=[{"name": "Acme Corp"}, {"name": "acme corp", "category": "Platforms"}],
    )

    verified = verifier.verify(SKILLS_SOURCE, claimed)

    assert verified.skills[0].category == "General"
    assert [(tool.name, tool.category) for tool in verified.tools] == [("Acme Corp", "General")]


def test_experience_grounded_by_company(verifier: ExtractionVerifier) -> None:
    claimed = extraction(experience=[{"title": "Engineer", "company": "Acme Inc"}])

    verified = verifier.verify(ACME_SOURCE, claimed)

    assert len(verified.experience) == 1


def test_experience_with_unknown_company_and_title_is_dropped(verifier: ExtractionVerifier) -> None:
    claimed = extraction(experience=[{"title": "Engineer", "company": "Nonexistent Co"}])

    verified = verifier.verify(ACME_SOURCE, claimed)

    assert verified.experience == []


def test_experience_grounded_by_title_alone(verifier: ExtractionVerifier) -> None:
    claimed = extraction(experience=[{"title": "Senior Engineer", "company": "Initech"}])

    verified = verifier.verify(SKILLS_SOURCE, claimed)

    assert [exp.company for exp in verified.experience] == ["Initech"]


def test_experience_requires_title_and_company(verifier: ExtractionVerifier) -> None:
    claimed = extraction(
        experience=[
            {"title": "Senior Engineer", "company": ""},
            {"title": "   ", "company": "Acme Corp"},
        ]
    )

    assert verifier.verify(SKILLS_SOURCE, claimed).experience == []


def test_experience_fields_are_trimmed(verifier: ExtractionVerifier) -> None:
    claimed = extraction(
        experience=[
            {
                "title": "  Engineer ",
                "company": "  Acme Inc  ",
                "startDate": " 2019 ",
                "endDate": None,
                "description": "  Billing.  ",
                "achievements": ["  Cut costs ", "", "   ", None],
            }
        ]
    )

    item = verifier.verify(ACME_SOURCE, claimed).experience[0]

    assert item.title == "Engineer"
    assert item.company == "Acme Inc"
    assert item.start_date == "2019"
    assert item.end_date == ""
    assert item.description == "Billing."
    assert item.achievements == ["Cut costs"]


def test_certifications(verifier: ExtractionVerifier) -> None:
    source = "Certifications: AWS Certified Solutions Architect (2021)"
    claimed = extraction(
        certifications=[
            {"name": " AWS Certified Solutions Architect ", "issuer": " Amazon ", "date": "2021"},
            {"name": "Certified Kubernetes Administrator", "issuer": "CNCF"},
            {"name": ""},
        ]
    )

    verified = verifier.verify(source, claimed)

    assert len(verified.certifications) == 1
    assert verified.certifications[0].name == "AWS Certified Solutions Architect"
    assert verified.certifications[0].issuer == "Amazon"


def test_projects_grounded_by_title_or_any_technology(verifier: ExtractionVerifier) -> None:
    source = "Side projects: Ledgerly, a budgeting app written with Django and React."
    claimed = extraction(
        projects=[
            {"title": "Ledgerly", "technologies": []},
            {"title": "Budget Tracker", "technologies": ["Flutter", " Django "]},
            {"title": "Chat Bot", "technologies": ["Go", "Rust"]},
            {"title": "", "technologies": ["React"]},
        ]
    )

    verified = verifier.verify(source, claimed)

    assert [project.title for project in verified.projects] == ["Ledgerly", "Budget Tracker"]
    assert verified.projects[1].technologies == ["Flutter", "Django"]


def test_domain_experience(verifier: ExtractionVerifier) -> None:
    source = "Eight years in FinTech and e-commerce payments."
    claimed = extraction(domainExperience=["Fintech", "E-Commerce", "Healthcare", "  "])

    verified = verifier.verify(source, claimed)

    assert verified.domain_experience == ["Fintech", "E-Commerce"]


def test_verification_never_adds_items(verifier: ExtractionVerifier) -> None:
    claimed = extraction(
        experience=[{"title": "Engineer", "company": "Acme Inc"}, {"title": "CTO", "company": "Globex"}],
        skills=[{"name": "billing"}, {"name": "Billing"}, {"name": "COBOL"}],
        tools=[{"name": "Jira"}],
        certifications=[{"name": "PMP"}],
        projects=[{"title": "billing systems"}],
        domainExperience=["billing", "aviation"],
    )

    verified = verifier.verify(ACME_SOURCE, claimed)

    for category in CATEGORIES:
        assert len(getattr(verified, category)) <= len(getattr(claimed, category))


def test_nontrivial_source_with_nothing_grounded_is_a_failure(verifier: ExtractionVerifier) -> None:
    source = ("Jane Doe built billing systems and data pipelines for a payments company. " * 8).strip()
    assert len(source) > 400
    claimed = extraction(
        experience=[{"title": "Astronaut", "company": "NASA"}],
        skills=[{"name": "Rust"}],
    )

    with pytest.raises(SchemaMismatch):
        verifier.verify(source, claimed)


def test_nontrivial_source_with_empty_extraction_is_a_failure(verifier: ExtractionVerifier) -> None:
    with pytest.raises(SchemaMismatch):
        verifier.verify("x" * 401, StructuredExtraction())


def test_short_source_may_legitimately_verify_to_nothing(verifier: ExtractionVerifier) -> None:
    claimed = extraction(skills=[{"name": "Rust"}])

    verified = verifier.verify("  " + "a" * 400 + "  ", claimed)

    assert verified.is_empty()


def test_report_counts_drops_by_reason(verifier: ExtractionVerifier) -> None:
    claimed = extraction(
        skills=[{"name": "Python"}, {"name": "python"}, {"name": "Go"}, {"name": "Rust"}, {"name": ""}]
    )

    _, report = verifier.verify_with_report(SKILLS_SOURCE, claimed)

    assert report.received["skills"] == 5
    assert report.kept["skills"] == 1
    assert report.dropped["skills"] == 4
    assert report.dropped_ungrounded == {"skills": 2}
    assert report.dropped_incomplete == {"skills": 1}
    assert report.duplicates == {"skills": 1}


def test_null_items_are_dropped_as_incomplete(verifier: ExtractionVerifier) -> None:
    claimed = extraction(skills=[None, {"name": "Python"}], certifications=[None])

    verified, report = verifier.verify_with_report(SKILLS_SOURCE, claimed)

    assert [skill.name for skill in verified.skills] == ["Python"]
    assert report.dropped_incomplete == {"skills": 1, "certifications": 1}


def test_logs_counts_not_content() -> None:
    claimed = extraction(skills=[{"name": "Python"}, {"name": "Rust"}])

    with capture_logs() as logs:
        ExtractionVerifier().verify(SKILLS_SOURCE, claimed)

    completed = [entry for entry in logs if entry["event"] == "verifier.completed"]
    assert completed
    assert completed[0]["kept"]["skills"] == 1
    assert "Rust" not in repr(logs)


def test_configurable_needle_length_and_fuzzy_mode() -> None:
    relaxed = ExtractionVerifier(config=VerifierConfig(min_needle_length=2))
    fuzzy = ExtractionVerifier(config=VerifierConfig(match_mode="fuzzy", fuzzy_threshold=80.0))
    source = "Skills: Python, Go, Kubernetes"

    assert [s.name for s in relaxed.verify(source, extraction(skills=[{"name": "Go"}])).skills] == ["Go"]
    assert [s.name for s in fuzzy.verify(source, extraction(skills=[{"name": "Kubernets"}])).skills] == [
        "Kubernets"
    ]
