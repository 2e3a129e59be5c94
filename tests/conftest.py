from __future__ import annotations

import io
import zipfile
from typing import Callable, Sequence
from xml.sax.saxutils import escape

import pytest
import structlog

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
CT_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
WML_CT = "application/vnd.openxmlformats-officedocument.wordprocessingml"

DocxFactory = Callable[..., bytes]


def paragraph(text: str) -> str:
    return (
        '<w:p w:rsidR="00A1"><w:pPr><w:pStyle w:val="Normal"/></w:pPr>'
        f'<w:r><w:rPr><w:b/></w:rPr><w:t xml:space="preserve">{escape(text)}</w:t></w:r></w:p>'
    )


def part_xml(root: str, body: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<w:{root} xmlns:w="{W_NS}">{body}</w:{root}>'
    )


def content_types(headers: int, footers: int, *, include_document: bool = True) -> str:
    overrides = []
    if include_document:
        overrides.append(("/word/document.xml", f"{WML_CT}.document.main+xml"))
    overrides += [(f"/word/header{index}.xml", f"{WML_CT}.header+xml") for index in range(1, headers + 1)]
    overrides += [(f"/word/footer{index}.xml", f"{WML_CT}.footer+xml") for index in range(1, footers + 1)]
    return (
        f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?><Types xmlns="{CT_NS}">'
        '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
        '<Default Extension="xml" ContentType="application/xml"/>'
        + "".join(f'<Override PartName="{name}" ContentType="{ct}"/>' for name, ct in overrides)
        + "</Types>"
    )


def relationships(targets: Sequence[tuple[str, str]]) -> str:
    return (
        f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?><Relationships xmlns="{PKG_REL_NS}">'
        + "".join(
            f'<Relationship Id="rId{index}" Type="{REL_TYPE}/{kind}" Target="{target}"/>'
            for index, (kind, target) in enumerate(targets, start=1)
        )
        + "</Relationships>"
    )


def build_docx(
    paragraphs: Sequence[str] = (),
    *,
    body_xml: str | None = None,
    document_xml: str | None = None,
    headers: Sequence[str] = (),
    footers: Sequence[str] = (),
    include_document: bool = True,
) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(
            "[Content_Types].xml",
            content_types(len(headers), len(footers), include_document=include_document),
        )
        archive.writestr("_rels/.rels", relationships([("officeDocument", "word/document.xml")]))
        if include_document:
            if document_xml is None:
                body = body_xml if body_xml is not None else "".join(paragraph(p) for p in paragraphs)
                document_xml = part_xml("document", f"<w:body>{body}<w:sectPr/></w:body>")
            archive.writestr("word/document.xml", document_xml)
            targets = [("header", f"header{index}.xml") for index in range(1, len(headers) + 1)]
            targets += [("footer", f"footer{index}.xml") for index in range(1, len(footers) + 1)]
            archive.writestr("word/_rels/document.xml.rels", relationships(targets))
        for index, text in enumerate(headers, start=1):
            archive.writestr(f"word/header{index}.xml", part_xml("hdr", paragraph(text)))
        for index, text in enumerate(footers, start=1):
            archive.writestr(f"word/footer{index}.xml", part_xml("ftr", paragraph(text)))
    return buffer.getvalue()


RESUME_LINES = (
    "Jane Doe",
    "Senior Software Engineer at Globex Corporation, 2019-2022",
    "Built payment reconciliation services in Python and PostgreSQL.",
    "Led a team of five engineers migrating batch jobs to Kubernetes.",
    "Certifications: AWS Certified Solutions Architect",
    "Skills: Python, SQL, Terraform, Kubernetes",
)


@pytest.fixture
def make_docx() -> DocxFactory:
    return build_docx


@pytest.fixture
def resume_lines() -> tuple[str, ...]:
    return RESUME_LINES


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()
