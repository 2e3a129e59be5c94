"""Documents flowing through the intake pipeline."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Provenance(str, Enum):
    """Which code path produced an ``ExtractedText``."""

    LOCAL_DOCX = "LocalDocx"
    LOCAL_TXT = "LocalTxt"
    REMOTE_PDF = "RemotePdf"


class RawDocument(BaseModel):
    """Uploaded file bytes plus whatever the client declared about them."""

    data: bytes
    mime_type: str | None = None
    file_name: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def head(self) -> bytes:
        return self.data[:8]


class ExtractedText(BaseModel):
    """Human-readable text recovered from a ``RawDocument``."""

    text: str
    provenance: Provenance

    model_config = ConfigDict(frozen=True)


__all__ = ["Provenance", "RawDocument", "ExtractedText"]
