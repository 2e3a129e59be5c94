"""Text normalization and grounding checks."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from rapidfuzz import fuzz

MatchMode = Literal["substring", "fuzzy"]

_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(value: str) -> str:
    """Lowercase, turn punctuation into spaces, collapse whitespace and trim."""
    lowered = value.lower()
    return _WHITESPACE_RE.sub(" ", _NON_WORD_RE.sub(" ", lowered)).strip()


def resume_contains(source_text: str, needle: str, *, min_length: int = 3) -> bool:
    """Return True when ``needle`` occurs in ``source_text`` after normalization."""
    return ContainmentMatcher(source_text, min_length=min_length).contains(needle)


@dataclass
class ContainmentMatcher:
    """Containment checks against one source document.

    The source is normalized once; every needle is normalized on each call.
    Needles whose normalized form is shorter than ``min_length`` never match,
    which also keeps an all-punctuation needle from matching everything.
    """

    source_text: str
    min_length: int = 3
    mode: MatchMode = "substring"
    fuzzy_threshold: float = 90.0

    def __post_init__(self) -> None:
        self._haystack = normalize_text(self.source_text)

    def contains(self, needle: str) -> bool:
        normalized = normalize_text(needle)
        if not normalized or len(normalized) < self.min_length:
            return False
        if normalized in self._haystack:
            return True
        if self.mode == "fuzzy" and self._haystack:
            return fuzz.partial_ratio(normalized, self._haystack) >= self.fuzzy_threshold
        return False


__all__ = ["ContainmentMatcher", "MatchMode", "normalize_text", "resume_contains"]
