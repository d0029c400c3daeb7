"""Text normalization and forbidden-phrase matching.

Both the stored phrases and the submitted text are reduced to the same
canonical form: diacritics removed, lower-cased, and every run of
characters that is neither a letter nor a number collapsed into a single
space. Matching is then plain substring containment, so "kata-kasar",
"Kata  Kasar!" and "kàta kasar" all contain the stored phrase "kata kasar".
"""
import re
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass

_SEPARATOR_RUN = re.compile(r"[\W_]+")


@dataclass(frozen=True)
class PhraseEntry:
    phrase: str  # as entered by the moderator, shown back to the commenter
    normalized: str


def normalize(text: str | None) -> str:
    """Canonical comparison form of ``text``; empty for None or blank input."""
    if not isinstance(text, str) or not text.strip():
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.category(ch).startswith("M"))
    return _SEPARATOR_RUN.sub(" ", stripped.lower()).strip()


def clean_phrase(phrase: str) -> str:
    """Trim and collapse inner whitespace, keeping the moderator's spelling."""
    return " ".join(phrase.split())


def match_forbidden(text: str | None, phrases: Iterable[PhraseEntry]) -> PhraseEntry | None:
    """First entry whose normalized form occurs inside the normalized ``text``."""
    normalized_text = normalize(text)
    if not normalized_text:
        return None
    for entry in phrases:
        if entry.normalized and entry.normalized in normalized_text:
            return entry
    return None
