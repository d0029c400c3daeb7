"""Plain-text sanitization for comment bodies and request metadata.

HTML-significant characters are replaced with lookalike glyphs, not
entities. Comment text is rendered as plain text and the renderer expects
exactly these glyphs; moving to HTML rendering means revisiting this table.
"""
import re

CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
ZERO_WIDTH_CHARS = re.compile(r"[\u200b-\u200f\u202a-\u202e\u2060\ufeff]")
LINE_BREAKS_AND_TABS = re.compile(r"[\r\n\t]+")

LOOKALIKES = str.maketrans({
    "<": "\u2039",  # ‹
    ">": "\u203a",  # ›
    "&": "\uff06",  # ＆
})


def sanitize_comment_content(text: str) -> str:
    normalized = "\n".join(line.rstrip() for line in text.replace("\r\n", "\n").split("\n"))
    stripped = ZERO_WIDTH_CHARS.sub("", CONTROL_CHARS.sub("", normalized))
    return stripped.translate(LOOKALIKES)


def sanitize_metadata(value: str | None, max_length: int = 255) -> str | None:
    """Single-line, control-free, truncated copy of a header value; None if blank."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    cleaned = LINE_BREAKS_AND_TABS.sub(" ", trimmed)
    cleaned = ZERO_WIDTH_CHARS.sub("", CONTROL_CHARS.sub("", cleaned))
    return cleaned[:max_length]
