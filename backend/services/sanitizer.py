"""Input cleanup shared by the analysis and cover letter pipelines."""

import html
import re

_SCRIPT_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def sanitize_text(text: str | None) -> str:
    """Strip script/style blocks, HTML tags and control characters, then trim."""
    if not text:
        return ""
    cleaned = _SCRIPT_RE.sub("", text)
    cleaned = _TAG_RE.sub("", cleaned)
    cleaned = html.unescape(cleaned)
    cleaned = _CONTROL_RE.sub("", cleaned)
    cleaned = cleaned.replace("\r\n", "\n").replace("\r", "\n")
    return cleaned.strip()


def truncate(text: str, max_length: int) -> tuple[str, bool]:
    """Cut text to max_length characters. Returns (text, was_truncated)."""
    if len(text) <= max_length:
        return text, False
    return text[:max_length], True
