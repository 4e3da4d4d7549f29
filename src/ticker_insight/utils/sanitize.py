"""Text sanitization for untrusted provider text (headlines, publisher names)."""

import re

_LINE_BREAKS = re.compile(r"[\t\n\r\x0b\x0c]+")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_SPACES = re.compile(r" {2,}")


def sanitize_text(text: str | None, max_length: int = 500) -> str | None:
    """
    Sanitize an untrusted text field.

    Line breaks and tabs become single spaces, remaining control characters
    are dropped, runs of spaces collapse, and the result is truncated to
    max_length with a trailing "...".

    Args:
        text: Text to sanitize (may be None)
        max_length: Maximum length before truncation

    Returns:
        Sanitized text or None if input was None
    """
    if text is None:
        return None

    text = _LINE_BREAKS.sub(" ", text)
    text = _CONTROL_CHARS.sub("", text)
    text = _SPACES.sub(" ", text).strip()

    if len(text) > max_length:
        text = text[:max_length].rstrip() + "..."

    return text
