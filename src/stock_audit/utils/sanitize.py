"""Text sanitization for model-generated fields."""

import re
from typing import Any

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def sanitize_text(text: str | None, max_length: int = 500) -> str | None:
    """
    Sanitize untrusted text fields.

    Removes control characters and truncates to max_length.
    Apply to: name, sector, moat label, reasoning, advice, red flags.

    Args:
        text: Text to sanitize (may be None)
        max_length: Maximum length before truncation

    Returns:
        Sanitized text or None if input was None
    """
    if text is None:
        return None

    text = _CONTROL_CHARS.sub("", str(text))

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text.strip()


def sanitize_text_list(values: Any, max_items: int = 10, max_length: int = 200) -> list[str]:
    """
    Sanitize a list of free-text strings (e.g. narrative red flags).

    Non-list input yields []. Non-string items, and items that are empty
    after sanitizing, are dropped. Output is capped at max_items.
    """
    if not isinstance(values, (list, tuple)):
        return []

    cleaned: list[str] = []
    for item in values:
        if not isinstance(item, str):
            continue
        text = sanitize_text(item, max_length=max_length)
        if text:
            cleaned.append(text)
        if len(cleaned) >= max_items:
            break
    return cleaned
