"""
Text utilities for headers and item names.

Used for header normalization before column mapping and for
case/whitespace-insensitive name comparison in matching.
"""

import re
from typing import Any, Optional

_LINE_BREAKS = re.compile(r"[\r\n]+")
_WHITESPACE = re.compile(r"\s+")


def normalize_header(header: Any) -> str:
    """
    Canonicalize a raw header string.

    - "Кол-во\\r\\n(шт.)" → "Кол-во (шт.)"
    - "  Завод   изготовитель " → "Завод изготовитель"

    Total and idempotent; characters other than whitespace pass through.

    Args:
        header: Raw header cell (non-strings are stringified)

    Returns:
        Single-spaced, trimmed header
    """
    if header is None:
        return ""
    text = _LINE_BREAKS.sub(" ", str(header))
    return _WHITESPACE.sub(" ", text).strip()


def normalize_for_match(text: Optional[str]) -> str:
    """
    Lowercase and single-space a name for comparison.

    "  Кабель   ВВГ " → "кабель ввг"
    """
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip().lower()


def clean_text(value: Any, max_length: Optional[int] = None) -> Optional[str]:
    """
    Clean a text cell for storage.

    - Strips whitespace
    - Truncates to max length
    - Returns None for empty/whitespace-only strings

    Args:
        value: Raw cell value
        max_length: Maximum characters to keep

    Returns:
        Cleaned text or None
    """
    if value is None:
        return None

    text = str(value).strip()

    if not text:
        return None

    if max_length is not None and len(text) > max_length:
        text = text[:max_length]

    return text
