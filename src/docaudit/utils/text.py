"""Text helpers, including the identifier redaction filter."""

from __future__ import annotations

import re
from typing import Iterable, List

REDACTION_MARKER = "[REDACTED]"

# nnn nnn nnnn, any whitespace between the groups
_SPACED_IDENTIFIER = re.compile(r"\d{3}\s+\d{3}\s+\d{4}")
# exactly ten digits, not part of a longer run
_ISOLATED_TEN_DIGITS = re.compile(r"(?<!\d)\d{10}(?!\d)")


def redact_identifiers(text: str) -> str:
    """Replace NHS-number shaped digit runs with a redaction marker.

    The spaced ``nnn nnn nnnn`` form is replaced first; the isolated
    ten-digit form is then searched for in the result. Digit runs longer
    than ten digits are left untouched.
    """
    if not text:
        return text
    result = _SPACED_IDENTIFIER.sub(REDACTION_MARKER, text)
    return _ISOLATED_TEN_DIGITS.sub(REDACTION_MARKER, result)


def redact_all(values: Iterable[str]) -> List[str]:
    """Redact every string in ``values``, preserving order and duplicates."""
    return [redact_identifiers(value) for value in values]


def is_numeric_label(text: str) -> bool:
    """Return True when ``text`` is made only of numeric characters and dots."""
    return all(char.isnumeric() or char == "." for char in text)
