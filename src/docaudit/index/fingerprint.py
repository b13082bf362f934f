"""Order-independent fingerprints of column-name sets."""

from __future__ import annotations

from typing import Iterable, List

from docaudit.utils.files import crc32_bytes


def normalize_column(name: str) -> str:
    """Lowercase ``name`` and delete every non-alphanumeric character."""
    return "".join(char for char in name.lower() if char.isalnum())


def normalize_columns(columns: Iterable[str]) -> List[str]:
    """Distinct normalized column names, sorted, with empty results dropped."""
    return sorted({normalized for normalized in map(normalize_column, columns) if normalized})


def column_similarity_hash(columns: Iterable[str]) -> int:
    """CRC32 of the normalized column names joined with commas.

    Invariant to column order, casing and punctuation, not to synonyms.
    """
    return crc32_bytes(",".join(normalize_columns(columns)).encode("utf-8"))
