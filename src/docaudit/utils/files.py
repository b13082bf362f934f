"""Utility helpers for working with files."""

from __future__ import annotations

import os
import zlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

MAX_HASH_SIZE = 128 * 1024
CREATED_FORMAT = "%Y-%m-%dT%H:%M"

_EXTENSION_TYPES = {
    ".csv": "csv",
    ".xlsx": "excel",
    ".xls": "excel",
    ".xlsm": "excel",
    ".xlsb": "excel",
    ".pdf": "pdf",
    ".docx": "docx",
    ".eml": "eml",
}

SUPPORTED_EXTENSIONS = frozenset(_EXTENSION_TYPES)


def detect_file_type(path: Path) -> Optional[str]:
    """Return the type tag for ``path`` or None when the extension is unsupported."""
    return _EXTENSION_TYPES.get(path.suffix.lower())


def is_supported_file(path: Path) -> bool:
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


def iter_supported_paths(root: Path) -> Iterator[Path]:
    """Yield supported files under ``root`` in a stable order."""
    for child in sorted(root.rglob("*")):
        if child.is_file() and not child.is_symlink() and is_supported_file(child):
            yield child


def compute_crc32(path: Path, *, chunk_size: int = 8192) -> str:
    """Compute the CRC32 checksum of a file as eight lowercase hex digits."""
    checksum = 0
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(chunk_size), b""):
            checksum = zlib.crc32(chunk, checksum)
    return f"{checksum & 0xFFFFFFFF:08x}"


def crc32_bytes(data: bytes) -> int:
    return zlib.crc32(data) & 0xFFFFFFFF


def creation_timestamp(stat: os.stat_result) -> float:
    """Creation time when the platform exposes it, modification time otherwise.

    Only some platforms (macOS, BSD, Windows) report a birth time through
    ``os.stat``. On Linux the result is always the modification time.
    """
    birthtime = getattr(stat, "st_birthtime", None)
    if birthtime:
        return birthtime
    return stat.st_mtime


def format_created(stat: os.stat_result) -> str:
    """Format :func:`creation_timestamp` to minute precision, UTC."""
    stamp = creation_timestamp(stat)
    return datetime.fromtimestamp(stamp, tz=timezone.utc).strftime(CREATED_FORMAT)
