"""Directory scanning pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from docaudit.config import ScanConfig
from docaudit.ingestion.tabular import extract_csv_metadata, extract_excel_metadata
from docaudit.models import CsvMetadata, DirectoryEntry, ExcelMetadata, ScanRecord
from docaudit.utils.files import (
    MAX_HASH_SIZE,
    compute_crc32,
    detect_file_type,
    format_created,
    iter_supported_paths,
)
from docaudit.utils.text import redact_identifiers

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[Path], None]


def find_supported_files(root: Path) -> list[Path]:
    """Find all supported files under ``root``."""
    return list(iter_supported_paths(root))


def directory_label(directory: Path, root: Optional[Path] = None) -> str:
    """Redacted POSIX path of ``directory``, relative to ``root`` when given."""
    if root is not None:
        try:
            directory = directory.relative_to(root)
        except ValueError:
            pass
    return redact_identifiers(directory.as_posix())


@dataclass(slots=True)
class ScanStats:
    processed: int = 0
    failed: int = 0
    failed_files: list[str] = field(default_factory=list)

    def record_success(self) -> None:
        self.processed += 1

    def record_failure(self, label: str) -> None:
        self.failed += 1
        self.failed_files.append(label)


class Scanner:
    """Turns files into ScanRecords according to a ScanConfig."""

    def __init__(self, config: ScanConfig) -> None:
        self.config = config
        self.stats = ScanStats()

    def process_file(self, path: Path, *, root: Optional[Path] = None) -> ScanRecord:
        """Build the record for a single file.

        Raises on per-file failures (unreadable file, corrupt CSV header,
        corrupt workbook); the caller decides whether to drop the file.
        """
        stat = path.stat()
        file_type = detect_file_type(path)

        crc32_hash: Optional[str] = None
        file_size: Optional[int] = None
        if self.config.hash_enabled and stat.st_size <= MAX_HASH_SIZE:
            crc32_hash = compute_crc32(path)
        else:
            file_size = stat.st_size

        csv_metadata: Optional[CsvMetadata] = None
        excel_metadata: Optional[ExcelMetadata] = None
        if file_type == "csv":
            csv_metadata = extract_csv_metadata(path, self.config.max_rows)
        elif file_type == "excel":
            excel_metadata = extract_excel_metadata(path, self.config.max_rows)

        return ScanRecord(
            directory=directory_label(path.parent, root),
            name=redact_identifiers(path.name),
            created=format_created(stat),
            file_type=file_type,
            crc32_hash=crc32_hash,
            file_size=file_size,
            csv_metadata=csv_metadata,
            excel_metadata=excel_metadata,
        )

    def scan(
        self,
        root: Path,
        *,
        paths: Optional[Sequence[Path]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[DirectoryEntry]:
        """Scan every supported file under ``root``.

        Files that fail are logged and left out of the result. Entries are
        sorted by their redacted directory path.
        """
        root = Path(root)
        if not root.exists():
            raise FileNotFoundError(f"Directory does not exist: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Not a directory: {root}")

        if paths is None:
            paths = find_supported_files(root)
        if not paths:
            LOGGER.warning("No supported files found")

        self.stats = ScanStats()
        by_directory: Dict[str, List[ScanRecord]] = {}

        for path in paths:
            label = redact_identifiers(str(path))
            LOGGER.debug("Processing: %s", label)
            try:
                record = self.process_file(path, root=root)
            except Exception as e:
                LOGGER.warning("Failed to process %s: %s", label, redact_identifiers(str(e)))
                self.stats.record_failure(label)
            else:
                by_directory.setdefault(record.directory, []).append(record)
                self.stats.record_success()
            finally:
                if on_progress is not None:
                    on_progress(path)

        return [
            DirectoryEntry(path=directory, files=records)
            for directory, records in sorted(by_directory.items())
        ]
