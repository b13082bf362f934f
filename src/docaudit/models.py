"""Core DocAudit data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


@dataclass(slots=True, frozen=True)
class CsvMetadata:
    """Schema of a CSV file."""

    columns: List[str]
    row_count: int
    column_similarity_hash: int
    stopped_row_count_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "columns": list(self.columns),
                "row_count": self.row_count,
                "column_similarity_hash": self.column_similarity_hash,
                "stopped_row_count_at": self.stopped_row_count_at,
            }
        )


@dataclass(slots=True, frozen=True)
class SheetMetadata:
    """Schema of a single worksheet."""

    sheet_name: str
    columns: List[str]
    row_count: int
    column_similarity_hash: int
    stopped_row_count_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "sheet_name": self.sheet_name,
                "columns": list(self.columns),
                "row_count": self.row_count,
                "column_similarity_hash": self.column_similarity_hash,
                "stopped_row_count_at": self.stopped_row_count_at,
            }
        )


@dataclass(slots=True, frozen=True)
class ExcelMetadata:
    sheets: List[SheetMetadata] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"sheets": [sheet.to_dict() for sheet in self.sheets]}


@dataclass(slots=True, frozen=True)
class ScanRecord:
    """Everything reported about one file.

    ``crc32_hash`` and ``file_size`` are mutually exclusive: the size is only
    reported when the hash was not computed.
    """

    directory: str
    name: str
    created: str
    file_type: Optional[str] = None
    crc32_hash: Optional[str] = None
    file_size: Optional[int] = None
    csv_metadata: Optional[CsvMetadata] = None
    excel_metadata: Optional[ExcelMetadata] = None

    @property
    def source(self) -> str:
        """Label used for this file in the duplicate tables."""
        return f"{self.directory}/{self.name}"

    def tables(self) -> List[Tuple[str, List[str], int]]:
        """(source, columns, fingerprint) for the CSV body or each Excel sheet."""
        items: List[Tuple[str, List[str], int]] = []
        if self.csv_metadata is not None:
            meta = self.csv_metadata
            items.append((self.source, meta.columns, meta.column_similarity_hash))
        if self.excel_metadata is not None:
            for sheet in self.excel_metadata.sheets:
                items.append(
                    (
                        f"{self.source} ({sheet.sheet_name})",
                        sheet.columns,
                        sheet.column_similarity_hash,
                    )
                )
        return items

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "name": self.name,
                "created": self.created,
                "file_type": self.file_type,
                "file_size": self.file_size,
                "crc32_hash": self.crc32_hash,
                "csv_metadata": self.csv_metadata.to_dict() if self.csv_metadata else None,
                "excel_metadata": self.excel_metadata.to_dict() if self.excel_metadata else None,
            }
        )


@dataclass(slots=True, frozen=True)
class DirectoryEntry:
    """Records found in a single directory."""

    path: str
    files: List[ScanRecord]

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "files": [record.to_dict() for record in self.files]}


@dataclass(slots=True, frozen=True)
class Crc32HashEntry:
    hash: str
    sources: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"hash": self.hash, "sources": list(self.sources)}


@dataclass(slots=True, frozen=True)
class SimilarityHashEntry:
    hash: int
    example_columns: List[str]
    sources: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "example_columns": list(self.example_columns),
            "sources": list(self.sources),
        }


@dataclass(slots=True, frozen=True)
class FuzzySimilarityGroup:
    group_id: int
    similarity_score: float
    representative_columns: List[str]
    sources: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_id": self.group_id,
            "similarity_score": self.similarity_score,
            "representative_columns": list(self.representative_columns),
            "sources": list(self.sources),
        }


@dataclass(slots=True, frozen=True)
class DuplicateIndices:
    """The three duplicate views derived from a completed scan."""

    content_groups: List[Crc32HashEntry] = field(default_factory=list)
    schema_groups: List[SimilarityHashEntry] = field(default_factory=list)
    fuzzy_groups: List[FuzzySimilarityGroup] = field(default_factory=list)
