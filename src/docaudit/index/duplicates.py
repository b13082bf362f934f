"""Duplicate tables derived from a completed scan."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

from docaudit.index.fuzzy import ColumnSet, cluster_column_sets
from docaudit.models import (
    Crc32HashEntry,
    DirectoryEntry,
    DuplicateIndices,
    FuzzySimilarityGroup,
    ScanRecord,
    SimilarityHashEntry,
)

LOGGER = logging.getLogger(__name__)


def _iter_records(directories: Sequence[DirectoryEntry]) -> List[ScanRecord]:
    return [record for entry in directories for record in entry.files]


def collect_column_sets(directories: Sequence[DirectoryEntry]) -> List[ColumnSet]:
    """Every CSV file and Excel sheet as ``(columns, source)``, in scan order."""
    items: List[ColumnSet] = []
    for record in _iter_records(directories):
        items.extend((columns, source) for source, columns, _ in record.tables())
    return items


def build_crc32_table(directories: Sequence[DirectoryEntry]) -> List[Crc32HashEntry]:
    """Group byte-identical files by content hash.

    Files without a hash (too large, or hashing disabled) do not take part.
    """
    groups: Dict[str, List[str]] = {}
    for record in _iter_records(directories):
        if record.crc32_hash is None:
            continue
        groups.setdefault(record.crc32_hash, []).append(record.source)

    return [
        Crc32HashEntry(hash=checksum, sources=sources)
        for checksum, sources in sorted(groups.items())
        if len(sources) > 1
    ]


def build_similarity_table(directories: Sequence[DirectoryEntry]) -> List[SimilarityHashEntry]:
    """Group CSV files and sheets sharing a schema fingerprint."""
    groups: Dict[int, Tuple[List[str], List[str]]] = {}
    for record in _iter_records(directories):
        for source, columns, fingerprint in record.tables():
            sources, _ = groups.setdefault(fingerprint, ([], list(columns)))
            sources.append(source)

    return [
        SimilarityHashEntry(hash=fingerprint, example_columns=example, sources=sources)
        for fingerprint, (sources, example) in sorted(groups.items())
        if len(sources) > 1
    ]


def build_fuzzy_similarity_groups(
    directories: Sequence[DirectoryEntry], threshold: float
) -> List[FuzzySimilarityGroup]:
    if threshold <= 0.0:
        return []
    return cluster_column_sets(collect_column_sets(directories), threshold)


def build_duplicate_indices(
    directories: Sequence[DirectoryEntry], fuzzy_threshold: float
) -> DuplicateIndices:
    """Build the content, schema and fuzzy duplicate tables in one go."""
    indices = DuplicateIndices(
        content_groups=build_crc32_table(directories),
        schema_groups=build_similarity_table(directories),
        fuzzy_groups=build_fuzzy_similarity_groups(directories, fuzzy_threshold),
    )
    LOGGER.debug(
        "Built %d content, %d schema and %d fuzzy groups",
        len(indices.content_groups),
        len(indices.schema_groups),
        len(indices.fuzzy_groups),
    )
    return indices
