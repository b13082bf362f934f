"""Assembly and serialization of the scan report."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Sequence

from docaudit.models import DirectoryEntry, DuplicateIndices


def canonical_root(root: Path) -> str:
    """Absolute, symlink-free form of the scan root, or the path as given."""
    try:
        return str(Path(root).resolve(strict=True))
    except OSError:
        return str(root)


def build_report(
    root: Path, directories: Sequence[DirectoryEntry], indices: DuplicateIndices
) -> Dict[str, Any]:
    return {
        "scan_directory": canonical_root(root),
        "directories": [entry.to_dict() for entry in directories],
        "column_similarity_table": [entry.to_dict() for entry in indices.schema_groups],
        "crc32_similarity_table": [entry.to_dict() for entry in indices.content_groups],
        "fuzzy_similarity_groups": [group.to_dict() for group in indices.fuzzy_groups],
    }


def write_report(report: Dict[str, Any], output_path: Path) -> Path:
    """Write ``report`` as indented UTF-8 JSON, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as handle:
        json.dump(report, handle, indent=2, ensure_ascii=False)
        handle.write("\n")
    return output_path
