"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_MAX_ROWS = 524288
DEFAULT_FUZZY_THRESHOLD = 0.8
DEFAULT_OUTPUT = Path("output.json")


@dataclass(slots=True)
class ScanConfig:
    hash_enabled: bool = True
    max_rows: int = DEFAULT_MAX_ROWS
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD
    output_path: Path = DEFAULT_OUTPUT

    def __post_init__(self) -> None:
        if self.max_rows < 1:
            raise ValueError(f"max_rows must be at least 1, got {self.max_rows}")
        if not 0.0 <= self.fuzzy_threshold <= 1.0:
            raise ValueError(
                f"fuzzy_threshold must be between 0 and 1, got {self.fuzzy_threshold}"
            )

    def resolve_output_path(self, base_dir: Path | None = None) -> Path:
        if Path(self.output_path).is_absolute() or base_dir is None:
            return Path(self.output_path)
        return base_dir / self.output_path
