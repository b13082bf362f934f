"""Schema extraction for CSV files and Excel workbooks.

Only header cells are ever kept as text. Data rows are counted and
discarded, which keeps memory flat for CSV files of any size. Workbooks are
read through pandas with the calamine engine, which handles xlsx, xlsm,
xlsb and legacy xls files alike.
"""

from __future__ import annotations

import csv
import logging
import math
import sys
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from docaudit.errors import SchemaExtractionError
from docaudit.index.fingerprint import column_similarity_hash
from docaudit.models import CsvMetadata, ExcelMetadata, SheetMetadata
from docaudit.utils.text import is_numeric_label, redact_all, redact_identifiers

LOGGER = logging.getLogger(__name__)

HEADER_SCAN_ROWS = 5
EXCEL_ENGINE = "calamine"

# csv rejects fields over 128KiB by default; the limit must fit a C long
CSV_FIELD_SIZE_LIMIT = min(sys.maxsize, 2**31 - 1)
csv.field_size_limit(CSV_FIELD_SIZE_LIMIT)


def _is_decodable(fields: Sequence[str]) -> bool:
    # undecodable bytes survive as lone surrogates under surrogateescape
    try:
        "".join(fields).encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _next_record(reader: Iterator[List[str]]) -> Optional[List[str]]:
    """Next non-blank record, or None at end of input."""
    for record in reader:
        if record:
            return record
    return None


def count_csv_rows(
    reader: Iterator[List[str]], width: int, max_rows: int
) -> Tuple[int, Optional[int]]:
    """Count well-formed data rows, stopping once ``max_rows`` are counted.

    Rows that fail to parse, contain undecodable bytes or have a field count
    different from the header are skipped without being counted.
    """
    row_count = 0
    while True:
        try:
            record = next(reader)
        except StopIteration:
            break
        except csv.Error as exc:
            LOGGER.debug("Skipping malformed CSV row: %s", exc)
            continue

        if not record:
            continue
        if len(record) != width or not _is_decodable(record):
            continue

        row_count += 1
        if row_count >= max_rows:
            return row_count, max_rows
    return row_count, None


def extract_csv_metadata(path: Path, max_rows: int) -> CsvMetadata:
    """Read the header and count the data rows of a CSV file.

    Raises:
        SchemaExtractionError: if the header line cannot be parsed or decoded.
        OSError: if the file cannot be opened.
    """
    with path.open("r", encoding="utf-8-sig", errors="surrogateescape", newline="") as handle:
        reader = csv.reader(handle)
        try:
            header = _next_record(reader) or []
        except csv.Error as exc:
            raise SchemaExtractionError(f"Malformed CSV header: {exc}") from exc
        if not _is_decodable(header):
            raise SchemaExtractionError("CSV header is not valid UTF-8")

        row_count, stopped_at = count_csv_rows(reader, len(header), max_rows)

    columns = redact_all(header)
    return CsvMetadata(
        columns=columns,
        row_count=row_count,
        column_similarity_hash=column_similarity_hash(columns),
        stopped_row_count_at=stopped_at,
    )


def cell_text(value: Any) -> str:
    """Trimmed string form of a worksheet cell; empty for blank cells."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def detect_header_row(rows: Sequence[Sequence[Any]]) -> Tuple[List[str], int]:
    """Pick the most label-like row among the first few rows of a sheet.

    A row scores one point per non-empty cell that is not purely numeric.
    The strictly highest score wins, ties go to the earliest row, and when
    no row scores at all the first row is used as-is. Returns the redacted
    non-empty header cells and the header row index.
    """
    best_columns: List[str] = []
    best_score = 0
    best_index = 0

    for index, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        cells = [text for text in map(cell_text, row) if text]
        score = sum(1 for text in cells if not is_numeric_label(text))
        if score > best_score:
            best_score = score
            best_columns = cells
            best_index = index

    if best_score == 0:
        best_index = 0
        best_columns = [text for text in map(cell_text, rows[0]) if text] if rows else []

    return redact_all(best_columns), best_index


def build_sheet_metadata(
    sheet_name: str, rows: Sequence[Sequence[Any]], max_rows: int
) -> SheetMetadata:
    columns, header_index = detect_header_row(rows)
    data_rows = max(len(rows) - (header_index + 1), 0)

    stopped_at: Optional[int] = None
    if data_rows > max_rows:
        data_rows = max_rows
        stopped_at = max_rows

    return SheetMetadata(
        sheet_name=redact_identifiers(sheet_name),
        columns=columns,
        row_count=data_rows,
        column_similarity_hash=column_similarity_hash(columns),
        stopped_row_count_at=stopped_at,
    )


def _read_sheet_rows(workbook: pd.ExcelFile, sheet_name: str) -> List[List[Any]]:
    frame = workbook.parse(sheet_name, header=None, dtype=object, na_filter=False)
    return frame.values.tolist()


def extract_excel_metadata(path: Path, max_rows: int) -> ExcelMetadata:
    """Extract one SheetMetadata per readable worksheet.

    Raises:
        SchemaExtractionError: if the workbook itself cannot be opened.
    """
    try:
        workbook = pd.ExcelFile(path, engine=EXCEL_ENGINE)
    except Exception as exc:
        raise SchemaExtractionError(f"Cannot open workbook: {exc}") from exc

    sheets: List[SheetMetadata] = []
    with workbook:
        for sheet_name in workbook.sheet_names:
            try:
                rows = _read_sheet_rows(workbook, sheet_name)
            except Exception as exc:
                LOGGER.debug(
                    "Skipping unreadable sheet %s: %s", redact_identifiers(str(sheet_name)), exc
                )
                continue
            sheets.append(build_sheet_metadata(str(sheet_name), rows, max_rows))

    return ExcelMetadata(sheets=sheets)
