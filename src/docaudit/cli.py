"""Command line interface for DocAudit."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from docaudit.config import DEFAULT_FUZZY_THRESHOLD, DEFAULT_MAX_ROWS, DEFAULT_OUTPUT, ScanConfig
from docaudit.errors import DocAuditError
from docaudit.index.duplicates import build_duplicate_indices
from docaudit.index.scanner import Scanner, find_supported_files
from docaudit.ingestion.tabular import extract_csv_metadata, extract_excel_metadata
from docaudit.report import build_report, write_report
from docaudit.utils.files import detect_file_type
from docaudit.utils.text import redact_identifiers


console = Console()
app = typer.Typer(help="DocAudit - schema inventory and duplicate detection for document shares")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _format_rows(row_count: int, stopped_at: int | None) -> str:
    return f"{row_count}+" if stopped_at is not None else str(row_count)


@app.command()
def scan(
    directory: Path = typer.Option(..., "--directory", "-d", help="Directory to scan"),
    output: Path = typer.Option(DEFAULT_OUTPUT, "--output", "-o", help="Output JSON file path"),
    disable_hash: bool = typer.Option(
        False, "--disable-hash", help="Skip CRC32 hashing of files up to 128KB"
    ),
    max_rows: int = typer.Option(
        DEFAULT_MAX_ROWS, "--max-rows", help="Maximum rows to count per CSV file or sheet"
    ),
    fuzzy_threshold: float = typer.Option(
        DEFAULT_FUZZY_THRESHOLD,
        "--fuzzy-threshold",
        help="Column-set similarity needed to group files (0 disables)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Scan a directory tree and write the JSON report."""
    _setup_logging(verbose)
    if not directory.exists():
        raise typer.BadParameter(f"Directory does not exist: {directory}")
    if not directory.is_dir():
        raise typer.BadParameter(f"Not a directory: {directory}")

    try:
        config = ScanConfig(
            hash_enabled=not disable_hash,
            max_rows=max_rows,
            fuzzy_threshold=fuzzy_threshold,
            output_path=output,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    output_path = config.resolve_output_path(Path.cwd())
    console.print(f"Scanning directory: [bold]{escape(str(directory))}[/bold]")
    console.print(f"Output file: {escape(str(output_path))}")

    paths = find_supported_files(directory)
    console.print(f"Found {len(paths)} files to process")

    scanner = Scanner(config)
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Processing", total=len(paths))
        directories = scanner.scan(
            directory, paths=paths, on_progress=lambda _path: progress.advance(task)
        )

    indices = build_duplicate_indices(directories, config.fuzzy_threshold)
    write_report(build_report(directory, directories, indices), output_path)

    stats = scanner.stats
    console.print(
        f"Completed! Found {len(directories)} directories with files "
        f"(processed: {stats.processed}, failed: {stats.failed})."
    )
    console.print(
        f"Duplicate groups - content: {len(indices.content_groups)}, "
        f"schema: {len(indices.schema_groups)}, fuzzy: {len(indices.fuzzy_groups)}"
    )
    console.print(f"Output written to: {escape(str(output_path))}")


@app.command()
def inspect(
    path: Path = typer.Argument(
        ..., help="CSV or Excel file to inspect.", exists=True, dir_okay=False, resolve_path=True
    ),
    max_rows: int = typer.Option(DEFAULT_MAX_ROWS, "--max-rows", help="Maximum rows to count"),
) -> None:
    """Show the columns detected in a single tabular file."""
    file_type = detect_file_type(path)
    if file_type not in ("csv", "excel"):
        console.print(f"[yellow]No tabular metadata for {file_type or 'unsupported'} files.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Sheet")
    table.add_column("Rows")
    table.add_column("Fingerprint")
    table.add_column("Columns")

    try:
        if file_type == "csv":
            meta = extract_csv_metadata(path, max_rows)
            table.add_row(
                "-",
                _format_rows(meta.row_count, meta.stopped_row_count_at),
                str(meta.column_similarity_hash),
                escape(", ".join(meta.columns)),
            )
        else:
            for sheet in extract_excel_metadata(path, max_rows).sheets:
                table.add_row(
                    escape(sheet.sheet_name),
                    _format_rows(sheet.row_count, sheet.stopped_row_count_at),
                    str(sheet.column_similarity_hash),
                    escape(", ".join(sheet.columns)),
                )
    except (OSError, DocAuditError) as exc:
        name = escape(redact_identifiers(path.name))
        reason = escape(redact_identifiers(str(exc)))
        console.print(f"[red]Cannot read {name}: {reason}[/red]")
        raise typer.Exit(code=1) from exc

    console.print(table)


@app.command()
def redact(text: str = typer.Argument(..., help="Text to redact")) -> None:
    """Print TEXT with NHS-number shaped identifiers removed."""
    console.print(redact_identifiers(text), markup=False, highlight=False)
