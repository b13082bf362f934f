"""Tests for CLI commands."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from docaudit.cli import _format_rows, _setup_logging, app


runner = CliRunner()


def _output(result) -> str:
    output = result.stdout
    if result.exception:
        output += repr(result.exception)
    return output


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("docaudit.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("docaudit.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestFormatRows:
    """Tests for _format_rows helper."""

    def test_complete(self) -> None:
        assert _format_rows(12, None) == "12"

    def test_truncated(self) -> None:
        assert _format_rows(12, 12) == "12+"


class TestScanCommand:
    """Tests for the scan command."""

    @pytest.fixture
    def share(self, tmp_path: Path) -> Path:
        root = tmp_path / "share"
        (root / "sub").mkdir(parents=True)
        (root / "a.csv").write_text("Name,Age\nAlice,30\nBob,40\nCara,50\n")
        (root / "b.csv").write_text("name, age\nDan,31\nEve,41\nFay,51\n")
        (root / "sub" / "copy.pdf").write_bytes(b"%PDF-1.4 same")
        (root / "sub" / "copy2.pdf").write_bytes(b"%PDF-1.4 same")
        (root / "sub" / "other.pdf").write_bytes(b"%PDF-1.4 sama")
        (root / "patient_1234567890.docx").write_bytes(b"docx")
        (root / "notes.txt").write_text("ignored")
        return root

    def test_end_to_end(self, share: Path, tmp_path: Path) -> None:
        """Writes the full report with all three duplicate tables."""
        output = tmp_path / "out" / "report.json"

        result = runner.invoke(app, ["scan", "-d", str(share), "-o", str(output)])

        assert result.exit_code == 0, _output(result)
        assert "Completed!" in result.stdout
        report = json.loads(output.read_text(encoding="utf-8"))

        assert report["scan_directory"] == str(share.resolve())
        assert [entry["path"] for entry in report["directories"]] == [".", "sub"]
        root_files = {f["name"]: f for f in report["directories"][0]["files"]}
        assert set(root_files) == {"a.csv", "b.csv", "patient_[REDACTED].docx"}
        assert root_files["a.csv"]["csv_metadata"]["columns"] == ["Name", "Age"]
        assert root_files["a.csv"]["csv_metadata"]["row_count"] == 3
        assert "excel_metadata" not in root_files["a.csv"]
        assert root_files["patient_[REDACTED].docx"]["file_type"] == "docx"
        assert "1234567890" not in output.read_text(encoding="utf-8")

        crc_groups = report["crc32_similarity_table"]
        assert len(crc_groups) == 1
        assert crc_groups[0]["sources"] == ["sub/copy.pdf", "sub/copy2.pdf"]

        schema_groups = report["column_similarity_table"]
        assert len(schema_groups) == 1
        assert schema_groups[0]["sources"] == ["./a.csv", "./b.csv"]
        assert schema_groups[0]["example_columns"] == ["Name", "Age"]

        fuzzy_groups = report["fuzzy_similarity_groups"]
        assert len(fuzzy_groups) == 1
        assert fuzzy_groups[0]["group_id"] == 0
        assert fuzzy_groups[0]["similarity_score"] == 0.8
        assert fuzzy_groups[0]["sources"] == ["./a.csv", "./b.csv"]

    def test_fuzzy_disabled(self, share: Path, tmp_path: Path) -> None:
        """A zero threshold leaves the fuzzy table empty."""
        output = tmp_path / "report.json"

        result = runner.invoke(
            app, ["scan", "-d", str(share), "-o", str(output), "--fuzzy-threshold", "0"]
        )

        assert result.exit_code == 0, _output(result)
        report = json.loads(output.read_text(encoding="utf-8"))
        assert report["fuzzy_similarity_groups"] == []
        assert len(report["column_similarity_table"]) == 1

    def test_disable_hash(self, share: Path, tmp_path: Path) -> None:
        """Without hashing every file reports its size and nothing groups by content."""
        output = tmp_path / "report.json"

        result = runner.invoke(app, ["scan", "-d", str(share), "-o", str(output), "--disable-hash"])

        assert result.exit_code == 0, _output(result)
        report = json.loads(output.read_text(encoding="utf-8"))
        assert report["crc32_similarity_table"] == []
        for entry in report["directories"]:
            for record in entry["files"]:
                assert "crc32_hash" not in record
                assert "file_size" in record

    def test_max_rows(self, share: Path, tmp_path: Path) -> None:
        """The row cap is applied and marked."""
        output = tmp_path / "report.json"

        result = runner.invoke(app, ["scan", "-d", str(share), "-o", str(output), "--max-rows", "2"])

        assert result.exit_code == 0, _output(result)
        report = json.loads(output.read_text(encoding="utf-8"))
        files = {f["name"]: f for f in report["directories"][0]["files"]}
        assert files["a.csv"]["csv_metadata"]["row_count"] == 2
        assert files["a.csv"]["csv_metadata"]["stopped_row_count_at"] == 2

    def test_missing_directory(self, tmp_path: Path) -> None:
        """A missing scan root aborts before any work."""
        output = tmp_path / "report.json"

        result = runner.invoke(app, ["scan", "-d", str(tmp_path / "missing"), "-o", str(output)])

        assert result.exit_code == 2
        assert not output.exists()

    def test_invalid_threshold(self, share: Path, tmp_path: Path) -> None:
        result = runner.invoke(
            app, ["scan", "-d", str(share), "-o", str(tmp_path / "r.json"), "--fuzzy-threshold", "1.5"]
        )

        assert result.exit_code == 2


class TestInspectCommand:
    """Tests for the inspect command."""

    def test_inspect_csv(self, tmp_path: Path) -> None:
        path = tmp_path / "a.csv"
        path.write_text("Name,Age\nA,1\nB,2\n")

        result = runner.invoke(app, ["inspect", str(path)])

        assert result.exit_code == 0, _output(result)
        assert "Name, Age" in result.stdout

    def test_inspect_document(self, tmp_path: Path) -> None:
        path = tmp_path / "r.pdf"
        path.write_bytes(b"%PDF")

        result = runner.invoke(app, ["inspect", str(path)])

        assert result.exit_code == 0
        assert "No tabular metadata for pdf files" in result.stdout

    def test_inspect_corrupt_csv(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.csv"
        path.write_bytes(b"\xff\xfe\n")

        result = runner.invoke(app, ["inspect", str(path)])

        assert result.exit_code == 1
        assert "Cannot read" in result.stdout

    def test_inspect_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["inspect", str(tmp_path / "missing.csv")])

        assert result.exit_code == 2


class TestRedactCommand:
    """Tests for the redact command."""

    def test_redact(self) -> None:
        result = runner.invoke(app, ["redact", "NHS 123 456 7890 and 1234567890"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "NHS [REDACTED] and [REDACTED]"

    def test_long_run_kept(self) -> None:
        result = runner.invoke(app, ["redact", "12345678901"])

        assert result.stdout.strip() == "12345678901"
