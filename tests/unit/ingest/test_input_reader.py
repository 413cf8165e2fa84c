"""Unit tests for raw export discovery and loading."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from core.errors import FilenamePatternError, StockroomIngestError
from ingest.input_reader import list_raw_files, load_raw_file, validate_file_names
from tests.fixture_paths import copy_raw_fixture


def test_list_raw_files_creates_missing_directory(tmp_path: Path) -> None:
    """A missing raw directory should be created and yield nothing."""
    raw_dir = tmp_path / "raw"

    files = list_raw_files(raw_dir)

    assert files == [] and raw_dir.is_dir()


def test_list_raw_files_filters_and_sorts_csv(tmp_path: Path) -> None:
    """Only CSV files are listed, in name order."""
    raw_dir = tmp_path / "raw"
    raw_dir.mkdir()
    (raw_dir / "stock-items_01_06_2024.csv").write_text("x", encoding="utf-8")
    (raw_dir / "stock-items_01_05_2024.CSV").write_text("x", encoding="utf-8")
    (raw_dir / "notes.txt").write_text("x", encoding="utf-8")

    files = list_raw_files(raw_dir)

    assert [path.name for path in files] == [
        "stock-items_01_05_2024.CSV",
        "stock-items_01_06_2024.csv",
    ]


def test_list_raw_files_rejects_file_path(tmp_path: Path) -> None:
    """A raw path pointing at a file should fail."""
    raw_path = tmp_path / "raw"
    raw_path.write_text("", encoding="utf-8")

    with pytest.raises(StockroomIngestError):
        list_raw_files(raw_path)


def test_validate_file_names_fails_on_first_bad_name(tmp_path: Path) -> None:
    """Any invalid name should abort before parsing."""
    paths = [tmp_path / "stock-items_01_05_2024.csv", tmp_path / "inventory-export.csv"]

    with pytest.raises(FilenamePatternError):
        validate_file_names(paths)


def test_load_raw_file_reads_date_and_mtime(tmp_path: Path) -> None:
    """Loaded files should carry the name date and UTC modification time."""
    modified_at = datetime(2024, 1, 5, 9, 30, 15, 250000, tzinfo=timezone.utc)
    file_path = copy_raw_fixture(
        "raw_valid/stock-items_01_05_2024.csv", tmp_path / "raw", modified_at.timestamp()
    )

    ingested = load_raw_file(file_path)

    assert ingested.snapshot_date == "2024-01-05"
    assert ingested.modified_at == modified_at
    assert len(ingested.result.items) == 3
