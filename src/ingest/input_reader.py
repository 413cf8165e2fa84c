"""Raw export discovery and loading.

This module lists raw CSV exports and turns each one into a parsed,
dated file record for identity resolution.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from core.constants import RAW_FILE_EXTENSION
from core.errors import StockroomIngestError
from core.types import IngestedFile
from ingest.row_reader import read_inventory_file
from ingest.snapshot_date import derive_snapshot_date


def list_raw_files(raw_dir: Path) -> list[Path]:
    """List raw CSV exports sorted by file name.

    A missing raw directory is created and yields no files.

    Args:
        raw_dir: Directory holding raw exports.

    Returns:
        Sorted CSV file paths.

    Raises:
        StockroomIngestError: If the path exists but is not a directory.
    """
    if raw_dir.exists() and not raw_dir.is_dir():
        raise StockroomIngestError(
            f"Raw input path {raw_dir} is not a directory. "
            "Point STOCKROOM_RAW_DIR at the export folder."
        )
    raw_dir.mkdir(parents=True, exist_ok=True)
    files = [
        file_path
        for file_path in raw_dir.iterdir()
        if file_path.is_file() and file_path.suffix.lower() == RAW_FILE_EXTENSION
    ]
    return sorted(files, key=lambda file_path: file_path.name)


def validate_file_names(file_paths: list[Path]) -> dict[str, str]:
    """Derive snapshot dates for every file before any parsing.

    Args:
        file_paths: Raw file paths.

    Returns:
        Snapshot dates keyed by file name.

    Raises:
        FilenamePatternError: If any file name does not encode a valid date.
    """
    return {file_path.name: derive_snapshot_date(file_path.name) for file_path in file_paths}


def load_raw_file(file_path: Path, snapshot_date: str | None = None) -> IngestedFile:
    """Parse one raw export together with its date and modification time.

    Args:
        file_path: Raw CSV path.
        snapshot_date: Pre-validated date; derived from the name when omitted.

    Returns:
        Parsed file record.

    Raises:
        FilenamePatternError: If the file name is invalid.
        ParseError: If the file has no valid rows.
    """
    resolved_date = snapshot_date or derive_snapshot_date(file_path.name)
    result = read_inventory_file(file_path)
    return IngestedFile(
        source_file=file_path.name,
        snapshot_date=resolved_date,
        modified_at=file_modified_at(file_path),
        result=result,
    )


def file_modified_at(file_path: Path) -> datetime:
    """Return the file modification time as an aware UTC datetime."""
    try:
        modified_timestamp = file_path.stat().st_mtime
    except OSError as error:
        raise StockroomIngestError(
            f"Failed to stat raw file {file_path}: {error}."
        ) from error
    return datetime.fromtimestamp(modified_timestamp, tz=timezone.utc)
