"""Snapshot date extraction from raw export file names."""

from __future__ import annotations

from datetime import date
import re

from core.constants import SNAPSHOT_FILE_PATTERN
from core.errors import FilenamePatternError

_FILE_NAME_RE = re.compile(SNAPSHOT_FILE_PATTERN, re.IGNORECASE)


def derive_snapshot_date(file_name: str) -> str:
    """Derive the ISO snapshot date encoded in a raw file name.

    Names follow ``stock-items_MM_DD_YYYY.csv``; matching is case-insensitive.

    Args:
        file_name: Raw file name without directory.

    Returns:
        Date string formatted as ``YYYY-MM-DD``.

    Raises:
        FilenamePatternError: If the name does not match or the date is impossible.
    """
    match = _FILE_NAME_RE.search(file_name)
    if match is None:
        raise FilenamePatternError(
            f"File name does not match expected pattern: {file_name}. "
            "Rename the export to stock-items_MM_DD_YYYY.csv."
        )
    month, day, year = (int(group) for group in match.groups())
    try:
        snapshot_date = date(year, month, day)
    except ValueError as error:
        raise FilenamePatternError(
            f"File name {file_name} encodes an invalid calendar date: {error}. "
            "Fix the month and day in the export name."
        ) from error
    return snapshot_date.isoformat()
