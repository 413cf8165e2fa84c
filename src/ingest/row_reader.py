"""Raw inventory CSV parsing.

This module turns one exported CSV into a canonical, name-sorted item
list. Bad rows are skipped and reported as issues rather than failing
the file; a file with no usable rows is a parse error.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Sequence

from core.constants import NAME_COLUMN, QUANTITY_COLUMN, REQUIRED_COLUMNS, UNIT_COLUMN
from core.errors import ParseError, StockroomIngestError
from core.quantity import parse_quantity
from core.types import IngestIssue, IngestResult, InventoryItem, IssueKind


def read_inventory_file(file_path: Path) -> IngestResult:
    """Read and parse one raw inventory file.

    Args:
        file_path: Path to the CSV export.

    Returns:
        Parsed items and non-fatal issues.

    Raises:
        StockroomIngestError: If the file cannot be read.
        ParseError: If the file has no valid rows.
    """
    try:
        text = file_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as error:
        raise StockroomIngestError(
            f"Failed to read raw file {file_path}: {error}. "
            "Check that the export is a readable UTF-8 CSV."
        ) from error
    return parse_inventory_rows(text, file_path.name)


def parse_inventory_rows(text: str, source_file: str) -> IngestResult:
    """Parse CSV text into canonical items.

    Args:
        text: Raw CSV content with a header row.
        source_file: File name used in issues and errors.

    Returns:
        Items sorted by name plus collected issues.

    Raises:
        ParseError: If the header lacks required columns or no rows are valid.
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    try:
        columns = _read_header(reader, source_file)
        items, issues = _collect_items(reader, columns, source_file)
    except csv.Error as error:
        raise ParseError(
            f"Invalid CSV in {source_file} at line {reader.line_num}: {error}. "
            "Re-export the file and retry."
        ) from error
    if not items:
        raise ParseError(
            f"No valid rows in {source_file}: every row was empty or rejected. "
            "Check the Name and Quantity columns."
        )
    items.sort(key=lambda item: item.name)
    return IngestResult(items=tuple(items), issues=tuple(issues))


def _read_header(reader: Any, source_file: str) -> dict[str, int]:
    """Locate required columns in the first non-empty row.

    Args:
        reader: CSV reader positioned at the start of the file.
        source_file: File name for error context.

    Returns:
        Column positions keyed by lowercase column name.

    Raises:
        ParseError: If the header is missing or incomplete.
    """
    for row in reader:
        if not _is_blank(row):
            positions = {cell.strip().lower(): index for index, cell in enumerate(row)}
            missing = [column for column in REQUIRED_COLUMNS if column not in positions]
            if missing:
                raise ParseError(
                    f"Missing required columns in {source_file}: {', '.join(missing)}. "
                    "Expected a header with Name, Unit, and Quantity."
                )
            return positions
    raise ParseError(f"No valid rows in {source_file}: the file has no header row.")


def _collect_items(
    reader: Any,
    columns: dict[str, int],
    source_file: str,
) -> tuple[list[InventoryItem], list[IngestIssue]]:
    items: list[InventoryItem] = []
    issues: list[IngestIssue] = []
    seen_names: set[str] = set()
    for row in reader:
        if _is_blank(row):
            continue
        line_number = reader.line_num
        name = _cell(row, columns[NAME_COLUMN])
        if not name:
            issues.append(_issue(source_file, line_number, "row_skipped", "missing item name"))
            continue
        if name in seen_names:
            issues.append(
                _issue(
                    source_file,
                    line_number,
                    "duplicate_name_skipped",
                    f"duplicate item name '{name}'",
                )
            )
            continue
        raw_quantity = _cell(row, columns[QUANTITY_COLUMN])
        quantity = parse_quantity(raw_quantity)
        if quantity is None:
            issues.append(
                _issue(
                    source_file,
                    line_number,
                    "row_skipped",
                    f"invalid quantity '{raw_quantity}' for item '{name}'",
                )
            )
            continue
        unit = _cell(row, columns[UNIT_COLUMN])
        items.append(InventoryItem(name=name, unit=unit, quantity=quantity))
        seen_names.add(name)
    return items, issues


def _cell(row: Sequence[str], position: int) -> str:
    if position >= len(row):
        return ""
    return row[position].strip()


def _is_blank(row: Sequence[str]) -> bool:
    return not any(cell.strip() for cell in row)


def _issue(source_file: str, line_number: int, kind: IssueKind, message: str) -> IngestIssue:
    return IngestIssue(
        source_file=source_file,
        line_number=line_number,
        kind=kind,
        message=message,
    )
