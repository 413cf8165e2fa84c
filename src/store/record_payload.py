"""Shared JSON serialization for snapshot, report, and index payloads.

This module centralizes the camelCase JSON shapes read by the
presentation layer. It is reused by artifact writes, prior-artifact
scans, and SDK reads.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Mapping

from core.errors import StockroomStoreError
from core.quantity import quantity_to_json, round_quantity
from core.types import (
    ChangeEntry,
    IndexEntry,
    InventoryItem,
    ReportCounts,
    ReportTotals,
    SnapshotMeta,
    SnapshotPayload,
    SnapshotReport,
)


def meta_to_payload(meta: SnapshotMeta) -> dict[str, object]:
    """Serialize snapshot metadata."""
    return {
        "snapshotDate": meta.snapshot_date,
        "uploadedAt": meta.uploaded_at,
        "sourceFile": meta.source_file,
    }


def item_to_payload(item: InventoryItem) -> dict[str, object]:
    """Serialize one inventory item."""
    return {
        "name": item.name,
        "unit": item.unit,
        "quantity": quantity_to_json(item.quantity),
    }


def snapshot_to_payload(snapshot: SnapshotPayload) -> dict[str, object]:
    """Serialize a snapshot body.

    Args:
        snapshot: Snapshot to encode.

    Returns:
        JSON-safe ``{meta, items}`` dictionary.
    """
    return {
        "meta": meta_to_payload(snapshot.meta),
        "items": [item_to_payload(item) for item in snapshot.items],
    }


def report_to_payload(report: SnapshotReport) -> dict[str, object]:
    """Serialize a change report.

    Args:
        report: Report to encode.

    Returns:
        JSON-safe report dictionary.
    """
    totals = report.totals
    counts = report.counts
    return {
        "meta": meta_to_payload(report.meta),
        "totals": {
            "items": totals.items,
            "quantity": quantity_to_json(totals.quantity),
            "deltaItems": totals.delta_items,
            "deltaQuantity": quantity_to_json(totals.delta_quantity),
        },
        "counts": {
            "new": counts.new,
            "removed": counts.removed,
            "increased": counts.increased,
            "decreased": counts.decreased,
            "unchanged": counts.unchanged,
        },
        "newItems": [_change_to_payload(entry) for entry in report.new_items],
        "removedItems": [_change_to_payload(entry) for entry in report.removed_items],
        "increases": [_change_to_payload(entry) for entry in report.increases],
        "decreases": [_change_to_payload(entry) for entry in report.decreases],
    }


def index_entry_to_payload(entry: IndexEntry) -> dict[str, object]:
    """Serialize one index row."""
    return {
        **meta_to_payload(entry.meta),
        "path": entry.path,
        "latestForDate": entry.latest_for_date,
        "totalItems": entry.total_items,
        "totalQuantity": quantity_to_json(entry.total_quantity),
    }


def meta_from_payload(payload: Mapping[str, Any], source_path: Path) -> SnapshotMeta:
    """Deserialize snapshot metadata.

    Args:
        payload: Mapping with camelCase meta keys.
        source_path: File the payload came from, for error context.

    Returns:
        Typed snapshot metadata.

    Raises:
        StockroomStoreError: If required keys are missing.
    """
    try:
        return SnapshotMeta(
            snapshot_date=str(payload["snapshotDate"]),
            uploaded_at=str(payload["uploadedAt"]),
            source_file=str(payload["sourceFile"]),
        )
    except KeyError as error:
        raise StockroomStoreError(
            f"Invalid snapshot metadata at {source_path}: missing key {error}. "
            "Rebuild artifacts from raw exports."
        ) from error


def snapshot_from_payload(payload: object, source_path: Path) -> SnapshotPayload:
    """Deserialize a snapshot body.

    Args:
        payload: Parsed JSON object.
        source_path: File the payload came from.

    Returns:
        Typed snapshot with rounded quantities.

    Raises:
        StockroomStoreError: If the payload shape is invalid.
    """
    mapping = _expect_mapping(payload, source_path, "snapshot")
    raw_items = mapping.get("items")
    if not isinstance(raw_items, list):
        raise StockroomStoreError(
            f"Invalid snapshot at {source_path}: items must be a list."
        )
    meta_mapping = _expect_mapping(mapping.get("meta"), source_path, "meta")
    meta = meta_from_payload(meta_mapping, source_path)
    items = tuple(_item_from_payload(item, source_path) for item in raw_items)
    return SnapshotPayload(meta=meta, items=items)


def report_from_payload(payload: object, source_path: Path) -> SnapshotReport:
    """Deserialize a change report.

    Args:
        payload: Parsed JSON object.
        source_path: File the payload came from.

    Returns:
        Typed report.

    Raises:
        StockroomStoreError: If the payload shape is invalid.
    """
    mapping = _expect_mapping(payload, source_path, "report")
    meta_mapping = _expect_mapping(mapping.get("meta"), source_path, "meta")
    try:
        totals = mapping["totals"]
        counts = mapping["counts"]
        return SnapshotReport(
            meta=meta_from_payload(meta_mapping, source_path),
            totals=ReportTotals(
                items=int(totals["items"]),
                quantity=_quantity(totals["quantity"]),
                delta_items=int(totals["deltaItems"]),
                delta_quantity=_quantity(totals["deltaQuantity"]),
            ),
            counts=ReportCounts(
                new=int(counts["new"]),
                removed=int(counts["removed"]),
                increased=int(counts["increased"]),
                decreased=int(counts["decreased"]),
                unchanged=int(counts["unchanged"]),
            ),
            new_items=_changes_from_payload(mapping["newItems"]),
            removed_items=_changes_from_payload(mapping["removedItems"]),
            increases=_changes_from_payload(mapping["increases"]),
            decreases=_changes_from_payload(mapping["decreases"]),
        )
    except (KeyError, TypeError, ValueError) as error:
        raise StockroomStoreError(
            f"Invalid report at {source_path}: {error}. Rebuild artifacts from raw exports."
        ) from error


def index_entry_from_payload(payload: object, source_path: Path) -> IndexEntry:
    """Deserialize one index row.

    Args:
        payload: Parsed JSON object.
        source_path: Index file path.

    Returns:
        Typed index entry.

    Raises:
        StockroomStoreError: If the row is invalid.
    """
    mapping = _expect_mapping(payload, source_path, "index entry")
    try:
        return IndexEntry(
            meta=meta_from_payload(mapping, source_path),
            path=str(mapping["path"]),
            latest_for_date=bool(mapping.get("latestForDate", False)),
            total_items=int(mapping.get("totalItems", 0)),
            total_quantity=_quantity(mapping.get("totalQuantity", 0)),
        )
    except (KeyError, TypeError, ValueError) as error:
        raise StockroomStoreError(
            f"Invalid index entry at {source_path}: {error}. Rebuild artifacts from raw exports."
        ) from error


def _change_to_payload(entry: ChangeEntry) -> dict[str, object]:
    return {
        "name": entry.name,
        "unit": entry.unit,
        "previousQuantity": quantity_to_json(entry.previous_quantity),
        "quantity": quantity_to_json(entry.quantity),
        "delta": quantity_to_json(entry.delta),
    }


def _changes_from_payload(raw_entries: list[Mapping[str, Any]]) -> tuple[ChangeEntry, ...]:
    return tuple(
        ChangeEntry(
            name=str(raw["name"]),
            unit=str(raw.get("unit", "")),
            previous_quantity=_quantity(raw["previousQuantity"]),
            quantity=_quantity(raw["quantity"]),
            delta=_quantity(raw["delta"]),
        )
        for raw in raw_entries
    )


def _item_from_payload(payload: object, source_path: Path) -> InventoryItem:
    mapping = _expect_mapping(payload, source_path, "item")
    try:
        return InventoryItem(
            name=str(mapping["name"]),
            unit=str(mapping.get("unit", "")),
            quantity=_quantity(mapping["quantity"]),
        )
    except (KeyError, ValueError) as error:
        raise StockroomStoreError(
            f"Invalid item at {source_path}: {error}. Rebuild artifacts from raw exports."
        ) from error


def _quantity(value: object) -> Decimal:
    """Convert a JSON number into a rounded quantity without binary float noise."""
    try:
        return round_quantity(_decimal(value))
    except InvalidOperation as error:
        raise ValueError(f"quantity out of range: {value!r}") from error


def _decimal(value: object) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"expected number, got {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value))
        except InvalidOperation as error:
            raise ValueError(f"expected number, got {value!r}") from error
    raise ValueError(f"expected number, got {type(value).__name__}")


def _expect_mapping(value: object, source_path: Path, context: str) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    raise StockroomStoreError(
        f"Invalid {context} at {source_path}: expected JSON object, "
        f"got {type(value).__name__}."
    )
