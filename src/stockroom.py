"""Public SDK surface for Stockroom.

This module provides a stable import path for SDK users.
It re-exports the primary client, typed models, and the diff engine.
"""

from __future__ import annotations

from core.config import StockroomConfig
from core.errors import (
    FilenamePatternError,
    ParseError,
    StockroomError,
    StockroomStoreError,
)
from core.types import (
    ChangeEntry,
    IndexEntry,
    IngestIssue,
    InventoryItem,
    PreviewResult,
    RebuildResult,
    SnapshotMeta,
    SnapshotPayload,
    SnapshotReport,
)
from ingest.row_reader import parse_inventory_rows
from reports.diff_engine import build_report, calculate_totals
from store.inventory_sdk import StockroomClient

__all__ = [
    "ChangeEntry",
    "FilenamePatternError",
    "IndexEntry",
    "IngestIssue",
    "InventoryItem",
    "ParseError",
    "PreviewResult",
    "RebuildResult",
    "SnapshotMeta",
    "SnapshotPayload",
    "SnapshotReport",
    "StockroomClient",
    "StockroomConfig",
    "StockroomError",
    "StockroomStoreError",
    "build_report",
    "calculate_totals",
    "parse_inventory_rows",
]
