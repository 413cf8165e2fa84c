"""Shared typed models.

This module defines immutable data models used by ingest, identity,
report, and store layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Literal

IssueKind = Literal["row_skipped", "duplicate_name_skipped"]


@dataclass(frozen=True)
class InventoryItem:
    """One named stock record.

    Attributes:
        name: Item name, unique within a snapshot.
        unit: Unit of measure as exported.
        quantity: Quantity rounded to three fractional digits.
    """

    name: str
    unit: str
    quantity: Decimal


@dataclass(frozen=True)
class SnapshotMeta:
    """Snapshot metadata shared by snapshots, reports, and index rows.

    Attributes:
        snapshot_date: ISO calendar date derived from the source file name.
        uploaded_at: ISO UTC timestamp with millisecond precision.
        source_file: Raw file name the snapshot was built from.
    """

    snapshot_date: str
    uploaded_at: str
    source_file: str


@dataclass(frozen=True)
class SnapshotPayload:
    """Immutable snapshot body with name-sorted items."""

    meta: SnapshotMeta
    items: tuple[InventoryItem, ...]


@dataclass(frozen=True)
class IngestIssue:
    """Non-fatal problem found while reading one raw row.

    Attributes:
        source_file: Raw file name.
        line_number: One-based CSV line number of the offending row.
        kind: Issue category.
        message: Human-readable description.
    """

    source_file: str
    line_number: int
    kind: IssueKind
    message: str


@dataclass(frozen=True)
class IngestResult:
    """Canonical items and collected issues for one raw file."""

    items: tuple[InventoryItem, ...]
    issues: tuple[IngestIssue, ...]


@dataclass(frozen=True)
class IngestedFile:
    """Raw file after parsing, before identity resolution.

    Attributes:
        source_file: Raw file name.
        snapshot_date: ISO date derived from the file name.
        modified_at: File modification time in UTC.
        result: Parsed items and issues.
    """

    source_file: str
    snapshot_date: str
    modified_at: datetime
    result: IngestResult


@dataclass(frozen=True)
class PriorIdentity:
    """Identity of a previously persisted snapshot."""

    content_hash: str
    uploaded_at: str
    storage_filename: str


@dataclass(frozen=True)
class ResolvedSnapshot:
    """Snapshot with a settled identity.

    Attributes:
        payload: Snapshot body.
        storage_filename: JSON file name under the snapshots directory.
        content_hash: Canonical content fingerprint.
        reused: Whether the identity was carried over from prior artifacts.
    """

    payload: SnapshotPayload
    storage_filename: str
    content_hash: str
    reused: bool


@dataclass(frozen=True)
class ChangeEntry:
    """One row of a snapshot diff."""

    name: str
    unit: str
    previous_quantity: Decimal
    quantity: Decimal
    delta: Decimal


@dataclass(frozen=True)
class ReportTotals:
    """Aggregate totals of a report."""

    items: int
    quantity: Decimal
    delta_items: int
    delta_quantity: Decimal


@dataclass(frozen=True)
class ReportCounts:
    """Per-category change counts of a report."""

    new: int
    removed: int
    increased: int
    decreased: int
    unchanged: int


@dataclass(frozen=True)
class SnapshotReport:
    """Difference between one snapshot and its predecessor."""

    meta: SnapshotMeta
    totals: ReportTotals
    counts: ReportCounts
    new_items: tuple[ChangeEntry, ...]
    removed_items: tuple[ChangeEntry, ...]
    increases: tuple[ChangeEntry, ...]
    decreases: tuple[ChangeEntry, ...]


@dataclass(frozen=True)
class IndexEntry:
    """One row of the snapshot index.

    Attributes:
        meta: Snapshot metadata.
        path: Snapshot path as seen by the presentation layer.
        latest_for_date: Whether this is the newest upload for its date.
        total_items: Number of items in the snapshot.
        total_quantity: Rounded sum of item quantities.
    """

    meta: SnapshotMeta
    path: str
    latest_for_date: bool
    total_items: int
    total_quantity: Decimal


@dataclass(frozen=True)
class ChainedSnapshot:
    """Resolved snapshot paired with its report."""

    snapshot: ResolvedSnapshot
    report: SnapshotReport


@dataclass(frozen=True)
class ArtifactSet:
    """Complete artifact set produced by one rebuild."""

    chain: tuple[ChainedSnapshot, ...]
    index_entries: tuple[IndexEntry, ...]
    current: ChainedSnapshot | None


@dataclass(frozen=True)
class RebuildResult:
    """Summary of a completed rebuild.

    Attributes:
        index_entries: Persisted index rows in chronological order.
        issues: Non-fatal ingest issues across all raw files.
        current: Metadata of the current snapshot, if any.
        reused_count: Snapshots whose identity was carried over.
        minted_count: Snapshots that received a fresh identity.
        output_dir: Live artifact directory.
    """

    index_entries: tuple[IndexEntry, ...]
    issues: tuple[IngestIssue, ...]
    current: SnapshotMeta | None
    reused_count: int
    minted_count: int
    output_dir: Path


@dataclass(frozen=True)
class PreviewResult:
    """Ad-hoc single file diff that never touches persisted state."""

    items: tuple[InventoryItem, ...]
    issues: tuple[IngestIssue, ...]
    report: SnapshotReport
