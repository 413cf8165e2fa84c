"""Unit tests for snapshot chain and index assembly."""

from __future__ import annotations

from decimal import Decimal

from core.types import InventoryItem, ResolvedSnapshot, SnapshotMeta, SnapshotPayload
from reports.chain_builder import assemble_artifacts, build_report_chain, order_snapshots


def _snapshot(
    snapshot_date: str,
    uploaded_at: str,
    source_file: str,
    quantity: str,
) -> ResolvedSnapshot:
    meta = SnapshotMeta(
        snapshot_date=snapshot_date,
        uploaded_at=uploaded_at,
        source_file=source_file,
    )
    items = (InventoryItem(name="Flour", unit="kg", quantity=Decimal(quantity)),)
    return ResolvedSnapshot(
        payload=SnapshotPayload(meta=meta, items=items),
        storage_filename=f"{snapshot_date}_{uploaded_at[11:13]}.json",
        content_hash=quantity,
        reused=False,
    )


_EARLY = _snapshot("2024-01-05", "2024-01-05T08:00:00.000Z", "a.csv", "10")
_LATE_SAME_DAY = _snapshot("2024-01-05", "2024-01-05T09:00:00.000Z", "b.csv", "14")
_NEXT_DAY = _snapshot("2024-01-06", "2024-01-04T07:00:00.000Z", "a.csv", "11")


def test_order_snapshots_sorts_by_date_then_upload() -> None:
    """Chain order follows snapshot date before upload time."""
    ordered = order_snapshots([_NEXT_DAY, _LATE_SAME_DAY, _EARLY])

    assert ordered == [_EARLY, _LATE_SAME_DAY, _NEXT_DAY]


def test_build_report_chain_uses_global_predecessor() -> None:
    """Reports diff against the previous snapshot of any source."""
    chain = build_report_chain([_EARLY, _LATE_SAME_DAY, _NEXT_DAY])

    assert chain[2].report.decreases[0].previous_quantity == Decimal("14")


def test_build_report_chain_source_scope_uses_own_history() -> None:
    """Source scope diffs each file against its own previous snapshot."""
    chain = build_report_chain([_EARLY, _LATE_SAME_DAY, _NEXT_DAY], chain_scope="source")

    assert chain[1].report.counts.new == 1
    assert chain[2].report.increases[0].previous_quantity == Decimal("10")


def test_assemble_artifacts_flags_latest_upload_per_date() -> None:
    """Only the newest upload of each date is flagged latest."""
    artifacts = assemble_artifacts(
        [_EARLY, _LATE_SAME_DAY, _NEXT_DAY], index_path_prefix="data"
    )

    assert [entry.latest_for_date for entry in artifacts.index_entries] == [False, True, True]


def test_assemble_artifacts_picks_current_by_upload_time() -> None:
    """The current snapshot has the greatest upload time, not the latest date."""
    artifacts = assemble_artifacts([_EARLY, _LATE_SAME_DAY, _NEXT_DAY], index_path_prefix="")

    assert artifacts.current is not None
    assert artifacts.current.snapshot == _LATE_SAME_DAY


def test_assemble_artifacts_builds_prefixed_paths() -> None:
    """Index paths join the prefix, snapshots dir, and storage file name."""
    artifacts = assemble_artifacts([_EARLY], index_path_prefix="data")

    assert artifacts.index_entries[0].path == f"data/snapshots/{_EARLY.storage_filename}"


def test_assemble_artifacts_handles_empty_history() -> None:
    """No snapshots means an empty index and no current pointer."""
    artifacts = assemble_artifacts([], index_path_prefix="data")

    assert artifacts.index_entries == () and artifacts.current is None
