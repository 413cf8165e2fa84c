"""Snapshot chain and index assembly.

Snapshots form a single chronological chain ordered by
(snapshot date, upload time). Each report diffs a snapshot against its
immediate predecessor in that chain, which may come from a different
source file: reports answer "what changed since the last upload of
anything". The ``source`` scope instead chains each source file on
its own.
"""

from __future__ import annotations

from itertools import groupby
from typing import Iterable, Sequence

from core.constants import CHAIN_SCOPE_GLOBAL, SNAPSHOTS_DIR_NAME
from core.types import (
    ArtifactSet,
    ChainedSnapshot,
    IndexEntry,
    InventoryItem,
    ResolvedSnapshot,
)
from reports.diff_engine import build_report, calculate_totals


def snapshot_order_key(snapshot: ResolvedSnapshot) -> tuple[str, str, str]:
    """Return the total-order key of a snapshot."""
    meta = snapshot.payload.meta
    return (meta.snapshot_date, meta.uploaded_at, meta.source_file)


def order_snapshots(snapshots: Iterable[ResolvedSnapshot]) -> list[ResolvedSnapshot]:
    """Sort snapshots into chronological chain order."""
    return sorted(snapshots, key=snapshot_order_key)


def build_report_chain(
    ordered: Sequence[ResolvedSnapshot],
    chain_scope: str = CHAIN_SCOPE_GLOBAL,
) -> list[ChainedSnapshot]:
    """Diff every snapshot against its predecessor.

    Args:
        ordered: Snapshots in chain order.
        chain_scope: ``global`` for one chain across all sources, ``source``
            for one chain per source file.

    Returns:
        Snapshots paired with their reports, in chain order.
    """
    chained: list[ChainedSnapshot] = []
    previous_by_source: dict[str, tuple[InventoryItem, ...]] = {}
    previous_items: tuple[InventoryItem, ...] = ()
    for snapshot in ordered:
        meta = snapshot.payload.meta
        if chain_scope != CHAIN_SCOPE_GLOBAL:
            previous_items = previous_by_source.get(meta.source_file, ())
        report = build_report(meta, snapshot.payload.items, previous_items)
        chained.append(ChainedSnapshot(snapshot=snapshot, report=report))
        previous_items = snapshot.payload.items
        previous_by_source[meta.source_file] = snapshot.payload.items
    return chained


def latest_per_date(ordered: Sequence[ResolvedSnapshot]) -> set[str]:
    """Return storage file names of the newest upload for each snapshot date.

    Args:
        ordered: Snapshots in chain order.

    Returns:
        Storage file names flagged ``latestForDate``.
    """
    latest: set[str] = set()
    for _, group in groupby(ordered, key=lambda snapshot: snapshot.payload.meta.snapshot_date):
        newest = max(group, key=snapshot_order_key)
        latest.add(newest.storage_filename)
    return latest


def select_current(chained: Sequence[ChainedSnapshot]) -> ChainedSnapshot | None:
    """Return the snapshot with the greatest upload time across the index."""
    if not chained:
        return None
    return max(
        chained,
        key=lambda item: (
            item.snapshot.payload.meta.uploaded_at,
            snapshot_order_key(item.snapshot),
        ),
    )


def build_index_entries(
    ordered: Sequence[ResolvedSnapshot],
    index_path_prefix: str,
) -> list[IndexEntry]:
    """Build index rows in chain order with per-date latest flags.

    Args:
        ordered: Snapshots in chain order.
        index_path_prefix: Prefix for snapshot paths as served to readers.

    Returns:
        Index entries.
    """
    latest = latest_per_date(ordered)
    entries: list[IndexEntry] = []
    for snapshot in ordered:
        totals = calculate_totals(snapshot.payload.items)
        path_parts = [index_path_prefix, SNAPSHOTS_DIR_NAME, snapshot.storage_filename]
        entries.append(
            IndexEntry(
                meta=snapshot.payload.meta,
                path="/".join(part for part in path_parts if part),
                latest_for_date=snapshot.storage_filename in latest,
                total_items=totals.items,
                total_quantity=totals.quantity,
            )
        )
    return entries


def assemble_artifacts(
    snapshots: Iterable[ResolvedSnapshot],
    index_path_prefix: str,
    chain_scope: str = CHAIN_SCOPE_GLOBAL,
) -> ArtifactSet:
    """Order snapshots, chain reports, and build the index and current pointer.

    Args:
        snapshots: Resolved snapshots from one run.
        index_path_prefix: Prefix for snapshot paths in the index.
        chain_scope: Predecessor selection policy.

    Returns:
        Complete artifact set ready for persistence.
    """
    ordered = order_snapshots(snapshots)
    chain = build_report_chain(ordered, chain_scope)
    return ArtifactSet(
        chain=tuple(chain),
        index_entries=tuple(build_index_entries(ordered, index_path_prefix)),
        current=select_current(chain),
    )
