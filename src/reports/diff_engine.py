"""Snapshot diff engine.

This module compares one snapshot's items with its predecessor's and
classifies every item as new, removed, increased, decreased, or
unchanged. All arithmetic runs on rounded decimals and every sort is
stable, so equal keys keep their name order.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from core.quantity import ZERO, quantity_delta, round_quantity, sum_quantities
from core.types import (
    ChangeEntry,
    InventoryItem,
    ReportCounts,
    ReportTotals,
    SnapshotMeta,
    SnapshotReport,
)


@dataclass(frozen=True)
class ItemTotals:
    """Item count and rounded quantity sum of one item list."""

    items: int
    quantity: Decimal


def calculate_totals(items: Sequence[InventoryItem]) -> ItemTotals:
    """Count items and sum their quantities.

    Args:
        items: Snapshot items.

    Returns:
        Totals with the quantity sum rounded once.
    """
    return ItemTotals(items=len(items), quantity=sum_quantities(item.quantity for item in items))


def build_report(
    meta: SnapshotMeta,
    items: Sequence[InventoryItem],
    previous_items: Sequence[InventoryItem] = (),
) -> SnapshotReport:
    """Build the change report of a snapshot against its predecessor.

    Args:
        meta: Metadata of the current snapshot.
        items: Current items.
        previous_items: Predecessor items; empty for the first snapshot.

    Returns:
        Report with classified, ordered change entries and totals.
    """
    current_items = sorted(items, key=lambda item: item.name)
    previous_by_name = {item.name: item for item in previous_items}
    current_names = {item.name for item in current_items}

    new_items: list[ChangeEntry] = []
    increases: list[ChangeEntry] = []
    decreases: list[ChangeEntry] = []
    unchanged = 0
    for item in current_items:
        prior = previous_by_name.get(item.name)
        if prior is None:
            new_items.append(_change_entry(item, ZERO))
            continue
        entry = _change_entry(item, prior.quantity)
        if entry.delta > 0:
            increases.append(entry)
        elif entry.delta < 0:
            decreases.append(entry)
        else:
            unchanged += 1

    removed_items = [
        ChangeEntry(
            name=prior.name,
            unit=prior.unit,
            previous_quantity=round_quantity(prior.quantity),
            quantity=ZERO,
            delta=quantity_delta(ZERO, prior.quantity),
        )
        for prior in previous_items
        if prior.name not in current_names
    ]

    new_items.sort(key=lambda entry: entry.quantity, reverse=True)
    removed_items.sort(key=lambda entry: entry.previous_quantity, reverse=True)
    increases.sort(key=lambda entry: entry.delta, reverse=True)
    decreases.sort(key=lambda entry: abs(entry.delta), reverse=True)

    totals = calculate_totals(current_items)
    previous_totals = calculate_totals(previous_items)
    return SnapshotReport(
        meta=meta,
        totals=ReportTotals(
            items=totals.items,
            quantity=totals.quantity,
            delta_items=totals.items - previous_totals.items,
            delta_quantity=quantity_delta(totals.quantity, previous_totals.quantity),
        ),
        counts=ReportCounts(
            new=len(new_items),
            removed=len(removed_items),
            increased=len(increases),
            decreased=len(decreases),
            unchanged=unchanged,
        ),
        new_items=tuple(new_items),
        removed_items=tuple(removed_items),
        increases=tuple(increases),
        decreases=tuple(decreases),
    )


def _change_entry(item: InventoryItem, previous_quantity: Decimal) -> ChangeEntry:
    return ChangeEntry(
        name=item.name,
        unit=item.unit,
        previous_quantity=round_quantity(previous_quantity),
        quantity=round_quantity(item.quantity),
        delta=quantity_delta(item.quantity, previous_quantity),
    )
