"""Content fingerprints for snapshot identity.

Items are canonicalized (sorted by name, quantities rendered as fixed
three-digit strings) and serialized as compact sorted-key JSON before
hashing, so logically identical item sets always share one hash
regardless of input row order.
"""

from __future__ import annotations

import hashlib
import json
from typing import Iterable

from core.constants import HASH_ALGORITHM
from core.quantity import quantity_to_text
from core.types import InventoryItem


def build_content_hash(items: Iterable[InventoryItem]) -> str:
    """Compute the stable content hash of an item set.

    Args:
        items: Snapshot items in any order.

    Returns:
        Hex digest string.
    """
    canonical_items = [
        {"name": item.name, "unit": item.unit, "quantity": quantity_to_text(item.quantity)}
        for item in sorted(items, key=lambda item: item.name)
    ]
    normalized = json.dumps(
        canonical_items, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )
    hash_builder = hashlib.new(HASH_ALGORITHM)
    hash_builder.update(normalized.encode("utf-8"))
    return hash_builder.hexdigest()
