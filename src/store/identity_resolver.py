"""Snapshot identity resolution.

This module makes rebuilds idempotent. Prior snapshots are bucketed by
(source file, snapshot date); a freshly parsed file whose content hash
matches a prior entry consumes that entry and keeps its upload timestamp
and storage file name. Anything else gets a fresh identity derived from
the raw file's modification time.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from core.constants import COLLISION_SUFFIX_LENGTH, FILE_STAMP_FORMAT, UPLOADED_AT_FORMAT
from core.errors import MissingPriorArtifactError
from core.logging_config import get_logger
from core.types import (
    IngestedFile,
    PriorIdentity,
    ResolvedSnapshot,
    SnapshotMeta,
    SnapshotPayload,
)
from store.content_hash import build_content_hash
from store.snapshot_store import ArtifactStore, storage_filename

_LOGGER = get_logger(__name__)

IdentityKey = tuple[str, str]


@dataclass
class PriorIdentityLookup:
    """Prior identities keyed by (source file, snapshot date).

    Buckets keep index order; matched entries are removed so one prior
    identity is never handed out twice.
    """

    buckets: dict[IdentityKey, list[PriorIdentity]] = field(
        default_factory=lambda: defaultdict(list)
    )

    def add(self, key: IdentityKey, identity: PriorIdentity) -> None:
        """Register one prior identity under its key."""
        self.buckets[key].append(identity)

    def consume(self, key: IdentityKey, content_hash: str) -> PriorIdentity | None:
        """Remove and return the first prior identity with a matching hash."""
        bucket = self.buckets.get(key, [])
        for position, identity in enumerate(bucket):
            if identity.content_hash == content_hash:
                return bucket.pop(position)
        return None

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self.buckets.values())


def load_prior_identities(store: ArtifactStore) -> PriorIdentityLookup:
    """Scan persisted artifacts and build the prior identity lookup.

    Snapshot bodies that are missing or unreadable are cache misses.

    Args:
        store: Artifact store to scan.

    Returns:
        Lookup of prior identities.

    Raises:
        StockroomStoreError: If the prior index itself is malformed.
    """
    lookup = PriorIdentityLookup()
    prior_root = store.locate_prior_root()
    if prior_root is None:
        return lookup
    for entry in store.read_index(prior_root):
        try:
            snapshot = store.read_snapshot(entry, prior_root)
        except MissingPriorArtifactError as error:
            _LOGGER.warning(
                "prior_artifact_missing",
                source_file=entry.meta.source_file,
                snapshot_date=entry.meta.snapshot_date,
                path=entry.path,
                reason=str(error),
            )
            continue
        key = (entry.meta.source_file, entry.meta.snapshot_date)
        lookup.add(
            key,
            PriorIdentity(
                content_hash=build_content_hash(snapshot.items),
                uploaded_at=entry.meta.uploaded_at,
                storage_filename=storage_filename(entry),
            ),
        )
    _LOGGER.info("prior_identities_loaded", prior_root=str(prior_root), count=len(lookup))
    return lookup


class IdentityResolver:
    """Assigns upload timestamps and storage file names to parsed files."""

    def __init__(self, lookup: PriorIdentityLookup) -> None:
        self._lookup = lookup

    def resolve(self, ingested_files: Iterable[IngestedFile]) -> list[ResolvedSnapshot]:
        """Resolve identities for one run's parsed files.

        Hash matches are settled for the whole batch before any fresh
        identity is minted, so a minted file name never shadows a reused one.

        Args:
            ingested_files: Parsed raw files in processing order.

        Returns:
            Resolved snapshots in the same order.
        """
        files = list(ingested_files)
        hashes = [build_content_hash(ingested.result.items) for ingested in files]
        matches: list[PriorIdentity | None] = []
        for ingested, content_hash in zip(files, hashes):
            key = (ingested.source_file, ingested.snapshot_date)
            matches.append(self._lookup.consume(key, content_hash))
        claimed_names = {match.storage_filename for match in matches if match is not None}
        resolved: list[ResolvedSnapshot] = []
        for ingested, content_hash, match in zip(files, hashes, matches):
            if match is not None:
                resolved.append(_reuse_identity(ingested, content_hash, match))
                continue
            snapshot = _mint_identity(ingested, content_hash, claimed_names)
            claimed_names.add(snapshot.storage_filename)
            resolved.append(snapshot)
        return resolved


def format_uploaded_at(moment: datetime) -> str:
    """Format a timestamp as ISO UTC with milliseconds and a ``Z`` suffix."""
    moment_utc = moment.astimezone(timezone.utc)
    milliseconds = moment_utc.microsecond // 1000
    return f"{moment_utc.strftime(UPLOADED_AT_FORMAT)}.{milliseconds:03d}Z"


def build_storage_filename(snapshot_date: str, uploaded_at: str) -> str:
    """Build ``{date}_{YYYYMMDDTHHMMSSZ}.json`` from an upload timestamp."""
    moment = datetime.strptime(uploaded_at, f"{UPLOADED_AT_FORMAT}.%fZ")
    return f"{snapshot_date}_{moment.strftime(FILE_STAMP_FORMAT)}.json"


def _reuse_identity(
    ingested: IngestedFile,
    content_hash: str,
    prior: PriorIdentity,
) -> ResolvedSnapshot:
    _LOGGER.info(
        "identity_reused",
        source_file=ingested.source_file,
        snapshot_date=ingested.snapshot_date,
        uploaded_at=prior.uploaded_at,
        storage_filename=prior.storage_filename,
    )
    return _build_snapshot(ingested, content_hash, prior.uploaded_at, prior.storage_filename, True)


def _mint_identity(
    ingested: IngestedFile,
    content_hash: str,
    claimed_names: set[str],
) -> ResolvedSnapshot:
    uploaded_at = format_uploaded_at(ingested.modified_at)
    file_name = build_storage_filename(ingested.snapshot_date, uploaded_at)
    if file_name in claimed_names:
        stem = f"{Path(file_name).stem}_{content_hash[:COLLISION_SUFFIX_LENGTH]}"
        file_name = f"{stem}.json"
        attempt = 2
        while file_name in claimed_names:
            file_name = f"{stem}-{attempt}.json"
            attempt += 1
    _LOGGER.info(
        "identity_minted",
        source_file=ingested.source_file,
        snapshot_date=ingested.snapshot_date,
        uploaded_at=uploaded_at,
        storage_filename=file_name,
    )
    return _build_snapshot(ingested, content_hash, uploaded_at, file_name, False)


def _build_snapshot(
    ingested: IngestedFile,
    content_hash: str,
    uploaded_at: str,
    file_name: str,
    reused: bool,
) -> ResolvedSnapshot:
    meta = SnapshotMeta(
        snapshot_date=ingested.snapshot_date,
        uploaded_at=uploaded_at,
        source_file=ingested.source_file,
    )
    return ResolvedSnapshot(
        payload=SnapshotPayload(meta=meta, items=ingested.result.items),
        storage_filename=file_name,
        content_hash=content_hash,
        reused=reused,
    )
