"""Artifact store for snapshots, reports, and the index.

This module reads the previously published artifact tree and replaces
it with a freshly built one. New trees are written into a sibling
staging directory and renamed into place, so an interrupted run never
leaves the live directory without a valid index.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
import shutil
from uuid import uuid4

from core.config import StockroomConfig
from core.constants import (
    BACKUP_DIR_PREFIX,
    CURRENT_REPORT_FILE_NAME,
    CURRENT_SNAPSHOT_FILE_NAME,
    INDEX_FILE_NAME,
    REPORTS_DIR_NAME,
    SNAPSHOTS_DIR_NAME,
    STAGING_DIR_PREFIX,
)
from core.errors import MissingPriorArtifactError, StockroomStoreError
from core.logging_config import get_logger
from core.types import ArtifactSet, IndexEntry, SnapshotPayload, SnapshotReport
from store.catalog_io import read_index_file, read_json_file, write_json_file
from store.record_payload import (
    index_entry_to_payload,
    report_from_payload,
    report_to_payload,
    snapshot_from_payload,
    snapshot_to_payload,
)

_LOGGER = get_logger(__name__)


class ArtifactStore:
    """Filesystem artifact store.

    This class owns the live output directory, the optional publish
    mirror, and the staging/backup siblings used during swaps.
    """

    def __init__(self, config: StockroomConfig) -> None:
        """Initialize artifact store from config.

        Args:
            config: Runtime configuration.
        """
        self._output_dir = config.output_dir
        self._publish_dir = config.publish_dir

    @property
    def output_dir(self) -> Path:
        """Live artifact directory."""
        return self._output_dir

    def locate_prior_root(self) -> Path | None:
        """Find the directory holding the most recent complete artifact tree.

        Returns:
            Live directory when present, else the newest backup left by an
            interrupted swap, else None.
        """
        if self._output_dir.is_dir():
            return self._output_dir
        backups = _sibling_dirs(self._output_dir, BACKUP_DIR_PREFIX)
        if not backups:
            return None
        recovered = max(backups, key=lambda path: path.stat().st_mtime)
        _LOGGER.warning(
            "prior_artifacts_recovered",
            output_dir=str(self._output_dir),
            backup_dir=str(recovered),
        )
        return recovered

    def read_index(self, root: Path | None = None) -> list[IndexEntry]:
        """Read the index of an artifact tree.

        Args:
            root: Artifact tree root; the live directory when omitted.

        Returns:
            Index entries, empty when no index exists.

        Raises:
            StockroomStoreError: If the index exists but is malformed.
        """
        index_path = (root or self._output_dir) / INDEX_FILE_NAME
        try:
            return read_index_file(index_path)
        except MissingPriorArtifactError:
            return []

    def read_snapshot(self, entry: IndexEntry, root: Path | None = None) -> SnapshotPayload:
        """Load the snapshot body referenced by an index entry.

        Args:
            entry: Index row pointing at the snapshot.
            root: Artifact tree root; the live directory when omitted.

        Returns:
            Snapshot body.

        Raises:
            MissingPriorArtifactError: If the body is missing or unusable.
        """
        snapshot_path = (root or self._output_dir) / SNAPSHOTS_DIR_NAME / storage_filename(entry)
        try:
            return snapshot_from_payload(read_json_file(snapshot_path), snapshot_path)
        except MissingPriorArtifactError:
            raise
        except StockroomStoreError as error:
            raise MissingPriorArtifactError(str(error)) from error

    def read_current_snapshot(self) -> SnapshotPayload | None:
        """Load the live current snapshot, or None for the null sentinel."""
        current_path = self._output_dir / CURRENT_SNAPSHOT_FILE_NAME
        payload = _read_optional(current_path)
        if payload is None:
            return None
        return snapshot_from_payload(payload, current_path)

    def read_current_report(self) -> SnapshotReport | None:
        """Load the live current report, or None when missing or null."""
        current_path = self._output_dir / CURRENT_REPORT_FILE_NAME
        payload = _read_optional(current_path)
        if payload is None:
            return None
        return report_from_payload(payload, current_path)

    def replace_artifacts(self, artifacts: ArtifactSet) -> None:
        """Write a complete artifact set and swap it into place.

        Every target tree is fully staged before any live directory is touched.

        Args:
            artifacts: Snapshot/report chain, index, and current pointer.

        Raises:
            StockroomStoreError: If staging or swapping fails.
        """
        targets = [self._output_dir]
        if self._publish_dir is not None:
            targets.append(self._publish_dir)
        staged: list[tuple[Path, Path]] = []
        try:
            for target in targets:
                staged.append((target, _stage_tree(target, artifacts)))
        except BaseException:
            for _, staging_dir in staged:
                shutil.rmtree(staging_dir, ignore_errors=True)
            raise
        for target, staging_dir in staged:
            _swap_into_place(staging_dir, target)
            _LOGGER.info(
                "artifacts_swapped",
                target_dir=str(target),
                snapshot_count=len(artifacts.chain),
            )


def storage_filename(entry: IndexEntry) -> str:
    """Return the snapshot file name referenced by an index entry."""
    return PurePosixPath(entry.path).name


def _stage_tree(target: Path, artifacts: ArtifactSet) -> Path:
    """Write the full artifact tree into a fresh staging sibling.

    Args:
        target: Live directory the tree will replace.
        artifacts: Artifact set to write.

    Returns:
        Staging directory path.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    for stale_dir in _sibling_dirs(target, STAGING_DIR_PREFIX):
        shutil.rmtree(stale_dir, ignore_errors=True)
    staging_dir = target.parent / f"{STAGING_DIR_PREFIX}{target.name}-{uuid4().hex[:8]}"
    try:
        snapshots_dir = staging_dir / SNAPSHOTS_DIR_NAME
        reports_dir = staging_dir / REPORTS_DIR_NAME
        snapshots_dir.mkdir(parents=True)
        reports_dir.mkdir()
        for chained in artifacts.chain:
            file_name = chained.snapshot.storage_filename
            snapshot_payload = snapshot_to_payload(chained.snapshot.payload)
            write_json_file(snapshots_dir / file_name, snapshot_payload)
            write_json_file(reports_dir / file_name, report_to_payload(chained.report))
        write_json_file(
            staging_dir / INDEX_FILE_NAME,
            [index_entry_to_payload(entry) for entry in artifacts.index_entries],
        )
        current = artifacts.current
        write_json_file(
            staging_dir / CURRENT_SNAPSHOT_FILE_NAME,
            snapshot_to_payload(current.snapshot.payload) if current else None,
        )
        write_json_file(
            staging_dir / CURRENT_REPORT_FILE_NAME,
            report_to_payload(current.report) if current else None,
        )
    except OSError as error:
        shutil.rmtree(staging_dir, ignore_errors=True)
        raise StockroomStoreError(
            f"Failed to stage artifacts for {target}: {error}. Check disk space and permissions."
        ) from error
    except StockroomStoreError:
        shutil.rmtree(staging_dir, ignore_errors=True)
        raise
    return staging_dir


def _swap_into_place(staging_dir: Path, target: Path) -> None:
    """Rename the live tree aside, move staging in, then drop the old tree.

    Args:
        staging_dir: Fully written staging directory.
        target: Live directory path.

    Raises:
        StockroomStoreError: If a rename fails.
    """
    backup_dir: Path | None = None
    try:
        if target.exists():
            backup_dir = target.parent / f"{BACKUP_DIR_PREFIX}{target.name}-{uuid4().hex[:8]}"
            target.rename(backup_dir)
        staging_dir.rename(target)
    except OSError as error:
        if backup_dir is not None and backup_dir.exists() and not target.exists():
            backup_dir.rename(target)
        shutil.rmtree(staging_dir, ignore_errors=True)
        raise StockroomStoreError(
            f"Failed to swap artifacts into {target}: {error}. "
            "The previous artifact tree was kept."
        ) from error
    for old_dir in _sibling_dirs(target, BACKUP_DIR_PREFIX):
        shutil.rmtree(old_dir, ignore_errors=True)


def _sibling_dirs(target: Path, prefix: str) -> list[Path]:
    if not target.parent.is_dir():
        return []
    return sorted(target.parent.glob(f"{prefix}{target.name}-*"))


def _read_optional(payload_path: Path) -> object | None:
    try:
        return read_json_file(payload_path)
    except MissingPriorArtifactError:
        return None
