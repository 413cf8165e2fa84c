"""Python SDK for snapshot history operations.

This module exposes high-level APIs for rebuilding, previewing, and
reading the published snapshot artifacts.
"""

from __future__ import annotations

from pathlib import Path

from core.config import StockroomConfig
from core.types import (
    IndexEntry,
    PreviewResult,
    RebuildResult,
    SnapshotPayload,
    SnapshotReport,
)
from ingest.pipeline import preview_file, rebuild_artifacts
from reports.diff_engine import build_report
from store.snapshot_store import ArtifactStore


class StockroomClient:
    """Primary SDK entry point for inventory snapshot workflows."""

    def __init__(self, config: StockroomConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or StockroomConfig.from_env()
        self._store = ArtifactStore(self._config)

    @property
    def config(self) -> StockroomConfig:
        """Runtime configuration used by this client."""
        return self._config

    def rebuild(self) -> RebuildResult:
        """Rebuild all artifacts from the raw directory.

        Returns:
            Rebuild summary.

        Raises:
            FilenamePatternError: If a raw file name is invalid.
            ParseError: If a raw file has no valid rows.
            StockroomStoreError: If artifact persistence fails.
        """
        return rebuild_artifacts(self._config)

    def preview(self, file_path: str | Path) -> PreviewResult:
        """Diff one ad-hoc file against the current snapshot without writing.

        Args:
            file_path: Raw CSV path.

        Returns:
            Items, issues, and report for the file.
        """
        return preview_file(Path(file_path).expanduser(), self._config)

    def list_snapshots(self) -> list[IndexEntry]:
        """Return the live index in chronological order."""
        return self._store.read_index()

    def current_snapshot(self) -> SnapshotPayload | None:
        """Return the current snapshot, or None when no snapshots exist."""
        return self._store.read_current_snapshot()

    def current_report(self) -> SnapshotReport | None:
        """Return the current report.

        When the report artifact is missing or null but a current snapshot
        exists, a report treating every item as new is synthesized.

        Returns:
            Current report, or None when no snapshots exist.
        """
        report = self._store.read_current_report()
        if report is not None:
            return report
        snapshot = self.current_snapshot()
        if snapshot is None:
            return None
        return build_report(snapshot.meta, snapshot.items)
