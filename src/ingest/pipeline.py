"""Rebuild orchestration.

This module coordinates prior-artifact scanning, raw parsing, identity
resolution, report chaining, and the staged artifact swap. The run
moves through idle, scanning_existing, parsing, diffing, writing, and
done; any failure before writing leaves stored artifacts untouched.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from core.config import StockroomConfig
from core.errors import FilenamePatternError
from core.logging_config import get_logger
from core.rebuild_state import RebuildState, validate_transition
from core.types import (
    ArtifactSet,
    IngestedFile,
    IngestIssue,
    PreviewResult,
    RebuildResult,
    ResolvedSnapshot,
    SnapshotMeta,
)
from ingest.input_reader import (
    file_modified_at,
    list_raw_files,
    load_raw_file,
    validate_file_names,
)
from ingest.row_reader import read_inventory_file
from ingest.snapshot_date import derive_snapshot_date
from reports.chain_builder import assemble_artifacts
from reports.diff_engine import build_report, calculate_totals
from store.identity_resolver import (
    IdentityResolver,
    PriorIdentityLookup,
    format_uploaded_at,
    load_prior_identities,
)
from store.snapshot_store import ArtifactStore

_LOGGER = get_logger(__name__)


class RebuildPipelineRunner:
    """Stateful runner for one full artifact rebuild."""

    def __init__(self, config: StockroomConfig) -> None:
        self._config = config
        self._store = ArtifactStore(config)
        self._state: RebuildState = "idle"

    @property
    def state(self) -> RebuildState:
        """Current lifecycle state."""
        return self._state

    def run(self) -> RebuildResult:
        """Execute the rebuild and return its summary.

        Raises:
            FilenamePatternError: If a raw file name is invalid.
            ParseError: If a raw file has no valid rows.
            StockroomStoreError: If prior artifacts are malformed or writing fails.
        """
        try:
            lookup = self._scan_existing()
            ingested_files = self._parse()
            snapshots = IdentityResolver(lookup).resolve(ingested_files)
            artifacts = self._diff(snapshots)
            self._write(artifacts)
        except Exception as error:
            self._transition("failed", error=str(error))
            raise
        self._transition("done")
        issues = tuple(issue for ingested in ingested_files for issue in ingested.result.issues)
        result = _build_result(artifacts, snapshots, issues, self._store.output_dir)
        _log_rebuild_completion(result)
        return result

    def _scan_existing(self) -> PriorIdentityLookup:
        self._transition("scanning_existing")
        return load_prior_identities(self._store)

    def _parse(self) -> list[IngestedFile]:
        self._transition("parsing")
        raw_files = list_raw_files(self._config.raw_dir)
        if not raw_files:
            _LOGGER.warning("raw_files_missing", raw_dir=str(self._config.raw_dir))
        snapshot_dates = validate_file_names(raw_files)
        ingested_files: list[IngestedFile] = []
        for file_path in raw_files:
            ingested = load_raw_file(file_path, snapshot_dates[file_path.name])
            _log_ingested_file(ingested)
            ingested_files.append(ingested)
        return ingested_files

    def _diff(self, snapshots: list[ResolvedSnapshot]) -> ArtifactSet:
        self._transition("diffing")
        return assemble_artifacts(
            snapshots,
            index_path_prefix=self._config.index_path_prefix,
            chain_scope=self._config.chain_scope,
        )

    def _write(self, artifacts: ArtifactSet) -> None:
        self._transition("writing")
        self._store.replace_artifacts(artifacts)

    def _transition(self, next_state: RebuildState, error: str | None = None) -> None:
        validate_transition(self._state, next_state)
        _LOGGER.info(
            "rebuild_state_changed",
            previous_state=self._state,
            state=next_state,
            error=error,
        )
        self._state = next_state


def rebuild_artifacts(config: StockroomConfig) -> RebuildResult:
    """Run a full rebuild from the raw directory.

    Args:
        config: Runtime configuration.

    Returns:
        Rebuild summary.

    Raises:
        StockroomError: If parsing or persistence fails.
    """
    runner = RebuildPipelineRunner(config)
    return runner.run()


def preview_file(file_path: Path, config: StockroomConfig) -> PreviewResult:
    """Diff one ad-hoc raw file against the current snapshot without writing.

    The snapshot date comes from the file name when it follows the export
    pattern, otherwise from its modification time.

    Args:
        file_path: Raw CSV path.
        config: Runtime configuration.

    Returns:
        Parsed items, issues, and the report.

    Raises:
        ParseError: If the file has no valid rows.
        StockroomStoreError: If the current snapshot artifact is malformed.
    """
    result = read_inventory_file(file_path)
    modified_at = file_modified_at(file_path)
    current = ArtifactStore(config).read_current_snapshot()
    previous_items = current.items if current else ()
    meta = SnapshotMeta(
        snapshot_date=_preview_date(file_path.name, modified_at),
        uploaded_at=format_uploaded_at(modified_at),
        source_file=file_path.name,
    )
    return PreviewResult(
        items=result.items,
        issues=result.issues,
        report=build_report(meta, result.items, previous_items),
    )


def _preview_date(file_name: str, modified_at: datetime) -> str:
    """Use the file name date when present, else the modification date."""
    try:
        return derive_snapshot_date(file_name)
    except FilenamePatternError:
        return modified_at.date().isoformat()


def _log_ingested_file(ingested: IngestedFile) -> None:
    """Log one parsed raw file and each of its non-fatal issues."""
    for issue in ingested.result.issues:
        _LOGGER.warning(
            "ingest_issue",
            source_file=issue.source_file,
            line_number=issue.line_number,
            kind=issue.kind,
            message=issue.message,
        )
    totals = calculate_totals(ingested.result.items)
    _LOGGER.info(
        "snapshot_ingested",
        source_file=ingested.source_file,
        snapshot_date=ingested.snapshot_date,
        item_count=totals.items,
        total_quantity=str(totals.quantity),
        issue_count=len(ingested.result.issues),
    )


def _build_result(
    artifacts: ArtifactSet,
    snapshots: list[ResolvedSnapshot],
    issues: tuple[IngestIssue, ...],
    output_dir: Path,
) -> RebuildResult:
    """Summarize a completed rebuild."""
    reused_count = sum(1 for snapshot in snapshots if snapshot.reused)
    current = artifacts.current
    return RebuildResult(
        index_entries=artifacts.index_entries,
        issues=issues,
        current=current.snapshot.payload.meta if current else None,
        reused_count=reused_count,
        minted_count=len(snapshots) - reused_count,
        output_dir=output_dir,
    )


def _log_rebuild_completion(result: RebuildResult) -> None:
    """Log rebuild completion with contextual metadata."""
    _LOGGER.info(
        "rebuild_completed",
        snapshot_count=len(result.index_entries),
        reused_count=result.reused_count,
        minted_count=result.minted_count,
        issue_count=len(result.issues),
        current_uploaded_at=result.current.uploaded_at if result.current else None,
        output_dir=str(result.output_dir),
    )
