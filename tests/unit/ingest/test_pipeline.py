"""Unit tests for rebuild orchestration and preview."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
import json
from pathlib import Path

import pytest

from core.config import StockroomConfig
from core.errors import FilenamePatternError, ParseError
from ingest.pipeline import RebuildPipelineRunner, preview_file, rebuild_artifacts
from tests.fixture_paths import copy_raw_fixture, fixture_path

_FIRST_MTIME = datetime(2024, 1, 5, 10, 0, 0, 500000, tzinfo=timezone.utc).timestamp()
_SECOND_MTIME = datetime(2024, 1, 6, 8, 0, 0, tzinfo=timezone.utc).timestamp()


def _config(tmp_path: Path) -> StockroomConfig:
    return StockroomConfig.from_mapping(
        {
            "raw_dir": str(tmp_path / "raw"),
            "output_dir": str(tmp_path / "artifacts"),
            "publish_dir": "",
        }
    )


def _seed_valid_raw(raw_dir: Path) -> None:
    copy_raw_fixture("raw_valid/stock-items_01_05_2024.csv", raw_dir, _FIRST_MTIME)
    copy_raw_fixture("raw_valid/stock-items_01_06_2024.csv", raw_dir, _SECOND_MTIME)


def test_rebuild_writes_index_in_chronological_order(tmp_path: Path) -> None:
    """Index rows should follow snapshot date order."""
    config = _config(tmp_path)
    _seed_valid_raw(config.raw_dir)

    result = rebuild_artifacts(config)

    assert [entry.meta.snapshot_date for entry in result.index_entries] == [
        "2024-01-05",
        "2024-01-06",
    ]


def test_rebuild_mints_identity_from_mtime(tmp_path: Path) -> None:
    """First rebuild should derive upload times from file mtimes."""
    config = _config(tmp_path)
    _seed_valid_raw(config.raw_dir)

    result = rebuild_artifacts(config)
    first_entry = result.index_entries[0]

    assert first_entry.meta.uploaded_at == "2024-01-05T10:00:00.500Z"
    assert first_entry.path == "data/snapshots/2024-01-05_20240105T100000Z.json"
    assert result.minted_count == 2 and result.reused_count == 0


def test_rebuild_writes_current_report_against_predecessor(tmp_path: Path) -> None:
    """The current report should diff against the previous snapshot."""
    config = _config(tmp_path)
    _seed_valid_raw(config.raw_dir)

    rebuild_artifacts(config)
    report = json.loads((config.output_dir / "latest-report.json").read_text("utf-8"))

    assert report["counts"] == {
        "new": 1,
        "removed": 1,
        "increased": 1,
        "decreased": 1,
        "unchanged": 0,
    }
    assert report["decreases"][0] == {
        "name": "Yeast",
        "unit": "g",
        "previousQuantity": 1250.5,
        "quantity": 1000,
        "delta": -250.5,
    }


def test_rebuild_reuses_identity_on_second_run(tmp_path: Path) -> None:
    """Unchanged raw content should keep its identities."""
    config = _config(tmp_path)
    _seed_valid_raw(config.raw_dir)
    first = rebuild_artifacts(config)

    second = rebuild_artifacts(config)

    assert second.reused_count == 2 and second.index_entries == first.index_entries


def test_rebuild_with_empty_raw_dir_writes_null_current(tmp_path: Path) -> None:
    """No raw files should produce an empty index and null current pointers."""
    config = _config(tmp_path)

    result = rebuild_artifacts(config)

    assert result.index_entries == () and result.current is None
    assert json.loads((config.output_dir / "index.json").read_text("utf-8")) == []
    assert json.loads((config.output_dir / "latest.json").read_text("utf-8")) is None


def test_rebuild_collects_row_issues(tmp_path: Path) -> None:
    """Skipped rows should be reported without failing the run."""
    config = _config(tmp_path)
    copy_raw_fixture("raw/stock-items_02_01_2024.csv", config.raw_dir, _FIRST_MTIME)

    result = rebuild_artifacts(config)

    assert len(result.issues) == 3 and result.index_entries[0].total_items == 3


def test_rebuild_failure_leaves_artifacts_untouched(tmp_path: Path) -> None:
    """A bad file name should abort before anything is written."""
    config = _config(tmp_path)
    _seed_valid_raw(config.raw_dir)
    rebuild_artifacts(config)
    index_before = (config.output_dir / "index.json").read_bytes()
    copy_raw_fixture("raw/inventory-export.csv", config.raw_dir, _SECOND_MTIME)
    runner = RebuildPipelineRunner(config)

    with pytest.raises(FilenamePatternError):
        runner.run()

    assert runner.state == "failed"
    assert (config.output_dir / "index.json").read_bytes() == index_before


def test_rebuild_aborts_on_file_without_valid_rows(tmp_path: Path) -> None:
    """A raw file with no usable rows should fail the whole rebuild."""
    config = _config(tmp_path)
    copy_raw_fixture("raw/stock-items_02_02_2024.csv", config.raw_dir, _FIRST_MTIME)

    with pytest.raises(ParseError):
        rebuild_artifacts(config)

    assert not config.output_dir.exists()


def test_runner_finishes_in_done_state(tmp_path: Path) -> None:
    """A successful run should end in the done state."""
    config = _config(tmp_path)
    runner = RebuildPipelineRunner(config)

    runner.run()

    assert runner.state == "done"


def test_preview_diffs_against_current_without_writing(tmp_path: Path) -> None:
    """Preview should compare with the current snapshot and leave artifacts alone."""
    config = _config(tmp_path)
    copy_raw_fixture("raw_valid/stock-items_01_05_2024.csv", config.raw_dir, _FIRST_MTIME)
    rebuild_artifacts(config)
    index_before = (config.output_dir / "index.json").read_bytes()

    preview = preview_file(fixture_path("raw_valid/stock-items_01_06_2024.csv"), config)

    assert preview.report.meta.snapshot_date == "2024-01-06"
    assert preview.report.totals.delta_quantity == Decimal("-251.500")
    assert (config.output_dir / "index.json").read_bytes() == index_before


def test_preview_falls_back_to_mtime_date(tmp_path: Path) -> None:
    """Files without the export pattern should take their date from mtime."""
    config = _config(tmp_path)
    file_path = copy_raw_fixture("raw/inventory-export.csv", tmp_path / "adhoc", _SECOND_MTIME)

    preview = preview_file(file_path, config)

    assert preview.report.meta.snapshot_date == "2024-01-06"
    assert preview.report.counts.new == 1
