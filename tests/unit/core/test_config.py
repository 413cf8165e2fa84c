"""Unit tests for core config parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import StockroomConfig, load_config_file
from core.errors import StockroomConfigError


def test_from_env_reads_raw_dir(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve raw directory from environment."""
    monkeypatch.setenv("STOCKROOM_RAW_DIR", "./.tmp-raw")

    config = StockroomConfig.from_env()

    assert config.raw_dir.name == ".tmp-raw"


def test_from_env_uses_defaults_without_settings() -> None:
    """Config should fall back to the default layout."""
    config = StockroomConfig.from_env()

    assert (
        config.output_dir.parts[-2:] == ("data", "artifacts")
        and config.publish_dir is not None
        and config.index_path_prefix == "data"
        and config.chain_scope == "global"
        and config.log_level == "INFO"
    )


def test_from_env_empty_publish_dir_disables_mirror(monkeypatch: pytest.MonkeyPatch) -> None:
    """An empty publish directory setting should disable mirroring."""
    monkeypatch.setenv("STOCKROOM_PUBLISH_DIR", "")

    config = StockroomConfig.from_env()

    assert config.publish_dir is None


def test_from_env_raises_for_invalid_chain_scope(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for an unknown chain scope."""
    monkeypatch.setenv("STOCKROOM_CHAIN_SCOPE", "weekly")

    with pytest.raises(StockroomConfigError):
        StockroomConfig.from_env()


def test_from_mapping_normalizes_prefix_and_scope() -> None:
    """Prefix slashes and scope case should be normalized."""
    config = StockroomConfig.from_mapping(
        {"index_path_prefix": "/public/data/", "chain_scope": " Source "}
    )

    assert config.index_path_prefix == "public/data" and config.chain_scope == "source"


def test_env_overrides_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Environment values should win over config file values."""
    config_file = tmp_path / "stockroom.yaml"
    config_file.write_text(
        "raw_dir: from-file\nindex_path_prefix: files\n", encoding="utf-8"
    )
    monkeypatch.setenv("STOCKROOM_CONFIG_FILE", str(config_file))
    monkeypatch.setenv("STOCKROOM_RAW_DIR", str(tmp_path / "from-env"))

    config = StockroomConfig.from_env()

    assert config.raw_dir.name == "from-env" and config.index_path_prefix == "files"


def test_load_config_file_rejects_unknown_keys(tmp_path: Path) -> None:
    """Unknown config file keys should be reported."""
    config_file = tmp_path / "stockroom.yaml"
    config_file.write_text("raw_dir: data\nretention_days: 3\n", encoding="utf-8")

    with pytest.raises(StockroomConfigError, match="retention_days"):
        load_config_file(config_file)


def test_load_config_file_rejects_non_mapping(tmp_path: Path) -> None:
    """A YAML list at the top level is not a valid config."""
    config_file = tmp_path / "stockroom.yaml"
    config_file.write_text("- raw_dir\n", encoding="utf-8")

    with pytest.raises(StockroomConfigError):
        load_config_file(config_file)


def test_load_config_file_reports_missing_file(tmp_path: Path) -> None:
    """A missing config file should fail with a config error."""
    with pytest.raises(StockroomConfigError):
        load_config_file(tmp_path / "missing.yaml")


def test_load_config_file_accepts_empty_file(tmp_path: Path) -> None:
    """An empty YAML file yields no settings."""
    config_file = tmp_path / "stockroom.yaml"
    config_file.write_text("", encoding="utf-8")

    assert load_config_file(config_file) == {}
