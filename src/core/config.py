"""Runtime configuration model for Stockroom.

This module owns all environment variable and config file parsing.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping, cast

import yaml

from core.constants import (
    CHAIN_SCOPE_GLOBAL,
    DEFAULT_INDEX_PATH_PREFIX,
    DEFAULT_LOG_LEVEL,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PUBLISH_DIR,
    DEFAULT_RAW_DIR,
    SUPPORTED_CHAIN_SCOPES,
)
from core.errors import StockroomConfigError

CONFIG_FILE_ENV = "STOCKROOM_CONFIG_FILE"
_ENV_KEYS = {
    "raw_dir": "STOCKROOM_RAW_DIR",
    "output_dir": "STOCKROOM_OUTPUT_DIR",
    "publish_dir": "STOCKROOM_PUBLISH_DIR",
    "index_path_prefix": "STOCKROOM_INDEX_PATH_PREFIX",
    "chain_scope": "STOCKROOM_CHAIN_SCOPE",
    "log_level": "STOCKROOM_LOG_LEVEL",
}


@dataclass(frozen=True)
class StockroomConfig:
    """Validated runtime configuration.

    Attributes:
        raw_dir: Directory holding raw ``stock-items_MM_DD_YYYY.csv`` exports.
        output_dir: Live artifact directory rebuilt by each run.
        publish_dir: Optional mirror of the artifact tree for the web front end.
        index_path_prefix: Prefix for snapshot paths written into the index.
        chain_scope: ``global`` or ``source`` predecessor selection for reports.
        log_level: Standard logging level name.
    """

    raw_dir: Path
    output_dir: Path
    publish_dir: Path | None
    index_path_prefix: str
    chain_scope: str
    log_level: str

    @classmethod
    def from_env(cls) -> "StockroomConfig":
        """Build config from an optional YAML file and environment variables.

        Environment variables override values from the file named by
        ``STOCKROOM_CONFIG_FILE``.

        Returns:
            A validated config object.

        Raises:
            StockroomConfigError: If file or environment values are invalid.
        """
        values: dict[str, str] = {}
        config_file = os.getenv(CONFIG_FILE_ENV)
        if config_file:
            values.update(load_config_file(Path(config_file)))
        for key, env_name in _ENV_KEYS.items():
            env_value = os.getenv(env_name)
            if env_value is not None:
                values[key] = env_value
        return cls.from_mapping(values)

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "StockroomConfig":
        """Build config from plain string settings.

        Args:
            values: Setting values keyed by config field name.

        Returns:
            A validated config object.

        Raises:
            StockroomConfigError: If a value is invalid.
        """
        publish_value = values.get("publish_dir", str(DEFAULT_PUBLISH_DIR)).strip()
        return cls(
            raw_dir=_resolve_path(values.get("raw_dir", str(DEFAULT_RAW_DIR))),
            output_dir=_resolve_path(values.get("output_dir", str(DEFAULT_OUTPUT_DIR))),
            publish_dir=_resolve_path(publish_value) if publish_value else None,
            index_path_prefix=values.get(
                "index_path_prefix", DEFAULT_INDEX_PATH_PREFIX
            ).strip("/"),
            chain_scope=_parse_chain_scope(values.get("chain_scope", CHAIN_SCOPE_GLOBAL)),
            log_level=values.get("log_level", DEFAULT_LOG_LEVEL).strip().upper(),
        )


def load_config_file(config_path: Path) -> dict[str, str]:
    """Load settings from a YAML config file.

    Args:
        config_path: Path to YAML file with a top-level mapping.

    Returns:
        Setting values keyed by config field name.

    Raises:
        StockroomConfigError: If the file is missing, malformed, or has unknown keys.
    """
    config_file = config_path.expanduser().resolve()
    if not config_file.exists():
        raise StockroomConfigError(
            f"Config file does not exist at {config_file}. "
            f"Fix {CONFIG_FILE_ENV} or create the file."
        )
    try:
        payload = cast(object, yaml.safe_load(config_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise StockroomConfigError(
            f"Failed to read config file {config_file}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise StockroomConfigError(
            f"Failed to parse YAML config at {config_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise StockroomConfigError(
            f"Invalid config file {config_file}: expected mapping, "
            f"got {type(payload).__name__}."
        )
    unknown_keys = sorted(str(key) for key in payload if key not in _ENV_KEYS)
    if unknown_keys:
        raise StockroomConfigError(
            f"Unsupported keys in config file {config_file}: {', '.join(unknown_keys)}. "
            f"Allowed keys: {', '.join(sorted(_ENV_KEYS))}."
        )
    return {str(key): "" if value is None else str(value) for key, value in payload.items()}


def _resolve_path(raw_value: str) -> Path:
    return Path(raw_value.strip()).expanduser().resolve()


def _parse_chain_scope(raw_value: str) -> str:
    """Parse the report chain scope setting.

    Args:
        raw_value: Raw setting value.

    Returns:
        Normalized chain scope.

    Raises:
        StockroomConfigError: If the scope is unsupported.
    """
    scope = raw_value.strip().lower()
    if scope not in SUPPORTED_CHAIN_SCOPES:
        raise StockroomConfigError(
            f"Invalid STOCKROOM_CHAIN_SCOPE value '{raw_value}'. "
            f"Expected one of: {', '.join(SUPPORTED_CHAIN_SCOPES)}."
        )
    return scope
