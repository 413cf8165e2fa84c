"""Core constants used across Stockroom modules.

This module centralizes file names, patterns, and numeric rules.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

DEFAULT_RAW_DIR = Path("data") / "raw"
DEFAULT_OUTPUT_DIR = Path("data") / "artifacts"
DEFAULT_PUBLISH_DIR = Path("inventory") / "public" / "data"
DEFAULT_INDEX_PATH_PREFIX = "data"
DEFAULT_LOG_LEVEL = "INFO"
SNAPSHOTS_DIR_NAME = "snapshots"
REPORTS_DIR_NAME = "reports"
INDEX_FILE_NAME = "index.json"
CURRENT_SNAPSHOT_FILE_NAME = "latest.json"
CURRENT_REPORT_FILE_NAME = "latest-report.json"
STAGING_DIR_PREFIX = ".staging-"
BACKUP_DIR_PREFIX = ".previous-"
RAW_FILE_EXTENSION = ".csv"
SNAPSHOT_FILE_PATTERN = r"stock-items_(\d{2})_(\d{2})_(\d{4})\.csv$"
NAME_COLUMN = "name"
UNIT_COLUMN = "unit"
QUANTITY_COLUMN = "quantity"
REQUIRED_COLUMNS = (NAME_COLUMN, UNIT_COLUMN, QUANTITY_COLUMN)
GROUPING_SEPARATOR = ","
QUANTITY_PLACES = 3
QUANTITY_EXPONENT = Decimal(1).scaleb(-QUANTITY_PLACES)
QUANTITY_ROUNDING = ROUND_HALF_UP
QUANTITY_MAX_DIGITS = 28
QUANTITY_ARITHMETIC_DIGITS = 64
HASH_ALGORITHM = "sha256"
COLLISION_SUFFIX_LENGTH = 8
UPLOADED_AT_FORMAT = "%Y-%m-%dT%H:%M:%S"
FILE_STAMP_FORMAT = "%Y%m%dT%H%M%SZ"
CHAIN_SCOPE_GLOBAL = "global"
CHAIN_SCOPE_SOURCE = "source"
SUPPORTED_CHAIN_SCOPES = (CHAIN_SCOPE_GLOBAL, CHAIN_SCOPE_SOURCE)
