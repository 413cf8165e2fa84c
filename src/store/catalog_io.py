"""Index and artifact JSON persistence helpers.

This module isolates JSON file IO and index parsing.
It keeps artifact store orchestration focused on business flow.
"""

from __future__ import annotations

from decimal import Decimal
import json
from pathlib import Path
import re
from uuid import uuid4

from core.errors import MissingPriorArtifactError, StockroomStoreError
from core.types import IndexEntry
from store.record_payload import index_entry_from_payload


def read_json_file(payload_path: Path) -> object:
    """Read one JSON artifact, parsing decimals exactly.

    Args:
        payload_path: Artifact path.

    Returns:
        Parsed JSON payload with non-integral numbers as ``Decimal``.

    Raises:
        MissingPriorArtifactError: If the file does not exist.
        StockroomStoreError: If the file is unreadable or malformed.
    """
    try:
        text = payload_path.read_text(encoding="utf-8")
    except FileNotFoundError as error:
        raise MissingPriorArtifactError(
            f"Missing artifact at {payload_path}. It may have been removed by hand."
        ) from error
    except OSError as error:
        raise StockroomStoreError(f"Failed to read artifact {payload_path}: {error}.") from error
    try:
        return json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as error:
        raise StockroomStoreError(
            f"Failed to parse JSON at {payload_path}: {error.msg}. "
            "Delete the artifact directory and rebuild from raw exports."
        ) from error


def write_json_file(payload_path: Path, payload: object) -> None:
    """Write one JSON artifact with traceable errors.

    Args:
        payload_path: Destination path.
        payload: JSON-safe payload.

    Raises:
        StockroomStoreError: If the write fails.
    """
    try:
        payload_path.write_text(encode_json(payload) + "\n", encoding="utf-8")
    except OSError as error:
        raise StockroomStoreError(f"Failed to write artifact {payload_path}: {error}.") from error


def read_index_file(index_path: Path) -> list[IndexEntry]:
    """Read and validate the snapshot index.

    Args:
        index_path: Index JSON path.

    Returns:
        Index entries in file order.

    Raises:
        MissingPriorArtifactError: If the index does not exist.
        StockroomStoreError: If the index is malformed.
    """
    payload = read_json_file(index_path)
    if not isinstance(payload, list):
        raise StockroomStoreError(
            f"Failed to parse snapshot index at {index_path}: "
            "expected JSON array at top level. Rebuild artifacts from raw exports."
        )
    return [index_entry_from_payload(item, index_path) for item in payload]


def encode_json(payload: object) -> str:
    """Serialize a payload with ``Decimal`` values as exact JSON numbers.

    The stdlib encoder only knows binary floats, so decimals are first
    written as uniquely tagged strings and the tags are then unquoted.

    Args:
        payload: JSON-safe payload that may contain ``Decimal`` values.

    Returns:
        Indented JSON text without a trailing newline.
    """
    tag = f"decimal-{uuid4().hex}:"

    def _tag_decimal(value: object) -> str:
        if isinstance(value, Decimal) and value.is_finite():
            return f"{tag}{format(value, 'f')}"
        raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")

    text = json.dumps(payload, indent=2, ensure_ascii=False, default=_tag_decimal)
    return re.sub(rf'"{re.escape(tag)}(-?[0-9]+(?:\.[0-9]+)?)"', r"\1", text)
