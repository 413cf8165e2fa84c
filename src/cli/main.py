"""Stockroom CLI entry points.

This module exposes the rebuild command and read-only helpers.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import asdict, replace
from pathlib import Path
import sys
from typing import Any, Sequence

from core.config import StockroomConfig
from core.errors import StockroomError
from core.logging_config import configure_logging
from store.catalog_io import encode_json
from store.inventory_sdk import StockroomClient
from store.record_payload import report_to_payload


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="stockroom",
        description="Rebuild inventory snapshot history and change reports",
    )
    parser.add_argument("--raw-dir", help="Override STOCKROOM_RAW_DIR for this command")
    parser.add_argument("--output-dir", help="Override STOCKROOM_OUTPUT_DIR for this command")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("rebuild", help="Rebuild all artifacts (default)")
    _add_preview_command(subparsers)
    subparsers.add_parser("snapshots", help="List indexed snapshots")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Stockroom CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.raw_dir, args.output_dir)
        configure_logging(client.config.log_level)
        if args.command in (None, "rebuild"):
            return _run_rebuild_command(client)
        if args.command == "preview":
            return _run_preview_command(client, args)
        if args.command == "snapshots":
            return _run_snapshots_command(client)
    except StockroomError as error:
        print(f"stockroom: error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(raw_dir: str | None, output_dir: str | None) -> StockroomClient:
    """Build SDK client with optional directory overrides.

    Args:
        raw_dir: Optional raw directory override.
        output_dir: Optional output directory override.

    Returns:
        Configured SDK client.
    """
    config = StockroomConfig.from_env()
    if raw_dir:
        config = replace(config, raw_dir=Path(raw_dir).expanduser().resolve())
    if output_dir:
        config = replace(config, output_dir=Path(output_dir).expanduser().resolve())
    return StockroomClient(config)


def _run_rebuild_command(client: StockroomClient) -> int:
    """Handle rebuild command.

    Args:
        client: SDK client.

    Returns:
        Exit code.
    """
    result = client.rebuild()
    current = result.current
    print(
        f"snapshots={len(result.index_entries)}\t"
        f"reused={result.reused_count}\t"
        f"new={result.minted_count}\t"
        f"issues={len(result.issues)}\t"
        f"current={current.uploaded_at if current else '-'}"
    )
    return 0


def _run_preview_command(client: StockroomClient, args: argparse.Namespace) -> int:
    """Handle preview command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    preview = client.preview(args.file)
    payload = {
        "report": report_to_payload(preview.report),
        "issues": [asdict(issue) for issue in preview.issues],
    }
    print(encode_json(payload))
    return 0


def _run_snapshots_command(client: StockroomClient) -> int:
    """Handle snapshots command.

    Args:
        client: SDK client.

    Returns:
        Exit code.
    """
    for entry in client.list_snapshots():
        print(
            f"{entry.meta.snapshot_date}\t"
            f"{entry.meta.uploaded_at}\t"
            f"{entry.meta.source_file}\t"
            f"{entry.total_items}\t"
            f"{entry.total_quantity}\t"
            f"{'latest' if entry.latest_for_date else '-'}"
        )
    return 0


def _add_preview_command(subparsers: Any) -> None:
    """Register preview subcommand."""
    parser = subparsers.add_parser(
        "preview",
        help="Diff one CSV against the current snapshot without writing",
    )
    parser.add_argument("file", help="Raw CSV export to preview")
