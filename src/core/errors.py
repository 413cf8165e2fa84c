"""Stockroom exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class StockroomError(Exception):
    """Base exception for all Stockroom failures."""


class StockroomConfigError(StockroomError):
    """Raised for invalid runtime configuration."""


class StockroomIngestError(StockroomError):
    """Raised for raw input reading and parsing failures."""


class FilenamePatternError(StockroomIngestError):
    """Raised when a raw file name does not encode a valid snapshot date."""


class ParseError(StockroomIngestError):
    """Raised when a raw file yields no usable inventory rows."""


class StockroomStoreError(StockroomError):
    """Raised for artifact store read and write failures."""


class MissingPriorArtifactError(StockroomStoreError):
    """Raised when a previously indexed snapshot body cannot be loaded."""


class StockroomStateError(StockroomError):
    """Raised for invalid rebuild state transitions."""
