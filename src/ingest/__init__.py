"""Raw export ingestion and rebuild orchestration.

This package reads dated inventory CSV exports into canonical item sets
and drives the full rebuild from raw files to published artifacts.
"""
