"""Snapshot diffing and chain assembly."""
