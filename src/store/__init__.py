"""Artifact storage and snapshot identity layer.

This package persists immutable snapshots, reports, and the index, and
resolves which parsed files keep a previously published identity.
"""
