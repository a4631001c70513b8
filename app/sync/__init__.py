"""
Record Snapshot Module

Loads tenant records from the Supabase record store into immutable
snapshots for the labour cost trend engine.
"""

from .snapshot_loader import (
    SnapshotLoader,
    get_snapshot_loader,
    snapshot_from_rows,
    snapshot_version,
)

__all__ = [
    "SnapshotLoader",
    "get_snapshot_loader",
    "snapshot_from_rows",
    "snapshot_version",
]
