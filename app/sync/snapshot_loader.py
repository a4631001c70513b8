"""
Record Snapshot Loader

Builds RecordSnapshots from the record store and keeps the latest one per
company for a short TTL.

Key rules:
- A snapshot is immutable once built; refreshing replaces it
- snapshot.version is a content hash of the raw rows, so identical data
  always yields the same version (and the same payload cache key)
"""

import hashlib
import json
import logging
import os
from datetime import datetime
from typing import Dict, List, Optional

from app.models.records import RecordSnapshot
from app.services.supabase_client import (
    RecordStore,
    get_record_store,
    job_from_row,
    job_type_from_row,
    time_record_from_row,
    worker_from_row,
)

logger = logging.getLogger(__name__)

SNAPSHOT_TTL_SECONDS = int(os.getenv("SNAPSHOT_TTL_SECONDS", "300"))


def snapshot_version(rows: Dict[str, List[Dict]]) -> str:
    """Stable content hash of the raw rows"""
    canonical = {
        table: sorted(
            (json.dumps(r, sort_keys=True, default=str) for r in table_rows)
        )
        for table, table_rows in rows.items()
    }
    digest = hashlib.sha256(json.dumps(canonical, sort_keys=True).encode("utf-8"))
    return digest.hexdigest()[:16]


def snapshot_from_rows(rows: Dict[str, List[Dict]]) -> RecordSnapshot:
    """Map raw store rows into an immutable snapshot"""
    time_records = []
    skipped = 0
    for row in rows.get("time_entries", []):
        record = time_record_from_row(row)
        if record is None:
            skipped += 1
            continue
        time_records.append(record)

    if skipped:
        logger.warning(f"[Snapshot] Skipped {skipped} time entries with unparseable timestamps")

    return RecordSnapshot(
        workers=tuple(worker_from_row(r) for r in rows.get("workers", [])),
        jobs=tuple(job_from_row(r) for r in rows.get("jobs", [])),
        time_records=tuple(time_records),
        job_types=tuple(job_type_from_row(r) for r in rows.get("job_types", [])),
        version=snapshot_version(rows),
        loaded_at=datetime.now(),
    )


class SnapshotLoader:
    """Loads and caches record snapshots per company"""

    def __init__(self, store: Optional[RecordStore] = None, ttl_seconds: int = SNAPSHOT_TTL_SECONDS):
        self._store = store
        self.ttl_seconds = ttl_seconds
        self._snapshots: Dict[Optional[str], RecordSnapshot] = {}

    @property
    def store(self) -> RecordStore:
        if self._store is None:
            self._store = get_record_store()
        return self._store

    def _is_fresh(self, snapshot: RecordSnapshot) -> bool:
        return (datetime.now() - snapshot.loaded_at).total_seconds() <= self.ttl_seconds

    def load_snapshot(self, company_id: Optional[str] = None) -> RecordSnapshot:
        """Fetch a fresh snapshot from the store and cache it"""
        rows = self.store.get_all_rows(company_id)
        snapshot = snapshot_from_rows(rows)

        previous = self._snapshots.get(company_id)
        if previous and previous.version != snapshot.version:
            logger.info(f"[Snapshot] Company {company_id}: data changed ({previous.version} -> {snapshot.version})")

        self._snapshots[company_id] = snapshot
        return snapshot

    def get_snapshot(self, company_id: Optional[str] = None, force_refresh: bool = False) -> RecordSnapshot:
        """Cached snapshot if still fresh, else reload"""
        cached = self._snapshots.get(company_id)
        if cached and not force_refresh and self._is_fresh(cached):
            return cached
        return self.load_snapshot(company_id)

    def clear(self, company_id: Optional[str] = None):
        """Drop one company's snapshot, or all"""
        if company_id:
            self._snapshots.pop(company_id, None)
        else:
            self._snapshots.clear()


# Singleton instance
_snapshot_loader: Optional[SnapshotLoader] = None


def get_snapshot_loader() -> SnapshotLoader:
    """Get or create snapshot loader"""
    global _snapshot_loader
    if _snapshot_loader is None:
        _snapshot_loader = SnapshotLoader()
    return _snapshot_loader
