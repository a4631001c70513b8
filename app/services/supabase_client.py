"""
Supabase Record Store

Bulk reads of workers, jobs, time entries and job types for one company.
No date filtering is pushed to the store; the trend engine filters by
period itself.
"""

import logging
import os
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from supabase import create_client, Client

from app.models.enums import TimeEntryCategory
from app.models.records import JobRecord, JobTypeRecord, TimeRecord, WorkerRecord

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000


class RecordStoreError(RuntimeError):
    """Record store could not be read"""


# ============== Row Mappers ==============

def _to_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Safely convert value to float."""
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def _to_date(value: Any) -> Optional[date]:
    """Parse YYYY-MM-DD (or an ISO timestamp) to a date."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _to_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; a trailing Z is treated as UTC."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def worker_from_row(row: Dict) -> WorkerRecord:
    return WorkerRecord(
        id=str(row["id"]),
        name=row.get("name") or "Unknown",
        hourly_rate=max(0.0, _to_float(row.get("hourly_rate"))),
    )


def job_type_from_row(row: Dict) -> JobTypeRecord:
    return JobTypeRecord(id=str(row["id"]), name=row.get("name") or "Unknown")


def job_from_row(row: Dict) -> JobRecord:
    type_id = row.get("type_id")
    return JobRecord(
        id=str(row["id"]),
        name=row.get("name") or "",
        type_id=str(type_id) if type_id else None,
        revenue=_to_float(row.get("revenue"), None),
        job_date=_to_date(row.get("date")),
        start_date=_to_date(row.get("start_date")),
        end_date=_to_date(row.get("end_date")),
        hours_per_day=_to_float(row.get("hours_per_day"), None),
        hours_expected=_to_float(row.get("hours_expected"), None),
    )


def time_record_from_row(row: Dict) -> Optional[TimeRecord]:
    """Map a time_entries row; rows without usable timestamps are dropped."""
    start = _to_datetime(row.get("start"))
    end = _to_datetime(row.get("end"))
    if start is None or end is None:
        return None
    # naive and aware timestamps cannot be subtracted
    if (start.tzinfo is None) != (end.tzinfo is None):
        return None
    return TimeRecord(
        id=str(row["id"]),
        worker_id=str(row.get("worker_id")),
        job_id=str(row.get("job_id")),
        start=start,
        end=end,
        break_minutes=_to_float(row.get("breaks")),
        is_overtime=bool(row.get("is_overtime")),
        category=TimeEntryCategory.from_value(row.get("category") or "billable"),
    )


# ============== Store ==============

class RecordStore:
    """Reads tenant records from Supabase"""

    def __init__(self, client: Optional[Client] = None):
        if client is None:
            supabase_url = os.getenv("SUPABASE_URL")
            supabase_key = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY")

            if not supabase_url or not supabase_key:
                raise ValueError("SUPABASE_URL and SUPABASE_KEY/SUPABASE_SERVICE_KEY must be set")

            client = create_client(supabase_url, supabase_key)

        self.supabase: Client = client

    def _fetch_all(self, table: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict]:
        """
        Page through a table.

        Filters with a list value become `in` filters, scalars become `eq`;
        None values are not applied.
        """
        rows: List[Dict] = []
        offset = 0
        try:
            while True:
                query = self.supabase.table(table).select("*")
                for column, value in (filters or {}).items():
                    if value is None:
                        continue
                    if isinstance(value, (list, tuple)):
                        query = query.in_(column, list(value))
                    else:
                        query = query.eq(column, value)
                result = query.range(offset, offset + PAGE_SIZE - 1).execute()
                page = result.data or []
                rows.extend(page)
                if len(page) < PAGE_SIZE:
                    break
                offset += PAGE_SIZE
        except Exception as e:
            logger.error(f"[Record Store] Error reading {table}: {e}")
            raise RecordStoreError(f"Failed to read {table}") from e
        return rows

    def get_worker_rows(self, company_id: Optional[str] = None) -> List[Dict]:
        return self._fetch_all("workers", {"company_id": company_id})

    def get_job_rows(self, company_id: Optional[str] = None) -> List[Dict]:
        return self._fetch_all("jobs", {"company_id": company_id})

    def get_job_type_rows(self, company_id: Optional[str] = None) -> List[Dict]:
        return self._fetch_all("job_types", {"company_id": company_id})

    def get_time_entry_rows(self, worker_ids: Optional[List[str]] = None) -> List[Dict]:
        """
        Time entries carry no company column; scope them through the
        company's workers when a worker list is given.
        """
        if worker_ids is not None and not worker_ids:
            return []
        return self._fetch_all("time_entries", {"worker_id": worker_ids})

    def get_all_rows(self, company_id: Optional[str] = None) -> Dict[str, List[Dict]]:
        """Raw rows for every table the trend engine reads"""
        if not company_id:
            logger.warning("[Record Store] No company_id given, reading records for all companies")
        workers = self.get_worker_rows(company_id)
        worker_ids = [str(w["id"]) for w in workers] if company_id else None
        rows = {
            "workers": workers,
            "jobs": self.get_job_rows(company_id),
            "job_types": self.get_job_type_rows(company_id),
            "time_entries": self.get_time_entry_rows(worker_ids),
        }
        logger.info(
            f"[Record Store] Loaded company={company_id or 'all'}: "
            + ", ".join(f"{k}={len(v)}" for k, v in rows.items())
        )
        return rows


# Singleton instance
_record_store: Optional[RecordStore] = None


def get_record_store() -> RecordStore:
    """Get or create record store"""
    global _record_store
    if _record_store is None:
        _record_store = RecordStore()
    return _record_store
