"""
Input Records

Read-only snapshots of the rows owned by the record store.
The engine never mutates these; every calculation builds fresh structures.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple

from app.models.enums import TimeEntryCategory


@dataclass(frozen=True)
class WorkerRecord:
    """Worker with hourly rate (currency units per hour)"""
    id: str
    name: str
    hourly_rate: float = 0.0


@dataclass(frozen=True)
class JobTypeRecord:
    """Job type lookup row"""
    id: str
    name: str


@dataclass(frozen=True)
class JobRecord:
    """
    Scheduled job.

    Single-day jobs carry `job_date` (and usually `hours_expected`);
    multi-day jobs carry `start_date`/`end_date` and `hours_per_day`.
    """
    id: str
    name: str
    type_id: Optional[str] = None
    revenue: Optional[float] = None
    job_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    hours_per_day: Optional[float] = None
    hours_expected: Optional[float] = None

    @property
    def schedule_date(self) -> Optional[date]:
        """Date the job counts towards: single date, else start of range"""
        return self.job_date or self.start_date


@dataclass(frozen=True)
class TimeRecord:
    """
    Clocked time for one worker on one job.

    `category` is carried through from the store for display only; cost
    and hours are the same for every category.
    """
    id: str
    worker_id: str
    job_id: str
    start: datetime
    end: datetime
    break_minutes: float = 0.0
    is_overtime: bool = False
    category: TimeEntryCategory = TimeEntryCategory.BILLABLE

    @property
    def start_date(self) -> date:
        return self.start.date()


@dataclass(frozen=True)
class RecordSnapshot:
    """All records for one tenant at one point in time"""
    workers: Tuple[WorkerRecord, ...] = ()
    jobs: Tuple[JobRecord, ...] = ()
    time_records: Tuple[TimeRecord, ...] = ()
    job_types: Tuple[JobTypeRecord, ...] = ()
    version: str = "static"
    loaded_at: datetime = field(default_factory=datetime.now, compare=False)

    @property
    def record_count(self) -> int:
        return len(self.workers) + len(self.jobs) + len(self.time_records) + len(self.job_types)
