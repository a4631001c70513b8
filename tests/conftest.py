"""Shared fixtures for the labour cost trend tests."""

from datetime import date, datetime, timedelta

import pytest

from app.models.records import (
    JobRecord,
    JobTypeRecord,
    RecordSnapshot,
    TimeRecord,
    WorkerRecord,
)
from app.services.labour_trend import clear_payload_cache

# Wednesday. 90-day window: 2025-12-18..2026-03-18, twelve full weeks
# from Mon 2025-12-22 to Sun 2026-03-15.
TODAY = date(2026, 3, 18)
CURRENT_WEEK = date(2026, 3, 9)
PREVIOUS_WEEK = date(2026, 3, 2)


class RecordFactory:
    """Builds records with sequential ids."""

    def __init__(self):
        self._seq = 0

    def _next(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}-{self._seq}"

    def worker(self, rate: float, name: str = None, id: str = None) -> WorkerRecord:
        worker_id = id or self._next("w")
        return WorkerRecord(id=worker_id, name=name or f"Worker {worker_id}", hourly_rate=rate)

    def job_type(self, name: str, id: str = None) -> JobTypeRecord:
        return JobTypeRecord(id=id or self._next("t"), name=name)

    def job(self, day: date = None, id: str = None, **kwargs) -> JobRecord:
        job_id = id or self._next("j")
        return JobRecord(id=job_id, name=kwargs.pop("name", f"Job {job_id}"), job_date=day, **kwargs)

    def entry(
        self,
        worker: WorkerRecord,
        job: JobRecord,
        day: date,
        hours: float,
        overtime: bool = False,
        break_minutes: float = 0,
        start_hour: int = 8
    ) -> TimeRecord:
        start = datetime(day.year, day.month, day.day, start_hour)
        return TimeRecord(
            id=self._next("e"),
            worker_id=worker.id,
            job_id=job.id,
            start=start,
            end=start + timedelta(hours=hours, minutes=break_minutes),
            break_minutes=break_minutes,
            is_overtime=overtime,
        )

    @staticmethod
    def snapshot(workers=(), jobs=(), entries=(), job_types=(), version="test") -> RecordSnapshot:
        return RecordSnapshot(
            workers=tuple(workers),
            jobs=tuple(jobs),
            time_records=tuple(entries),
            job_types=tuple(job_types),
            version=version,
        )


@pytest.fixture
def records():
    return RecordFactory()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture(autouse=True)
def _clear_payload_cache():
    clear_payload_cache()
    yield
    clear_payload_cache()


@pytest.fixture
def weekly_history(records):
    """
    Twelve weeks with one job per week: a steady baseline, then a cost
    spike with heavy overtime in the current week.
    """
    alice = records.worker(40.0, name="Alice")
    bob = records.worker(20.0, name="Bob")
    install = records.job_type("Install")
    repair = records.job_type("Repair")

    jobs, entries = [], []
    week = date(2025, 12, 22)
    while week <= CURRENT_WEEK:
        job = records.job(week + timedelta(days=1), type_id=install.id, hours_expected=8, revenue=1000)
        jobs.append(job)
        if week == CURRENT_WEEK:
            entries.append(records.entry(alice, job, job.job_date, 10))
            entries.append(records.entry(bob, job, job.job_date, 6, overtime=True, start_hour=18))
        else:
            entries.append(records.entry(alice, job, job.job_date, 8))
        week += timedelta(days=7)

    return records.snapshot(
        workers=[alice, bob],
        jobs=jobs,
        entries=entries,
        job_types=[install, repair],
    )
