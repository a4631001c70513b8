"""
Record Index

Indexes a snapshot once (by job, by worker, by period) so the trend,
breakdown and estimate-vs-actual passes look rows up instead of re-scanning
the full record set for every grouping.
"""

from bisect import bisect_right
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from app.models.records import JobRecord, RecordSnapshot, TimeRecord, WorkerRecord
from app.services.labour_calculator import blended_hourly_rate, worker_lookup
from app.services.periods import Period


class RecordIndex:
    """Read-only lookup tables over one snapshot"""

    def __init__(self, snapshot: RecordSnapshot, periods: Sequence[Period] = ()):
        self.snapshot = snapshot
        self.periods: List[Period] = list(periods)
        self.workers: Dict[str, WorkerRecord] = worker_lookup(snapshot.workers)
        self.jobs: Dict[str, JobRecord] = {j.id: j for j in snapshot.jobs}
        self.job_type_names: Dict[str, str] = {t.id: t.name for t in snapshot.job_types}
        self.blended_rate: float = blended_hourly_rate(snapshot.workers)

        self._period_starts = [p.start for p in self.periods]

        records_by_job: Dict[str, List[TimeRecord]] = defaultdict(list)
        records_by_period: Dict[Period, List[TimeRecord]] = defaultdict(list)
        for record in snapshot.time_records:
            records_by_job[record.job_id].append(record)
            period = self.period_for(record.start_date)
            if period is not None:
                records_by_period[period].append(record)

        jobs_by_period: Dict[Period, List[JobRecord]] = defaultdict(list)
        for job in snapshot.jobs:
            period = self.period_for(job.schedule_date)
            if period is not None:
                jobs_by_period[period].append(job)

        self.records_by_job = dict(records_by_job)
        self._records_by_period = dict(records_by_period)
        self._jobs_by_period = dict(jobs_by_period)

    def period_for(self, day: Optional[date]) -> Optional[Period]:
        """Indexed period containing day, if any"""
        if day is None or not self.periods:
            return None
        i = bisect_right(self._period_starts, day) - 1
        if i >= 0 and self.periods[i].contains(day):
            return self.periods[i]
        return None

    def records_in(self, period: Period) -> List[TimeRecord]:
        """Time records whose start falls inside an indexed period"""
        return self._records_by_period.get(period, [])

    def jobs_in(self, period: Period) -> List[JobRecord]:
        """Jobs whose scheduling date falls inside an indexed period"""
        return self._jobs_by_period.get(period, [])

    def records_for_job(self, job_id: str) -> List[TimeRecord]:
        return self.records_by_job.get(job_id, [])

    def worker(self, worker_id: str) -> Optional[WorkerRecord]:
        return self.workers.get(worker_id)

    def job(self, job_id: str) -> Optional[JobRecord]:
        return self.jobs.get(job_id)
