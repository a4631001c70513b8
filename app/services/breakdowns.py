"""
Breakdown Computer

Three groupings used to explain the current period's labour cost:
- By job type: jobs scheduled in the current period, worst impact first
- By technician: time records in the current period, highest overtime first
- Estimate vs actual: every period in the lookback, chronological

Impact cost is hours over estimate priced at the blended hourly rate.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.models.labour_models import (
    BreakdownRowEstimateVsActual,
    BreakdownRowJobType,
    BreakdownRowTechnician,
)
from app.models.enums import Granularity
from app.models.records import JobRecord
from app.services.labour_calculator import (
    delta_pct,
    elapsed_hours,
    estimated_hours,
    impact_cost,
    job_type_name,
    labour_cost,
    overtime_cost,
    safe_div,
    variance_pct,
)
from app.services.periods import Period
from app.services.record_index import RecordIndex


# ============== Grouping Keys ==============

@dataclass(frozen=True)
class JobTypeKey:
    """Job-type grouping key; type_id None is the Unspecified bucket"""
    type_id: Optional[str] = None

    @classmethod
    def for_job(cls, job: JobRecord) -> "JobTypeKey":
        return cls(job.type_id or None)

    @property
    def is_unspecified(self) -> bool:
        return self.type_id is None


UNSPECIFIED = JobTypeKey()


# ============== Accumulators ==============

@dataclass
class JobTypeTotals:
    cost: float = 0.0
    jobs: int = 0
    overtime_hours: float = 0.0
    est_hours: float = 0.0
    actual_hours: float = 0.0

    @property
    def avg_cost(self) -> float:
        return safe_div(self.cost, self.jobs)


@dataclass
class TechnicianTotals:
    cost: float = 0.0
    actual_hours: float = 0.0
    overtime_hours: float = 0.0
    overtime_cost: float = 0.0
    # insertion-ordered set of job ids
    job_ids: Dict[str, None] = field(default_factory=dict)

    @property
    def avg_cost(self) -> float:
        return safe_div(self.cost, len(self.job_ids))


# ============== By Job Type ==============

def _job_type_totals(index: RecordIndex, period: Period) -> Dict[JobTypeKey, JobTypeTotals]:
    """Group the period's scheduled jobs (and all their time records) by type"""
    groups: Dict[JobTypeKey, JobTypeTotals] = {}
    for job in index.jobs_in(period):
        row = groups.setdefault(JobTypeKey.for_job(job), JobTypeTotals())
        for record in index.records_for_job(job.id):
            worker = index.worker(record.worker_id)
            if not worker:
                continue
            hours = elapsed_hours(record)
            row.cost += labour_cost(record, worker)
            row.actual_hours += hours
            if record.is_overtime:
                row.overtime_hours += hours
        row.jobs += 1
        row.est_hours += estimated_hours(job)
    return groups


def build_by_job_type(
    index: RecordIndex,
    current: Optional[Period],
    previous: Optional[Period]
) -> List[BreakdownRowJobType]:
    if current is None:
        return []

    groups = _job_type_totals(index, current)
    previous_groups = _job_type_totals(index, previous) if previous else {}

    rows = []
    for key, row in groups.items():
        avg = row.avg_cost
        prev = previous_groups.get(key)
        prev_avg = prev.avg_cost if prev and prev.jobs > 0 else avg
        variance = row.actual_hours - row.est_hours

        rows.append(BreakdownRowJobType(
            job_type_id=key.type_id,
            job_type=job_type_name(key.type_id, index.job_type_names),
            avg_labour_cost_per_job=avg,
            delta_pct=delta_pct(prev_avg, avg),
            jobs_count=row.jobs,
            overtime_hours=row.overtime_hours,
            est_vs_actual_hours_variance=variance,
            impact_cost=impact_cost(variance, index.blended_rate),
        ))

    return sorted(rows, key=lambda r: r.impact_cost, reverse=True)


# ============== By Technician ==============

def _technician_totals(index: RecordIndex, period: Period) -> Dict[str, TechnicianTotals]:
    """Group the period's time records by worker"""
    groups: Dict[str, TechnicianTotals] = {}
    for record in index.records_in(period):
        worker = index.worker(record.worker_id)
        if not worker:
            continue
        row = groups.setdefault(worker.id, TechnicianTotals())
        hours = elapsed_hours(record)
        row.cost += labour_cost(record, worker)
        row.actual_hours += hours
        row.job_ids.setdefault(record.job_id, None)
        if record.is_overtime:
            row.overtime_hours += hours
            row.overtime_cost += overtime_cost(record, worker)
    return groups


def build_by_technician(
    index: RecordIndex,
    current: Optional[Period],
    previous: Optional[Period]
) -> List[BreakdownRowTechnician]:
    if current is None:
        return []

    groups = _technician_totals(index, current)
    previous_groups = _technician_totals(index, previous) if previous else {}

    rows = []
    for worker_id, row in groups.items():
        worker = index.worker(worker_id)
        avg = row.avg_cost
        prev = previous_groups.get(worker_id)
        prev_avg = prev.avg_cost if prev and prev.job_ids else avg

        est_hours = 0.0
        for job_id in row.job_ids:
            job = index.job(job_id)
            if job:
                est_hours += estimated_hours(job)
        variance = row.actual_hours - est_hours

        rows.append(BreakdownRowTechnician(
            technician_id=worker_id,
            technician_name=worker.name,
            avg_labour_cost_per_job=avg,
            delta_pct=delta_pct(prev_avg, avg),
            jobs_count=len(row.job_ids),
            overtime_hours=row.overtime_hours,
            overtime_cost=row.overtime_cost,
            est_vs_actual_hours_variance=variance,
            impact_cost=impact_cost(variance, index.blended_rate),
        ))

    return sorted(rows, key=lambda r: r.overtime_cost, reverse=True)


# ============== Estimate vs Actual ==============

def build_est_vs_actual(
    index: RecordIndex,
    granularity: Granularity
) -> List[BreakdownRowEstimateVsActual]:
    """One row per period; actual hours cover every record of the period's jobs"""
    rows = []
    for period in index.periods:
        est_hours = 0.0
        actual_hours = 0.0
        for job in index.jobs_in(period):
            est_hours += estimated_hours(job)
            actual_hours += sum(elapsed_hours(r) for r in index.records_for_job(job.id))

        variance = actual_hours - est_hours
        rows.append(BreakdownRowEstimateVsActual(
            period_label=period.label(granularity),
            period_start=period.start,
            period_end=period.end,
            est_hours=est_hours,
            actual_hours=actual_hours,
            variance_hours=variance,
            variance_pct=variance_pct(variance, est_hours),
            impact_cost=impact_cost(variance, index.blended_rate),
        ))
    return rows
