"""
Labour Cost Calculator Service

Record-level arithmetic shared by every trend component:
- Elapsed hours per time record (breaks deducted, floored at 0)
- Labour cost with overtime premium (canonical: hours x rate x 1.5)
- Blended hourly rate (unweighted mean across workers)
- Estimated hours per job (single-day and multi-day)
- Guarded ratios: every division returns 0 instead of NaN/Infinity

All monetary values are in currency units (not cents).
"""

import math
from typing import Dict, Iterable, Optional

from app.models.records import JobRecord, TimeRecord, WorkerRecord


OT_MULTIPLIER = 1.5


# ============== Guarded Arithmetic ==============

def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safe division with default."""
    if not denominator:
        return default
    result = numerator / denominator
    return result if math.isfinite(result) else default


def delta_pct(previous: float, current: float) -> float:
    """
    Percentage change from previous to current.

    A zero previous value has no meaningful ratio; by convention the change
    is reported as 100 when current is positive and 0 otherwise.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return safe_div((current - previous) * 100, previous)


def mean(values: Iterable[float]) -> float:
    values = list(values)
    return safe_div(sum(values), len(values))


# ============== Time Records ==============

def elapsed_hours(record: TimeRecord) -> float:
    """Clocked hours minus breaks, never negative"""
    hours = (record.end - record.start).total_seconds() / 3600 - (record.break_minutes or 0) / 60
    return max(0.0, hours)


def labour_cost(record: TimeRecord, worker: WorkerRecord) -> float:
    """Cost of one record, overtime charged at OT_MULTIPLIER"""
    multiplier = OT_MULTIPLIER if record.is_overtime else 1.0
    return elapsed_hours(record) * worker.hourly_rate * multiplier


def overtime_cost(record: TimeRecord, worker: WorkerRecord) -> float:
    """Full overtime cost (premium included) for a flagged record, else 0"""
    if not record.is_overtime:
        return 0.0
    return elapsed_hours(record) * worker.hourly_rate * OT_MULTIPLIER


# ============== Workers ==============

def blended_hourly_rate(workers: Iterable[WorkerRecord]) -> float:
    """
    Unweighted mean hourly rate across all known workers.

    Used as a cost proxy for hour variance; it is not weighted by hours
    actually worked.
    """
    return mean(w.hourly_rate for w in workers)


def impact_cost(variance_hours: float, blended_rate: float) -> float:
    """Cost of hours over estimate; under-runs cost nothing"""
    return max(variance_hours, 0.0) * blended_rate


# ============== Jobs ==============

def estimated_hours(job: JobRecord) -> float:
    """
    Estimated hours for a job.

    Flat hours_expected wins; multi-day jobs multiply hours_per_day by the
    inclusive day span; a bare hours_per_day counts once.
    """
    if job.hours_expected is not None:
        return max(0.0, float(job.hours_expected))
    if job.hours_per_day is None:
        return 0.0
    if job.start_date and job.end_date:
        days = max(1, (job.end_date - job.start_date).days + 1)
        return max(0.0, float(job.hours_per_day)) * days
    return max(0.0, float(job.hours_per_day))


def job_revenue(job: JobRecord) -> float:
    return max(0.0, float(job.revenue or 0))


# ============== Derived Ratios ==============

def overtime_pct_of_labour(overtime: float, total_labour: float) -> float:
    """Overtime cost as a percentage of total labour cost"""
    return safe_div(overtime * 100, total_labour)


def revenue_per_labour_hour(revenue: float, hours: float) -> float:
    """RPLH"""
    return safe_div(revenue, hours)


def variance_pct(variance_hours: float, est_hours: float) -> float:
    return safe_div(variance_hours * 100, est_hours)


def worker_lookup(workers: Iterable[WorkerRecord]) -> Dict[str, WorkerRecord]:
    return {w.id: w for w in workers}


def job_type_name(type_id: Optional[str], names: Dict[str, str]) -> str:
    """Display name for a job-type key"""
    if type_id is None:
        return "Unspecified"
    return names.get(type_id, "Unknown")
