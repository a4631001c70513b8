"""
Trend Builder

Folds the records of each period into one TrendPoint and strings the points
into an ascending series. The last two points are the current and previous
periods used by KPIs and breakdowns.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set

from app.models.labour_models import TrendPoint
from app.services.labour_calculator import (
    elapsed_hours,
    job_revenue,
    labour_cost,
    overtime_cost,
    overtime_pct_of_labour,
    revenue_per_labour_hour,
    safe_div,
)
from app.services.periods import Period
from app.services.record_index import RecordIndex


@dataclass
class PeriodTotals:
    """Running totals for one period"""
    labour_cost: float = 0.0
    actual_hours: float = 0.0
    overtime_hours: float = 0.0
    overtime_cost: float = 0.0
    job_ids: Set[str] = field(default_factory=set)


@dataclass(frozen=True)
class TrendSeries:
    """Ascending trend plus the periods it was built from"""
    periods: List[Period]
    points: List[TrendPoint]

    @property
    def current(self) -> Optional[TrendPoint]:
        return self.points[-1] if self.points else None

    @property
    def previous(self) -> Optional[TrendPoint]:
        return self.points[-2] if len(self.points) > 1 else None

    @property
    def current_period(self) -> Optional[Period]:
        return self.periods[-1] if self.periods else None

    @property
    def previous_period(self) -> Optional[Period]:
        return self.periods[-2] if len(self.periods) > 1 else None


def aggregate_period(index: RecordIndex, period: Period) -> TrendPoint:
    """
    Aggregate one period.

    Records with an unknown worker are skipped. Job count is the number of
    jobs scheduled in the period, else the distinct jobs touched by time
    records, floored at 1.
    """
    totals = PeriodTotals()

    for record in index.records_in(period):
        worker = index.worker(record.worker_id)
        if not worker:
            continue

        hours = elapsed_hours(record)
        totals.labour_cost += labour_cost(record, worker)
        totals.actual_hours += hours
        if record.is_overtime:
            totals.overtime_hours += hours
            totals.overtime_cost += overtime_cost(record, worker)
        totals.job_ids.add(record.job_id)

    scheduled = index.jobs_in(period)
    jobs_count = max(len(scheduled) or len(totals.job_ids), 1)
    revenue = sum(job_revenue(j) for j in scheduled)

    return TrendPoint(
        period_start=period.start,
        period_end=period.end,
        total_labour_cost=totals.labour_cost,
        jobs_count=jobs_count,
        avg_labour_cost_per_job=safe_div(totals.labour_cost, jobs_count),
        total_revenue=revenue,
        overtime_cost=totals.overtime_cost,
        overtime_hours=totals.overtime_hours,
        total_actual_hours=totals.actual_hours,
        avg_actual_hours_per_job=safe_div(totals.actual_hours, jobs_count),
        overtime_pct_of_labour=overtime_pct_of_labour(totals.overtime_cost, totals.labour_cost),
        revenue_per_labour_hour=revenue_per_labour_hour(revenue, totals.actual_hours),
    )


def build_trend(index: RecordIndex) -> TrendSeries:
    """One TrendPoint per indexed period, in order"""
    points = [aggregate_period(index, period) for period in index.periods]
    return TrendSeries(periods=list(index.periods), points=points)
