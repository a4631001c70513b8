"""
KPI Calculator

Headline metrics for the current period with deltas vs the previous one.
A missing period counts as all-zero, so an empty trend yields zeroed KPIs.
"""

from typing import Optional

from app.models.labour_models import KPIBlock, KpiDelta, TrendPoint
from app.services.labour_calculator import delta_pct


def _kpi(previous: float, current: float, with_abs: bool = False) -> KpiDelta:
    return KpiDelta(
        value=current,
        delta_pct=delta_pct(previous, current),
        delta_abs=(current - previous) if with_abs else None,
    )


def build_kpis(current: Optional[TrendPoint], previous: Optional[TrendPoint]) -> KPIBlock:
    """Compare the last two trend points"""
    def metric(point: Optional[TrendPoint], name: str) -> float:
        return float(getattr(point, name)) if point is not None else 0.0

    return KPIBlock(
        avg_labour_cost_per_job=_kpi(
            metric(previous, "avg_labour_cost_per_job"),
            metric(current, "avg_labour_cost_per_job"),
            with_abs=True,
        ),
        jobs_count=_kpi(metric(previous, "jobs_count"), metric(current, "jobs_count")),
        overtime_cost=_kpi(metric(previous, "overtime_cost"), metric(current, "overtime_cost")),
        overtime_pct_of_labour=_kpi(
            metric(previous, "overtime_pct_of_labour"),
            metric(current, "overtime_pct_of_labour"),
        ),
        avg_actual_hours_per_job=_kpi(
            metric(previous, "avg_actual_hours_per_job"),
            metric(current, "avg_actual_hours_per_job"),
        ),
    )
