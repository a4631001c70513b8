"""
Profit Leakage Estimator

Excess labour cost in the current period versus a target (or the trend's
own average), projected over the period's job volume, with a one-line
attribution to the worst job type and the highest-overtime technicians.
"""

from typing import Optional, Sequence

from app.models.enums import currency_symbol
from app.models.labour_models import (
    BreakdownRowJobType,
    BreakdownRowTechnician,
    ProfitLeakage,
    TrendPoint,
)
from app.services.labour_calculator import mean


TOP_TECHNICIANS = 2


def format_money(amount: float, currency: str) -> str:
    """Whole units with thousands separators, e.g. £1,234"""
    return f"{currency_symbol(currency)}{round(amount):,}"


def primary_driver(by_job_type: Sequence[BreakdownRowJobType], currency: str) -> str:
    top = by_job_type[0] if by_job_type else None
    if top is None or top.impact_cost <= 0:
        return "Labour cost in line with baseline."
    return f"{top.job_type} driving {format_money(top.impact_cost, currency)} variance vs estimate."


def tech_impact(by_technician: Sequence[BreakdownRowTechnician], currency: str) -> str:
    top = [t for t in by_technician if t.overtime_cost > 0][:TOP_TECHNICIANS]
    if not top:
        return "No significant tech impact."
    return "; ".join(
        f"{t.technician_name} (OT: {format_money(t.overtime_cost, currency)})" for t in top
    )


def estimate_profit_leakage(
    current: Optional[TrendPoint],
    trend: Sequence[TrendPoint],
    target_labour_cost_per_job: Optional[float],
    by_job_type: Sequence[BreakdownRowJobType],
    by_technician: Sequence[BreakdownRowTechnician],
    currency: str = "GBP"
) -> ProfitLeakage:
    """
    leakage = max(0, (current avg cost/job - baseline) x current jobs)

    The baseline is the caller's target when given, else the mean avg
    cost/job over the whole trend.
    """
    if current is None or current.jobs_count == 0:
        return ProfitLeakage(value=0.0, primary_driver="No jobs in period.", tech_impact="—")

    if target_labour_cost_per_job is not None:
        baseline = target_labour_cost_per_job
    else:
        baseline = mean(p.avg_labour_cost_per_job for p in trend)

    value = max(0.0, (current.avg_labour_cost_per_job - baseline) * current.jobs_count)

    return ProfitLeakage(
        value=value,
        primary_driver=primary_driver(by_job_type, currency),
        tech_impact=tech_impact(by_technician, currency),
    )
