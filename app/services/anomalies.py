"""
Anomaly Detector

Flags trend points that deviate from the mean of the six periods before
them:
- avg labour cost per job moved by 15% or more (up = warn, down = info)
- overtime share of labour rose by 10 percentage points or more (warn)

Only the most recent anomalies are returned, newest first.
"""

from typing import List, Sequence

from app.models.enums import AnomalyMetric, AnomalySeverity
from app.models.labour_models import Anomaly, TrendPoint
from app.services.labour_calculator import delta_pct, mean


BASELINE_PERIODS = 6
COST_DELTA_THRESHOLD_PCT = 15.0
OVERTIME_JUMP_THRESHOLD_PTS = 10.0
MAX_ANOMALIES = 5


def _cost_anomaly(point: TrendPoint, baseline: float) -> Anomaly:
    change = delta_pct(baseline, point.avg_labour_cost_per_job)
    start = point.period_start.isoformat()
    return Anomaly(
        id=f"cost-{start}",
        label=f"{start}: {change:+.0f}% vs {BASELINE_PERIODS}-period avg",
        period_start=point.period_start,
        period_end=point.period_end,
        severity=AnomalySeverity.WARN if change > 0 else AnomalySeverity.INFO,
        metric=AnomalyMetric.AVG_LABOUR_COST_PER_JOB,
        delta_pct=change,
        baseline=baseline,
        current=point.avg_labour_cost_per_job,
    )


def _overtime_anomaly(point: TrendPoint, baseline: float) -> Anomaly:
    jump = point.overtime_pct_of_labour - baseline
    start = point.period_start.isoformat()
    return Anomaly(
        id=f"ot-{start}",
        label=f"Overtime {start}: +{jump:.0f}% of labour vs {BASELINE_PERIODS}-period avg",
        period_start=point.period_start,
        period_end=point.period_end,
        severity=AnomalySeverity.WARN,
        metric=AnomalyMetric.OVERTIME_PCT,
        delta_pct=jump,
        baseline=baseline,
        current=point.overtime_pct_of_labour,
    )


def detect_anomalies(trend: Sequence[TrendPoint], max_count: int = MAX_ANOMALIES) -> List[Anomaly]:
    """Scan every point that has a full baseline window behind it"""
    anomalies: List[Anomaly] = []

    for i in range(BASELINE_PERIODS, len(trend)):
        point = trend[i]
        window = trend[i - BASELINE_PERIODS:i]

        baseline_cost = mean(p.avg_labour_cost_per_job for p in window)
        if abs(delta_pct(baseline_cost, point.avg_labour_cost_per_job)) >= COST_DELTA_THRESHOLD_PCT:
            anomalies.append(_cost_anomaly(point, baseline_cost))

        baseline_ot = mean(p.overtime_pct_of_labour for p in window)
        if point.overtime_pct_of_labour - baseline_ot >= OVERTIME_JUMP_THRESHOLD_PTS:
            anomalies.append(_overtime_anomaly(point, baseline_ot))

    # stable: a period's cost anomaly stays ahead of its overtime anomaly
    anomalies.sort(key=lambda a: a.period_start, reverse=True)
    return anomalies[:max_count]
