"""
Labour Cost Trend Pydantic Models

Response schemas for GET /api/analytics/labour-cost-trend:
- Trend points per calendar period
- KPI deltas (current vs previous period)
- Breakdowns by job type, technician and estimate-vs-actual
- Anomalies and profit leakage

Attributes are snake_case; the wire format is camelCase.
All monetary values are in currency units (not cents).
"""

from datetime import date
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.enums import AnomalyMetric, AnomalySeverity, Granularity


class PayloadModel(BaseModel):
    """Immutable, camelCase-serialised base"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ============== Trend ==============

class TrendPoint(PayloadModel):
    """Aggregate of all matching records within one period"""
    period_start: date
    period_end: date
    total_labour_cost: float = Field(..., description="Labour cost incl. overtime premium")
    jobs_count: int = Field(..., ge=1, description="Jobs in period, floored at 1")
    avg_labour_cost_per_job: float
    total_revenue: float = 0.0
    overtime_cost: float = 0.0
    overtime_hours: float = 0.0
    total_actual_hours: float = 0.0
    avg_actual_hours_per_job: float = 0.0
    overtime_pct_of_labour: float = Field(0.0, description="Overtime cost as % of labour cost")
    revenue_per_labour_hour: float = Field(0.0, description="RPLH")


# ============== KPIs ==============

class KpiDelta(PayloadModel):
    """Headline metric with change vs previous period"""
    value: float
    delta_pct: float
    delta_abs: Optional[float] = None


class KPIBlock(PayloadModel):
    """Five headline metrics for the current period"""
    avg_labour_cost_per_job: KpiDelta
    jobs_count: KpiDelta
    overtime_cost: KpiDelta
    overtime_pct_of_labour: KpiDelta
    avg_actual_hours_per_job: KpiDelta


# ============== Breakdowns ==============

class BreakdownRowJobType(PayloadModel):
    job_type_id: Optional[str] = Field(None, description="None for the Unspecified bucket")
    job_type: str
    avg_labour_cost_per_job: float
    delta_pct: float
    jobs_count: int
    overtime_hours: float
    est_vs_actual_hours_variance: float
    impact_cost: float = Field(..., ge=0)


class BreakdownRowTechnician(PayloadModel):
    technician_id: str
    technician_name: str
    avg_labour_cost_per_job: float
    delta_pct: float
    jobs_count: int
    overtime_hours: float
    overtime_cost: float
    est_vs_actual_hours_variance: float
    impact_cost: float = Field(..., ge=0)


class BreakdownRowEstimateVsActual(PayloadModel):
    period_label: str
    period_start: date
    period_end: date
    est_hours: float
    actual_hours: float
    variance_hours: float
    variance_pct: float
    impact_cost: float = Field(..., ge=0)


class Breakdown(PayloadModel):
    by_job_type: List[BreakdownRowJobType] = []
    by_technician: List[BreakdownRowTechnician] = []
    est_vs_actual: List[BreakdownRowEstimateVsActual] = []


# ============== Anomalies ==============

class Anomaly(PayloadModel):
    """Trend point that deviates from its rolling baseline"""
    id: str
    label: str
    period_start: date
    period_end: date
    severity: AnomalySeverity
    metric: AnomalyMetric
    delta_pct: float
    baseline: float
    current: float


# ============== Payload ==============

class ProfitLeakage(PayloadModel):
    value: float = Field(..., ge=0)
    primary_driver: str
    tech_impact: str


class LabourCostTrendPayload(PayloadModel):
    """Response for /labour-cost-trend"""
    range_days: int
    granularity: Granularity
    currency: str
    target_labour_cost_per_job: Optional[float] = None
    profit_leakage: ProfitLeakage
    kpis: KPIBlock
    trend: List[TrendPoint] = []
    breakdown: Breakdown
    anomalies: List[Anomaly] = []
