"""
Labour Cost Trend Service

Composes bucketing, trend, KPIs, breakdowns, anomalies and profit leakage
into one immutable payload.

The build is a pure function of (snapshot, config, today): inputs are never
mutated and every intermediate structure is created fresh, so payloads can
be cached on the full input key.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional, Tuple

from app.models.enums import RangeDays
from app.models.labour_models import Breakdown, LabourCostTrendPayload
from app.models.records import RecordSnapshot
from app.services.anomalies import detect_anomalies
from app.services.breakdowns import build_by_job_type, build_by_technician, build_est_vs_actual
from app.services.kpi_calculator import build_kpis
from app.services.periods import build_periods
from app.services.profit_leakage import estimate_profit_leakage
from app.services.record_index import RecordIndex
from app.services.trend_builder import build_trend

logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 90
DEFAULT_CURRENCY = "GBP"


@dataclass(frozen=True)
class LabourTrendConfig:
    """Validated request parameters"""
    range_days: int = DEFAULT_RANGE_DAYS
    currency: str = DEFAULT_CURRENCY
    target_labour_cost_per_job: Optional[float] = None


def validate_trend_request(
    range_days: int,
    target_labour_cost_per_job: Optional[float] = None,
    currency: str = DEFAULT_CURRENCY
) -> LabourTrendConfig:
    """
    Boundary validation. Raises ValueError for unsupported ranges or a
    negative target; the engine itself assumes validated input.
    """
    if range_days not in RangeDays.allowed():
        raise ValueError(
            f"rangeDays must be one of {RangeDays.allowed()}, got {range_days}"
        )
    if target_labour_cost_per_job is not None and target_labour_cost_per_job < 0:
        raise ValueError("targetLabourCostPerJob must be non-negative")

    return LabourTrendConfig(
        range_days=int(range_days),
        currency=currency or DEFAULT_CURRENCY,
        target_labour_cost_per_job=target_labour_cost_per_job,
    )


def build_labour_cost_trend_payload(
    snapshot: RecordSnapshot,
    config: LabourTrendConfig,
    today: Optional[date] = None
) -> LabourCostTrendPayload:
    """Build the full labour cost trend payload for one snapshot"""
    today = today or date.today()

    periods, granularity = build_periods(config.range_days, today)
    index = RecordIndex(snapshot, periods)

    series = build_trend(index)
    kpis = build_kpis(series.current, series.previous)

    by_job_type = build_by_job_type(index, series.current_period, series.previous_period)
    by_technician = build_by_technician(index, series.current_period, series.previous_period)
    est_vs_actual = build_est_vs_actual(index, granularity)

    anomalies = detect_anomalies(series.points)
    leakage = estimate_profit_leakage(
        series.current,
        series.points,
        config.target_labour_cost_per_job,
        by_job_type,
        by_technician,
        currency=config.currency,
    )

    logger.debug(
        f"[Labour Trend] range={config.range_days}d granularity={granularity.value} "
        f"periods={len(periods)} anomalies={len(anomalies)} snapshot={snapshot.version}"
    )

    return LabourCostTrendPayload(
        range_days=config.range_days,
        granularity=granularity,
        currency=config.currency,
        target_labour_cost_per_job=config.target_labour_cost_per_job,
        profit_leakage=leakage,
        kpis=kpis,
        trend=series.points,
        breakdown=Breakdown(
            by_job_type=by_job_type,
            by_technician=by_technician,
            est_vs_actual=est_vs_actual,
        ),
        anomalies=anomalies,
    )


# ============== Cache ==============

PayloadKey = Tuple[Optional[str], int, Optional[float], str, str, date]


@dataclass
class CachedPayload:
    payload: LabourCostTrendPayload
    cached_at: datetime = field(default_factory=datetime.now)

    def is_expired(self, ttl_seconds: float) -> bool:
        return (datetime.now() - self.cached_at).total_seconds() > ttl_seconds


_payload_cache: Dict[PayloadKey, CachedPayload] = {}
# requests run on the threadpool; all cache reads and writes hold this lock
_payload_cache_lock = threading.Lock()


def payload_cache_key(
    company_id: Optional[str],
    snapshot: RecordSnapshot,
    config: LabourTrendConfig,
    today: date
) -> PayloadKey:
    """Every input that can change the payload is part of the key"""
    return (
        company_id,
        config.range_days,
        config.target_labour_cost_per_job,
        config.currency,
        snapshot.version,
        today,
    )


def get_labour_cost_trend(
    snapshot: RecordSnapshot,
    config: LabourTrendConfig,
    today: Optional[date] = None,
    company_id: Optional[str] = None,
    ttl_seconds: float = 300
) -> LabourCostTrendPayload:
    """
    Cached wrapper around build_labour_cost_trend_payload.

    The build runs outside the lock; two threads missing on the same key
    both build and the last one stores its (identical) payload.
    """
    today = today or date.today()
    key = payload_cache_key(company_id, snapshot, config, today)

    with _payload_cache_lock:
        cached = _payload_cache.get(key)
    if cached and not cached.is_expired(ttl_seconds):
        return cached.payload

    payload = build_labour_cost_trend_payload(snapshot, config, today)

    with _payload_cache_lock:
        for stale, entry in list(_payload_cache.items()):
            if entry.is_expired(ttl_seconds):
                _payload_cache.pop(stale, None)
        _payload_cache[key] = CachedPayload(payload=payload)
    return payload


def clear_payload_cache():
    """Clear payload cache"""
    with _payload_cache_lock:
        _payload_cache.clear()
