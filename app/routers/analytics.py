"""
Labour Analytics Endpoints

Labour cost per job trend for the owner dashboard:
- Calendar-aligned trend (weekly up to 90 days, monthly beyond)
- KPI deltas vs previous period
- Breakdowns by job type, technician and estimate-vs-actual
- Anomalies and estimated profit leakage

Reads one record snapshot per request; all computation is in
app.services.labour_trend.
"""

import logging
import os
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.models.labour_models import LabourCostTrendPayload
from app.services.labour_trend import (
    DEFAULT_CURRENCY,
    DEFAULT_RANGE_DAYS,
    get_labour_cost_trend,
    validate_trend_request,
)
from app.services.supabase_client import RecordStoreError
from app.sync import SnapshotLoader, get_snapshot_loader

logger = logging.getLogger(__name__)

router = APIRouter()

REPORT_CURRENCY = os.getenv("REPORT_CURRENCY", DEFAULT_CURRENCY)
DEFAULT_COMPANY_ID = os.getenv("DEFAULT_COMPANY_ID")
PAYLOAD_CACHE_TTL_SECONDS = int(os.getenv("PAYLOAD_CACHE_TTL_SECONDS", "300"))


def get_today() -> date:
    """Reference date for the lookback window."""
    return date.today()


@router.get("/labour-cost-trend", response_model=LabourCostTrendPayload)
def labour_cost_trend(
    range_days: int = Query(DEFAULT_RANGE_DAYS, alias="rangeDays", description="Lookback window: 30, 90, 180 or 365"),
    target_labour_cost_per_job: Optional[float] = Query(
        None, alias="targetLabourCostPerJob", ge=0, description="Target labour cost per job"
    ),
    company_id: Optional[str] = Query(None, alias="companyId", description="Tenant company ID"),
    loader: SnapshotLoader = Depends(get_snapshot_loader),
    today: date = Depends(get_today)
):
    """
    Labour cost per job trend.

    Returns trend points, KPIs, breakdowns, anomalies and profit leakage
    for the requested lookback window.
    """
    try:
        config = validate_trend_request(range_days, target_labour_cost_per_job, REPORT_CURRENCY)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    company_id = company_id or DEFAULT_COMPANY_ID
    if not company_id:
        logger.warning("[Labour Trend] No companyId and DEFAULT_COMPANY_ID unset, payload covers every company")

    try:
        snapshot = loader.get_snapshot(company_id)
    except ValueError as e:
        logger.error(f"[Labour Trend] Record store not configured: {e}")
        raise HTTPException(status_code=500, detail="Record store not configured")
    except RecordStoreError as e:
        logger.error(f"[Labour Trend] Record store read failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to load labour cost trend")

    return get_labour_cost_trend(
        snapshot,
        config,
        today=today,
        company_id=company_id,
        ttl_seconds=PAYLOAD_CACHE_TTL_SECONDS,
    )
