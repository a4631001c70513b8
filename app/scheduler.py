"""
Scheduler Module

Background job scheduler for record snapshot refreshes.
Uses APScheduler to reload the configured company's records on an interval
so dashboard requests are served from a warm snapshot.
"""

import os
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.sync import get_snapshot_loader

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Configuration from environment
SNAPSHOT_REFRESH_ENABLED = os.getenv("SNAPSHOT_REFRESH_ENABLED", "true").lower() == "true"
SNAPSHOT_REFRESH_MINUTES = int(os.getenv("SNAPSHOT_REFRESH_MINUTES", "10"))
DEFAULT_COMPANY_ID = os.getenv("DEFAULT_COMPANY_ID")

# Create scheduler
scheduler = AsyncIOScheduler()


def scheduled_snapshot_refresh(company_id=None):
    """
    Reload the record snapshot (every N minutes).

    Plain function: the store reads block, so APScheduler runs it in its
    thread pool executor instead of on the event loop.
    """
    company_id = company_id or DEFAULT_COMPANY_ID
    logger.info(f"[Scheduler] Refreshing record snapshot for company {company_id}")
    try:
        snapshot = get_snapshot_loader().load_snapshot(company_id)
        logger.info(f"[Scheduler] Snapshot refresh complete: version={snapshot.version} "
                   f"records={snapshot.record_count}")
    except Exception as e:
        logger.error(f"[Scheduler] Snapshot refresh failed: {e}")


def start_scheduler():
    """Start the background scheduler"""
    if not SNAPSHOT_REFRESH_ENABLED:
        logger.info("[Scheduler] Refresh disabled via SNAPSHOT_REFRESH_ENABLED env var")
        return
    if not DEFAULT_COMPANY_ID:
        logger.info("[Scheduler] DEFAULT_COMPANY_ID not set, snapshot refresh not scheduled")
        return

    logger.info(f"[Scheduler] Starting scheduler with:")
    logger.info(f"  - Snapshot refresh: every {SNAPSHOT_REFRESH_MINUTES} minutes")
    logger.info(f"  - Company ID: {DEFAULT_COMPANY_ID}")

    scheduler.add_job(
        scheduled_snapshot_refresh,
        IntervalTrigger(minutes=SNAPSHOT_REFRESH_MINUTES),
        id="snapshot_refresh",
        name="Record Snapshot Refresh",
        replace_existing=True
    )

    scheduler.start()
    logger.info("[Scheduler] Scheduler started successfully")


def stop_scheduler():
    """Stop the scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("[Scheduler] Scheduler stopped")
