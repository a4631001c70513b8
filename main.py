"""
Labour Trend Backend - Main Application

Labour cost analytics backend for the small-business profitability dashboard.
Serves the labour cost per job trend computed from time-tracking and job records.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os
import logging

from app.routers import analytics
from app.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    logger.info("Starting Labour Trend Backend...")
    start_scheduler()
    yield
    # Shutdown
    logger.info("Shutting down Labour Trend Backend...")
    stop_scheduler()


# Initialize FastAPI app
app = FastAPI(
    title="Labour Trend API",
    description="Labour cost trend analytics: KPIs, breakdowns, anomalies and profit leakage",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ALLOW_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(analytics.router, prefix="/api/analytics", tags=["Labour Analytics"])


@app.get("/")
def read_root():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "Labour Trend Backend",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Detailed health check"""
    return {
        "status": "healthy",
        "record_store_configured": bool(
            os.getenv("SUPABASE_URL") and (os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY"))
        ),
        "default_company_id": os.getenv("DEFAULT_COMPANY_ID", "not set"),
        "currency": os.getenv("REPORT_CURRENCY", "GBP")
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", 8000)), reload=True)
