"""taskminder - recurring-task reminders."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from taskminder.core.config import settings
from taskminder.core.db_client import close_connection, init_db
from taskminder.core.logging import configure_logfire, instrument_fastapi
from taskminder.core.scheduler import DAILY_REMINDERS_JOB, start_scheduler, stop_scheduler
from taskminder.core.scheduler_tracker import job_tracker
from taskminder.interface.router import router as api_router


logger = logging.getLogger(__name__)


def validate_startup_configuration() -> None:
    """Warn about missing optional configuration; nothing here is fatal."""
    if not settings.cron_secret:
        logger.warning("startup_validation", extra={"setting": "cron_secret", "status": "missing"})
    if not settings.resend_api_key:
        logger.warning("startup_validation", extra={"setting": "resend_api_key", "status": "missing"})
    if not (settings.twilio_account_sid and settings.twilio_auth_token and settings.twilio_from_number):
        logger.info("startup_validation", extra={"setting": "twilio", "status": "disabled"})


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Configure logging first so validation logs are captured
    configure_logfire()
    validate_startup_configuration()

    await init_db()
    logger.info("Database initialized")

    if settings.enable_scheduler:
        start_scheduler()
    yield
    if settings.enable_scheduler:
        stop_scheduler()
    await close_connection()


app = FastAPI(
    title="taskminder",
    description="Recurring-task reminders",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

app.include_router(api_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)


@app.get("/health/scheduler")
async def scheduler_health_check() -> JSONResponse:
    """Scheduler health check endpoint with job status."""
    job_status = await job_tracker.get_job_status(DAILY_REMINDERS_JOB)
    dlq = job_tracker.get_dead_letter_queue()

    overall_status = "degraded" if job_status["consecutive_failures"] > 0 else "healthy"
    if len(dlq) > 0:
        overall_status = "critical"

    return JSONResponse(
        content={
            "status": overall_status,
            "jobs": {DAILY_REMINDERS_JOB: job_status},
            "dead_letter_queue_size": len(dlq),
            "dead_letter_queue": dlq,
        },
        status_code=200 if overall_status == "healthy" else 503,
    )
