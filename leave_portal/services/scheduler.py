import logging
import datetime
import os
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from leave_portal.db import AsyncSessionLocal
from leave_portal.models import JobLog
from leave_portal.models.enums import JobStatusEnum
from leave_portal.services import employee_service
from sqlalchemy import select, and_  # type: ignore

logger = logging.getLogger(__name__)
scheduler = AsyncIOScheduler()


def scheduler_enabled() -> bool:
    return os.getenv("SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")


def _yearly_reset_job_name(year: int) -> str:
    """Canonical job name for the period reset (one per year)."""
    return f"yearly_balance_reset_{year}"


async def yearly_balance_reset(year: Optional[int] = None, executed_by: str = "scheduler") -> Optional[dict]:
    """
    Resets annual and fr entitlements for every employee on Jan 1st.
    Taken counters are untouched. Idempotent: skips if already run this year.
    """
    year = year or datetime.date.today().year
    job_name = _yearly_reset_job_name(year)
    logger.info("Running yearly balance reset for %s", year)

    async with AsyncSessionLocal() as db:
        existing = await db.execute(
            select(JobLog).where(
                and_(JobLog.job_name == job_name, JobLog.status == JobStatusEnum.SUCCESS)
            )
        )
        if existing.scalar_one_or_none():
            logger.info("Yearly balance reset already run for %s, skipping", year)
            return None

        try:
            updated = await employee_service.reset_category_balances(db)
            details = {
                "employees_updated": updated,
                "annual": employee_service.DEFAULT_ANNUAL_BALANCE,
                "fr": employee_service.DEFAULT_FR_BALANCE,
            }
            db.add(JobLog(
                job_name=job_name,
                status=JobStatusEnum.SUCCESS,
                details=details,
                executed_by=executed_by,
            ))
            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception("Yearly balance reset for %s failed", year)
            raise

    logger.info("Yearly balance reset complete, updated %s employees", updated)
    return details


def start_scheduler():
    if not scheduler_enabled():
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")
        return
    # Trigger: Jan 1st at 00:05
    scheduler.add_job(
        yearly_balance_reset, "cron", month=1, day=1, hour=0, minute=5,
        id="yearly_balance_reset", replace_existing=True,
    )
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")


def shutdown_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler shutdown")
