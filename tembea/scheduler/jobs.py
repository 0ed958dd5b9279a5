"""
Background tier jobs using APScheduler.

Jobs:
- Monthly tier evaluation (cron, day/hour from settings)
- Expired manual tier cleanup (interval from settings)
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from tembea.config import settings
from tembea.db import get_db_context
from tembea.services.tier_assignment import cleanup_expired_manual_tiers, evaluate_vendor_tiers

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = AsyncIOScheduler(timezone="UTC")


async def tier_evaluation_job():
    """Re-tier every approved vendor from this month's performance."""
    logger.info("Running monthly tier evaluation job")
    try:
        async with get_db_context() as db:
            report = await evaluate_vendor_tiers(db)
        if report.errors:
            logger.warning(
                f"Tier evaluation job: {len(report.errors)} vendors failed "
                f"({', '.join(str(e.vendor_id) for e in report.errors)})"
            )
    except Exception as e:
        logger.error(f"Tier evaluation job error: {e}")


async def manual_tier_cleanup_job():
    """Move vendors with expired manual tiers back to automatic."""
    logger.debug("Running manual tier cleanup job")
    try:
        async with get_db_context() as db:
            report = await cleanup_expired_manual_tiers(db)
        if report.cleaned_count:
            logger.info(f"Manual tier cleanup job: {report.cleaned_count} vendors reset")
    except Exception as e:
        logger.error(f"Manual tier cleanup job error: {e}")


def setup_scheduler():
    """
    Configure and add all scheduled jobs.

    Called during application startup.
    """
    scheduler.add_job(
        tier_evaluation_job,
        trigger=CronTrigger(
            day=settings.tier_evaluation_day,
            hour=settings.tier_evaluation_hour,
            minute=0,
            timezone="UTC",
        ),
        id="tier_evaluation",
        name="Monthly vendor tier evaluation",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    scheduler.add_job(
        manual_tier_cleanup_job,
        trigger=IntervalTrigger(hours=settings.tier_cleanup_interval_hours),
        id="manual_tier_cleanup",
        name="Expired manual tier cleanup",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    logger.info("Scheduler configured with jobs")
