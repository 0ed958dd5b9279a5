"""
Tests for the scheduled tier jobs.
"""

from contextlib import asynccontextmanager
from datetime import timedelta

import pytest
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from tembea.scheduler import jobs
from tembea.utils.dates import utcnow


@pytest.fixture
def job_session(db_session, monkeypatch):
    """Route the jobs' get_db_context() to the test session."""

    @asynccontextmanager
    async def test_context():
        yield db_session
        await db_session.commit()

    monkeypatch.setattr(jobs, "get_db_context", test_context)
    return db_session


def test_setup_registers_both_jobs():
    jobs.setup_scheduler()

    evaluation = jobs.scheduler.get_job("tier_evaluation")
    cleanup = jobs.scheduler.get_job("manual_tier_cleanup")

    assert isinstance(evaluation.trigger, CronTrigger)
    assert isinstance(cleanup.trigger, IntervalTrigger)
    assert cleanup.trigger.interval == timedelta(hours=24)

    jobs.scheduler.remove_all_jobs()


@pytest.mark.asyncio
async def test_evaluation_job_tiers_vendors(factory, job_session):
    bronze, _, _ = await factory.ladder()
    vendor = await factory.vendor()
    await job_session.commit()

    await jobs.tier_evaluation_job()

    await job_session.refresh(vendor)
    assert vendor.current_tier_id == bronze.id


@pytest.mark.asyncio
async def test_cleanup_job_resets_expired_vendor(factory, job_session):
    _, silver, _ = await factory.ladder()
    vendor = await factory.vendor(
        manual_tier_id=silver.id, manual_tier_expires_at=utcnow() - timedelta(days=1)
    )
    await job_session.commit()

    await jobs.manual_tier_cleanup_job()

    await job_session.refresh(vendor)
    assert vendor.manual_tier_id is None


@pytest.mark.asyncio
async def test_job_errors_are_logged_not_raised(job_session, monkeypatch, caplog):
    async def broken(db):
        raise RuntimeError("database is on fire")

    monkeypatch.setattr(jobs, "evaluate_vendor_tiers", broken)

    await jobs.tier_evaluation_job()

    assert "database is on fire" in caplog.text
