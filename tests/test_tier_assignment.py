"""
Tests for vendor tier assignment: monthly evaluation, manual tiers and
the expired manual tier sweep.

Setup data is committed before each job runs, since the jobs commit
and roll back per vendor.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import NOW
from tembea.models import BookingStatus, VendorStatus
from tembea.services import tier_assignment
from tembea.services.errors import (
    PricingValidationError,
    TierNotFoundError,
    VendorNotFoundError,
)
from tembea.services.tier_assignment import (
    VendorTierState,
    assign_manual_tier,
    calculate_vendor_metrics,
    cleanup_expired_manual_tiers,
    effective_tier_id,
    evaluate_vendor_tiers,
    get_vendor_tier_info,
    remove_manual_tier,
    vendor_tier_state,
)


async def strong_vendor(factory, name="Kilimanjaro Treks", bookings=30):
    """Vendor with enough completed bookings and 4.8 stars for Gold."""
    vendor = await factory.vendor(name)
    service = await factory.service(vendor)
    await factory.bookings(service, bookings)
    for rating in (5, 5, 5, 5, 4):
        await factory.review(service, rating)
    return vendor


# ── Metrics ──────────────────────────────────────────


class TestMetrics:
    @pytest.mark.asyncio
    async def test_counts_completed_bookings_this_month(self, factory, db_session):
        vendor = await factory.vendor()
        service = await factory.service(vendor)
        await factory.bookings(service, 3)
        await factory.booking(service, status=BookingStatus.CANCELLED)
        await factory.booking(service, status=BookingStatus.CONFIRMED)
        await factory.booking(service, created_at=NOW - timedelta(days=40))

        metrics = await calculate_vendor_metrics(db_session, vendor.id, NOW)

        assert metrics.monthly_bookings == 3

    @pytest.mark.asyncio
    async def test_average_rating_across_services(self, factory, db_session):
        vendor = await factory.vendor()
        first = await factory.service(vendor, title="Balloon safari")
        second = await factory.service(vendor, title="Spice tour")
        await factory.review(first, 5)
        await factory.review(second, 4)

        metrics = await calculate_vendor_metrics(db_session, vendor.id, NOW)

        assert metrics.average_rating == Decimal("4.5")

    @pytest.mark.asyncio
    async def test_unreviewed_vendor_gets_placeholder_rating(self, factory, db_session):
        vendor = await factory.vendor()

        metrics = await calculate_vendor_metrics(db_session, vendor.id, NOW)

        assert metrics.monthly_bookings == 0
        assert metrics.average_rating == Decimal("4.0")


# ── Manual tier state ────────────────────────────────


class TestTierState:
    @pytest.mark.asyncio
    async def test_states(self, factory):
        bronze, _, gold = await factory.ladder()
        automatic = await factory.vendor("A", current_tier_id=bronze.id)
        active = await factory.vendor(
            "B", current_tier_id=bronze.id, manual_tier_id=gold.id,
            manual_tier_expires_at=NOW + timedelta(days=1),
        )
        open_ended = await factory.vendor("C", manual_tier_id=gold.id)
        expired = await factory.vendor(
            "D", current_tier_id=bronze.id, manual_tier_id=gold.id,
            manual_tier_expires_at=NOW,
        )

        assert vendor_tier_state(automatic, NOW) == VendorTierState.AUTOMATIC
        assert vendor_tier_state(active, NOW) == VendorTierState.MANUAL_ACTIVE
        assert vendor_tier_state(open_ended, NOW) == VendorTierState.MANUAL_ACTIVE
        assert vendor_tier_state(expired, NOW) == VendorTierState.MANUAL_EXPIRED

        assert effective_tier_id(active, NOW) == gold.id
        assert effective_tier_id(expired, NOW) == bronze.id


# ── Monthly evaluation ───────────────────────────────


class TestEvaluation:
    @pytest.mark.asyncio
    async def test_strong_vendor_promoted_to_gold(self, factory, db_session):
        bronze, _, gold = await factory.ladder()
        vendor = await strong_vendor(factory)
        vendor.current_tier_id = bronze.id
        await db_session.commit()

        report = await evaluate_vendor_tiers(db_session, now=NOW)

        await db_session.refresh(vendor)
        assert vendor.current_tier_id == gold.id
        assert vendor.current_commission_rate == Decimal("0.1")
        assert vendor.monthly_booking_count == 30
        assert vendor.average_rating == Decimal("4.80")
        assert report.changed_count == 1
        assert report.results[0].previous_tier_id == bronze.id
        assert report.results[0].new_tier_id == gold.id

    @pytest.mark.asyncio
    async def test_new_vendor_lands_on_floor_tier(self, factory, db_session):
        bronze, _, _ = await factory.ladder()
        vendor = await factory.vendor()
        await db_session.commit()

        await evaluate_vendor_tiers(db_session, now=NOW)

        await db_session.refresh(vendor)
        assert vendor.current_tier_id == bronze.id
        assert vendor.last_tier_evaluated_at is not None

    @pytest.mark.asyncio
    async def test_only_approved_vendors_evaluated(self, factory, db_session):
        await factory.ladder()
        pending = await factory.vendor("Pending", status=VendorStatus.PENDING)
        await db_session.commit()

        report = await evaluate_vendor_tiers(db_session, now=NOW)

        await db_session.refresh(pending)
        assert report.results == []
        assert pending.current_tier_id is None

    @pytest.mark.asyncio
    async def test_active_manual_tier_is_skipped(self, factory, db_session):
        bronze, silver, _ = await factory.ladder()
        vendor = await strong_vendor(factory)
        vendor.current_tier_id = bronze.id
        vendor.manual_tier_id = silver.id
        vendor.manual_tier_expires_at = NOW + timedelta(days=10)
        await db_session.commit()

        report = await evaluate_vendor_tiers(db_session, now=NOW)

        await db_session.refresh(vendor)
        assert report.skipped_vendor_ids == [vendor.id]
        assert vendor.current_tier_id == bronze.id
        assert vendor.manual_tier_id == silver.id

    @pytest.mark.asyncio
    async def test_no_tiers_leaves_vendor_alone(self, factory, db_session):
        vendor = await factory.vendor()
        await db_session.commit()

        report = await evaluate_vendor_tiers(db_session, now=NOW)

        await db_session.refresh(vendor)
        assert vendor.current_tier_id is None
        assert report.changed_count == 0

    @pytest.mark.asyncio
    async def test_one_vendor_failing_does_not_stop_the_run(
        self, factory, db_session, monkeypatch
    ):
        _, _, gold = await factory.ladder()
        broken = await factory.vendor("Broken")
        healthy = await strong_vendor(factory, "Healthy")
        await db_session.commit()
        broken_id = broken.id
        gold_id, healthy_id = gold.id, healthy.id

        real_metrics = tier_assignment.calculate_vendor_metrics

        async def flaky_metrics(db, vendor_id, now=None):
            if vendor_id == broken_id:
                raise RuntimeError("metrics unavailable")
            return await real_metrics(db, vendor_id, now)

        monkeypatch.setattr(tier_assignment, "calculate_vendor_metrics", flaky_metrics)

        report = await evaluate_vendor_tiers(db_session, now=NOW)

        await db_session.refresh(healthy)
        assert healthy.current_tier_id == gold_id
        assert [e.vendor_id for e in report.errors] == [broken_id]
        assert "metrics unavailable" in report.errors[0].error
        assert [r.vendor_id for r in report.results] == [healthy_id]


# ── Expired manual tier sweep ────────────────────────


class TestCleanup:
    @pytest.mark.asyncio
    async def test_expired_manual_tier_cleared(self, factory, db_session):
        bronze, silver, gold = await factory.ladder()
        vendor = await strong_vendor(factory)
        vendor.current_tier_id = bronze.id
        vendor.manual_tier_id = silver.id
        vendor.manual_tier_expires_at = NOW - timedelta(hours=1)
        vendor.manual_tier_reason = "Launch promotion"
        await db_session.commit()

        report = await cleanup_expired_manual_tiers(db_session, now=NOW)

        await db_session.refresh(vendor)
        assert report.cleaned_count == 1
        assert vendor.manual_tier_id is None
        assert vendor.manual_tier_expires_at is None
        assert vendor.manual_tier_reason is None
        assert vendor.current_tier_id == gold.id

    @pytest.mark.asyncio
    async def test_unexpired_and_open_ended_tiers_kept(self, factory, db_session):
        bronze, silver, _ = await factory.ladder()
        later = await factory.vendor(
            "Later", manual_tier_id=silver.id,
            manual_tier_expires_at=NOW + timedelta(minutes=1),
        )
        forever = await factory.vendor("Forever", manual_tier_id=silver.id)
        await db_session.commit()

        report = await cleanup_expired_manual_tiers(db_session, now=NOW)

        await db_session.refresh(later)
        await db_session.refresh(forever)
        assert report.cleaned_count == 0
        assert later.manual_tier_id == silver.id
        assert forever.manual_tier_id == silver.id

    @pytest.mark.asyncio
    async def test_failure_recorded_and_sweep_continues(
        self, factory, db_session, monkeypatch
    ):
        bronze, silver, _ = await factory.ladder()
        first = await factory.vendor(
            "First", manual_tier_id=silver.id, manual_tier_expires_at=NOW - timedelta(days=1)
        )
        second = await factory.vendor(
            "Second", manual_tier_id=silver.id, manual_tier_expires_at=NOW - timedelta(days=1)
        )
        await db_session.commit()
        first_id = first.id
        bronze_id, silver_id = bronze.id, silver.id

        real_metrics = tier_assignment.calculate_vendor_metrics

        async def flaky_metrics(db, vendor_id, now=None):
            if vendor_id == first_id:
                raise RuntimeError("boom")
            return await real_metrics(db, vendor_id, now)

        monkeypatch.setattr(tier_assignment, "calculate_vendor_metrics", flaky_metrics)

        report = await cleanup_expired_manual_tiers(db_session, now=NOW)

        await db_session.refresh(first)
        await db_session.refresh(second)
        assert report.cleaned_count == 1
        assert [e.vendor_id for e in report.errors] == [first_id]
        assert first.manual_tier_id == silver_id
        assert second.manual_tier_id is None
        assert second.current_tier_id == bronze_id


# ── Manual assignment ────────────────────────────────


class TestManualAssignment:
    @pytest.mark.asyncio
    async def test_assign_keeps_automatic_tier(self, factory, db_session):
        bronze, _, gold = await factory.ladder()
        admin = await factory.user()
        vendor = await factory.vendor(current_tier_id=bronze.id)

        await assign_manual_tier(
            db_session, vendor.id, gold.id,
            expires_at=NOW + timedelta(days=30),
            reason="  Partner launch  ",
            assigned_by=admin.id,
            now=NOW,
        )

        assert vendor.manual_tier_id == gold.id
        assert vendor.current_tier_id == bronze.id
        assert vendor.manual_tier_reason == "Partner launch"
        assert vendor.manual_tier_assigned_by == admin.id
        assert effective_tier_id(vendor, NOW) == gold.id

    @pytest.mark.asyncio
    async def test_assign_rejects_past_expiry(self, factory, db_session):
        _, _, gold = await factory.ladder()
        vendor = await factory.vendor()

        with pytest.raises(PricingValidationError):
            await assign_manual_tier(
                db_session, vendor.id, gold.id, expires_at=NOW, now=NOW
            )

    @pytest.mark.asyncio
    async def test_assign_rejects_inactive_tier(self, factory, db_session):
        retired = await factory.tier("Retired", "5", 9, is_active=False)
        vendor = await factory.vendor()

        with pytest.raises(PricingValidationError):
            await assign_manual_tier(db_session, vendor.id, retired.id, now=NOW)

    @pytest.mark.asyncio
    async def test_assign_unknown_ids(self, factory, db_session):
        bronze = await factory.tier()
        vendor = await factory.vendor()

        with pytest.raises(VendorNotFoundError):
            await assign_manual_tier(db_session, 999, bronze.id, now=NOW)
        with pytest.raises(TierNotFoundError):
            await assign_manual_tier(db_session, vendor.id, 999, now=NOW)

    @pytest.mark.asyncio
    async def test_remove_reevaluates(self, factory, db_session):
        bronze, silver, gold = await factory.ladder()
        vendor = await strong_vendor(factory)
        vendor.current_tier_id = bronze.id
        vendor.manual_tier_id = silver.id

        await remove_manual_tier(db_session, vendor.id, now=NOW)

        assert vendor.manual_tier_id is None
        assert vendor.current_tier_id == gold.id

    @pytest.mark.asyncio
    async def test_remove_without_manual_tier(self, factory, db_session):
        vendor = await factory.vendor()

        with pytest.raises(PricingValidationError):
            await remove_manual_tier(db_session, vendor.id, now=NOW)


# ── Tier info ────────────────────────────────────────


class TestTierInfo:
    @pytest.mark.asyncio
    async def test_info_for_manual_vendor(self, factory, db_session):
        bronze, silver, gold = await factory.ladder()
        vendor = await factory.vendor(
            current_tier_id=bronze.id,
            manual_tier_id=silver.id,
            manual_tier_expires_at=NOW + timedelta(days=5),
        )

        info = await get_vendor_tier_info(db_session, vendor.id, now=NOW)

        assert info.state == VendorTierState.MANUAL_ACTIVE
        assert info.effective_tier.id == silver.id
        assert info.automatic_tier.id == bronze.id
        assert info.progress.next_tier.id == gold.id

    @pytest.mark.asyncio
    async def test_info_unknown_vendor(self, db_session):
        with pytest.raises(VendorNotFoundError):
            await get_vendor_tier_info(db_session, 12345, now=NOW)
