"""
Tests for tier and override administration.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import NOW, RULES_START
from tembea.models import CommissionType, FeePayer
from tembea.services.errors import (
    OverrideNotFoundError,
    PricingValidationError,
    ServiceNotFoundError,
    TierNotFoundError,
)
from tembea.services.pricing_admin import (
    count_vendors_by_tier,
    create_override,
    create_tier,
    deactivate_tier,
    delete_override,
    list_overrides,
    list_tiers,
    normalize_fee_payer,
    update_override,
    update_tier,
)


# ── Fee payer parsing ────────────────────────────────


class TestNormalizeFeePayer:
    def test_case_and_whitespace(self):
        assert normalize_fee_payer(" Tourist ") == FeePayer.TOURIST
        assert normalize_fee_payer("SHARED") == FeePayer.SHARED
        assert normalize_fee_payer(FeePayer.VENDOR) == FeePayer.VENDOR

    def test_rejects_unknown(self):
        with pytest.raises(PricingValidationError):
            normalize_fee_payer("platform")
        with pytest.raises(PricingValidationError):
            normalize_fee_payer(None)


# ── Tiers ────────────────────────────────────────────


class TestTierAdmin:
    @pytest.mark.asyncio
    async def test_create_and_list(self, db_session):
        gold = await create_tier(
            db_session,
            created_by=1,
            name=" Gold ",
            commission_type="percentage",
            commission_value="10",
            min_monthly_bookings=25,
            min_rating="4.5",
            priority_order=3,
            effective_from=RULES_START,
        )
        await create_tier(
            db_session,
            name="Bronze",
            commission_type=CommissionType.PERCENTAGE,
            commission_value=15,
            priority_order=1,
        )

        tiers = await list_tiers(db_session)

        assert gold.name == "Gold"
        assert gold.min_rating == Decimal("4.5")
        assert gold.created_by == 1
        assert [t.name for t in tiers] == ["Bronze", "Gold"]

    @pytest.mark.asyncio
    async def test_percentage_over_hundred_rejected(self, db_session):
        with pytest.raises(PricingValidationError):
            await create_tier(
                db_session, name="Greedy", commission_type="percentage",
                commission_value="101", priority_order=1,
            )

    @pytest.mark.asyncio
    async def test_flat_amount_may_exceed_hundred(self, db_session):
        tier = await create_tier(
            db_session, name="Flat", commission_type="flat",
            commission_value="2500", priority_order=1,
        )
        assert tier.commission_type == CommissionType.FLAT

    @pytest.mark.asyncio
    async def test_window_must_not_be_inverted(self, db_session):
        with pytest.raises(PricingValidationError):
            await create_tier(
                db_session, name="Backwards", commission_type="percentage",
                commission_value="10", priority_order=1,
                effective_from=NOW, effective_until=NOW - timedelta(days=1),
            )

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, db_session):
        with pytest.raises(PricingValidationError) as exc_info:
            await create_tier(
                db_session, name="X", commission_type="percentage",
                commission_value="10", priority_order=1, colour="gold",
            )
        assert "colour" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_update_validates_merged_record(self, factory, db_session):
        tier = await factory.tier("Flat", "500", 1, commission_type=CommissionType.FLAT)

        with pytest.raises(PricingValidationError):
            await update_tier(db_session, tier.id, commission_type="percentage")

        updated = await update_tier(db_session, tier.id, commission_value="750")
        assert updated.commission_value == Decimal("750")

    @pytest.mark.asyncio
    async def test_update_rejects_null_required_fields(self, factory, db_session):
        tier = await factory.tier()

        with pytest.raises(PricingValidationError):
            await update_tier(db_session, tier.id, is_active=None)
        with pytest.raises(PricingValidationError):
            await update_tier(db_session, tier.id, commission_value=None)

        assert tier.is_active is True
        assert tier.commission_value == Decimal("15")

    @pytest.mark.asyncio
    async def test_update_unknown_tier(self, db_session):
        with pytest.raises(TierNotFoundError):
            await update_tier(db_session, 55, name="Ghost")

    @pytest.mark.asyncio
    async def test_deactivate_hides_from_default_listing(self, factory, db_session):
        tier = await factory.tier()

        await deactivate_tier(db_session, tier.id)

        assert await list_tiers(db_session) == []
        assert len(await list_tiers(db_session, include_inactive=True)) == 1

    @pytest.mark.asyncio
    async def test_vendor_counts_follow_effective_tier(self, factory, db_session):
        bronze, silver, _ = await factory.ladder()
        await factory.vendor("A", current_tier_id=bronze.id)
        await factory.vendor("B", current_tier_id=bronze.id)
        await factory.vendor(
            "C", current_tier_id=bronze.id, manual_tier_id=silver.id,
            manual_tier_expires_at=NOW + timedelta(days=3),
        )

        counts = await count_vendors_by_tier(db_session, now=NOW)

        assert counts == {bronze.id: 2, silver.id: 1}


# ── Overrides ────────────────────────────────────────


class TestOverrideAdmin:
    @pytest.mark.asyncio
    async def test_create_shared_override(self, factory, db_session):
        vendor = await factory.vendor()
        service = await factory.service(vendor)

        override = await create_override(
            db_session,
            service.id,
            created_by=7,
            override_type="percentage",
            override_value="10",
            fee_payer="Shared",
            tourist_percentage="70",
            vendor_percentage="30",
        )

        assert override.fee_payer == FeePayer.SHARED
        assert override.tourist_percentage == Decimal("70")
        assert override.override_enabled is True

    @pytest.mark.asyncio
    async def test_shared_percentages_must_total_hundred(self, factory, db_session):
        vendor = await factory.vendor()
        service = await factory.service(vendor)

        with pytest.raises(PricingValidationError):
            await create_override(
                db_session, service.id, override_type="flat", override_value="100",
                fee_payer="shared", tourist_percentage="60", vendor_percentage="30",
            )

    @pytest.mark.asyncio
    async def test_shared_needs_both_percentages(self, factory, db_session):
        vendor = await factory.vendor()
        service = await factory.service(vendor)

        with pytest.raises(PricingValidationError):
            await create_override(
                db_session, service.id, override_type="flat", override_value="100",
                fee_payer="shared", tourist_percentage="100",
            )

    @pytest.mark.asyncio
    async def test_percentages_cleared_for_single_payer(self, factory, db_session):
        vendor = await factory.vendor()
        service = await factory.service(vendor)

        override = await create_override(
            db_session, service.id, override_type="flat", override_value="100",
            fee_payer="tourist", tourist_percentage="50", vendor_percentage="50",
        )

        assert override.tourist_percentage is None
        assert override.vendor_percentage is None

    @pytest.mark.asyncio
    async def test_one_override_per_service(self, factory, db_session):
        vendor = await factory.vendor()
        service = await factory.service(vendor)
        await factory.override(service)

        with pytest.raises(PricingValidationError):
            await create_override(
                db_session, service.id, override_type="flat", override_value="1"
            )

    @pytest.mark.asyncio
    async def test_unknown_service(self, db_session):
        with pytest.raises(ServiceNotFoundError):
            await create_override(db_session, 31, override_type="flat", override_value="1")

    @pytest.mark.asyncio
    async def test_switching_payer_clears_split(self, factory, db_session):
        vendor = await factory.vendor()
        service = await factory.service(vendor)
        override = await factory.override(
            service, fee_payer=FeePayer.SHARED,
            tourist_percentage=Decimal("50"), vendor_percentage=Decimal("50"),
        )

        updated = await update_override(db_session, override.id, fee_payer="vendor")

        assert updated.fee_payer == FeePayer.VENDOR
        assert updated.tourist_percentage is None

    @pytest.mark.asyncio
    async def test_update_rejects_null_required_fields(self, factory, db_session):
        vendor = await factory.vendor()
        service = await factory.service(vendor)
        override = await factory.override(service, value="500")

        with pytest.raises(PricingValidationError):
            await update_override(db_session, override.id, override_enabled=None)
        with pytest.raises(PricingValidationError):
            await update_override(db_session, override.id, override_value=None)

        assert override.override_enabled is True
        assert override.override_value == Decimal("500")

    @pytest.mark.asyncio
    async def test_delete_returns_service(self, factory, db_session):
        vendor = await factory.vendor()
        service = await factory.service(vendor)
        override = await factory.override(service)

        assert await delete_override(db_session, override.id) == service.id
        assert await list_overrides(db_session, service_id=service.id) == []

        with pytest.raises(OverrideNotFoundError):
            await delete_override(db_session, override.id)
