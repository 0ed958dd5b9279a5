"""
Fee resolution: which commission applies to a sale and who pays it.

Precedence, first hit wins:
1. An enabled service override in force at the time of sale
2. The vendor's effective tier (manual while active, else automatic)
3. settings.default_commission_percent, paid by the vendor

Every call reads the rules fresh; nothing is cached between calls.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tembea.config import settings
from tembea.models import (
    CommissionTier,
    FeePayer,
    Service,
    ServicePriceOverride,
    ServiceStatus,
    Vendor,
)
from tembea.services.errors import ServiceNotFoundError, StorageError, VendorNotFoundError
from tembea.services.fee_split import (
    HUNDRED,
    Number,
    compute_platform_fee,
    split_fee,
    to_decimal,
)
from tembea.services.tier_assignment import effective_tier_id
from tembea.utils.dates import utcnow

logger = logging.getLogger(__name__)

SOURCE_TIER = "tier"
SOURCE_OVERRIDE = "override"


@dataclass(frozen=True)
class FeeResolution:
    """Priced sale. pricing_reference_id is the rule's id, or "" for the default rate."""

    success: bool
    base_price: Decimal
    platform_fee: Decimal
    tourist_fee: Decimal
    vendor_fee: Decimal
    vendor_payout: Decimal
    total_customer_payment: Decimal
    fee_payer: str
    pricing_source: str
    pricing_reference_id: str
    service_id: Optional[int] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class TierCommission:
    """Result of the tier branch alone."""

    tier_id: Optional[int]
    commission_rate: Decimal
    commission_amount: Decimal


@dataclass(frozen=True)
class PricingPreview:
    resolution: FeeResolution
    applied_rule: str
    currency: str


@dataclass(frozen=True)
class OverrideImpact:
    """Which of a vendor's live services would follow a tier change."""

    total_services: int
    services_using_tier: int
    services_with_overrides: int
    overridden_service_ids: List[int]


def _not_found(service_id: int) -> FeeResolution:
    zero = Decimal("0")
    return FeeResolution(
        success=False,
        error="Service not found",
        base_price=zero,
        platform_fee=zero,
        tourist_fee=zero,
        vendor_fee=zero,
        vendor_payout=zero,
        total_customer_payment=zero,
        fee_payer=FeePayer.VENDOR.value,
        pricing_source=SOURCE_TIER,
        pricing_reference_id="",
        service_id=service_id,
    )


def _vendor_pays(
    service_id: int,
    base_price: Decimal,
    platform_fee: Decimal,
    reference_id: str,
) -> FeeResolution:
    split = split_fee(base_price, platform_fee, FeePayer.VENDOR)
    return FeeResolution(
        success=True,
        base_price=base_price,
        platform_fee=platform_fee,
        tourist_fee=split.tourist_fee,
        vendor_fee=split.vendor_fee,
        vendor_payout=split.vendor_payout,
        total_customer_payment=split.total_customer_payment,
        fee_payer=FeePayer.VENDOR.value,
        pricing_source=SOURCE_TIER,
        pricing_reference_id=reference_id,
        service_id=service_id,
    )


async def find_active_override(
    db: AsyncSession,
    service_id: int,
    as_of: datetime,
) -> Optional[ServicePriceOverride]:
    """
    Override in force for a service at ``as_of``.

    Overlapping windows resolve to the latest effective_from, then the
    highest id.
    """
    result = await db.execute(
        select(ServicePriceOverride)
        .where(
            and_(
                ServicePriceOverride.service_id == service_id,
                ServicePriceOverride.override_enabled == True,
                ServicePriceOverride.effective_from <= as_of,
                or_(
                    ServicePriceOverride.effective_until.is_(None),
                    ServicePriceOverride.effective_until >= as_of,
                ),
            )
        )
        .order_by(
            ServicePriceOverride.effective_from.desc(),
            ServicePriceOverride.id.desc(),
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def resolve_tier_commission(
    db: AsyncSession,
    vendor: Optional[Vendor],
    base_price: Number,
    as_of: Optional[datetime] = None,
) -> TierCommission:
    """
    Commission from the vendor's effective tier, or the default rate.

    A flat tier's rate is its amount over the price (0 for a zero price).
    """
    as_of = as_of or utcnow()
    price = to_decimal(base_price)

    tier = None
    if vendor is not None:
        tier_id = effective_tier_id(vendor, as_of)
        if tier_id is not None:
            tier = await db.get(CommissionTier, tier_id)
            if tier is not None and not tier.is_effective_at(as_of):
                logger.debug(f"Tier {tier_id} of vendor {vendor.id} not in force at {as_of}")
                tier = None

    if tier is None:
        rate = to_decimal(settings.default_commission_percent) / HUNDRED
        return TierCommission(tier_id=None, commission_rate=rate, commission_amount=price * rate)

    amount = compute_platform_fee(price, tier.commission_type, tier.commission_value)
    rate = tier.commission_rate
    if rate is None:
        rate = amount / price if price else Decimal("0")
    return TierCommission(tier_id=tier.id, commission_rate=rate, commission_amount=amount)


async def resolve_fee(
    db: AsyncSession,
    service_id: int,
    base_price: Optional[Number] = None,
    as_of: Optional[datetime] = None,
) -> FeeResolution:
    """
    Price one sale of a service.

    Args:
        db: Database session
        service_id: Service being sold
        base_price: Price to charge on; defaults to the listing price
            (ticket-level prices are passed in explicitly)
        as_of: Moment of sale; defaults to now

    Returns:
        FeeResolution; success=False with zeroed amounts for an unknown service

    Raises:
        StorageError: the database failed
    """
    as_of = as_of or utcnow()

    try:
        service = await db.get(Service, service_id)
        if service is None:
            logger.debug(f"Fee resolution for unknown service {service_id}")
            return _not_found(service_id)

        price = to_decimal(service.price if base_price is None else base_price)

        override = await find_active_override(db, service_id, as_of)
        if override is not None:
            platform_fee = compute_platform_fee(
                price, override.override_type, override.override_value
            )
            split = split_fee(
                price,
                platform_fee,
                override.fee_payer,
                override.tourist_percentage,
                override.vendor_percentage,
            )
            logger.debug(f"Service {service_id} priced by override {override.id}")
            return FeeResolution(
                success=True,
                base_price=price,
                platform_fee=platform_fee,
                tourist_fee=split.tourist_fee,
                vendor_fee=split.vendor_fee,
                vendor_payout=split.vendor_payout,
                total_customer_payment=split.total_customer_payment,
                fee_payer=FeePayer(override.fee_payer).value,
                pricing_source=SOURCE_OVERRIDE,
                pricing_reference_id=str(override.id),
                service_id=service_id,
            )

        vendor = await db.get(Vendor, service.vendor_id)
        commission = await resolve_tier_commission(db, vendor, price, as_of)
        reference_id = str(commission.tier_id) if commission.tier_id is not None else ""
        logger.debug(
            f"Service {service_id} priced by "
            f"{'tier ' + reference_id if reference_id else 'default rate'}"
        )
        return _vendor_pays(service_id, price, commission.commission_amount, reference_id)

    except SQLAlchemyError as e:
        logger.error(f"Fee resolution failed for service {service_id}: {e}")
        raise StorageError(str(e)) from e


def describe_rule(resolution: FeeResolution) -> str:
    if resolution.pricing_source == SOURCE_OVERRIDE:
        return f"Service override ({resolution.fee_payer} pays fee)"
    if not resolution.pricing_reference_id:
        return "Default commission (vendor pays fee)"
    return "Vendor tier commission (vendor pays fee)"


async def get_pricing_preview(
    db: AsyncSession,
    service_id: int,
    base_price: Optional[Number] = None,
    as_of: Optional[datetime] = None,
) -> PricingPreview:
    """resolve_fee() for display: raises instead of returning a zeroed result."""
    resolution = await resolve_fee(db, service_id, base_price, as_of)
    if not resolution.success:
        raise ServiceNotFoundError(service_id)

    # Still in the identity map from resolve_fee
    service = await db.get(Service, service_id)
    return PricingPreview(
        resolution=resolution,
        applied_rule=describe_rule(resolution),
        currency=service.currency,
    )


async def summarize_override_impact(
    db: AsyncSession,
    vendor_id: int,
    as_of: Optional[datetime] = None,
) -> OverrideImpact:
    """Count the vendor's approved services and those shielded by an active override."""
    as_of = as_of or utcnow()

    try:
        vendor = await db.get(Vendor, vendor_id)
        if vendor is None:
            raise VendorNotFoundError(vendor_id)

        service_ids = (
            await db.execute(
                select(Service.id).where(
                    and_(
                        Service.vendor_id == vendor_id,
                        Service.status == ServiceStatus.APPROVED,
                    )
                )
            )
        ).scalars().all()

        overridden: List[int] = []
        for service_id in service_ids:
            if await find_active_override(db, service_id, as_of) is not None:
                overridden.append(service_id)
    except SQLAlchemyError as e:
        raise StorageError(str(e)) from e

    return OverrideImpact(
        total_services=len(service_ids),
        services_using_tier=len(service_ids) - len(overridden),
        services_with_overrides=len(overridden),
        overridden_service_ids=overridden,
    )
