"""
Administrative writes for commission tiers and service overrides.

Every function validates the complete resulting record before touching
the session, then flushes. Routers commit and write the audit log.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tembea.models import (
    CommissionTier,
    CommissionType,
    FeePayer,
    Service,
    ServicePriceOverride,
    Vendor,
    VendorStatus,
)
from tembea.services.errors import (
    OverrideNotFoundError,
    PricingValidationError,
    ServiceNotFoundError,
    TierNotFoundError,
)
from tembea.services.fee_split import HUNDRED, to_decimal
from tembea.services.tier_assignment import effective_tier_id
from tembea.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)

TIER_FIELDS = {
    "name",
    "commission_type",
    "commission_value",
    "min_monthly_bookings",
    "min_rating",
    "priority_order",
    "effective_from",
    "effective_until",
    "is_active",
}

OVERRIDE_FIELDS = {
    "override_enabled",
    "override_type",
    "override_value",
    "fee_payer",
    "tourist_percentage",
    "vendor_percentage",
    "effective_from",
    "effective_until",
}


# ── Validation ─────────────────────────────────────────


def normalize_fee_payer(value: Union[FeePayer, str, None]) -> FeePayer:
    """Accept ' Tourist ' and friends; reject anything else."""
    if isinstance(value, FeePayer):
        return value
    normalized = (value or "").strip().lower()
    try:
        return FeePayer(normalized)
    except ValueError:
        raise PricingValidationError(
            f"Invalid fee payer {value!r}, expected vendor, tourist or shared"
        )


def _commission_type(value) -> CommissionType:
    try:
        return CommissionType(value)
    except ValueError:
        raise PricingValidationError(f"Invalid commission type {value!r}, expected percentage or flat")


def _check_amount(commission_type: CommissionType, value) -> Decimal:
    value = to_decimal(value)
    if value < 0:
        raise PricingValidationError("Commission value cannot be negative")
    if commission_type == CommissionType.PERCENTAGE and value > HUNDRED:
        raise PricingValidationError("Percentage commission cannot exceed 100")
    return value


def _require(data: Dict[str, Any], *fields: str) -> None:
    for field in fields:
        if data.get(field) is None:
            raise PricingValidationError(f"{field} cannot be null")


def _check_window(effective_from: Optional[datetime], effective_until: Optional[datetime]) -> None:
    if effective_from is None:
        raise PricingValidationError("effective_from is required")
    if effective_until is not None and as_utc(effective_until) < as_utc(effective_from):
        raise PricingValidationError("effective_until must not be before effective_from")


def validate_tier(data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalise and check a complete tier record."""
    if not (data.get("name") or "").strip():
        raise PricingValidationError("Tier name is required")
    data["name"] = data["name"].strip()
    _require(data, "commission_value", "is_active")

    data["commission_type"] = _commission_type(data.get("commission_type"))
    data["commission_value"] = _check_amount(data["commission_type"], data.get("commission_value"))

    if (data.get("min_monthly_bookings") or 0) < 0:
        raise PricingValidationError("min_monthly_bookings cannot be negative")
    data["min_monthly_bookings"] = data.get("min_monthly_bookings") or 0

    if data.get("min_rating") is not None:
        rating = to_decimal(data["min_rating"])
        if rating < 0 or rating > 5:
            raise PricingValidationError("min_rating must be between 0 and 5")
        data["min_rating"] = rating

    if data.get("priority_order") is None or data["priority_order"] < 1:
        raise PricingValidationError("priority_order must be a positive integer")

    _check_window(data.get("effective_from"), data.get("effective_until"))
    return data


def validate_override(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalise and check a complete override record.

    Shared splits must name both percentages and they must add up to
    100; for the other payers the percentages are cleared.
    """
    _require(data, "override_value", "override_enabled")
    data["fee_payer"] = normalize_fee_payer(data.get("fee_payer"))
    data["override_type"] = _commission_type(data.get("override_type"))
    data["override_value"] = _check_amount(data["override_type"], data.get("override_value"))

    if data["fee_payer"] == FeePayer.SHARED:
        tourist = data.get("tourist_percentage")
        vendor = data.get("vendor_percentage")
        if tourist is None or vendor is None:
            raise PricingValidationError(
                "Shared fee payer needs both tourist_percentage and vendor_percentage"
            )
        tourist, vendor = to_decimal(tourist), to_decimal(vendor)
        for pct in (tourist, vendor):
            if pct < 0 or pct > HUNDRED:
                raise PricingValidationError("Split percentages must be between 0 and 100")
        if tourist + vendor != HUNDRED:
            raise PricingValidationError(
                f"Split percentages must add up to 100 (got {tourist} + {vendor})"
            )
        data["tourist_percentage"] = tourist
        data["vendor_percentage"] = vendor
    else:
        data["tourist_percentage"] = None
        data["vendor_percentage"] = None

    _check_window(data.get("effective_from"), data.get("effective_until"))
    return data


def _reject_unknown(changes: Dict[str, Any], allowed: set) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise PricingValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")


# ── Tiers ──────────────────────────────────────────────


async def list_tiers(db: AsyncSession, include_inactive: bool = False) -> List[CommissionTier]:
    query = select(CommissionTier).order_by(
        CommissionTier.priority_order.asc(), CommissionTier.id.asc()
    )
    if not include_inactive:
        query = query.where(CommissionTier.is_active == True)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_tier(db: AsyncSession, tier_id: int) -> CommissionTier:
    tier = await db.get(CommissionTier, tier_id)
    if tier is None:
        raise TierNotFoundError(tier_id)
    return tier


async def create_tier(
    db: AsyncSession,
    created_by: Optional[int] = None,
    **fields,
) -> CommissionTier:
    _reject_unknown(fields, TIER_FIELDS)
    fields.setdefault("effective_from", utcnow())
    fields.setdefault("is_active", True)
    data = validate_tier(dict(fields))

    tier = CommissionTier(created_by=created_by, **data)
    db.add(tier)
    await db.flush()

    logger.info(f"Tier {tier.name} created (id={tier.id})")
    return tier


async def update_tier(db: AsyncSession, tier_id: int, **changes) -> CommissionTier:
    _reject_unknown(changes, TIER_FIELDS)
    tier = await get_tier(db, tier_id)

    merged = {name: getattr(tier, name) for name in TIER_FIELDS}
    merged.update(changes)
    data = validate_tier(merged)

    for name in changes:
        setattr(tier, name, data[name])
    await db.flush()

    logger.info(f"Tier {tier_id} updated: {', '.join(sorted(changes))}")
    return tier


async def deactivate_tier(db: AsyncSession, tier_id: int) -> CommissionTier:
    """Tiers are never deleted; vendors keep referencing inactive ones."""
    tier = await get_tier(db, tier_id)
    tier.is_active = False
    await db.flush()

    logger.info(f"Tier {tier_id} deactivated")
    return tier


async def count_vendors_by_tier(db: AsyncSession, now: Optional[datetime] = None) -> Dict[int, int]:
    """Approved vendors per effective tier id."""
    now = now or utcnow()
    result = await db.execute(
        select(Vendor).where(Vendor.status == VendorStatus.APPROVED)
    )

    counts: Dict[int, int] = {}
    for vendor in result.scalars().all():
        tier_id = effective_tier_id(vendor, now)
        if tier_id is not None:
            counts[tier_id] = counts.get(tier_id, 0) + 1
    return counts


# ── Overrides ──────────────────────────────────────────


async def list_overrides(
    db: AsyncSession,
    service_id: Optional[int] = None,
) -> List[ServicePriceOverride]:
    query = select(ServicePriceOverride).order_by(
        ServicePriceOverride.service_id.asc(),
        ServicePriceOverride.effective_from.desc(),
    )
    if service_id is not None:
        query = query.where(ServicePriceOverride.service_id == service_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_override(db: AsyncSession, override_id: int) -> ServicePriceOverride:
    override = await db.get(ServicePriceOverride, override_id)
    if override is None:
        raise OverrideNotFoundError(override_id)
    return override


async def create_override(
    db: AsyncSession,
    service_id: int,
    created_by: Optional[int] = None,
    **fields,
) -> ServicePriceOverride:
    """
    Give a service its own commission.

    A service carries at most one override; change the existing one
    with update_override() instead.
    """
    _reject_unknown(fields, OVERRIDE_FIELDS)
    fields.setdefault("effective_from", utcnow())
    fields.setdefault("override_enabled", True)
    fields.setdefault("fee_payer", FeePayer.VENDOR)
    data = validate_override(dict(fields))

    service = await db.get(Service, service_id)
    if service is None:
        raise ServiceNotFoundError(service_id)

    existing = await db.scalar(
        select(ServicePriceOverride.id)
        .where(ServicePriceOverride.service_id == service_id)
        .limit(1)
    )
    if existing is not None:
        raise PricingValidationError(
            f"Service {service_id} already has an override (id={existing})"
        )

    override = ServicePriceOverride(service_id=service_id, created_by=created_by, **data)
    db.add(override)
    await db.flush()

    logger.info(
        f"Override {override.id} created for service {service_id} "
        f"({data['override_type'].value} {data['override_value']}, {data['fee_payer'].value} pays)"
    )
    return override


async def update_override(db: AsyncSession, override_id: int, **changes) -> ServicePriceOverride:
    _reject_unknown(changes, OVERRIDE_FIELDS)
    override = await get_override(db, override_id)

    merged = {name: getattr(override, name) for name in OVERRIDE_FIELDS}
    merged.update(changes)
    data = validate_override(merged)

    # Percentages follow the payer even when only fee_payer changed
    for name in set(changes) | {"tourist_percentage", "vendor_percentage"}:
        setattr(override, name, data[name])
    await db.flush()

    logger.info(f"Override {override_id} updated: {', '.join(sorted(changes))}")
    return override


async def delete_override(db: AsyncSession, override_id: int) -> int:
    """Remove an override; returns the service it belonged to."""
    override = await get_override(db, override_id)
    service_id = override.service_id
    await db.delete(override)
    await db.flush()

    logger.info(f"Override {override_id} deleted, service {service_id} back on tier pricing")
    return service_id
