"""
Vendor tier assignment.

Each vendor is on exactly one tier at a time:
- AutomaticallyTiered: current_tier_id, set by the monthly evaluation
- ManuallyTieredActive: an admin-chosen manual_tier_id that has not expired
- ManuallyTieredExpired: manual fields still set but past their expiry,
  waiting for the cleanup sweep to put the vendor back on automatic

The manual tier is never copied into current_tier_id. Anything that needs
"the tier this vendor is on" goes through effective_tier_id().
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tembea.config import settings
from tembea.models import (
    Booking,
    BookingStatus,
    CommissionTier,
    Service,
    ServiceReview,
    Vendor,
    VendorStatus,
)
from tembea.services.errors import (
    PricingValidationError,
    TierNotFoundError,
    VendorNotFoundError,
)
from tembea.services.fee_split import to_decimal
from tembea.services.tier_eligibility import (
    NextTierProgress,
    VendorMetrics,
    next_tier_progress,
    select_tier,
)
from tembea.utils.dates import as_utc, start_of_month, utcnow

logger = logging.getLogger(__name__)


class VendorTierState(str, Enum):
    AUTOMATIC = "automatically_tiered"
    MANUAL_ACTIVE = "manually_tiered_active"
    MANUAL_EXPIRED = "manually_tiered_expired"


@dataclass
class TierEvaluationResult:
    vendor_id: int
    previous_tier_id: Optional[int]
    new_tier_id: Optional[int]
    monthly_bookings: int
    average_rating: Optional[Decimal]
    tier_changed: bool


@dataclass
class VendorJobError:
    vendor_id: int
    error: str


@dataclass
class TierEvaluationReport:
    """Outcome of one evaluation run."""

    evaluated_at: datetime
    results: List[TierEvaluationResult] = field(default_factory=list)
    skipped_vendor_ids: List[int] = field(default_factory=list)
    errors: List[VendorJobError] = field(default_factory=list)

    @property
    def changed_count(self) -> int:
        return sum(1 for r in self.results if r.tier_changed)


@dataclass
class CleanupReport:
    """Outcome of one expired-manual-tier sweep."""

    cleaned_count: int = 0
    errors: List[VendorJobError] = field(default_factory=list)


@dataclass
class VendorTierInfo:
    vendor: Vendor
    state: VendorTierState
    effective_tier: Optional[CommissionTier]
    automatic_tier: Optional[CommissionTier]
    manual_tier: Optional[CommissionTier]
    metrics: VendorMetrics
    progress: NextTierProgress


# ── State ──────────────────────────────────────────────


def has_active_manual_tier(vendor, now: datetime) -> bool:
    """Manual tier set and either open-ended or expiring after ``now``."""
    if vendor.manual_tier_id is None:
        return False
    expires_at = as_utc(vendor.manual_tier_expires_at)
    return expires_at is None or expires_at > as_utc(now)


def vendor_tier_state(vendor, now: datetime) -> VendorTierState:
    if vendor.manual_tier_id is None:
        return VendorTierState.AUTOMATIC
    if has_active_manual_tier(vendor, now):
        return VendorTierState.MANUAL_ACTIVE
    return VendorTierState.MANUAL_EXPIRED


def effective_tier_id(vendor, now: datetime) -> Optional[int]:
    """The tier that prices this vendor's sales at ``now``."""
    if has_active_manual_tier(vendor, now):
        return vendor.manual_tier_id
    return vendor.current_tier_id


# ── Reads ──────────────────────────────────────────────


async def get_effective_tiers(db: AsyncSession, as_of: datetime) -> List[CommissionTier]:
    """Active tiers in force at ``as_of``, floor tier first."""
    result = await db.execute(
        select(CommissionTier)
        .where(
            and_(
                CommissionTier.is_active == True,
                CommissionTier.effective_from <= as_of,
                or_(
                    CommissionTier.effective_until.is_(None),
                    CommissionTier.effective_until >= as_of,
                ),
            )
        )
        .order_by(CommissionTier.priority_order.asc(), CommissionTier.id.asc())
    )
    return list(result.scalars().all())


async def calculate_vendor_metrics(
    db: AsyncSession,
    vendor_id: int,
    now: Optional[datetime] = None,
) -> VendorMetrics:
    """
    Completed bookings created this calendar month (UTC) and the
    average review rating across the vendor's services.

    Vendors without reviews get settings.placeholder_vendor_rating.
    """
    now = now or utcnow()

    bookings = await db.scalar(
        select(func.count(Booking.id)).where(
            and_(
                Booking.vendor_id == vendor_id,
                Booking.status == BookingStatus.COMPLETED,
                Booking.created_at >= start_of_month(now),
            )
        )
    )

    average = await db.scalar(
        select(func.avg(ServiceReview.rating))
        .join(Service, Service.id == ServiceReview.service_id)
        .where(Service.vendor_id == vendor_id)
    )
    if average is None:
        rating = to_decimal(settings.placeholder_vendor_rating)
    else:
        rating = to_decimal(average)

    return VendorMetrics(monthly_bookings=bookings or 0, average_rating=rating)


async def get_vendor_tier_info(
    db: AsyncSession,
    vendor_id: int,
    now: Optional[datetime] = None,
) -> VendorTierInfo:
    """Tier, assignment state and progress for the admin and vendor panels."""
    now = now or utcnow()

    vendor = await db.get(Vendor, vendor_id)
    if vendor is None:
        raise VendorNotFoundError(vendor_id)

    tier_id = effective_tier_id(vendor, now)
    effective = await db.get(CommissionTier, tier_id) if tier_id else None
    automatic = (
        await db.get(CommissionTier, vendor.current_tier_id)
        if vendor.current_tier_id else None
    )
    manual = (
        await db.get(CommissionTier, vendor.manual_tier_id)
        if vendor.manual_tier_id else None
    )

    metrics = await calculate_vendor_metrics(db, vendor_id, now)
    tiers = await get_effective_tiers(db, now)

    return VendorTierInfo(
        vendor=vendor,
        state=vendor_tier_state(vendor, now),
        effective_tier=effective,
        automatic_tier=automatic,
        manual_tier=manual,
        metrics=metrics,
        progress=next_tier_progress(metrics, effective, tiers),
    )


# ── Writes ─────────────────────────────────────────────


def _apply_automatic_tier(vendor: Vendor, tier: Optional[CommissionTier], metrics: VendorMetrics) -> bool:
    """Write the evaluator's choice and cached metrics; True if the tier moved."""
    changed = tier is not None and vendor.current_tier_id != tier.id
    if changed:
        vendor.current_tier_id = tier.id
        vendor.current_commission_rate = tier.commission_rate

    vendor.monthly_booking_count = metrics.monthly_bookings
    if metrics.average_rating is not None:
        vendor.average_rating = metrics.average_rating.quantize(Decimal("0.01"))
    return changed


async def evaluate_vendor_tiers(
    db: AsyncSession,
    now: Optional[datetime] = None,
) -> TierEvaluationReport:
    """
    Monthly evaluation of every approved vendor.

    Vendors with an active manual tier are skipped. Every other vendor
    is committed on its own; a failure rolls back that vendor only and
    is recorded in the report.
    """
    now = now or utcnow()
    report = TierEvaluationReport(evaluated_at=now)

    vendor_ids = (
        await db.execute(
            select(Vendor.id)
            .where(Vendor.status == VendorStatus.APPROVED)
            .order_by(Vendor.id)
        )
    ).scalars().all()

    tiers = await get_effective_tiers(db, now)
    if not tiers:
        logger.warning("No effective commission tiers, vendors keep their current tier")

    for vendor_id in vendor_ids:
        try:
            vendor = await db.get(Vendor, vendor_id)
            if vendor is None:
                continue

            if has_active_manual_tier(vendor, now):
                logger.debug(f"Vendor {vendor_id} has an active manual tier, skipping")
                report.skipped_vendor_ids.append(vendor_id)
                continue

            metrics = await calculate_vendor_metrics(db, vendor_id, now)
            tier = select_tier(metrics, tiers)
            previous_tier_id = vendor.current_tier_id

            changed = _apply_automatic_tier(vendor, tier, metrics)
            vendor.last_tier_evaluated_at = now
            await db.commit()

            if changed:
                logger.info(
                    f"Vendor {vendor_id} moved from tier {previous_tier_id} to {tier.id} "
                    f"({metrics.monthly_bookings} bookings, rating {metrics.average_rating})"
                )

            report.results.append(
                TierEvaluationResult(
                    vendor_id=vendor_id,
                    previous_tier_id=previous_tier_id,
                    new_tier_id=tier.id if tier else previous_tier_id,
                    monthly_bookings=metrics.monthly_bookings,
                    average_rating=metrics.average_rating,
                    tier_changed=changed,
                )
            )
        except Exception as e:
            await db.rollback()
            logger.warning(f"Tier evaluation failed for vendor {vendor_id}: {e}")
            report.errors.append(VendorJobError(vendor_id=vendor_id, error=str(e)))
            # rollback expired the tier rows
            tiers = await get_effective_tiers(db, now)

    logger.info(
        f"Tier evaluation: {len(report.results)} evaluated, {report.changed_count} changed, "
        f"{len(report.skipped_vendor_ids)} skipped, {len(report.errors)} failed"
    )
    return report


async def cleanup_expired_manual_tiers(
    db: AsyncSession,
    now: Optional[datetime] = None,
) -> CleanupReport:
    """
    Return vendors whose manual tier has expired to automatic tiering.

    The automatic tier is recomputed from live metrics and written in the
    same flush that clears the manual fields. Best effort: one vendor
    failing does not stop the sweep.
    """
    now = now or utcnow()
    report = CleanupReport()

    vendor_ids = (
        await db.execute(
            select(Vendor.id)
            .where(
                and_(
                    Vendor.manual_tier_id.is_not(None),
                    Vendor.manual_tier_expires_at.is_not(None),
                    Vendor.manual_tier_expires_at <= now,
                )
            )
            .order_by(Vendor.id)
        )
    ).scalars().all()

    if not vendor_ids:
        logger.debug("No expired manual tiers")
        return report

    tiers = await get_effective_tiers(db, now)

    for vendor_id in vendor_ids:
        try:
            vendor = await db.get(Vendor, vendor_id)
            if vendor is None or vendor_tier_state(vendor, now) != VendorTierState.MANUAL_EXPIRED:
                continue

            metrics = await calculate_vendor_metrics(db, vendor_id, now)
            tier = select_tier(metrics, tiers)
            expired_tier_id = vendor.manual_tier_id

            _apply_automatic_tier(vendor, tier, metrics)
            vendor.manual_tier_id = None
            vendor.manual_tier_expires_at = None
            vendor.manual_tier_reason = None
            vendor.manual_tier_assigned_by = None
            vendor.last_tier_evaluated_at = now
            await db.commit()

            report.cleaned_count += 1
            logger.info(
                f"Vendor {vendor_id} manual tier {expired_tier_id} expired, "
                f"back on automatic tier {vendor.current_tier_id}"
            )
        except Exception as e:
            await db.rollback()
            logger.warning(f"Manual tier cleanup failed for vendor {vendor_id}: {e}")
            report.errors.append(VendorJobError(vendor_id=vendor_id, error=str(e)))
            tiers = await get_effective_tiers(db, now)

    logger.info(f"Manual tier cleanup: {report.cleaned_count} cleaned, {len(report.errors)} failed")
    return report


async def assign_manual_tier(
    db: AsyncSession,
    vendor_id: int,
    tier_id: int,
    expires_at: Optional[datetime] = None,
    reason: Optional[str] = None,
    assigned_by: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Vendor:
    """
    Put a vendor on an admin-chosen tier, optionally until ``expires_at``.

    current_tier_id is left alone so the automatic tier is still there
    when the manual one ends. Flushes; the caller commits.

    Raises:
        VendorNotFoundError, TierNotFoundError
        PricingValidationError: tier inactive or expiry not in the future
    """
    now = now or utcnow()

    vendor = await db.get(Vendor, vendor_id)
    if vendor is None:
        raise VendorNotFoundError(vendor_id)

    tier = await db.get(CommissionTier, tier_id)
    if tier is None:
        raise TierNotFoundError(tier_id)
    if not tier.is_active:
        raise PricingValidationError(f"Tier {tier_id} is not active")

    if expires_at is not None and as_utc(expires_at) <= as_utc(now):
        raise PricingValidationError("Manual tier expiry must be in the future")

    vendor.manual_tier_id = tier.id
    vendor.manual_tier_expires_at = expires_at
    vendor.manual_tier_reason = reason.strip() if reason else None
    vendor.manual_tier_assigned_by = assigned_by
    await db.flush()

    logger.info(
        f"Vendor {vendor_id} manually assigned to tier {tier.name} "
        f"(until {expires_at.isoformat() if expires_at else 'revoked'})"
    )
    return vendor


async def remove_manual_tier(
    db: AsyncSession,
    vendor_id: int,
    now: Optional[datetime] = None,
) -> Vendor:
    """Drop the manual tier and re-evaluate the vendor straight away."""
    now = now or utcnow()

    vendor = await db.get(Vendor, vendor_id)
    if vendor is None:
        raise VendorNotFoundError(vendor_id)

    if vendor.manual_tier_id is None:
        raise PricingValidationError(f"Vendor {vendor_id} has no manual tier")

    tiers = await get_effective_tiers(db, now)
    metrics = await calculate_vendor_metrics(db, vendor_id, now)
    tier = select_tier(metrics, tiers)

    _apply_automatic_tier(vendor, tier, metrics)
    vendor.manual_tier_id = None
    vendor.manual_tier_expires_at = None
    vendor.manual_tier_reason = None
    vendor.manual_tier_assigned_by = None
    vendor.last_tier_evaluated_at = now
    await db.flush()

    logger.info(f"Vendor {vendor_id} manual tier removed, automatic tier {vendor.current_tier_id}")
    return vendor
