"""
Commission snapshot on bookings.

When a booking is confirmed, the vendor's tier commission at that moment
is written onto the booking row. Later tier or rate changes never touch
existing bookings; payouts and receipts read the snapshot.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tembea.models import Booking, BookingStatus, Vendor
from tembea.services.errors import (
    BookingNotFoundError,
    PricingValidationError,
    StorageError,
    VendorNotFoundError,
)
from tembea.services.fee_resolver import resolve_tier_commission
from tembea.services.fee_split import Number, to_decimal
from tembea.utils.dates import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommissionCalculation:
    commission_rate: Decimal
    commission_amount: Decimal
    vendor_payout_amount: Decimal
    service_price: Decimal
    tier_id: Optional[int]


async def calculate_commission(
    db: AsyncSession,
    vendor_id: int,
    service_price: Number,
    as_of: Optional[datetime] = None,
) -> CommissionCalculation:
    """
    Tier commission for a vendor at a given price.

    Overrides are not consulted: they are service-level and were already
    applied when the checkout price was resolved.

    Raises:
        VendorNotFoundError: unknown vendor
    """
    vendor = await db.get(Vendor, vendor_id)
    if vendor is None:
        raise VendorNotFoundError(vendor_id)

    price = to_decimal(service_price)
    commission = await resolve_tier_commission(db, vendor, price, as_of)

    return CommissionCalculation(
        commission_rate=commission.commission_rate,
        commission_amount=commission.commission_amount,
        vendor_payout_amount=price - commission.commission_amount,
        service_price=price,
        tier_id=commission.tier_id,
    )


async def _load_booking(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .options(selectinload(Booking.service))
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingNotFoundError(booking_id)
    return booking


async def apply_commission(
    db: AsyncSession,
    booking_id: int,
    vendor_id: int,
    service_price: Number,
) -> Booking:
    """
    Write the commission snapshot onto a booking.

    A booking that already carries a snapshot is returned untouched.
    Runs inside the caller's transaction: flushes but never commits, so
    a failure here leaves nothing half-written.

    Returns:
        The booking with its service loaded (title for receipts)
    """
    try:
        booking = await _load_booking(db, booking_id)

        if booking.has_commission_snapshot:
            logger.debug(f"Booking {booking_id} already has a commission snapshot")
            return booking

        calculation = await calculate_commission(db, vendor_id, service_price)

        booking.commission_rate_at_booking = calculation.commission_rate
        booking.commission_amount = calculation.commission_amount
        booking.vendor_payout_amount = calculation.vendor_payout_amount
        booking.commission_snapshot_at = utcnow()
        await db.flush()
    except SQLAlchemyError as e:
        logger.error(f"Commission snapshot failed for booking {booking_id}: {e}")
        raise StorageError(str(e)) from e

    logger.info(
        f"Booking {booking_id} commission {calculation.commission_amount} "
        f"(rate {calculation.commission_rate}, tier {calculation.tier_id})"
    )
    return booking


async def confirm_booking(db: AsyncSession, booking_id: int) -> Booking:
    """
    Confirm a pending booking and snapshot its commission.

    The commission is taken on the service's listing price, not on
    total_amount, which may already carry a tourist-paid fee. Both
    changes are flushed together; if the snapshot fails the status
    change is never written. The caller commits.
    """
    booking = await _load_booking(db, booking_id)

    if booking.status != BookingStatus.PENDING:
        raise PricingValidationError(
            f"Booking {booking_id} is {booking.status.value}, only pending bookings can be confirmed"
        )

    booking = await apply_commission(db, booking.id, booking.vendor_id, booking.service.price)
    booking.status = BookingStatus.CONFIRMED
    await db.flush()

    logger.info(f"Booking {booking_id} confirmed")
    return booking
