"""Admin booking endpoints."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tembea.auth.dependencies import require_admin
from tembea.db import get_db
from tembea.models import AuditAction, User
from tembea.schemas.booking import BookingResponse
from tembea.services.booking_commission import confirm_booking
from tembea.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/bookings")


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
async def confirm(
    request: Request,
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Confirm a pending booking; its commission is frozen in the same commit."""
    booking = await confirm_booking(db, booking_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.CONFIRM_BOOKING,
        target_type="booking",
        target_id=booking_id,
        action_metadata={
            "commission_amount": booking.commission_amount,
            "commission_rate": booking.commission_rate_at_booking,
        },
        ip_address=get_client_ip(request),
    )
    await db.commit()

    return BookingResponse(
        id=booking.id,
        service_id=booking.service_id,
        service_title=booking.service.title,
        vendor_id=booking.vendor_id,
        customer_name=booking.customer_name,
        status=booking.status,
        total_amount=booking.total_amount,
        commission_rate_at_booking=booking.commission_rate_at_booking,
        commission_amount=booking.commission_amount,
        vendor_payout_amount=booking.vendor_payout_amount,
        commission_snapshot_at=booking.commission_snapshot_at,
    )
