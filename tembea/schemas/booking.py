"""Booking schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from tembea.models.booking import BookingStatus


class BookingResponse(BaseModel):
    """Booking with its commission snapshot, as shown on receipts."""

    id: int
    service_id: int
    service_title: Optional[str] = None
    vendor_id: int
    customer_name: str
    status: BookingStatus
    total_amount: Decimal
    commission_rate_at_booking: Optional[Decimal]
    commission_amount: Optional[Decimal]
    vendor_payout_amount: Optional[Decimal]
    commission_snapshot_at: Optional[datetime]

    model_config = {"from_attributes": True}
