"""
Booking model with the commission snapshot taken at confirmation.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tembea.models.base import BaseModel

if TYPE_CHECKING:
    from tembea.models.service import Service
    from tembea.models.vendor import Vendor


class BookingStatus(str, Enum):
    """Booking lifecycle."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Booking(BaseModel):
    """
    A customer's booking of a service.

    The commission_* and vendor_payout_amount columns are written once,
    when the booking is confirmed, and never recomputed afterwards.
    """

    __tablename__ = "bookings"

    service_id: Mapped[int] = mapped_column(
        ForeignKey("services.id"),
        nullable=False,
        index=True,
    )
    vendor_id: Mapped[int] = mapped_column(
        ForeignKey("vendors.id"),
        nullable=False,
        index=True,
    )
    customer_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    customer_email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    status: Mapped[BookingStatus] = mapped_column(
        SQLAlchemyEnum(
            BookingStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True,
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(16, 4),
        nullable=False,
    )
    booking_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
    )

    # Commission snapshot
    commission_rate_at_booking: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(9, 6),
        nullable=True,
    )
    commission_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(16, 4),
        nullable=True,
    )
    vendor_payout_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(16, 4),
        nullable=True,
    )
    commission_snapshot_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    service: Mapped["Service"] = relationship(
        "Service",
        back_populates="bookings",
    )
    vendor: Mapped["Vendor"] = relationship("Vendor")

    @property
    def has_commission_snapshot(self) -> bool:
        return self.commission_snapshot_at is not None

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, service_id={self.service_id}, status={self.status})>"
