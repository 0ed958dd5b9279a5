"""
Service model: a bookable listing owned by a vendor.
"""

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tembea.models.base import BaseModel

if TYPE_CHECKING:
    from tembea.models.booking import Booking
    from tembea.models.override import ServicePriceOverride
    from tembea.models.review import ServiceReview
    from tembea.models.vendor import Vendor


class ServiceStatus(str, Enum):
    """Listing moderation status."""
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    INACTIVE = "inactive"


class Service(BaseModel):
    """A tour, stay or activity with a listing price."""

    __tablename__ = "services"

    vendor_id: Mapped[int] = mapped_column(
        ForeignKey("vendors.id"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(16, 4),
        nullable=False,
    )
    currency: Mapped[str] = mapped_column(
        String(3),
        default="TZS",
        nullable=False,
        comment="ISO 4217 code of the listing price",
    )
    status: Mapped[ServiceStatus] = mapped_column(
        SQLAlchemyEnum(
            ServiceStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=ServiceStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Relationships
    vendor: Mapped["Vendor"] = relationship(
        "Vendor",
        back_populates="services",
    )
    price_overrides: Mapped[List["ServicePriceOverride"]] = relationship(
        "ServicePriceOverride",
        back_populates="service",
        cascade="all, delete-orphan",
    )
    bookings: Mapped[List["Booking"]] = relationship(
        "Booking",
        back_populates="service",
    )
    reviews: Mapped[List["ServiceReview"]] = relationship(
        "ServiceReview",
        back_populates="service",
    )

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, title='{self.title}', price={self.price} {self.currency})>"
