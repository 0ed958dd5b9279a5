"""
Vendor model with commission tier assignment.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tembea.models.base import BaseModel

if TYPE_CHECKING:
    from tembea.models.service import Service
    from tembea.models.tier import CommissionTier


class VendorStatus(str, Enum):
    """Vendor onboarding status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class Vendor(BaseModel):
    """
    A business selling services on the marketplace.

    current_tier_id holds the result of the automatic evaluation only.
    A manual tier lives in manual_tier_id and wins while it has not
    expired; use services.tier_assignment.effective_tier_id() to read
    the tier that actually applies.
    """

    __tablename__ = "vendors"

    business_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    status: Mapped[VendorStatus] = mapped_column(
        SQLAlchemyEnum(
            VendorStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=VendorStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Automatic tier
    current_tier_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("commission_tiers.id"),
        nullable=True,
    )
    current_commission_rate: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(9, 6),
        nullable=True,
        comment="Rate of current_tier_id as a fraction; NULL for flat tiers",
    )
    last_tier_evaluated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    monthly_booking_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    average_rating: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(3, 2),
        nullable=True,
    )

    # Manual tier
    manual_tier_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("commission_tiers.id"),
        nullable=True,
        index=True,
    )
    manual_tier_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )
    manual_tier_reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    manual_tier_assigned_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="users.id of the admin who set the manual tier",
    )

    # Optimistic concurrency for tier writes
    version_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Relationships
    current_tier: Mapped[Optional["CommissionTier"]] = relationship(
        "CommissionTier",
        foreign_keys=[current_tier_id],
    )
    manual_tier: Mapped[Optional["CommissionTier"]] = relationship(
        "CommissionTier",
        foreign_keys=[manual_tier_id],
    )
    services: Mapped[List["Service"]] = relationship(
        "Service",
        back_populates="vendor",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Vendor(id={self.id}, business_name='{self.business_name}', status={self.status})>"
