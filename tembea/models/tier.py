"""
CommissionTier model: platform-wide commission schedules.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from tembea.models.base import BaseModel
from tembea.utils.dates import window_contains


class CommissionType(str, Enum):
    """How a commission value is applied to the base price."""
    PERCENTAGE = "percentage"  # percent of base price
    FLAT = "flat"              # absolute amount in the listing currency


class CommissionTier(BaseModel):
    """
    A named commission tier (Bronze, Silver, Gold...).

    Vendors qualify by monthly completed bookings and average rating.
    priority_order ranks the ladder: the lowest number is the floor tier,
    higher numbers are harder to reach. Tiers are never deleted, only
    deactivated, because vendors and audit rows reference them.
    """

    __tablename__ = "commission_tiers"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    commission_type: Mapped[CommissionType] = mapped_column(
        SQLAlchemyEnum(
            CommissionType,
            name="tier_commission_type",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    commission_value: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
    )
    min_monthly_bookings: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    min_rating: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(3, 2),
        nullable=True,
        comment="Minimum average rating; NULL means no rating requirement",
    )
    priority_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )
    effective_from: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    effective_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        index=True,
    )
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="users.id of the creating admin",
    )

    @property
    def commission_rate(self) -> Optional[Decimal]:
        """Commission as a fraction of price, or None for flat tiers."""
        if self.commission_type == CommissionType.PERCENTAGE:
            return Decimal(self.commission_value) / Decimal("100")
        return None

    def is_effective_at(self, moment: datetime) -> bool:
        """Active and inside its validity window at ``moment``."""
        return bool(self.is_active) and window_contains(
            self.effective_from, self.effective_until, moment
        )

    def __repr__(self) -> str:
        return (
            f"<CommissionTier(id={self.id}, name='{self.name}', "
            f"priority_order={self.priority_order})>"
        )
