"""
ServicePriceOverride model: per-service exceptions to tier pricing.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tembea.models.base import BaseModel
from tembea.models.tier import CommissionType
from tembea.utils.dates import window_contains

if TYPE_CHECKING:
    from tembea.models.service import Service


class FeePayer(str, Enum):
    """Which party bears the platform commission."""
    VENDOR = "vendor"
    TOURIST = "tourist"
    SHARED = "shared"


class ServicePriceOverride(BaseModel):
    """
    Commission schedule for a single service.

    An enabled override in force at the time of sale beats any tier.
    tourist_percentage / vendor_percentage only mean something when
    fee_payer is SHARED.
    """

    __tablename__ = "service_price_overrides"

    service_id: Mapped[int] = mapped_column(
        ForeignKey("services.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    override_enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    override_type: Mapped[CommissionType] = mapped_column(
        SQLAlchemyEnum(
            CommissionType,
            name="override_commission_type",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    override_value: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
    )
    fee_payer: Mapped[FeePayer] = mapped_column(
        SQLAlchemyEnum(
            FeePayer,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=FeePayer.VENDOR,
        nullable=False,
    )
    tourist_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(7, 4),
        nullable=True,
    )
    vendor_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(7, 4),
        nullable=True,
    )
    effective_from: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    effective_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="users.id of the creating admin",
    )

    # Relationships
    service: Mapped["Service"] = relationship(
        "Service",
        back_populates="price_overrides",
    )

    def is_effective_at(self, moment: datetime) -> bool:
        """Enabled and inside its validity window at ``moment``."""
        return bool(self.override_enabled) and window_contains(
            self.effective_from, self.effective_until, moment
        )

    def __repr__(self) -> str:
        return (
            f"<ServicePriceOverride(id={self.id}, service_id={self.service_id}, "
            f"fee_payer={self.fee_payer})>"
        )
