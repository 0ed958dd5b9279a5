"""
AuditLog model for tracking administrative actions.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tembea.models.base import Base

if TYPE_CHECKING:
    from tembea.models.user import User


class AuditAction(str, Enum):
    """Types of auditable actions."""
    LOGIN = "login"
    LOGOUT = "logout"
    CREATE_TIER = "create_tier"
    UPDATE_TIER = "update_tier"
    DEACTIVATE_TIER = "deactivate_tier"
    CREATE_OVERRIDE = "create_override"
    UPDATE_OVERRIDE = "update_override"
    DELETE_OVERRIDE = "delete_override"
    ASSIGN_MANUAL_TIER = "assign_manual_tier"
    REMOVE_MANUAL_TIER = "remove_manual_tier"
    RUN_TIER_EVALUATION = "run_tier_evaluation"
    RUN_TIER_CLEANUP = "run_tier_cleanup"
    CONFIRM_BOOKING = "confirm_booking"


class AuditLog(Base):
    """
    Audit log for pricing rule changes.

    Every write that can change what a sale is charged lands here,
    so a disputed commission can be traced back to who changed which rule.
    """

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    action: Mapped[AuditAction] = mapped_column(
        SQLAlchemyEnum(
            AuditAction,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    target_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Type of entity affected (tier, override, vendor, booking)",
    )
    target_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="ID of the affected entity",
    )
    action_metadata: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
        comment="Additional context about the action",
    )
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),
        nullable=True,
        comment="IPv4 or IPv6 address",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="audit_logs",
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, user_id={self.user_id}, action={self.action})>"
