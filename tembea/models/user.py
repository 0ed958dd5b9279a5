"""
User model for authentication and role management.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tembea.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from tembea.models.audit import AuditLog
    from tembea.models.vendor import Vendor


class UserRole(str, Enum):
    """User roles for access control."""
    ADMIN = "admin"
    VENDOR = "vendor"


class User(Base, TimestampMixin):
    """
    User account model.

    - admin: manages tiers, overrides and manual tier assignments
    - vendor: reads its own tier and progress through the panel
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    role: Mapped[UserRole] = mapped_column(
        SQLAlchemyEnum(
            UserRole,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    display_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    last_active_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    # Set for vendor accounts only
    vendor_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("vendors.id"),
        nullable=True,
        index=True,
    )

    # Relationships
    vendor: Mapped[Optional["Vendor"]] = relationship("Vendor")
    audit_logs: Mapped[List["AuditLog"]] = relationship(
        "AuditLog",
        back_populates="user",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role={self.role})>"
