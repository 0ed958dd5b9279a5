"""
Database models for Tembea pricing.

All models are exported here for convenient imports:
    from tembea.models import Vendor, CommissionTier, ServicePriceOverride, etc.
"""

from tembea.models.audit import AuditAction, AuditLog
from tembea.models.base import Base, BaseModel, TimestampMixin
from tembea.models.booking import Booking, BookingStatus
from tembea.models.override import FeePayer, ServicePriceOverride
from tembea.models.review import ServiceReview
from tembea.models.service import Service, ServiceStatus
from tembea.models.tier import CommissionTier, CommissionType
from tembea.models.user import User, UserRole
from tembea.models.vendor import Vendor, VendorStatus

__all__ = [
    # Base
    "Base",
    "BaseModel",
    "TimestampMixin",
    # User
    "User",
    "UserRole",
    # Pricing rules
    "CommissionTier",
    "CommissionType",
    "ServicePriceOverride",
    "FeePayer",
    # Marketplace
    "Vendor",
    "VendorStatus",
    "Service",
    "ServiceStatus",
    "Booking",
    "BookingStatus",
    "ServiceReview",
    # Audit
    "AuditLog",
    "AuditAction",
]
