"""Pydantic schemas for request/response validation."""

from tembea.schemas.auth import CurrentUserResponse, LoginRequest, LoginResponse
from tembea.schemas.booking import BookingResponse
from tembea.schemas.override import OverrideCreate, OverrideResponse, OverrideUpdate
from tembea.schemas.pricing import DisplayAmounts, PricingPreviewResponse
from tembea.schemas.tier import TierCreate, TierListResponse, TierResponse, TierUpdate
from tembea.schemas.vendor import (
    CleanupResponse,
    ManualTierAssign,
    TierEvaluationResponse,
    TierProgressResponse,
    TierSummary,
    VendorTierResponse,
    vendor_tier_response,
)

__all__ = [
    # Auth
    "LoginRequest",
    "LoginResponse",
    "CurrentUserResponse",
    # Tiers
    "TierCreate",
    "TierUpdate",
    "TierResponse",
    "TierListResponse",
    # Overrides
    "OverrideCreate",
    "OverrideUpdate",
    "OverrideResponse",
    # Pricing
    "PricingPreviewResponse",
    "DisplayAmounts",
    # Vendors
    "ManualTierAssign",
    "TierSummary",
    "TierProgressResponse",
    "VendorTierResponse",
    "TierEvaluationResponse",
    "CleanupResponse",
    # Bookings
    "BookingResponse",
]
