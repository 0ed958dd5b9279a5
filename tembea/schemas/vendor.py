"""Vendor tier schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from tembea.models.tier import CommissionType


class TierSummary(BaseModel):
    id: int
    name: str
    commission_type: CommissionType
    commission_value: Decimal
    priority_order: int

    model_config = {"from_attributes": True}


class ManualTierAssign(BaseModel):
    """Put a vendor on a tier by hand."""

    tier_id: int
    expires_at: Optional[datetime] = None
    reason: Optional[str] = Field(None, max_length=500)


class TierProgressResponse(BaseModel):
    next_tier: Optional[TierSummary] = None
    progress_percentage: Decimal
    requirements: List[str] = Field(default_factory=list)


class VendorTierResponse(BaseModel):
    vendor_id: int
    business_name: str
    state: str
    effective_tier: Optional[TierSummary] = None
    automatic_tier: Optional[TierSummary] = None
    manual_tier: Optional[TierSummary] = None
    manual_tier_expires_at: Optional[datetime] = None
    manual_tier_reason: Optional[str] = None
    monthly_bookings: int
    average_rating: Optional[Decimal] = None
    last_tier_evaluated_at: Optional[datetime] = None
    progress: TierProgressResponse


class VendorJobErrorResponse(BaseModel):
    vendor_id: int
    error: str


class TierEvaluationResponse(BaseModel):
    evaluated: int
    changed: int
    skipped_vendor_ids: List[int]
    errors: List[VendorJobErrorResponse]


class CleanupResponse(BaseModel):
    cleaned_count: int
    errors: List[VendorJobErrorResponse]


def tier_summary(tier) -> Optional[TierSummary]:
    return TierSummary.model_validate(tier) if tier is not None else None


def vendor_tier_response(info) -> VendorTierResponse:
    """Build the response from a tier_assignment.VendorTierInfo."""
    vendor = info.vendor
    return VendorTierResponse(
        vendor_id=vendor.id,
        business_name=vendor.business_name,
        state=info.state.value,
        effective_tier=tier_summary(info.effective_tier),
        automatic_tier=tier_summary(info.automatic_tier),
        manual_tier=tier_summary(info.manual_tier),
        manual_tier_expires_at=vendor.manual_tier_expires_at,
        manual_tier_reason=vendor.manual_tier_reason,
        monthly_bookings=info.metrics.monthly_bookings,
        average_rating=info.metrics.average_rating,
        last_tier_evaluated_at=vendor.last_tier_evaluated_at,
        progress=TierProgressResponse(
            next_tier=tier_summary(info.progress.next_tier),
            progress_percentage=info.progress.progress_percentage,
            requirements=info.progress.requirements,
        ),
    )
