"""Commission tier schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel, Field

from tembea.models.tier import CommissionType


class TierCreate(BaseModel):
    """Create a commission tier."""

    name: str = Field(..., min_length=1, max_length=100)
    commission_type: CommissionType
    commission_value: Decimal = Field(..., ge=0)
    min_monthly_bookings: int = Field(0, ge=0)
    min_rating: Optional[Decimal] = Field(None, ge=0, le=5)
    priority_order: int = Field(..., ge=1)
    effective_from: Optional[datetime] = None
    effective_until: Optional[datetime] = None
    is_active: bool = True


class TierUpdate(BaseModel):
    """Partial tier update; only fields that are sent are changed."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    commission_type: Optional[CommissionType] = None
    commission_value: Optional[Decimal] = Field(None, ge=0)
    min_monthly_bookings: Optional[int] = Field(None, ge=0)
    min_rating: Optional[Decimal] = Field(None, ge=0, le=5)
    priority_order: Optional[int] = Field(None, ge=1)
    effective_from: Optional[datetime] = None
    effective_until: Optional[datetime] = None
    is_active: Optional[bool] = None


class TierResponse(BaseModel):
    id: int
    name: str
    commission_type: CommissionType
    commission_value: Decimal
    commission_rate: Optional[Decimal]
    min_monthly_bookings: int
    min_rating: Optional[Decimal]
    priority_order: int
    effective_from: datetime
    effective_until: Optional[datetime]
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime]

    # Approved vendors currently priced by this tier
    vendor_count: int = 0

    model_config = {"from_attributes": True}


class TierListResponse(BaseModel):
    tiers: list[TierResponse]
    vendors_by_tier: Dict[int, int] = Field(default_factory=dict)
