"""Service price override schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from tembea.models.override import FeePayer
from tembea.models.tier import CommissionType


class OverrideCreate(BaseModel):
    """
    Create an override for a service.

    fee_payer is free text here; it is trimmed and lower-cased before
    being checked against vendor / tourist / shared.
    """

    service_id: int
    override_type: CommissionType
    override_value: Decimal = Field(..., ge=0)
    fee_payer: str = Field("vendor", max_length=20)
    tourist_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    vendor_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    effective_from: Optional[datetime] = None
    effective_until: Optional[datetime] = None
    override_enabled: bool = True


class OverrideUpdate(BaseModel):
    override_type: Optional[CommissionType] = None
    override_value: Optional[Decimal] = Field(None, ge=0)
    fee_payer: Optional[str] = Field(None, max_length=20)
    tourist_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    vendor_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    effective_from: Optional[datetime] = None
    effective_until: Optional[datetime] = None
    override_enabled: Optional[bool] = None


class OverrideResponse(BaseModel):
    id: int
    service_id: int
    override_enabled: bool
    override_type: CommissionType
    override_value: Decimal
    fee_payer: FeePayer
    tourist_percentage: Optional[Decimal]
    vendor_percentage: Optional[Decimal]
    effective_from: datetime
    effective_until: Optional[datetime]
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}
