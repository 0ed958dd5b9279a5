"""Pricing preview schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class DisplayAmounts(BaseModel):
    """Final amounts rounded to the currency's display precision."""

    platform_fee: Decimal
    total_customer_payment: Decimal
    vendor_payout: Decimal


class PricingPreviewResponse(BaseModel):
    service_id: int
    currency: str
    base_price: Decimal
    platform_fee: Decimal
    tourist_fee: Decimal
    vendor_fee: Decimal
    vendor_payout: Decimal
    total_customer_payment: Decimal
    fee_payer: str
    pricing_source: str
    pricing_reference_id: str
    applied_rule: str
    display: DisplayAmounts
    error: Optional[str] = None
