"""
Public pricing preview.

Checkout and service pages call this to show the customer total and the
vendor payout before a booking exists.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tembea.db import get_db
from tembea.schemas.pricing import DisplayAmounts, PricingPreviewResponse
from tembea.services.errors import ServiceNotFoundError, StorageError
from tembea.services.fee_resolver import get_pricing_preview
from tembea.services.fee_split import round_for_display

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pricing", tags=["Pricing"])


@router.get("/services/{service_id}/preview", response_model=PricingPreviewResponse)
async def preview_service_pricing(
    service_id: int,
    base_price: Optional[Decimal] = Query(None, gt=0, description="Ticket price; defaults to the listing price"),
    as_of: Optional[datetime] = Query(None, description="Moment of sale; defaults to now"),
    db: AsyncSession = Depends(get_db),
):
    """Fee breakdown for one sale of a service."""
    try:
        preview = await get_pricing_preview(db, service_id, base_price, as_of)
    except ServiceNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service not found",
        )
    except StorageError as e:
        logger.error(f"Pricing preview for service {service_id} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Unable to load pricing",
        )

    fee = preview.resolution
    return PricingPreviewResponse(
        service_id=service_id,
        currency=preview.currency,
        base_price=fee.base_price,
        platform_fee=fee.platform_fee,
        tourist_fee=fee.tourist_fee,
        vendor_fee=fee.vendor_fee,
        vendor_payout=fee.vendor_payout,
        total_customer_payment=fee.total_customer_payment,
        fee_payer=fee.fee_payer,
        pricing_source=fee.pricing_source,
        pricing_reference_id=fee.pricing_reference_id,
        applied_rule=preview.applied_rule,
        display=DisplayAmounts(
            platform_fee=round_for_display(fee.platform_fee, preview.currency),
            total_customer_payment=round_for_display(fee.total_customer_payment, preview.currency),
            vendor_payout=round_for_display(fee.vendor_payout, preview.currency),
        ),
    )
