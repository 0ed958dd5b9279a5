"""Vendor panel: own tier and progress to the next one."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tembea.auth.dependencies import require_vendor
from tembea.db import get_db
from tembea.models import User
from tembea.schemas.vendor import VendorTierResponse, vendor_tier_response
from tembea.services.tier_assignment import get_vendor_tier_info

router = APIRouter(prefix="/tier")


@router.get("", response_model=VendorTierResponse)
async def my_tier(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_vendor),
):
    info = await get_vendor_tier_info(db, current_user.vendor_id)
    return vendor_tier_response(info)
