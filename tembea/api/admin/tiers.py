"""Admin commission tier endpoints."""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tembea.auth.dependencies import require_admin
from tembea.db import get_db
from tembea.models import AuditAction, User
from tembea.schemas.tier import TierCreate, TierListResponse, TierResponse, TierUpdate
from tembea.services import pricing_admin
from tembea.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/tiers")


@router.get("", response_model=TierListResponse)
async def list_tiers(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
    include_inactive: bool = Query(False),
):
    """All tiers, floor tier first, with how many vendors each prices."""
    tiers = await pricing_admin.list_tiers(db, include_inactive=include_inactive)
    counts = await pricing_admin.count_vendors_by_tier(db)

    items = [
        TierResponse.model_validate(tier).model_copy(
            update={"vendor_count": counts.get(tier.id, 0)}
        )
        for tier in tiers
    ]
    return TierListResponse(tiers=items, vendors_by_tier=counts)


@router.post("", response_model=TierResponse, status_code=201)
async def create_tier(
    request: Request,
    data: TierCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    fields = data.model_dump(exclude_none=True)
    tier = await pricing_admin.create_tier(db, created_by=current_user.id, **fields)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.CREATE_TIER,
        target_type="tier",
        target_id=tier.id,
        action_metadata=fields,
        ip_address=get_client_ip(request),
    )
    await db.commit()
    await db.refresh(tier)

    return TierResponse.model_validate(tier)


@router.patch("/{tier_id}", response_model=TierResponse)
async def update_tier(
    request: Request,
    tier_id: int,
    data: TierUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    changes = data.model_dump(exclude_unset=True)
    tier = await pricing_admin.update_tier(db, tier_id, **changes)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.UPDATE_TIER,
        target_type="tier",
        target_id=tier_id,
        action_metadata=changes,
        ip_address=get_client_ip(request),
    )
    await db.commit()
    await db.refresh(tier)

    return TierResponse.model_validate(tier)


@router.post("/{tier_id}/deactivate", response_model=TierResponse)
async def deactivate_tier(
    request: Request,
    tier_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Tiers are retired, never deleted."""
    tier = await pricing_admin.deactivate_tier(db, tier_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.DEACTIVATE_TIER,
        target_type="tier",
        target_id=tier_id,
        ip_address=get_client_ip(request),
    )
    await db.commit()
    await db.refresh(tier)

    return TierResponse.model_validate(tier)
