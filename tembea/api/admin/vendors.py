"""Admin vendor tier endpoints: manual assignment and job triggers."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tembea.auth.dependencies import require_admin
from tembea.db import get_db
from tembea.models import AuditAction, User
from tembea.schemas.vendor import (
    CleanupResponse,
    ManualTierAssign,
    TierEvaluationResponse,
    VendorJobErrorResponse,
    VendorTierResponse,
    vendor_tier_response,
)
from tembea.services.tier_assignment import (
    assign_manual_tier,
    cleanup_expired_manual_tiers,
    evaluate_vendor_tiers,
    get_vendor_tier_info,
    remove_manual_tier,
)
from tembea.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/vendors")


@router.post("/tiers/evaluate", response_model=TierEvaluationResponse)
async def run_tier_evaluation(
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Run the monthly evaluation now."""
    # Per-vendor rollbacks expire every loaded row, the user included
    admin_id = current_user.id
    report = await evaluate_vendor_tiers(db)

    await log_action(
        db=db,
        user_id=admin_id,
        action=AuditAction.RUN_TIER_EVALUATION,
        action_metadata={
            "evaluated": len(report.results),
            "changed": report.changed_count,
            "skipped": len(report.skipped_vendor_ids),
            "failed": len(report.errors),
        },
        ip_address=get_client_ip(request),
    )
    await db.commit()

    return TierEvaluationResponse(
        evaluated=len(report.results),
        changed=report.changed_count,
        skipped_vendor_ids=report.skipped_vendor_ids,
        errors=[VendorJobErrorResponse(vendor_id=e.vendor_id, error=e.error) for e in report.errors],
    )


@router.post("/tiers/cleanup", response_model=CleanupResponse)
async def run_manual_tier_cleanup(
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Run the expired manual tier sweep now."""
    admin_id = current_user.id
    report = await cleanup_expired_manual_tiers(db)

    await log_action(
        db=db,
        user_id=admin_id,
        action=AuditAction.RUN_TIER_CLEANUP,
        action_metadata={"cleaned": report.cleaned_count, "failed": len(report.errors)},
        ip_address=get_client_ip(request),
    )
    await db.commit()

    return CleanupResponse(
        cleaned_count=report.cleaned_count,
        errors=[VendorJobErrorResponse(vendor_id=e.vendor_id, error=e.error) for e in report.errors],
    )


@router.get("/{vendor_id}/tier", response_model=VendorTierResponse)
async def get_vendor_tier(
    vendor_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    info = await get_vendor_tier_info(db, vendor_id)
    return vendor_tier_response(info)


@router.put("/{vendor_id}/manual-tier", response_model=VendorTierResponse)
async def set_manual_tier(
    request: Request,
    vendor_id: int,
    data: ManualTierAssign,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    await assign_manual_tier(
        db,
        vendor_id,
        data.tier_id,
        expires_at=data.expires_at,
        reason=data.reason,
        assigned_by=current_user.id,
    )

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.ASSIGN_MANUAL_TIER,
        target_type="vendor",
        target_id=vendor_id,
        action_metadata=data.model_dump(),
        ip_address=get_client_ip(request),
    )
    await db.commit()

    info = await get_vendor_tier_info(db, vendor_id)
    return vendor_tier_response(info)


@router.delete("/{vendor_id}/manual-tier", response_model=VendorTierResponse)
async def clear_manual_tier(
    request: Request,
    vendor_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    vendor = await remove_manual_tier(db, vendor_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.REMOVE_MANUAL_TIER,
        target_type="vendor",
        target_id=vendor_id,
        action_metadata={"automatic_tier_id": vendor.current_tier_id},
        ip_address=get_client_ip(request),
    )
    await db.commit()

    info = await get_vendor_tier_info(db, vendor_id)
    return vendor_tier_response(info)
