"""Admin service price override endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tembea.auth.dependencies import require_admin
from tembea.db import get_db
from tembea.models import AuditAction, User
from tembea.schemas.override import OverrideCreate, OverrideResponse, OverrideUpdate
from tembea.services import pricing_admin
from tembea.utils.audit import get_client_ip, log_action

router = APIRouter(prefix="/overrides")


@router.get("", response_model=List[OverrideResponse])
async def list_overrides(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
    service_id: Optional[int] = Query(None),
):
    overrides = await pricing_admin.list_overrides(db, service_id=service_id)
    return [OverrideResponse.model_validate(o) for o in overrides]


@router.post("", response_model=OverrideResponse, status_code=201)
async def create_override(
    request: Request,
    data: OverrideCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    fields = data.model_dump(exclude_none=True)
    service_id = fields.pop("service_id")
    override = await pricing_admin.create_override(
        db, service_id, created_by=current_user.id, **fields
    )

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.CREATE_OVERRIDE,
        target_type="override",
        target_id=override.id,
        action_metadata={"service_id": service_id, **fields},
        ip_address=get_client_ip(request),
    )
    await db.commit()
    await db.refresh(override)

    return OverrideResponse.model_validate(override)


@router.patch("/{override_id}", response_model=OverrideResponse)
async def update_override(
    request: Request,
    override_id: int,
    data: OverrideUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    changes = data.model_dump(exclude_unset=True)
    override = await pricing_admin.update_override(db, override_id, **changes)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.UPDATE_OVERRIDE,
        target_type="override",
        target_id=override_id,
        action_metadata=changes,
        ip_address=get_client_ip(request),
    )
    await db.commit()
    await db.refresh(override)

    return OverrideResponse.model_validate(override)


@router.delete("/{override_id}")
async def delete_override(
    request: Request,
    override_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    service_id = await pricing_admin.delete_override(db, override_id)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.DELETE_OVERRIDE,
        target_type="override",
        target_id=override_id,
        action_metadata={"service_id": service_id},
        ip_address=get_client_ip(request),
    )
    await db.commit()

    return {"success": True, "service_id": service_id}
