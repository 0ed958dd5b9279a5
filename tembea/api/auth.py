"""
Authentication API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tembea.auth.dependencies import get_current_user
from tembea.auth.jwt import clear_auth_cookie, create_access_token, set_auth_cookie
from tembea.db import get_db
from tembea.models import AuditAction, User
from tembea.schemas.auth import CurrentUserResponse, LoginRequest, LoginResponse
from tembea.utils.audit import get_client_ip, log_action
from tembea.utils.dates import utcnow
from tembea.utils.password import hash_password, password_needs_rehash, verify_password

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate and set the JWT cookie."""
    result = await db.execute(
        select(User).where(User.username == credentials.username)
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    if password_needs_rehash(user.password_hash):
        user.password_hash = hash_password(credentials.password)

    token = create_access_token(user.id, user.role.value, vendor_id=user.vendor_id)
    set_auth_cookie(response, token)

    user.last_active_at = utcnow()

    await log_action(
        db=db,
        user_id=user.id,
        action=AuditAction.LOGIN,
        ip_address=get_client_ip(request),
    )
    await db.commit()

    return LoginResponse(
        success=True,
        message="Login successful",
        role=user.role.value,
    )


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Clear the JWT cookie."""
    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.LOGOUT,
        ip_address=get_client_ip(request),
    )
    await db.commit()

    clear_auth_cookie(response)
    return {"success": True, "message": "Logged out"}


@router.get("/me", response_model=CurrentUserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return CurrentUserResponse(
        id=current_user.id,
        username=current_user.username,
        display_name=current_user.display_name,
        role=current_user.role.value,
        vendor_id=current_user.vendor_id,
    )
