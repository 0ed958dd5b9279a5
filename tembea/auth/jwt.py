"""
JWT token management.

The access token travels in an httpOnly cookie; vendor tokens also carry
the vendor id so panel routes can scope reads without a user lookup.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from tembea.config import settings

# JWT configuration
ALGORITHM = "HS256"
TOKEN_TYPE = "access"
COOKIE_NAME = "access_token"


def create_access_token(
    user_id: int,
    role: str,
    vendor_id: Optional[int] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: User's database ID
        role: User's role (admin/vendor)
        vendor_id: Vendor the account belongs to, vendor accounts only
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(hours=settings.jwt_expire_hours))

    payload = {
        "sub": str(user_id),
        "role": role,
        "exp": expire,
        "type": TOKEN_TYPE,
        "iat": issued_at,
    }
    if vendor_id is not None:
        payload["vendor_id"] = vendor_id

    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """
    Verify and decode a JWT token.

    Returns:
        Dict with 'user_id', 'role' and 'vendor_id' (may be None),
        or None if the token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM],
        )
    except JWTError:
        return None

    if payload.get("type") != TOKEN_TYPE:
        return None

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        return None

    return {
        "user_id": int(user_id),
        "role": role,
        "vendor_id": payload.get("vendor_id"),
    }


def get_token_from_cookie(request) -> Optional[str]:
    """Extract the JWT from the auth cookie."""
    return request.cookies.get(COOKIE_NAME)


def set_auth_cookie(response, token: str) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.jwt_expire_hours * 3600,
    )


def clear_auth_cookie(response) -> None:
    response.delete_cookie(key=COOKIE_NAME)
