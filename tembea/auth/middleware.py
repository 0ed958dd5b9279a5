"""
Authentication middleware for role-based route protection.
"""

import logging
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from tembea.auth.jwt import get_token_from_cookie, verify_token

logger = logging.getLogger(__name__)

ADMIN_PREFIX = "/api/admin"
PANEL_PREFIX = "/api/panel"


def _json_error(detail: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Coarse role check in front of the routers.

    - /api/admin/* requires the admin role
    - /api/panel/* requires the vendor role
    Everything else (health, auth, pricing preview, docs) passes through;
    the route dependencies still do the fine-grained checks.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        path = request.url.path

        if not path.startswith((ADMIN_PREFIX, PANEL_PREFIX)):
            return await call_next(request)

        token = get_token_from_cookie(request)
        payload = verify_token(token) if token else None
        if not payload:
            return _json_error("Not authenticated", 401)

        role = payload.get("role")
        if path.startswith(ADMIN_PREFIX) and role != "admin":
            logger.warning(f"User {payload['user_id']} ({role}) denied {path}")
            return _json_error("Admin access required", 403)

        if path.startswith(PANEL_PREFIX) and role != "vendor":
            return _json_error("Vendor access required", 403)

        return await call_next(request)
