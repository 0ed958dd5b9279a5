"""API router aggregation."""

from fastapi import APIRouter

from tembea.api.admin import admin_router
from tembea.api.auth import router as auth_router
from tembea.api.health import router as health_router
from tembea.api.panel import panel_router
from tembea.api.pricing import router as pricing_router

# Main API router (for /api/* endpoints)
api_router = APIRouter(prefix="/api")

api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(pricing_router)
api_router.include_router(admin_router)
api_router.include_router(panel_router)

__all__ = ["api_router"]
