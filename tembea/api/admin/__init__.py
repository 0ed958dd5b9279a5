"""Admin API router aggregation."""

from fastapi import APIRouter

from tembea.api.admin.bookings import router as bookings_router
from tembea.api.admin.overrides import router as overrides_router
from tembea.api.admin.tiers import router as tiers_router
from tembea.api.admin.vendors import router as vendors_router

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(tiers_router)
admin_router.include_router(overrides_router)
admin_router.include_router(vendors_router)
admin_router.include_router(bookings_router)

__all__ = ["admin_router"]
