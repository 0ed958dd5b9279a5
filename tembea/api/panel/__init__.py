"""Vendor panel API router aggregation."""

from fastapi import APIRouter

from tembea.api.panel.tier import router as tier_router

panel_router = APIRouter(prefix="/panel", tags=["Panel"])

panel_router.include_router(tier_router)

__all__ = ["panel_router"]
