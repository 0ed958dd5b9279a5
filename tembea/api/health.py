"""
Health check endpoints.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tembea.db import get_db
from tembea.scheduler import scheduler
from tembea.services.tier_assignment import get_effective_tiers
from tembea.utils.dates import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """Returns 200 if the service is running."""
    return {"status": "healthy", "service": "tembea-pricing"}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """
    Ready once the tier table can be read.

    With no effective tier every sale falls back to the default rate,
    which is reported but does not make the service unready.
    """
    try:
        tiers = await get_effective_tiers(db, utcnow())
    except SQLAlchemyError as e:
        logger.warning(f"Readiness check failed: {e}")
        return {
            "status": "not_ready",
            "database": "unavailable",
        }

    return {
        "status": "ready",
        "database": "connected",
        "effective_tiers": len(tiers),
        "scheduler_running": scheduler.running,
    }


@router.get("/live")
async def liveness_check():
    return {"status": "alive"}
