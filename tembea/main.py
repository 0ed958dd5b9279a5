"""
Tembea Pricing - commission and vendor tier engine

Main FastAPI application with:
- Fee resolution and pricing previews
- Admin management of tiers, overrides and manual vendor tiers
- Vendor panel tier progress
- Scheduled tier evaluation and manual tier cleanup (APScheduler)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import select

from tembea.api import api_router
from tembea.auth.middleware import AuthMiddleware
from tembea.config import settings
from tembea.db import get_db_context
from tembea.models import User, UserRole
from tembea.scheduler import scheduler, setup_scheduler
from tembea.services.errors import NotFoundError, PricingValidationError, StorageError
from tembea.utils.password import hash_password, is_weak_password

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Creates the admin account if none exists
    - Starts the tier jobs

    Shutdown:
    - Stops the scheduler
    """
    logger.info("Starting Tembea pricing...")

    async with get_db_context() as db:
        result = await db.execute(
            select(User).where(User.role == UserRole.ADMIN).limit(1)
        )
        admin = result.scalar_one_or_none()

        if not admin:
            logger.info("Creating admin account...")
            if is_weak_password(settings.admin_password):
                logger.warning("ADMIN_PASSWORD is weak, change it before going live")
            db.add(
                User(
                    username=settings.admin_username,
                    password_hash=hash_password(settings.admin_password),
                    role=UserRole.ADMIN,
                    display_name="Administrator",
                    is_active=True,
                )
            )
            logger.info(f"Admin account created: {settings.admin_username}")

        await db.commit()

    if settings.scheduler_enabled:
        setup_scheduler()
        scheduler.start()
        logger.info("Tier scheduler started")

    logger.info("Tembea pricing started successfully!")

    yield

    # Shutdown
    logger.info("Shutting down Tembea pricing...")
    if scheduler.running:
        scheduler.shutdown(wait=False)


# Create FastAPI application
app = FastAPI(
    title="Tembea Pricing",
    description="Commission, fee split and vendor tier engine",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# Add authentication middleware
app.add_middleware(AuthMiddleware)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(PricingValidationError)
async def validation_error_handler(request: Request, exc: PricingValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": "Pricing data temporarily unavailable"},
    )


# Include routers
app.include_router(api_router)  # /api/* endpoints


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tembea.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
    )
