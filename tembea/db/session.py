"""
Async SQLAlchemy engine and sessions.

Request handlers get a session per request through get_db(). The tier
jobs, startup and scripts use get_db_context(), and each job run gets
its own session, because the batch jobs commit vendor by vendor.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from tembea.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """
    Engine for the configured database.

    asyncpg runs behind a transaction pooler in production, so it gets
    NullPool and no prepared statement cache. Other drivers (aiosqlite
    for local runs) use SQLAlchemy's defaults.
    """
    if "+asyncpg" in database_url:
        return create_async_engine(
            database_url,
            poolclass=NullPool,
            echo=False,
            connect_args={"statement_cache_size": 0},
        )

    logger.info(f"Using non-PostgreSQL database driver: {database_url.split(':', 1)[0]}")
    return create_async_engine(database_url, echo=False)


engine = build_engine(settings.database_url)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Routers commit their own writes; anything left pending when the
    handler returns is committed here, and an error rolls it all back.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Session outside a request (scheduler jobs, startup, scripts).

        async with get_db_context() as db:
            report = await evaluate_vendor_tiers(db)
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
