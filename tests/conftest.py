"""
Pytest configuration and fixtures.
"""

import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from tembea.models import (
    Base,
    Booking,
    BookingStatus,
    CommissionTier,
    CommissionType,
    FeePayer,
    Service,
    ServicePriceOverride,
    ServiceReview,
    ServiceStatus,
    User,
    UserRole,
    Vendor,
    VendorStatus,
)


# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed clock for everything date-dependent
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
RULES_START = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


class Factory:
    """Inserts rows with sensible defaults; every call flushes."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _add(self, obj):
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def tier(self, name="Bronze", value="15", priority_order=1, **kwargs):
        defaults = {
            "commission_type": CommissionType.PERCENTAGE,
            "min_monthly_bookings": 0,
            "min_rating": None,
            "effective_from": RULES_START,
            "is_active": True,
        }
        defaults.update(kwargs)
        return await self._add(
            CommissionTier(
                name=name,
                commission_value=Decimal(value),
                priority_order=priority_order,
                **defaults,
            )
        )

    async def ladder(self):
        """Bronze / Silver / Gold, the floor tier first."""
        bronze = await self.tier("Bronze", "15", 1)
        silver = await self.tier(
            "Silver", "12", 2, min_monthly_bookings=10, min_rating=Decimal("4.0")
        )
        gold = await self.tier(
            "Gold", "10", 3, min_monthly_bookings=25, min_rating=Decimal("4.5")
        )
        return bronze, silver, gold

    async def vendor(self, business_name="Safari Co", **kwargs):
        kwargs.setdefault("status", VendorStatus.APPROVED)
        return await self._add(Vendor(business_name=business_name, **kwargs))

    async def service(self, vendor, price="100000", **kwargs):
        kwargs.setdefault("title", "Day trip")
        kwargs.setdefault("currency", "TZS")
        kwargs.setdefault("status", ServiceStatus.APPROVED)
        return await self._add(Service(vendor_id=vendor.id, price=Decimal(price), **kwargs))

    async def override(self, service, override_type=CommissionType.FLAT, value="0", **kwargs):
        kwargs.setdefault("fee_payer", FeePayer.VENDOR)
        kwargs.setdefault("effective_from", RULES_START)
        kwargs.setdefault("override_enabled", True)
        return await self._add(
            ServicePriceOverride(
                service_id=service.id,
                override_type=override_type,
                override_value=Decimal(value),
                **kwargs,
            )
        )

    async def booking(self, service, status=BookingStatus.COMPLETED, created_at=None, **kwargs):
        kwargs.setdefault("customer_name", "Asha Mollel")
        kwargs.setdefault("total_amount", service.price)
        return await self._add(
            Booking(
                service_id=service.id,
                vendor_id=service.vendor_id,
                status=status,
                created_at=created_at or NOW - timedelta(days=1),
                **kwargs,
            )
        )

    async def bookings(self, service, count, **kwargs):
        for _ in range(count):
            await self.booking(service, **kwargs)

    async def review(self, service, rating):
        return await self._add(ServiceReview(service_id=service.id, rating=rating))

    async def user(self, username="admin", role=UserRole.ADMIN, **kwargs):
        kwargs.setdefault("display_name", username.title())
        kwargs.setdefault("password_hash", "not-a-real-hash")
        return await self._add(User(username=username, role=role, **kwargs))


@pytest.fixture
def factory(db_session):
    return Factory(db_session)
