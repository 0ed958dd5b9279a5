"""
Seed commission tiers and a few demo vendors for local testing.

Usage:
    python scripts/seed_pricing_data.py

Or with custom DATABASE_URL:
    DATABASE_URL="postgresql://..." python scripts/seed_pricing_data.py

This script creates (skipping anything that already exists):
- Bronze / Silver / Gold tiers
- Three approved vendors with a vendor login each
- One service per vendor, priced in TZS
- A tourist-pays override on the first service
"""

import asyncio
import os
import sys
from datetime import datetime, timezone
from decimal import Decimal

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from tembea.db import get_db_context
from tembea.models import (
    CommissionTier, CommissionType, FeePayer, Service, ServicePriceOverride,
    ServiceStatus, User, UserRole, Vendor, VendorStatus,
)
from tembea.utils.password import hash_password


EFFECTIVE_FROM = datetime(2024, 1, 1, tzinfo=timezone.utc)

# ===== TEST DATA =====

TIERS = [
    {"name": "Bronze", "commission_value": Decimal("15"), "min_monthly_bookings": 0, "min_rating": None, "priority_order": 1},
    {"name": "Silver", "commission_value": Decimal("12"), "min_monthly_bookings": 10, "min_rating": Decimal("4.0"), "priority_order": 2},
    {"name": "Gold", "commission_value": Decimal("10"), "min_monthly_bookings": 25, "min_rating": Decimal("4.5"), "priority_order": 3},
]

VENDORS = [
    {"business_name": "Kilimanjaro Treks", "username": "kilitreks", "service": "Machame Route 7 Days", "price": Decimal("4500000")},
    {"business_name": "Zanzibar Spice Tours", "username": "spicetours", "service": "Stone Town Spice Tour", "price": Decimal("85000")},
    {"business_name": "Serengeti Safaris", "username": "serengeti", "service": "3-Day Serengeti Safari", "price": Decimal("1200000")},
]


async def seed():
    async with get_db_context() as db:
        tiers = {}
        for data in TIERS:
            tier = (await db.execute(
                select(CommissionTier).where(CommissionTier.name == data["name"])
            )).scalar_one_or_none()
            if not tier:
                tier = CommissionTier(
                    commission_type=CommissionType.PERCENTAGE,
                    effective_from=EFFECTIVE_FROM,
                    is_active=True,
                    **data,
                )
                db.add(tier)
                await db.flush()
                print(f"  + tier {tier.name} ({tier.commission_value}%)")
            tiers[tier.name] = tier

        for index, data in enumerate(VENDORS):
            vendor = (await db.execute(
                select(Vendor).where(Vendor.business_name == data["business_name"])
            )).scalar_one_or_none()
            if vendor:
                continue

            vendor = Vendor(
                business_name=data["business_name"],
                status=VendorStatus.APPROVED,
                current_tier_id=tiers["Bronze"].id,
                current_commission_rate=tiers["Bronze"].commission_rate,
            )
            db.add(vendor)
            await db.flush()

            db.add(User(
                username=data["username"],
                password_hash=hash_password("vendor-demo-123"),
                role=UserRole.VENDOR,
                display_name=data["business_name"],
                vendor_id=vendor.id,
            ))

            service = Service(
                vendor_id=vendor.id,
                title=data["service"],
                price=data["price"],
                currency="TZS",
                status=ServiceStatus.APPROVED,
            )
            db.add(service)
            await db.flush()
            print(f"  + vendor {vendor.business_name} with service '{service.title}'")

            if index == 0:
                db.add(ServicePriceOverride(
                    service_id=service.id,
                    override_type=CommissionType.PERCENTAGE,
                    override_value=Decimal("8"),
                    fee_payer=FeePayer.TOURIST,
                    effective_from=EFFECTIVE_FROM,
                ))
                print(f"  + override: tourist pays 8% on '{service.title}'")

        await db.commit()


if __name__ == "__main__":
    print("Seeding pricing data...")
    asyncio.run(seed())
    print("Done.")
