"""
Run the tier jobs by hand, outside the scheduler.

Usage:
    python scripts/run_tier_jobs.py evaluate
    python scripts/run_tier_jobs.py cleanup
"""

import asyncio
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tembea.db import get_db_context
from tembea.services.tier_assignment import cleanup_expired_manual_tiers, evaluate_vendor_tiers


async def run(job: str) -> int:
    async with get_db_context() as db:
        if job == "evaluate":
            report = await evaluate_vendor_tiers(db)
            print(f"Evaluated {len(report.results)} vendors, {report.changed_count} changed tier")
            print(f"Skipped (manual tier): {report.skipped_vendor_ids or 'none'}")
            errors = report.errors
        else:
            report = await cleanup_expired_manual_tiers(db)
            print(f"Reset {report.cleaned_count} expired manual tiers")
            errors = report.errors

    for error in errors:
        print(f"  vendor {error.vendor_id}: {error.error}")
    return 1 if errors else 0


if __name__ == "__main__":
    if len(sys.argv) != 2 or sys.argv[1] not in ("evaluate", "cleanup"):
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(run(sys.argv[1])))
