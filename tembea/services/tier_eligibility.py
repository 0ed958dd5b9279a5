"""
Tier eligibility rules.

Pure functions over vendor metrics and tier rows (or anything with the
same attributes); no database access.

Tiers are ranked by priority_order: the lowest number is the floor tier
that every vendor qualifies for, and each higher number is a step up.
Callers pass tiers sorted by priority_order ascending, the order
get_effective_tiers() returns them in.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from tembea.services.fee_split import to_decimal


@dataclass(frozen=True)
class VendorMetrics:
    """Performance figures a tier is judged on."""

    monthly_bookings: int
    average_rating: Optional[Decimal] = None


@dataclass
class NextTierProgress:
    """How far a vendor is from the next tier up."""

    current_tier: Optional[object]
    next_tier: Optional[object]
    progress_percentage: Decimal
    requirements: List[str] = field(default_factory=list)


def is_eligible_for_tier(metrics: VendorMetrics, tier) -> bool:
    """Vendor meets the tier's booking count and, if set, its rating floor."""
    if metrics.monthly_bookings < (tier.min_monthly_bookings or 0):
        return False

    if tier.min_rating is not None:
        if metrics.average_rating is None:
            return False
        if to_decimal(metrics.average_rating) < to_decimal(tier.min_rating):
            return False

    return True


def best_tier(metrics: VendorMetrics, tiers: Sequence) -> Optional[object]:
    """
    Highest-ranked tier the vendor qualifies for, or None.

    Scans from the top of the ladder down and stops at the first match,
    so relaxing a lower tier's requirements can never push a vendor
    out of a higher tier it already qualifies for.
    """
    for tier in reversed(tiers):
        if is_eligible_for_tier(metrics, tier):
            return tier
    return None


def select_tier(metrics: VendorMetrics, tiers: Sequence) -> Optional[object]:
    """best_tier() with a fallback to the floor tier; None only without tiers."""
    if not tiers:
        return None
    tier = best_tier(metrics, tiers)
    if tier is None:
        return tiers[0]
    return tier


def next_tier_progress(
    metrics: VendorMetrics,
    current_tier,
    tiers: Sequence,
) -> NextTierProgress:
    """
    Progress towards the tier directly above current_tier.

    Progress is the weaker of booking progress and rating progress,
    capped at 100. A vendor already on the top tier is at 100.
    """
    hundred = Decimal("100")

    if current_tier is None:
        next_tier = tiers[0] if tiers else None
    else:
        next_tier = next(
            (t for t in tiers if t.priority_order > current_tier.priority_order),
            None,
        )

    if next_tier is None:
        return NextTierProgress(
            current_tier=current_tier,
            next_tier=None,
            progress_percentage=hundred,
        )

    min_bookings = next_tier.min_monthly_bookings or 0
    if min_bookings > 0:
        booking_progress = min(
            Decimal(metrics.monthly_bookings) / Decimal(min_bookings) * hundred,
            hundred,
        )
    else:
        booking_progress = hundred

    rating_progress = hundred
    if next_tier.min_rating and metrics.average_rating:
        rating_progress = min(
            to_decimal(metrics.average_rating) / to_decimal(next_tier.min_rating) * hundred,
            hundred,
        )

    requirements = [
        f"{min_bookings} monthly bookings ({metrics.monthly_bookings} current)"
    ]
    if next_tier.min_rating is not None:
        if metrics.average_rating is not None:
            current_rating = f"{to_decimal(metrics.average_rating):.1f}"
        else:
            current_rating = "N/A"
        requirements.append(
            f"{to_decimal(next_tier.min_rating):.1f} average rating ({current_rating} current)"
        )

    return NextTierProgress(
        current_tier=current_tier,
        next_tier=next_tier,
        progress_percentage=min(booking_progress, rating_progress),
        requirements=requirements,
    )
