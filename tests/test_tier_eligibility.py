"""
Tests for tier eligibility rules.
"""

from decimal import Decimal
from types import SimpleNamespace

from tembea.services.tier_eligibility import (
    VendorMetrics,
    best_tier,
    is_eligible_for_tier,
    next_tier_progress,
    select_tier,
)


def make_tier(name, priority_order, min_bookings=0, min_rating=None):
    return SimpleNamespace(
        name=name,
        priority_order=priority_order,
        min_monthly_bookings=min_bookings,
        min_rating=Decimal(min_rating) if min_rating is not None else None,
    )


BRONZE = make_tier("Bronze", 1)
SILVER = make_tier("Silver", 2, 10, "4.0")
GOLD = make_tier("Gold", 3, 25, "4.5")
LADDER = [BRONZE, SILVER, GOLD]


# ── Eligibility ──────────────────────────────────────


class TestEligibility:
    def test_meets_both_thresholds(self):
        metrics = VendorMetrics(monthly_bookings=25, average_rating=Decimal("4.5"))
        assert is_eligible_for_tier(metrics, GOLD) is True

    def test_too_few_bookings(self):
        metrics = VendorMetrics(monthly_bookings=24, average_rating=Decimal("5"))
        assert is_eligible_for_tier(metrics, GOLD) is False

    def test_rating_below_floor(self):
        metrics = VendorMetrics(monthly_bookings=100, average_rating=Decimal("4.49"))
        assert is_eligible_for_tier(metrics, GOLD) is False

    def test_missing_rating_fails_rated_tier(self):
        metrics = VendorMetrics(monthly_bookings=100)
        assert is_eligible_for_tier(metrics, SILVER) is False

    def test_missing_rating_passes_unrated_tier(self):
        metrics = VendorMetrics(monthly_bookings=0)
        assert is_eligible_for_tier(metrics, BRONZE) is True

    def test_float_rating_compares_exactly(self):
        metrics = VendorMetrics(monthly_bookings=10, average_rating=4.0)
        assert is_eligible_for_tier(metrics, SILVER) is True


# ── Selection ────────────────────────────────────────


class TestSelection:
    def test_strong_vendor_lands_on_gold(self):
        metrics = VendorMetrics(monthly_bookings=30, average_rating=Decimal("4.8"))
        assert select_tier(metrics, LADDER) is GOLD

    def test_middle_of_ladder(self):
        metrics = VendorMetrics(monthly_bookings=12, average_rating=Decimal("4.2"))
        assert select_tier(metrics, LADDER) is SILVER

    def test_many_bookings_weak_rating_stays_low(self):
        metrics = VendorMetrics(monthly_bookings=40, average_rating=Decimal("3.9"))
        assert select_tier(metrics, LADDER) is BRONZE

    def test_selected_tier_is_always_eligible(self):
        for bookings in (0, 9, 10, 24, 25, 60):
            for rating in ("3.0", "4.0", "4.4", "4.5", "5.0"):
                metrics = VendorMetrics(bookings, Decimal(rating))
                tier = best_tier(metrics, LADDER)
                assert tier is not None
                assert is_eligible_for_tier(metrics, tier)

    def test_falls_back_to_floor_tier(self):
        strict = [make_tier("Silver", 2, 10, "4.0"), make_tier("Gold", 3, 25, "4.5")]
        metrics = VendorMetrics(monthly_bookings=0, average_rating=Decimal("4.0"))

        assert best_tier(metrics, strict) is None
        assert select_tier(metrics, strict) is strict[0]

    def test_no_tiers(self):
        assert select_tier(VendorMetrics(monthly_bookings=50), []) is None


# ── Progress ─────────────────────────────────────────


class TestNextTierProgress:
    def test_progress_is_the_weaker_requirement(self):
        metrics = VendorMetrics(monthly_bookings=5, average_rating=Decimal("4.0"))

        progress = next_tier_progress(metrics, BRONZE, LADDER)

        assert progress.next_tier is SILVER
        assert progress.progress_percentage == Decimal("50")
        assert progress.requirements == [
            "10 monthly bookings (5 current)",
            "4.0 average rating (4.0 current)",
        ]

    def test_rating_can_be_the_bottleneck(self):
        metrics = VendorMetrics(monthly_bookings=30, average_rating=Decimal("3.6"))

        progress = next_tier_progress(metrics, SILVER, LADDER)

        assert progress.next_tier is GOLD
        assert progress.progress_percentage == Decimal("80")

    def test_capped_at_hundred(self):
        metrics = VendorMetrics(monthly_bookings=50, average_rating=Decimal("5"))

        progress = next_tier_progress(metrics, BRONZE, LADDER)

        assert progress.progress_percentage == Decimal("100")

    def test_top_tier_has_nothing_above(self):
        metrics = VendorMetrics(monthly_bookings=30, average_rating=Decimal("4.8"))

        progress = next_tier_progress(metrics, GOLD, LADDER)

        assert progress.next_tier is None
        assert progress.progress_percentage == Decimal("100")
        assert progress.requirements == []

    def test_missing_rating_reported_as_na(self):
        metrics = VendorMetrics(monthly_bookings=2)

        progress = next_tier_progress(metrics, BRONZE, LADDER)

        assert progress.requirements[1] == "4.0 average rating (N/A current)"

    def test_untiered_vendor_aims_at_floor(self):
        metrics = VendorMetrics(monthly_bookings=0)

        progress = next_tier_progress(metrics, None, LADDER)

        assert progress.next_tier is BRONZE
        assert progress.progress_percentage == Decimal("100")
