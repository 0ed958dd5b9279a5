"""Pricing and tier services."""

from tembea.services.booking_commission import apply_commission, calculate_commission, confirm_booking
from tembea.services.fee_resolver import get_pricing_preview, resolve_fee
from tembea.services.tier_assignment import cleanup_expired_manual_tiers, evaluate_vendor_tiers

__all__ = [
    "apply_commission",
    "calculate_commission",
    "cleanup_expired_manual_tiers",
    "confirm_booking",
    "evaluate_vendor_tiers",
    "get_pricing_preview",
    "resolve_fee",
]
