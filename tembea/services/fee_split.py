"""
Platform fee and fee-split arithmetic.

Everything here is plain Decimal math with no rounding. Percentages are
always a percentage of the base price, never of the total. Rounding is a
display concern and only happens in round_for_display(), on final amounts.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from tembea.models.override import FeePayer
from tembea.models.tier import CommissionType
from tembea.services.errors import PricingValidationError

HUNDRED = Decimal("100")

# ISO 4217 currencies shown in whole units
ZERO_DECIMAL_CURRENCIES = frozenset({"TZS", "KES", "UGX", "RWF", "BIF", "JPY"})

Number = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class FeeSplit:
    """Who pays what for one sale."""

    tourist_fee: Decimal
    vendor_fee: Decimal
    total_customer_payment: Decimal
    vendor_payout: Decimal


def to_decimal(value: Optional[Number]) -> Decimal:
    """Coerce a price or rate to Decimal; None becomes zero."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr keeps 0.1 as 0.1 instead of the binary expansion
        return Decimal(repr(value))
    return Decimal(value)


def compute_platform_fee(
    base_price: Number,
    fee_type: Union[CommissionType, str],
    fee_value: Number,
) -> Decimal:
    """
    Platform commission for a sale.

    Args:
        base_price: Price the fee is computed on
        fee_type: 'flat' (absolute amount) or 'percentage' (of base_price)
        fee_value: Amount or percentage

    Returns:
        The commission amount, unrounded
    """
    try:
        fee_type = CommissionType(fee_type)
    except ValueError:
        raise PricingValidationError(f"Unknown commission type: {fee_type!r}")

    value = to_decimal(fee_value)
    if fee_type == CommissionType.FLAT:
        return value
    return to_decimal(base_price) * value / HUNDRED


def split_fee(
    base_price: Number,
    platform_fee: Number,
    fee_payer: Union[FeePayer, str],
    tourist_percentage: Optional[Number] = None,
    vendor_percentage: Optional[Number] = None,
) -> FeeSplit:
    """
    Divide the platform fee between tourist and vendor.

    - vendor: fee comes out of the payout, tourist pays the base price
    - tourist: fee is added on top, vendor receives the full base price
    - shared: each side pays its percentage of the fee; missing
      percentages count as 0 and are used exactly as stored

    Raises:
        PricingValidationError: fee_payer is not vendor/tourist/shared
    """
    try:
        fee_payer = FeePayer(fee_payer)
    except ValueError:
        raise PricingValidationError(f"Unknown fee payer: {fee_payer!r}")

    base = to_decimal(base_price)
    fee = to_decimal(platform_fee)
    zero = Decimal("0")

    if fee_payer == FeePayer.VENDOR:
        return FeeSplit(
            tourist_fee=zero,
            vendor_fee=fee,
            total_customer_payment=base,
            vendor_payout=base - fee,
        )

    if fee_payer == FeePayer.TOURIST:
        return FeeSplit(
            tourist_fee=fee,
            vendor_fee=zero,
            total_customer_payment=base + fee,
            vendor_payout=base,
        )

    tourist_fee = fee * to_decimal(tourist_percentage) / HUNDRED
    vendor_fee = fee * to_decimal(vendor_percentage) / HUNDRED
    return FeeSplit(
        tourist_fee=tourist_fee,
        vendor_fee=vendor_fee,
        total_customer_payment=base + tourist_fee,
        vendor_payout=base - vendor_fee,
    )


def round_for_display(amount: Number, currency: str = "TZS") -> Decimal:
    """Round a final amount to the currency's display precision, half-up."""
    quantum = Decimal("1") if currency.upper() in ZERO_DECIMAL_CURRENCIES else Decimal("0.01")
    return to_decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP)
