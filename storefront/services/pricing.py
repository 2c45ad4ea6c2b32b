"""
storefront/services/pricing.py
──────────────────────────────
Dynamic pricing rules.

evaluate_price() is a pure function: no database, no clock. Callers pass
in the shopper's loyalty tier, accessibility needs and the local hour.

Rules
─────
• Loyalty:        gold 15 %, silver 10 %, bronze 5 %, anything else 0 %.
• Accessibility:  10 % when any accessibility need is recorded.
• Night owl:      5 % between 02:00 and 06:59 (hour 2..6 inclusive).
• Only the largest of the three applies. Ties go to night owl, then
  accessibility, then loyalty.
• A region multiplier (1.0 for US, 0.85 elsewhere) is applied afterwards.
• Money is rounded half-up to cents once, at the end.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Optional

LOYALTY_DISCOUNTS: Dict[str, Decimal] = {
    "gold": Decimal("0.15"),
    "silver": Decimal("0.10"),
    "bronze": Decimal("0.05"),
}
ACCESSIBILITY_DISCOUNT = Decimal("0.10")
NIGHT_OWL_DISCOUNT = Decimal("0.05")
NIGHT_OWL_HOURS = range(2, 7)

HOME_REGION = "US"
NON_HOME_REGION_MULTIPLIER = Decimal("0.85")

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class PriceQuote:
    base_price: Decimal
    final_price: Decimal
    discount: Decimal
    discount_percentage: int
    discount_reason: Optional[str]
    region: str
    loyalty_discount: Decimal
    accessibility_discount: Decimal
    time_discount: Decimal
    region_adjustment: Decimal


def _money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def region_multiplier(region: str) -> Decimal:
    return Decimal(1) if region.upper() == HOME_REGION else NON_HOME_REGION_MULTIPLIER


def evaluate_price(
    base_price: float,
    loyalty_tier: Optional[str] = None,
    accessibility_needs: Iterable[str] = (),
    hour: Optional[int] = None,
    region: str = HOME_REGION,
) -> PriceQuote:
    """
    Apply the single best personal discount and the region multiplier.

    hour=None disables the night-owl rule (used for anonymous shoppers,
    who get no personal discount at all).
    """
    if base_price <= 0:
        raise ValueError("base_price must be positive.")

    base = Decimal(str(base_price))
    tier = (loyalty_tier or "").strip().lower()

    loyalty_rate = LOYALTY_DISCOUNTS.get(tier, Decimal(0))
    accessibility_rate = ACCESSIBILITY_DISCOUNT if any(accessibility_needs) else Decimal(0)
    time_rate = NIGHT_OWL_DISCOUNT if hour is not None and hour in NIGHT_OWL_HOURS else Decimal(0)

    # Order matters: max() keeps the first of equal candidates.
    candidates = [
        (time_rate, "Night owl discount"),
        (accessibility_rate, "Accessibility support discount"),
        (loyalty_rate, f"{tier.capitalize()} member discount"),
    ]
    rate, reason = max(candidates, key=lambda c: c[0])
    if rate == 0:
        reason = None

    multiplier = region_multiplier(region)
    final = _money(base * (1 - rate) * multiplier)
    discount = base - final
    percentage = int((discount / base * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))

    return PriceQuote(
        base_price=_money(base),
        final_price=final,
        discount=_money(discount),
        discount_percentage=percentage,
        discount_reason=reason,
        region=region.upper(),
        loyalty_discount=_money(loyalty_rate * base),
        accessibility_discount=_money(accessibility_rate * base),
        time_discount=_money(time_rate * base),
        region_adjustment=_money((multiplier - 1) * base),
    )
