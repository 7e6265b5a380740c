# backend/app/services/discount_engine.py
"""
Discount engine: eligibility, amount calculation and stacking.

Works on a read-only snapshot of DiscountRecord objects passed in by the
caller. Nothing here touches the database or Redis, and current_uses is
only ever read.

Stacking rules:
  - candidates are walked by priority, highest first (ties keep input order)
  - each discount is computed against the running total, not the original
  - a non-combinable discount never joins a stack that already started
  - once a non-combinable discount fires, the walk stops

Dual interpretation of `value`:
  percentage                        → always percent (0-100)
  fixed_amount                      → always currency, capped at the base
  promo_code / seasonal / long_stay → percent if value <= 100, else currency
"""

import logging
from datetime import date, datetime
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Callable, Iterable, Optional

from ..schemas.discounts import (
    AppliedDiscount,
    BookingContext,
    DiscountBreakdown,
    DiscountRecord,
    DiscountStats,
    PromoCodeResult,
    RoomRateBreakdown,
    normalize_promo_code,
)

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")

# Types whose value is read as percent when <= 100 (fixed_amount never is)
_FLEXIBLE_TYPES = frozenset({"fixed_amount", "promo_code", "seasonal", "long_stay"})

PromoCodeLookup = Callable[[str], Optional[DiscountRecord]]


def round2(amount: float) -> float:
    """Round to currency cents, half-up."""
    return float(Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP))


def _as_date(value: date | datetime | None) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


# ── Validity ─────────────────────────────────────────────────────────────


def is_valid(
    discount: Optional[DiscountRecord],
    as_of: date | datetime | None = None,
) -> bool:
    """
    Check that a discount is usable on a given day.

    enabled AND valid_from <= as_of <= valid_to AND current_uses < maximum_uses.
    Missing bounds are unbounded. Comparison is date-only.
    """
    if discount is None or not discount.enabled:
        return False

    day = _as_date(as_of)

    if discount.valid_from is not None and day < discount.valid_from:
        return False
    if discount.valid_to is not None and day > discount.valid_to:
        return False
    if discount.maximum_uses is not None and discount.current_uses >= discount.maximum_uses:
        return False

    return True


def applies_to_room_type(discount: Optional[DiscountRecord], room_type_id) -> bool:
    """Empty applicable_room_types means the discount covers every room type."""
    if discount is None:
        return False
    if not discount.applicable_room_types:
        return True
    return room_type_id in discount.applicable_room_types


def filter_applicable(
    discounts: Iterable[DiscountRecord],
    context: BookingContext,
) -> list[DiscountRecord]:
    """
    Select the discounts eligible for a booking.

    A promo code in the context is an exclusive override: only the record
    carrying that code can pass. Without one, promo_code discounts are never
    auto-applied.
    """
    nights = max(0, context.nights)
    result = []

    for discount in discounts:
        if not discount.enabled:
            continue
        if not is_valid(discount, context.check_in_date):
            continue
        if discount.minimum_nights > nights:
            continue
        if context.room_type_id is not None and not applies_to_room_type(discount, context.room_type_id):
            continue

        if context.promo_code:
            if discount.promo_code == context.promo_code:
                result.append(discount)
            continue

        if discount.discount_type == "promo_code":
            continue

        result.append(discount)

    return result


# ── Amounts ──────────────────────────────────────────────────────────────


def amount_for(discount: Optional[DiscountRecord], base_amount: float) -> float:
    """
    Discount amount for a single discount against base_amount.

    Result is rounded to cents and clamped to [0, base_amount].
    A missing discount or a non-positive base yields 0.
    """
    if discount is None or not base_amount or base_amount <= 0:
        return 0.0

    value = discount.value
    discount_type = discount.discount_type

    if discount_type == "percentage":
        amount = base_amount * value / 100
    elif discount_type in _FLEXIBLE_TYPES:
        if discount_type != "fixed_amount" and value <= 100:
            amount = base_amount * value / 100
        else:
            amount = min(value, base_amount)
    else:
        return 0.0

    amount = round2(min(max(amount, 0.0), base_amount))
    if amount > base_amount:
        # half-up overshot a sub-cent base; stay on the cent grid below it
        amount = float(Decimal(str(base_amount)).quantize(_CENT, rounding=ROUND_DOWN))
    return amount


def final_amount(original_amount: float, discount_amount: float) -> float:
    """Amount left after a discount, floored at 0."""
    return max(0.0, round2(original_amount - discount_amount))


def combine(
    base_amount: float,
    discounts: Iterable[DiscountRecord],
) -> DiscountBreakdown:
    """
    Stack discounts onto base_amount in priority order.

    Returns a fresh DiscountBreakdown; the input records are not touched.
    """
    discounts = list(discounts)
    if not discounts:
        return DiscountBreakdown(
            original_amount=base_amount,
            total_discount=0.0,
            final_amount=base_amount,
            applied=[],
        )

    # sorted() is stable with reverse=True, so equal priorities keep input order
    ordered = sorted(discounts, key=lambda d: d.priority, reverse=True)

    current = base_amount
    applied: list[AppliedDiscount] = []

    for discount in ordered:
        if applied and not discount.can_combine:
            logger.debug(f"Skipping non-combinable discount {discount.id}: stack already started")
            continue

        amount = amount_for(discount, current)
        if amount <= 0:
            continue

        applied.append(AppliedDiscount(
            id=discount.id,
            name=discount.name,
            type=discount.discount_type,
            value=discount.value,
            amount=amount,
            priority=discount.priority,
        ))
        current = final_amount(current, amount)

        if not discount.can_combine:
            logger.debug(f"Exclusive discount {discount.id} applied, stopping")
            break

    return DiscountBreakdown(
        original_amount=base_amount,
        total_discount=round2(sum(a.amount for a in applied)),
        final_amount=round2(current),
        applied=applied,
    )


def calculate_room_rate(
    base_rate: float,
    nights: int,
    discounts: Iterable[DiscountRecord],
    applies_to: str = "room_rates",
) -> RoomRateBreakdown:
    """Room subtotal (rate × nights) with the discounts for one bucket stacked on it."""
    original_subtotal = round2(base_rate * nights)
    bucket = [d for d in discounts if d.applies_to == applies_to]

    breakdown = combine(original_subtotal, bucket)

    return RoomRateBreakdown(
        base_rate=base_rate,
        nights=nights,
        original_subtotal=original_subtotal,
        discounts=breakdown.applied,
        total_discount=breakdown.total_discount,
        subtotal_after_discount=breakdown.final_amount,
    )


# ── Promo codes ──────────────────────────────────────────────────────────


def validate_promo_code(
    code: Optional[str],
    lookup: PromoCodeLookup,
    as_of: date | datetime | None = None,
) -> PromoCodeResult:
    """
    Resolve a guest-entered promo code.

    The code is normalized to uppercase before lookup; failures come back
    as tagged results, never exceptions.
    """
    normalized = normalize_promo_code(code)
    discount = lookup(normalized) if normalized else None

    if discount is None:
        return PromoCodeResult(valid=False, reason="not found")
    if not is_valid(discount, as_of):
        return PromoCodeResult(valid=False, reason="expired or inactive")
    return PromoCodeResult(valid=True, discount=discount)


# ── Stats ────────────────────────────────────────────────────────────────


def discount_stats(
    discounts: Iterable[DiscountRecord],
    as_of: date | datetime | None = None,
) -> DiscountStats:
    discounts = list(discounts)
    day = _as_date(as_of)
    enabled = [d for d in discounts if d.enabled]
    active = sum(1 for d in enabled if is_valid(d, day))

    return DiscountStats(
        total=len(discounts),
        active=active,
        inactive=len(discounts) - len(enabled),
        expired=len(enabled) - active,
        total_used=sum(d.current_uses for d in discounts),
    )
