# backend/app/services/discount_applications.py
"""
Turn engine output into discount_applications payloads.

One payload per applied discount. Each step records the running total it
was computed against, so original_amount of step N equals final_amount of
step N-1. The target is either a reservation or a bill, never both.
"""

from typing import Optional

from ..schemas.discounts import AppliedDiscount, DiscountApplicationCreate, DiscountBreakdown
from .discount_engine import final_amount


def build_application(
    applied: AppliedDiscount,
    original_amount: float,
    reservation_id: Optional[int | str] = None,
    bill_id: Optional[int | str] = None,
) -> DiscountApplicationCreate:
    """Payload for a single applied discount against original_amount."""
    return DiscountApplicationCreate(
        discount_id=applied.id,
        reservation_id=reservation_id,
        bill_id=bill_id,
        original_amount=original_amount,
        discount_amount=applied.amount,
        final_amount=final_amount(original_amount, applied.amount),
    )


def applications_for(
    breakdown: DiscountBreakdown,
    reservation_id: Optional[int | str] = None,
    bill_id: Optional[int | str] = None,
) -> list[DiscountApplicationCreate]:
    """Payloads for every step of a breakdown, in the order they were applied."""
    result = []
    current = breakdown.original_amount

    for applied in breakdown.applied:
        app = build_application(applied, current, reservation_id=reservation_id, bill_id=bill_id)
        result.append(app)
        current = app.final_amount

    return result
