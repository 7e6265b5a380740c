# backend/app/routers/discounts.py
"""
Discount engine endpoints.

Read-only: every endpoint works on the current discount snapshot and
returns freshly computed results. Creating discounts and recording
applications is done elsewhere.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.discounts import (
    BookingContext,
    DiscountBreakdown,
    DiscountCalculateRequest,
    DiscountLabelRead,
    DiscountRecord,
    DiscountStats,
    PromoCodeResult,
    PromoCodeValidateRequest,
    RoomRateBreakdown,
    RoomRateRequest,
)
from ..services.discount_display import (
    applies_to_label,
    discount_badge_color,
    discount_type_label,
    format_discount,
)
from ..services.discount_engine import (
    calculate_room_rate,
    combine,
    discount_stats,
    filter_applicable,
    is_valid,
    validate_promo_code,
)
from ..services.discount_snapshot import load_discount_snapshot, promo_code_lookup

router = APIRouter(prefix="/discounts", tags=["discounts"])


def get_discount_snapshot(db: Session = Depends(get_db)) -> list[DiscountRecord]:
    return load_discount_snapshot(db)


def _candidates(
    snapshot: list[DiscountRecord],
    context: BookingContext | None,
) -> list[DiscountRecord]:
    """
    Eligible set for a context.

    Without one: every valid record except promo_code discounts, which
    only apply when their code is entered.
    """
    if context is not None:
        return filter_applicable(snapshot, context)
    return [d for d in snapshot if is_valid(d) and d.discount_type != "promo_code"]


@router.get("/snapshot", response_model=list[DiscountRecord])
def get_snapshot(snapshot: list[DiscountRecord] = Depends(get_discount_snapshot)):
    return snapshot


@router.post("/applicable", response_model=list[DiscountRecord])
def get_applicable_discounts(
    context: BookingContext,
    snapshot: list[DiscountRecord] = Depends(get_discount_snapshot),
):
    return filter_applicable(snapshot, context)


@router.post("/calculate", response_model=DiscountBreakdown)
def calculate_discounts(
    data: DiscountCalculateRequest,
    snapshot: list[DiscountRecord] = Depends(get_discount_snapshot),
):
    """
    Stack discounts onto an amount.

    discount_ids → those records, narrowed by the same eligibility rules
    context      → records eligible for the booking
    neither      → every valid record except promo_code discounts

    Unknown ids and ineligible records contribute nothing.
    """
    candidates = snapshot
    if data.discount_ids is not None:
        wanted = {str(i) for i in data.discount_ids}
        candidates = [d for d in snapshot if str(d.id) in wanted]

    discounts = _candidates(candidates, data.context)

    return combine(data.amount, discounts)


@router.post("/room-rate", response_model=RoomRateBreakdown)
def calculate_room_rate_endpoint(
    data: RoomRateRequest,
    snapshot: list[DiscountRecord] = Depends(get_discount_snapshot),
):
    discounts = _candidates(snapshot, data.context)
    return calculate_room_rate(data.base_rate, data.nights, discounts, data.applies_to)


@router.post("/promo-codes/validate", response_model=PromoCodeResult)
def validate_promo_code_endpoint(
    data: PromoCodeValidateRequest,
    snapshot: list[DiscountRecord] = Depends(get_discount_snapshot),
):
    return validate_promo_code(data.code, promo_code_lookup(snapshot), data.as_of)


@router.get("/stats", response_model=DiscountStats)
def get_discount_stats(snapshot: list[DiscountRecord] = Depends(get_discount_snapshot)):
    return discount_stats(snapshot)


@router.get("/{id}/label", response_model=DiscountLabelRead)
def get_discount_label(
    id: str,
    snapshot: list[DiscountRecord] = Depends(get_discount_snapshot),
):
    discount = next((d for d in snapshot if str(d.id) == id), None)
    if not discount:
        raise HTTPException(status_code=404, detail="Not found")

    return DiscountLabelRead(
        id=discount.id,
        label=format_discount(discount),
        badge_color=discount_badge_color(discount.discount_type),
        type_label=discount_type_label(discount.discount_type),
        applies_to_label=applies_to_label(discount.applies_to),
    )
