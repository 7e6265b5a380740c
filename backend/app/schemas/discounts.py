# backend/app/schemas/discounts.py

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

DiscountType = Literal["percentage", "fixed_amount", "promo_code", "seasonal", "long_stay"]
AppliesTo = Literal["room_rates", "addons", "total_bill"]
PromoCodeFailure = Literal["not found", "expired or inactive"]


def normalize_promo_code(code: Optional[str]) -> Optional[str]:
    """Promo codes are stored and compared uppercase; blank means no code."""
    if code is None:
        return None
    code = code.strip().upper()
    return code or None


# ── Configuration record (read-only snapshot) ────────────────────────────


class DiscountRecord(BaseModel):
    id: int | str
    name: str
    description: Optional[str] = None
    discount_type: DiscountType
    value: float = Field(ge=0)
    applies_to: AppliesTo = "room_rates"
    enabled: bool = True
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    applicable_room_types: list[int | str] = Field(default_factory=list)  # empty = all room types
    promo_code: Optional[str] = None
    minimum_nights: int = Field(default=0, ge=0)
    maximum_uses: Optional[int] = Field(default=None, ge=0)  # None = unlimited
    current_uses: int = Field(default=0, ge=0)
    priority: int = 0
    can_combine: bool = False

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("promo_code", mode="before")
    @classmethod
    def normalize_code(cls, v):
        return normalize_promo_code(v) if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_type_rules(self):
        if self.discount_type == "percentage" and self.value > 100:
            raise ValueError("Percentage discount cannot exceed 100%")
        if self.discount_type == "promo_code" and not self.promo_code:
            raise ValueError("Promo code is required for promo_code discounts")
        return self


class BookingContext(BaseModel):
    check_in_date: date
    check_out_date: date
    room_type_id: Optional[int | str] = None
    nights: int
    promo_code: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("promo_code", mode="before")
    @classmethod
    def normalize_code(cls, v):
        return normalize_promo_code(v) if isinstance(v, str) else v


# ── Engine output ────────────────────────────────────────────────────────


class AppliedDiscount(BaseModel):
    id: int | str
    name: str
    type: DiscountType
    value: float
    amount: float
    priority: int


class DiscountBreakdown(BaseModel):
    original_amount: float
    total_discount: float
    final_amount: float
    applied: list[AppliedDiscount] = Field(default_factory=list)


class RoomRateBreakdown(BaseModel):
    base_rate: float
    nights: int
    original_subtotal: float
    discounts: list[AppliedDiscount] = Field(default_factory=list)
    total_discount: float
    subtotal_after_discount: float


class PromoCodeResult(BaseModel):
    valid: bool
    discount: Optional[DiscountRecord] = None
    reason: Optional[PromoCodeFailure] = None


class DiscountStats(BaseModel):
    total: int
    active: int
    inactive: int
    expired: int
    total_used: int


# ── Persistence payload (outbound) ───────────────────────────────────────


class DiscountApplicationCreate(BaseModel):
    discount_id: int | str
    reservation_id: Optional[int | str] = None
    bill_id: Optional[int | str] = None
    original_amount: float
    discount_amount: float
    final_amount: float

    model_config = {"from_attributes": True, "frozen": True}

    @model_validator(mode="after")
    def check_single_target(self):
        if (self.reservation_id is None) == (self.bill_id is None):
            raise ValueError("Exactly one of reservation_id or bill_id must be set")
        return self


# ── Request / response bodies ────────────────────────────────────────────


class DiscountCalculateRequest(BaseModel):
    amount: float = Field(allow_inf_nan=False)
    discount_ids: Optional[list[int | str]] = None
    context: Optional[BookingContext] = None


class RoomRateRequest(BaseModel):
    base_rate: float = Field(allow_inf_nan=False)
    nights: int
    applies_to: AppliesTo = "room_rates"
    context: Optional[BookingContext] = None


class PromoCodeValidateRequest(BaseModel):
    code: str
    as_of: Optional[date] = None


class DiscountLabelRead(BaseModel):
    id: int | str
    label: str
    badge_color: str
    type_label: str
    applies_to_label: str
