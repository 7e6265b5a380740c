# backend/app/services/discount_display.py
"""Labels and badge colors for discounts, as shown in the admin UI."""

from typing import Optional

from ..config import settings
from ..schemas.discounts import DiscountRecord

_BADGE_COLORS: dict[str, str] = {
    "percentage": "blue",
    "fixed_amount": "green",
    "promo_code": "purple",
    "seasonal": "orange",
    "long_stay": "indigo",
}
_DEFAULT_BADGE_COLOR = "gray"

_TYPE_LABELS: dict[str, str] = {
    "percentage": "Percentage",
    "fixed_amount": "Fixed Amount",
    "promo_code": "Promo Code",
    "seasonal": "Seasonal",
    "long_stay": "Long Stay",
}

_APPLIES_TO_LABELS: dict[str, str] = {
    "room_rates": "Room Rates",
    "addons": "Add-ons",
    "total_bill": "Total Bill",
}


def _format_number(value: float) -> str:
    """10.0 → "10", 12.5 → "12.5"."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_discount(
    discount: Optional[DiscountRecord],
    currency_symbol: Optional[str] = None,
) -> str:
    """
    Human-readable value of a discount.

    percentage → "15% off", everything else → "₹500 off".
    """
    if discount is None:
        return ""

    value = _format_number(discount.value)
    if discount.discount_type == "percentage":
        return f"{value}% off"

    symbol = settings.currency_symbol if currency_symbol is None else currency_symbol
    return f"{symbol}{value} off"


def discount_badge_color(discount_type: str) -> str:
    return _BADGE_COLORS.get(discount_type, _DEFAULT_BADGE_COLOR)


def discount_type_label(discount_type: str) -> str:
    return _TYPE_LABELS.get(discount_type, discount_type)


def applies_to_label(applies_to: str) -> str:
    return _APPLIES_TO_LABELS.get(applies_to, applies_to)
