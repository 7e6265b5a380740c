import itertools
from datetime import date

import pytest

from backend.app.schemas.discounts import BookingContext, DiscountRecord


@pytest.fixture
def make_discount():
    ids = itertools.count(1)

    def _make(**overrides) -> DiscountRecord:
        data = {
            "id": next(ids),
            "name": "Discount",
            "discount_type": "percentage",
            "value": 10,
            "priority": 0,
            "can_combine": True,
        }
        data.update(overrides)
        return DiscountRecord(**data)

    return _make


@pytest.fixture
def make_context():
    def _make(**overrides) -> BookingContext:
        data = {
            "check_in_date": date(2025, 6, 15),
            "check_out_date": date(2025, 6, 18),
            "nights": 3,
        }
        data.update(overrides)
        return BookingContext(**data)

    return _make
