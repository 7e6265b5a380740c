from datetime import date
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from backend.app.services.field_converter import discount_from_row, keys_to_snake, to_snake_case


def _row(**overrides):
    data = {
        "id": 1,
        "name": "Summer",
        "description": None,
        "discount_type": "seasonal",
        "value": 20.0,
        "applies_to": "room_rates",
        "enabled": 1,
        "valid_from": "2025-06-01",
        "valid_to": "2025-06-30",
        "applicable_room_types": '["suite", "double"]',
        "promo_code": None,
        "minimum_nights": 0,
        "maximum_uses": None,
        "current_uses": 0,
        "priority": 5,
        "can_combine": 0,
    }
    data.update(overrides)
    return data


def test_to_snake_case():
    assert to_snake_case("roomTypeId") == "room_type_id"
    assert to_snake_case("already_snake") == "already_snake"


def test_keys_to_snake_recurses():
    payload = {"checkInDate": "2025-06-15", "items": [{"roomTypeId": 1}]}
    assert keys_to_snake(payload) == {"check_in_date": "2025-06-15", "items": [{"room_type_id": 1}]}


def test_from_orm_like_row():
    record = discount_from_row(SimpleNamespace(**_row()))

    assert record.valid_from == date(2025, 6, 1)
    assert record.valid_to == date(2025, 6, 30)
    assert record.applicable_room_types == ["suite", "double"]
    assert record.enabled is True
    assert record.can_combine is False
    assert record.maximum_uses is None


def test_from_snake_dict_with_timestamps():
    record = discount_from_row(_row(valid_from="2025-06-01T00:00:00+00:00", valid_to=None))
    assert record.valid_from == date(2025, 6, 1)
    assert record.valid_to is None


def test_from_camel_case_dict():
    record = discount_from_row({
        "id": "abc",
        "name": "Welcome",
        "discountType": "promo_code",
        "value": 10,
        "promoCode": "welcome",
        "canCombine": True,
        "applicableRoomTypes": [3],
        "minimumNights": 2,
    })

    assert record.discount_type == "promo_code"
    assert record.promo_code == "WELCOME"
    assert record.can_combine is True
    assert record.applicable_room_types == [3]
    assert record.minimum_nights == 2


def test_null_columns_fall_back_to_defaults():
    record = discount_from_row(_row(minimum_nights=None, priority=None, applicable_room_types=None))
    assert record.minimum_nights == 0
    assert record.priority == 0
    assert record.applicable_room_types == []


@pytest.mark.parametrize("raw", ["not json", '{"a": 1}', ""])
def test_malformed_room_types_mean_all_rooms(raw):
    assert discount_from_row(_row(applicable_room_types=raw)).applicable_room_types == []


def test_invalid_row_is_rejected():
    with pytest.raises(ValidationError):
        discount_from_row(_row(discount_type="percentage", value=150))
