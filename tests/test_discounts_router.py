from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from backend.app.main import app
from backend.app.routers.discounts import get_discount_snapshot
from backend.app.schemas.discounts import DiscountRecord

NEXT_YEAR = date.today().year + 1

SNAPSHOT = [
    DiscountRecord(
        id=1, name="Summer", discount_type="seasonal", value=20,
        valid_from=date(NEXT_YEAR, 6, 1), valid_to=date(NEXT_YEAR, 6, 30),
        priority=10, can_combine=True,
    ),
    DiscountRecord(
        id=2, name="Long stay", discount_type="long_stay", value=10,
        minimum_nights=7, priority=5, can_combine=True,
    ),
    DiscountRecord(
        id=3, name="Welcome", discount_type="promo_code", value=15,
        promo_code="WELCOME", priority=20, can_combine=False,
    ),
    DiscountRecord(
        id=4, name="Minibar", discount_type="fixed_amount", value=500,
        applies_to="addons", enabled=False,
    ),
    DiscountRecord(
        id=5, name="Expired", discount_type="percentage", value=50,
        valid_to=date.today() - timedelta(days=1),
    ),
]


@pytest.fixture
def client():
    app.dependency_overrides[get_discount_snapshot] = lambda: SNAPSHOT
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _context(**overrides):
    data = {
        "check_in_date": f"{NEXT_YEAR}-06-10",
        "check_out_date": f"{NEXT_YEAR}-06-17",
        "nights": 7,
    }
    data.update(overrides)
    return data


def test_snapshot(client):
    resp = client.get("/discounts/snapshot")
    assert resp.status_code == 200
    assert [d["id"] for d in resp.json()] == [1, 2, 3, 4, 5]


def test_applicable(client):
    resp = client.post("/discounts/applicable", json=_context())
    assert resp.status_code == 200
    assert [d["id"] for d in resp.json()] == [1, 2]


def test_applicable_with_promo_code(client):
    resp = client.post("/discounts/applicable", json=_context(promo_code="welcome"))
    assert [d["id"] for d in resp.json()] == [3]


def test_applicable_rejects_bad_context(client):
    resp = client.post("/discounts/applicable", json={"nights": 3})
    assert resp.status_code == 422


def test_calculate_with_context(client):
    resp = client.post("/discounts/calculate", json={"amount": 1000, "context": _context()})

    body = resp.json()
    assert resp.status_code == 200
    assert [a["id"] for a in body["applied"]] == [1, 2]
    # 20% of 1000, then 10% of 800
    assert body["total_discount"] == 280
    assert body["final_amount"] == 720


def test_calculate_without_context_skips_promo_codes(client):
    resp = client.post("/discounts/calculate", json={"amount": 1000})

    body = resp.json()
    assert resp.status_code == 200
    # 1 is out of season today, 3 needs its code, 4 is disabled, 5 expired
    assert [a["id"] for a in body["applied"]] == [2]
    assert body["final_amount"] == 900


def test_calculate_with_ids(client):
    resp = client.post("/discounts/calculate", json={"amount": 1000, "discount_ids": [2, 3]})

    body = resp.json()
    assert [a["id"] for a in body["applied"]] == [2]
    assert body["final_amount"] == 900


def test_calculate_with_ids_and_promo_code(client):
    resp = client.post(
        "/discounts/calculate",
        json={"amount": 1000, "discount_ids": [2, 3], "context": _context(promo_code="welcome")},
    )

    body = resp.json()
    assert [a["id"] for a in body["applied"]] == [3]
    assert body["final_amount"] == 850


def test_calculate_with_ids_skips_inactive(client):
    resp = client.post("/discounts/calculate", json={"amount": 1000, "discount_ids": [4, 5]})

    body = resp.json()
    assert resp.status_code == 200
    assert body["applied"] == []
    assert body["final_amount"] == 1000


def test_calculate_with_ids_skips_used_up(client):
    app.dependency_overrides[get_discount_snapshot] = lambda: [
        DiscountRecord(
            id=7, name="First ten", discount_type="percentage", value=25,
            maximum_uses=10, current_uses=10,
        ),
    ]

    resp = client.post("/discounts/calculate", json={"amount": 1000, "discount_ids": [7]})

    body = resp.json()
    assert body["applied"] == []
    assert body["final_amount"] == 1000


def test_calculate_unknown_id(client):
    resp = client.post("/discounts/calculate", json={"amount": 1000, "discount_ids": [99]})

    body = resp.json()
    assert resp.status_code == 200
    assert body["applied"] == []
    assert body["final_amount"] == 1000


def test_calculate_rejects_infinite_amount(client):
    resp = client.post(
        "/discounts/calculate",
        content='{"amount": 1e999}',
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 422


def test_calculate_without_discounts(client):
    resp = client.post("/discounts/calculate", json={"amount": 100, "discount_ids": []})
    assert resp.json() == {
        "original_amount": 100,
        "total_discount": 0,
        "final_amount": 100,
        "applied": [],
    }


def test_room_rate(client):
    resp = client.post(
        "/discounts/room-rate",
        json={"base_rate": 100, "nights": 7, "context": _context()},
    )

    body = resp.json()
    assert body["original_subtotal"] == 700
    assert body["total_discount"] == 196
    assert body["subtotal_after_discount"] == 504


def test_room_rate_without_context_skips_promo_codes(client):
    resp = client.post("/discounts/room-rate", json={"base_rate": 100, "nights": 7})

    body = resp.json()
    assert [d["id"] for d in body["discounts"]] == [2]
    assert body["total_discount"] == 70
    assert body["subtotal_after_discount"] == 630


def test_room_rate_rejects_infinite_rate(client):
    resp = client.post(
        "/discounts/room-rate",
        content='{"base_rate": 1e999, "nights": 1}',
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 422


def test_validate_promo_code(client):
    resp = client.post("/discounts/promo-codes/validate", json={"code": "welcome"})
    body = resp.json()
    assert body["valid"] is True
    assert body["discount"]["id"] == 3


def test_validate_promo_code_not_found(client):
    resp = client.post("/discounts/promo-codes/validate", json={"code": "NOPE"})
    assert resp.json() == {"valid": False, "discount": None, "reason": "not found"}


def test_validate_promo_code_as_of(client):
    resp = client.post(
        "/discounts/promo-codes/validate",
        json={"code": "WELCOME", "as_of": "2000-01-01"},
    )
    # No validity window on WELCOME, so it stays valid
    assert resp.json()["valid"] is True


def test_stats(client):
    resp = client.get("/discounts/stats")
    assert resp.json() == {
        "total": 5,
        "active": 2,
        "inactive": 1,
        "expired": 2,
        "total_used": 0,
    }


def test_label(client):
    resp = client.get("/discounts/4/label")
    assert resp.json() == {
        "id": 4,
        "label": "₹500 off",
        "badge_color": "green",
        "type_label": "Fixed Amount",
        "applies_to_label": "Add-ons",
    }


def test_label_unknown(client):
    resp = client.get("/discounts/99/label")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Not found"}
