# backend/app/services/field_converter.py
"""
Adapter between stored discount rows and DiscountRecord.

The discounts table keeps SQLite types:
  valid_from / valid_to    → ISO date TEXT
  applicable_room_types    → JSON list in TEXT
  enabled / can_combine    → INTEGER 0/1

Payloads coming from the admin UI may still be camelCase
(discountType, canCombine, ...). Everything is funnelled through
discount_from_row(), so the rest of the code only sees the snake_case
DiscountRecord shape.
"""

import json
import re
from datetime import date, datetime
from typing import Any, Optional

from ..schemas.discounts import DiscountRecord

_UPPER_RE = re.compile(r"[A-Z]")

_DISCOUNT_FIELDS = tuple(DiscountRecord.model_fields)


def to_snake_case(name: str) -> str:
    """roomTypeId → room_type_id"""
    return _UPPER_RE.sub(lambda m: "_" + m.group(0).lower(), name)


def keys_to_snake(obj: Any) -> Any:
    """Recursively convert dict keys to snake_case."""
    if isinstance(obj, list):
        return [keys_to_snake(item) for item in obj]
    if isinstance(obj, dict):
        return {to_snake_case(k): keys_to_snake(v) for k, v in obj.items()}
    return obj


def _parse_room_types(raw: Any) -> list:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple, set, frozenset)):
        return list(raw)
    try:
        items = json.loads(raw) if raw else []
    except (json.JSONDecodeError, TypeError):
        return []
    return items if isinstance(items, list) else []


def _parse_date(raw: Any) -> Optional[date]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    # "2025-06-01" or "2025-06-01T00:00:00" → date part only
    return date.fromisoformat(str(raw)[:10])


def discount_from_row(row: Any) -> DiscountRecord:
    """
    Build a DiscountRecord from an ORM row or a dict (snake_case or camelCase).

    NULL columns fall back to the record defaults (0 minimum nights,
    unlimited uses, ...).
    """
    if isinstance(row, dict):
        data = keys_to_snake(row)
    else:
        data = {name: getattr(row, name, None) for name in _DISCOUNT_FIELDS}

    data = {k: v for k, v in data.items() if k in _DISCOUNT_FIELDS and v is not None}

    data["applicable_room_types"] = _parse_room_types(data.get("applicable_room_types"))
    for key in ("valid_from", "valid_to"):
        data[key] = _parse_date(data.get(key))
    for key in ("enabled", "can_combine"):
        if key in data:
            data[key] = bool(data[key])

    return DiscountRecord.model_validate(data)
