# backend/app/services/discount_snapshot.py
"""
Read-only discount snapshot for the engine.

Loaded from the discounts table and cached in Redis as a JSON list:
  cache:discounts:snapshot → [DiscountRecord, ...]   (TTL from settings)

The cache is optional: Redis failures are logged and the snapshot is
read from the database. Code that writes discounts or bumps current_uses
calls invalidate_discount_snapshot() afterwards.
"""

import logging
from typing import Callable, Iterable, Optional

from pydantic import TypeAdapter, ValidationError
from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from ..config import settings
from ..models.generated import Discounts as DBDiscounts
from ..redis_client import redis_client
from ..schemas.discounts import DiscountRecord, normalize_promo_code
from .field_converter import discount_from_row

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "cache:discounts:snapshot"

_snapshot_adapter = TypeAdapter(list[DiscountRecord])


def load_discount_snapshot(
    db: Session,
    redis: Redis | None = None,
    use_cache: bool | None = None,
) -> list[DiscountRecord]:
    """Return every stored discount as a DiscountRecord, cache first."""
    redis = redis or redis_client
    if use_cache is None:
        use_cache = settings.discount_cache_enabled

    if use_cache:
        cached = _read_cache(redis)
        if cached is not None:
            logger.debug(f"Discount snapshot cache hit ({len(cached)} records)")
            return cached
        logger.debug("Discount snapshot cache miss")

    rows = db.query(DBDiscounts).order_by(DBDiscounts.id).all()
    snapshot = [discount_from_row(row) for row in rows]

    if use_cache:
        _write_cache(redis, snapshot)

    return snapshot


def invalidate_discount_snapshot(redis: Redis | None = None) -> None:
    (redis or redis_client).delete(SNAPSHOT_KEY)


def promo_code_lookup(
    snapshot: Iterable[DiscountRecord],
) -> Callable[[str], Optional[DiscountRecord]]:
    """Build the code → record lookup used by validate_promo_code()."""
    by_code = {d.promo_code: d for d in snapshot if d.promo_code}

    def lookup(code: str) -> Optional[DiscountRecord]:
        return by_code.get(normalize_promo_code(code))

    return lookup


# ── Cache helpers ────────────────────────────────────────────────────────


def _read_cache(redis: Redis) -> Optional[list[DiscountRecord]]:
    try:
        raw = redis.get(SNAPSHOT_KEY)
    except RedisError:
        logger.exception("Failed to read discount snapshot cache")
        return None

    if not raw:
        return None

    try:
        return _snapshot_adapter.validate_json(raw)
    except ValidationError:
        logger.warning("Discarding malformed discount snapshot cache")
        return None


def _write_cache(redis: Redis, snapshot: list[DiscountRecord]) -> None:
    try:
        redis.set(
            SNAPSHOT_KEY,
            _snapshot_adapter.dump_json(snapshot),
            ex=settings.discount_cache_ttl_seconds,
        )
    except RedisError:
        logger.exception("Failed to write discount snapshot cache")
