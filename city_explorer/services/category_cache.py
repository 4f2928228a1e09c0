"""
Cache-aside freshness policy for per-location category data.

For one (location, category) each call ends in exactly one of:
  - cache hit: stored generation is within the category TTL, returned as-is
  - fetch-and-populate: nothing stored yet, fetch upstream and persist
  - invalidate-and-refresh: stored generation is older than the TTL, replace it

Populate and refresh share one write path: fetch and normalize first, then swap
the generation in a single transaction. An upstream failure leaves the previous
generation untouched; a store failure rolls the swap back.
"""

import logging
import time
from dataclasses import asdict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from city_explorer.core.errors import StorageError
from city_explorer.models.location import Location
from city_explorer.repos import category_repo
from city_explorer.services.categories import Category, CategorySpec, FetchTarget, get_spec
from city_explorer.services.normalizers import normalize_items

logger = logging.getLogger(__name__)


def now_millis() -> int:
    return int(time.time() * 1000)


def _replace(db: Session, spec: CategorySpec, location: Location, now_ms: int | None) -> list:
    target = FetchTarget.from_location(location)
    # End the read transaction so no pooled connection is held across the upstream call
    db.rollback()
    items = spec.fetch(target)
    records = normalize_items(spec.normalizer, items)
    created_at = now_ms if now_ms is not None else now_millis()
    try:
        return category_repo.replace_generation(
            db,
            spec.model,
            spec.category.value,
            target.location_id,
            [asdict(r) for r in records],
            created_at,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Storing %s generation for location %s failed", spec.table, target.location_id)
        raise StorageError(f"Could not store {spec.table} for location {target.location_id}: {e}") from e


def get_category_data(
    db: Session,
    category: Category,
    location: Location,
    now_ms: int | None = None,
) -> list:
    """Return the current generation of `category` rows for `location`, refreshing as needed."""
    spec = get_spec(category)
    now = now_ms if now_ms is not None else now_millis()

    try:
        rows = category_repo.get_rows(db, spec.model, location.id)
        marker = category_repo.get_fetch_marker(db, location.id, spec.category.value)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Could not read {spec.table} for location {location.id}: {e}") from e

    if not rows and marker is None:
        logger.info("%s cold for location %s; fetching", spec.table, location.id)
        return _replace(db, spec, location, now_ms)

    fetched_at = marker.fetched_at if marker is not None else rows[0].created_at
    age = now - fetched_at
    if age <= spec.ttl_ms:
        logger.info("%s cache hit for location %s (age=%dms, rows=%d)", spec.table, location.id, age, len(rows))
        return rows

    logger.info("%s stale for location %s (age=%dms > ttl=%dms); refreshing", spec.table, location.id, age, spec.ttl_ms)
    return _replace(db, spec, location, now_ms)
