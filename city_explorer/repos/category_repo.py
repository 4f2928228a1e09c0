import hashlib
import logging

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from city_explorer.models.category_record import CategoryFetch

logger = logging.getLogger(__name__)


def compute_lock_key(location_id: int, category: str) -> int:
    """Deterministic signed 64-bit key for pg_advisory_xact_lock."""
    digest = hashlib.sha256(f"{category}|{location_id}".encode()).digest()
    return int.from_bytes(digest[:8], "big", signed=True)


def get_rows(db: Session, model, location_id: int) -> list:
    return db.query(model).filter(model.location_id == location_id).order_by(model.id).all()


def get_fetch_marker(db: Session, location_id: int, category: str) -> CategoryFetch | None:
    return (
        db.query(CategoryFetch)
        .filter(
            CategoryFetch.location_id == location_id,
            CategoryFetch.category == category,
        )
        .first()
    )


def _lock_generation(db: Session, location_id: int, category: str) -> None:
    bind = db.get_bind()
    if bind is None or bind.dialect.name != "postgresql":
        return
    # Released automatically on commit/rollback
    db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": compute_lock_key(location_id, category)})


def _stamp_marker(db: Session, location_id: int, category: str, fetched_at: int) -> None:
    marker = get_fetch_marker(db, location_id, category)
    if marker is not None:
        marker.fetched_at = fetched_at
        return
    try:
        with db.begin_nested():
            db.add(CategoryFetch(location_id=location_id, category=category, fetched_at=fetched_at))
    except IntegrityError:
        # A concurrent refresh created the marker first; take it over
        logger.info("Fetch marker for %s/%s inserted concurrently; updating", category, location_id)
        marker = get_fetch_marker(db, location_id, category)
        marker.fetched_at = fetched_at


def replace_generation(
    db: Session,
    model,
    category: str,
    location_id: int,
    rows: list[dict],
    created_at: int,
) -> list:
    """
    Swap the stored generation for (location_id, category) in one transaction:
    delete old rows, stamp the fetch marker, insert `rows`, commit.
    Nothing is visible to other sessions until the commit succeeds.
    """
    _lock_generation(db, location_id, category)
    deleted = db.query(model).filter(model.location_id == location_id).delete(synchronize_session="fetch")
    _stamp_marker(db, location_id, category, created_at)
    new_rows = [model(**r, created_at=created_at, location_id=location_id) for r in rows]
    db.add_all(new_rows)
    db.commit()
    logger.info(
        "Replaced %s generation for location %s: deleted=%d inserted=%d",
        category, location_id, deleted, len(new_rows),
    )
    return new_rows
