import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from city_explorer.core.errors import NotFoundError, StorageError
from city_explorer.models.location import Location
from city_explorer.repos import location_repo
from city_explorer.services import upstream_gateway
from city_explorer.services.normalizers import normalize_items, normalize_place

logger = logging.getLogger(__name__)


def _lookup(db: Session, search_query: str) -> Location | None:
    try:
        return location_repo.get_by_search_query(db, search_query)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Location lookup failed: {e}") from e


def resolve(db: Session, search_query: str) -> Location:
    """
    Return the stored Location for search_query, geocoding and inserting it on first sight.
    Exactly one insert on a miss, none on a hit.
    """
    existing = _lookup(db, search_query)
    if existing is not None:
        logger.debug("Location cache hit for %r (id=%s)", search_query, existing.id)
        return existing

    # Release the lookup transaction before the network round trip
    db.rollback()
    places = normalize_items(normalize_place, upstream_gateway.fetch_geocode(search_query))
    if not places:
        raise NotFoundError(f"No location found for {search_query!r}")
    place = places[0]

    try:
        location = location_repo.create(
            db,
            search_query=search_query,
            formatted_query=place.formatted_query,
            latitude=place.latitude,
            longitude=place.longitude,
        )
    except IntegrityError:
        # Another request inserted the same search_query first; its row wins.
        db.rollback()
        logger.info("Location %r was inserted concurrently; re-reading", search_query)
        winner = _lookup(db, search_query)
        if winner is None:
            raise StorageError(f"Location insert for {search_query!r} conflicted but no row was found")
        return winner
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Location insert failed: {e}") from e

    logger.info("Created location id=%s for %r (%s)", location.id, search_query, location.formatted_query)
    return location


def get_location(db: Session, location_id: int) -> Location:
    try:
        location = location_repo.get_by_id(db, location_id)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Location lookup failed: {e}") from e
    if location is None:
        raise NotFoundError(f"Location {location_id} does not exist")
    return location
