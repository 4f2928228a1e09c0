from sqlalchemy.orm import Session

from city_explorer.models.location import Location


def get_by_search_query(db: Session, search_query: str) -> Location | None:
    return db.query(Location).filter(Location.search_query == search_query).first()


def get_by_id(db: Session, location_id: int) -> Location | None:
    return db.query(Location).filter(Location.id == location_id).first()


def create(
    db: Session,
    search_query: str,
    formatted_query: str,
    latitude: float,
    longitude: float,
) -> Location:
    """Insert and commit. A duplicate search_query raises IntegrityError from the unique index."""
    location = Location(
        search_query=search_query,
        formatted_query=formatted_query,
        latitude=latitude,
        longitude=longitude,
    )
    db.add(location)
    db.commit()
    db.refresh(location)
    return location
