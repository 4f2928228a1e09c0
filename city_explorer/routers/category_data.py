import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from city_explorer.database import get_db
from city_explorer.schemas.category import EventResponse, MovieResponse, WeatherResponse
from city_explorer.schemas.location import LocationRef
from city_explorer.services.categories import Category
from city_explorer.services.category_cache import get_category_data
from city_explorer.services.location_service import get_location

logger = logging.getLogger(__name__)
router = APIRouter(tags=["category-data"])

_DATA_DESCRIPTION = "JSON-encoded location as returned by /location"


def _parse_location_ref(data: str) -> LocationRef:
    try:
        return LocationRef.model_validate_json(data)
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="data must be a JSON location object with an integer id",
        )


def _load(db: Session, category: Category, data: str) -> list:
    ref = _parse_location_ref(data)
    location = get_location(db, ref.id)
    rows = get_category_data(db, category, location)
    logger.debug("GET /%s location=%s count=%d", category.value, location.id, len(rows))
    return rows


@router.get("/weather", response_model=list[WeatherResponse])
def get_weather(data: str = Query(..., description=_DATA_DESCRIPTION), db: Session = Depends(get_db)):
    return _load(db, Category.WEATHER, data)


@router.get("/events", response_model=list[EventResponse])
def get_events(data: str = Query(..., description=_DATA_DESCRIPTION), db: Session = Depends(get_db)):
    return _load(db, Category.EVENT, data)


@router.get("/movies", response_model=list[MovieResponse])
def get_movies(data: str = Query(..., description=_DATA_DESCRIPTION), db: Session = Depends(get_db)):
    return _load(db, Category.MOVIE, data)
