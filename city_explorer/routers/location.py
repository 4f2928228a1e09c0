import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from city_explorer.database import get_db
from city_explorer.schemas.location import LocationResponse
from city_explorer.services.location_service import resolve

logger = logging.getLogger(__name__)
router = APIRouter(tags=["location"])


@router.get("/location", response_model=LocationResponse)
def get_location(
    data: str = Query(..., description="Free-text place name or postal code"),
    db: Session = Depends(get_db),
):
    """Resolve a search query to coordinates, geocoding it only the first time it is seen."""
    if not data.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Query text is required")
    location = resolve(db, data)
    logger.debug("GET /location %r -> id=%s", data, location.id)
    return location
