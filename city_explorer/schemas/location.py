from pydantic import BaseModel


class LocationResponse(BaseModel):
    id: int
    search_query: str
    formatted_query: str
    latitude: float
    longitude: float

    class Config:
        from_attributes = True


class LocationRef(BaseModel):
    """Location payload the client echoes back in the `data` query param of category routes."""

    id: int
    search_query: str | None = None
    formatted_query: str | None = None
    latitude: float | None = None
    longitude: float | None = None
