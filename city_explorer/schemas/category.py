from pydantic import BaseModel


class WeatherResponse(BaseModel):
    forecast: str
    formatted_date: str
    created_at: int
    location_id: int

    class Config:
        from_attributes = True


class EventResponse(BaseModel):
    link: str
    name: str
    event_date: str
    summary: str
    created_at: int
    location_id: int

    class Config:
        from_attributes = True


class MovieResponse(BaseModel):
    title: str
    overview: str
    average_votes: float
    total_votes: int
    image_url: str | None
    popularity: float
    released_on: str
    created_at: int
    location_id: int

    class Config:
        from_attributes = True
