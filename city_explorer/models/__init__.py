from city_explorer.models.location import Location
from city_explorer.models.category_record import Weather, Event, Movie, CategoryFetch

__all__ = [
    "Location",
    "Weather",
    "Event",
    "Movie",
    "CategoryFetch",
]
