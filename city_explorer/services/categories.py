from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from city_explorer.config import settings
from city_explorer.models import Event, Location, Movie, Weather
from city_explorer.services import normalizers, upstream_gateway


class Category(str, Enum):
    WEATHER = "weather"
    EVENT = "events"
    MOVIE = "movies"


@dataclass(frozen=True)
class FetchTarget:
    """Plain copy of the Location fields the upstream fetchers need."""

    location_id: int
    search_query: str
    latitude: float
    longitude: float

    @classmethod
    def from_location(cls, location: Location) -> "FetchTarget":
        return cls(
            location_id=location.id,
            search_query=location.search_query,
            latitude=location.latitude,
            longitude=location.longitude,
        )


@dataclass(frozen=True)
class CategorySpec:
    category: Category
    model: type
    ttl_setting: str
    normalizer: Callable[[dict], Any]
    fetch: Callable[[FetchTarget], list]

    @property
    def table(self) -> str:
        return self.model.__tablename__

    @property
    def ttl_ms(self) -> int:
        # Read at call time so TTLs follow the live settings object
        return int(getattr(settings, self.ttl_setting))


def _fetch_weather(target: FetchTarget) -> list:
    return upstream_gateway.fetch_weather(target.latitude, target.longitude)


def _fetch_events(target: FetchTarget) -> list:
    return upstream_gateway.fetch_events(target.search_query)


def _fetch_movies(target: FetchTarget) -> list:
    return upstream_gateway.fetch_movies(target.search_query)


CATEGORY_SPECS: dict[Category, CategorySpec] = {
    Category.WEATHER: CategorySpec(
        category=Category.WEATHER,
        model=Weather,
        ttl_setting="weather_ttl_ms",
        normalizer=normalizers.normalize_weather,
        fetch=_fetch_weather,
    ),
    Category.EVENT: CategorySpec(
        category=Category.EVENT,
        model=Event,
        ttl_setting="events_ttl_ms",
        normalizer=normalizers.normalize_event,
        fetch=_fetch_events,
    ),
    Category.MOVIE: CategorySpec(
        category=Category.MOVIE,
        model=Movie,
        ttl_setting="movies_ttl_ms",
        normalizer=normalizers.normalize_movie,
        fetch=_fetch_movies,
    ),
}


def get_spec(category: Category) -> CategorySpec:
    return CATEGORY_SPECS[Category(category)]
