"""
Pure transforms from one raw provider item to one category record.

Each normalizer returns None when a required field is missing or malformed, so
a single bad item is dropped instead of failing the whole batch. Optional fields
fall back to the defaults declared on the record types.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from city_explorer.config import settings

logger = logging.getLogger(__name__)

DISPLAY_DATE_FORMAT = "%a %b %d %Y"  # e.g. "Mon Jan 01 2024"


@dataclass(frozen=True)
class GeocodedPlace:
    formatted_query: str
    latitude: float
    longitude: float


@dataclass(frozen=True)
class WeatherRecord:
    forecast: str
    formatted_date: str


@dataclass(frozen=True)
class EventRecord:
    name: str
    link: str = ""
    event_date: str = ""
    summary: str = ""


@dataclass(frozen=True)
class MovieRecord:
    title: str
    overview: str = ""
    average_votes: float = 0.0
    total_votes: int = 0
    image_url: Optional[str] = None
    popularity: float = 0.0
    released_on: str = ""


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def normalize_place(item: dict) -> GeocodedPlace | None:
    try:
        coords = item["geometry"]["location"]
        latitude = float(coords["lat"])
        longitude = float(coords["lng"])
    except (KeyError, TypeError, ValueError):
        return None
    formatted = _as_text(item.get("formatted_address"))
    return GeocodedPlace(formatted_query=formatted, latitude=latitude, longitude=longitude)


def _forecast_zone(day: dict) -> tzinfo:
    """Zone of the forecast location: IANA name first, then hour offset, else UTC."""
    name = day.get("timezone")
    if name:
        try:
            return ZoneInfo(str(name))
        except (ZoneInfoNotFoundError, ValueError, OSError):
            logger.debug("Unknown forecast timezone %r; falling back to offset", name)
    offset = day.get("offset")
    if offset is not None:
        try:
            return timezone(timedelta(hours=float(offset)))
        except (TypeError, ValueError):
            logger.debug("Unusable forecast offset %r; using UTC", offset)
    return timezone.utc


def normalize_weather(day: dict) -> WeatherRecord | None:
    # Daily `time` is local midnight at the forecast location, so the date is read in its zone
    try:
        ts = datetime.fromtimestamp(int(day["time"]), tz=_forecast_zone(day))
    except (KeyError, TypeError, ValueError, OverflowError, OSError):
        return None
    return WeatherRecord(
        forecast=_as_text(day.get("summary")),
        formatted_date=ts.strftime(DISPLAY_DATE_FORMAT),
    )


def _event_date(start: Any) -> str:
    if not isinstance(start, dict) or not start.get("local"):
        return ""
    raw = str(start["local"])
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw).strftime(DISPLAY_DATE_FORMAT)
    except ValueError:
        return ""


def normalize_event(event: dict) -> EventRecord | None:
    name = event.get("name")
    # Eventbrite nests the display name under {"text": ..., "html": ...}
    if isinstance(name, dict):
        name = name.get("text")
    name = _as_text(name)
    if not name:
        return None
    return EventRecord(
        name=name,
        link=_as_text(event.get("url")),
        event_date=_event_date(event.get("start")),
        summary=_as_text(event.get("summary")),
    )


def normalize_movie(movie: dict) -> MovieRecord | None:
    title = _as_text(movie.get("title"))
    if not title:
        return None
    poster = _as_text(movie.get("poster_path"))
    return MovieRecord(
        title=title,
        overview=_as_text(movie.get("overview")),
        average_votes=_as_float(movie.get("vote_average"), 0.0),
        total_votes=_as_int(movie.get("vote_count"), 0),
        image_url=f"{settings.movie_image_base_url.rstrip('/')}/{poster.lstrip('/')}" if poster else None,
        popularity=_as_float(movie.get("popularity"), 0.0),
        released_on=_as_text(movie.get("release_date")),
    )


def normalize_items(normalizer: Callable[[dict], Any], items: list) -> list:
    """Apply one normalizer to a batch, dropping items it rejects."""
    records = []
    skipped = 0
    for item in items:
        record = normalizer(item) if isinstance(item, dict) else None
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        logger.warning("Skipped %d malformed item(s) in %s", skipped, normalizer.__name__)
    return records
