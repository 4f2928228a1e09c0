import logging
from typing import Any

import httpx

from city_explorer.config import settings
from city_explorer.core.errors import UpstreamError

logger = logging.getLogger(__name__)


def _require_key(provider: str, key: str) -> str:
    if not (key or "").strip():
        raise UpstreamError(provider, "API key is not configured")
    return key.strip()


def _get_json(provider: str, url: str, params: dict | None = None) -> Any:
    """Single GET with a bounded timeout. Every failure becomes UpstreamError."""
    try:
        response = httpx.get(url, params=params, timeout=settings.upstream_timeout_seconds)
        response.raise_for_status()
        return response.json()
    except httpx.TimeoutException as e:
        logger.warning("%s request timed out after %.1fs", provider, settings.upstream_timeout_seconds)
        raise UpstreamError(provider, "request timed out") from e
    except httpx.HTTPStatusError as e:
        logger.warning("%s returned HTTP %d", provider, e.response.status_code)
        raise UpstreamError(provider, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.warning("%s request failed: %s", provider, e)
        raise UpstreamError(provider, f"request failed: {e}") from e
    except ValueError as e:
        raise UpstreamError(provider, "invalid JSON response") from e


def _list_at(provider: str, payload: Any, *path: str) -> list:
    node = payload
    for key in path:
        if not isinstance(node, dict) or key not in node:
            raise UpstreamError(provider, f"unexpected payload shape, missing {'.'.join(path)}")
        node = node[key]
    if not isinstance(node, list):
        raise UpstreamError(provider, f"unexpected payload shape, {'.'.join(path)} is not a list")
    return node


def fetch_geocode(address: str) -> list[dict]:
    """Google Geocoding results for free-text address. Empty list when nothing matches."""
    provider = "geocode"
    key = _require_key(provider, settings.geocode_api_key)
    payload = _get_json(provider, settings.geocode_base_url, {"address": address, "key": key})
    if isinstance(payload, dict) and payload.get("status") == "ZERO_RESULTS":
        return []
    if isinstance(payload, dict) and payload.get("status") not in (None, "OK"):
        raise UpstreamError(provider, f"status {payload.get('status')}")
    results = _list_at(provider, payload, "results")
    logger.info("Geocoded %r: %d result(s)", address, len(results))
    return results


def fetch_weather(latitude: float, longitude: float) -> list[dict]:
    """
    Daily forecast entries for a coordinate.

    Each day carries the payload's `timezone` and `offset` so it can be dated in the
    location's own zone.
    """
    provider = "weather"
    key = _require_key(provider, settings.weather_api_key)
    url = f"{settings.weather_base_url.rstrip('/')}/{key}/{latitude},{longitude}"
    payload = _get_json(provider, url)
    days = _list_at(provider, payload, "daily", "data")
    zone = {"timezone": payload.get("timezone"), "offset": payload.get("offset")}
    logger.info("Fetched %d forecast day(s) for %s,%s (%s)", len(days), latitude, longitude, zone["timezone"])
    return [{**zone, **day} if isinstance(day, dict) else day for day in days]


def fetch_events(address: str) -> list[dict]:
    provider = "events"
    key = _require_key(provider, settings.eventbrite_api_key)
    payload = _get_json(provider, settings.events_base_url, {"token": key, "location.address": address})
    events = _list_at(provider, payload, "events")
    logger.info("Fetched %d event(s) for %r", len(events), address)
    return events


def fetch_movies(query: str) -> list[dict]:
    provider = "movies"
    key = _require_key(provider, settings.movie_api_key)
    payload = _get_json(provider, settings.movies_base_url, {"api_key": key, "query": query})
    movies = _list_at(provider, payload, "results")
    logger.info("Fetched %d movie(s) for %r", len(movies), query)
    return movies
