import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("GEOCODE_API_KEY", "test-geocode-key")
os.environ.setdefault("WEATHER_API_KEY", "test-weather-key")
os.environ.setdefault("EVENTBRITE_API_KEY", "test-eventbrite-key")
os.environ.setdefault("MOVIE_API_KEY", "test-movie-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import city_explorer.models  # noqa: F401
from city_explorer.core.errors import UpstreamError
from city_explorer.database import Base, get_db
from city_explorer.main import app
from city_explorer.services import upstream_gateway

GEOCODE_98105 = {
    "formatted_address": "Seattle, WA 98105, USA",
    "geometry": {"location": {"lat": 47.66, "lng": -122.3}},
}


def make_days(n=7, start=1_700_000_000, label="Day"):
    return [{"time": start + i * 86400, "summary": f"{label} {i}"} for i in range(n)]


class FakeUpstream:
    """Stands in for the gateway functions and counts calls per provider."""

    def __init__(self):
        self.calls = {"geocode": 0, "weather": 0, "events": 0, "movies": 0}
        self.geocode_results = [GEOCODE_98105]
        self.weather_days = make_days()
        self.events = [
            {
                "url": "https://www.eventbrite.com/e/1",
                "name": {"text": "Jazz Night"},
                "start": {"local": "2024-03-05T19:00:00"},
                "summary": "Live jazz",
            },
        ]
        self.movies = [
            {
                "title": "Sleepless in Seattle",
                "overview": "A widower...",
                "vote_average": 6.6,
                "vote_count": 1500,
                "poster_path": "/poster.jpg",
                "popularity": 12.5,
                "release_date": "1993-06-25",
            },
        ]
        self.failing = set()

    def _call(self, provider, payload):
        self.calls[provider] += 1
        if provider in self.failing:
            raise UpstreamError(provider, "injected failure")
        return list(payload)

    def fetch_geocode(self, address):
        return self._call("geocode", self.geocode_results)

    def fetch_weather(self, latitude, longitude):
        return self._call("weather", self.weather_days)

    def fetch_events(self, address):
        return self._call("events", self.events)

    def fetch_movies(self, query):
        return self._call("movies", self.movies)


@pytest.fixture
def fake_upstream(monkeypatch) -> FakeUpstream:
    fake = FakeUpstream()
    monkeypatch.setattr(upstream_gateway, "fetch_geocode", fake.fetch_geocode)
    monkeypatch.setattr(upstream_gateway, "fetch_weather", fake.fetch_weather)
    monkeypatch.setattr(upstream_gateway, "fetch_events", fake.fetch_events)
    monkeypatch.setattr(upstream_gateway, "fetch_movies", fake.fetch_movies)
    return fake


@pytest.fixture
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_conn, _record):
        dbapi_conn.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(test_engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def _db_override():
        yield db

    app.dependency_overrides[get_db] = _db_override
    yield TestClient(app)
    app.dependency_overrides.clear()
