import pytest
from sqlalchemy.exc import OperationalError

import city_explorer.services.location_service as ls
from city_explorer.core.errors import NotFoundError, StorageError, UpstreamError
from city_explorer.models import Location
from city_explorer.repos import location_repo


def _count(db, query):
    return db.query(Location).filter(Location.search_query == query).count()


def test_resolve_geocodes_and_persists_on_first_sight(db, fake_upstream):
    loc = ls.resolve(db, "98105")
    assert loc.id is not None
    assert loc.search_query == "98105"
    assert loc.formatted_query == "Seattle, WA 98105, USA"
    assert loc.latitude == pytest.approx(47.66)
    assert loc.longitude == pytest.approx(-122.3)
    assert fake_upstream.calls["geocode"] == 1
    assert _count(db, "98105") == 1


def test_resolve_hit_returns_same_row_without_geocoding(db, fake_upstream):
    first = ls.resolve(db, "98105")
    second = ls.resolve(db, "98105")
    assert second.id == first.id
    assert (second.formatted_query, second.latitude, second.longitude) == (
        first.formatted_query, first.latitude, first.longitude,
    )
    assert fake_upstream.calls["geocode"] == 1


def test_resolve_many_times_creates_one_row(db, fake_upstream):
    ids = {ls.resolve(db, "Seattle").id for _ in range(5)}
    assert len(ids) == 1
    assert _count(db, "Seattle") == 1


def test_resolve_query_text_is_the_key_not_coordinates(db, fake_upstream):
    a = ls.resolve(db, "98105")
    b = ls.resolve(db, "Seattle, WA")
    assert a.id != b.id
    assert (a.latitude, a.longitude) == (b.latitude, b.longitude)


def test_resolve_zero_results_raises_not_found(db, fake_upstream):
    fake_upstream.geocode_results = []
    with pytest.raises(NotFoundError):
        ls.resolve(db, "zzzz-nowhere")
    assert db.query(Location).count() == 0


def test_resolve_uses_first_usable_result(db, fake_upstream):
    fake_upstream.geocode_results = [
        {"formatted_address": "broken"},
        {"formatted_address": "Portland, OR, USA", "geometry": {"location": {"lat": 45.5, "lng": -122.6}}},
    ]
    loc = ls.resolve(db, "Portland")
    assert loc.formatted_query == "Portland, OR, USA"


def test_resolve_upstream_failure_propagates_and_inserts_nothing(db, fake_upstream):
    fake_upstream.failing.add("geocode")
    with pytest.raises(UpstreamError):
        ls.resolve(db, "98105")
    assert db.query(Location).count() == 0


def test_resolve_concurrent_insert_falls_back_to_winner(db, fake_upstream, monkeypatch):
    # Another request already committed the row after our lookup missed.
    winner = location_repo.create(db, "98105", "Seattle, WA 98105, USA", 47.66, -122.3)
    real_lookup = location_repo.get_by_search_query
    state = {"calls": 0}

    def racing_lookup(session, query):
        state["calls"] += 1
        if state["calls"] == 1:
            return None
        return real_lookup(session, query)

    monkeypatch.setattr(ls.location_repo, "get_by_search_query", racing_lookup)
    loc = ls.resolve(db, "98105")
    assert loc.id == winner.id
    assert state["calls"] == 2
    assert _count(db, "98105") == 1


def test_resolve_store_failure_raises_storage_error(db, fake_upstream, monkeypatch):
    def broken(session, query):
        raise OperationalError("SELECT", {}, Exception("db down"))

    monkeypatch.setattr(ls.location_repo, "get_by_search_query", broken)
    with pytest.raises(StorageError):
        ls.resolve(db, "98105")
    assert fake_upstream.calls["geocode"] == 0


def test_get_location_returns_row_or_raises(db, fake_upstream):
    loc = ls.resolve(db, "98105")
    assert ls.get_location(db, loc.id).id == loc.id
    with pytest.raises(NotFoundError):
        ls.get_location(db, loc.id + 100)


def test_resolve_does_not_hold_a_transaction_during_geocode(db, fake_upstream, monkeypatch):
    seen = []

    def spy(address):
        seen.append(db.in_transaction())
        return fake_upstream.fetch_geocode(address)

    monkeypatch.setattr(ls.upstream_gateway, "fetch_geocode", spy)
    loc = ls.resolve(db, "98105")
    assert seen == [False]
    assert _count(db, "98105") == 1
    assert loc.formatted_query == "Seattle, WA 98105, USA"
