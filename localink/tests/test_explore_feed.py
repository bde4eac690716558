from __future__ import annotations

from unittest.mock import MagicMock

from localink.directory.models import BusinessRecord
from localink.explore.feed import ExploreFeed, RemoteBatch, fetch_nearby_or_empty
from localink.geo.distance import Coordinate

TORONTO = Coordinate(43.6532, -79.3832)


def _business(id: str) -> BusinessRecord:
    return BusinessRecord(id=id, name=id, categories=["food"], lat=43.65, lng=-79.38)


def _ids(businesses) -> list[str]:
    return [b.id for b in businesses]


def test_current_batch_is_merged():
    feed = ExploreFeed([_business("local-1")])
    ticket = feed.request(TORONTO, 5.0)
    assert feed.apply(RemoteBatch(ticket, [_business("osm-1"), _business("local-1")]))
    assert _ids(feed.businesses) == ["local-1", "osm-1"]


def test_stale_batch_is_discarded():
    feed = ExploreFeed([_business("local-1")])
    old = feed.request(TORONTO, 5.0)
    new = feed.request(TORONTO, 10.0)
    assert new.generation == old.generation + 1

    assert not feed.apply(RemoteBatch(old, [_business("osm-old")]))
    assert feed.apply(RemoteBatch(new, [_business("osm-new")]))
    assert _ids(feed.businesses) == ["local-1", "osm-new"]


def test_late_batch_after_newer_one_is_discarded():
    feed = ExploreFeed()
    old = feed.request(TORONTO, 5.0)
    new = feed.request(Coordinate(45.5, -73.56), 5.0)
    feed.apply(RemoteBatch(new, [_business("montreal")]))
    assert not feed.apply(RemoteBatch(old, [_business("toronto")]))
    assert _ids(feed.businesses) == ["montreal"]


def test_reapplying_same_batch_does_not_duplicate():
    feed = ExploreFeed([_business("a")])
    ticket = feed.request(TORONTO, 5.0)
    batch = RemoteBatch(ticket, [_business("b"), _business("c")])
    feed.apply(batch)
    feed.apply(batch)
    assert _ids(feed.businesses) == ["a", "b", "c"]


def test_batch_without_any_request_is_discarded():
    feed = ExploreFeed()
    other = ExploreFeed().request(TORONTO, 5.0)
    assert not feed.apply(RemoteBatch(other, [_business("x")]))
    assert feed.businesses == []


def test_is_current():
    feed = ExploreFeed()
    first = feed.request(TORONTO, 5.0)
    assert feed.is_current(first)
    feed.request(TORONTO, 5.0)
    assert not feed.is_current(first)


def test_fetch_failure_degrades_to_empty():
    fetcher = MagicMock()
    fetcher.fetch_nearby.side_effect = RuntimeError("network down")
    businesses, ok = fetch_nearby_or_empty(fetcher, TORONTO, 5.0)
    assert businesses == []
    assert ok is False


def test_fetch_without_fetcher_is_empty():
    assert fetch_nearby_or_empty(None, TORONTO, 5.0) == ([], False)


def test_refresh_merges_fetched_records():
    fetcher = MagicMock()
    fetcher.fetch_nearby.return_value = [_business("osm-1")]
    feed = ExploreFeed([_business("local-1")])
    assert feed.refresh(fetcher, TORONTO, 5.0)
    fetcher.fetch_nearby.assert_called_once_with(TORONTO.lat, TORONTO.lng, 5.0)
    assert _ids(feed.businesses) == ["local-1", "osm-1"]


def test_refresh_failure_keeps_local_data():
    fetcher = MagicMock()
    fetcher.fetch_nearby.side_effect = TimeoutError()
    feed = ExploreFeed([_business("local-1")])
    assert not feed.refresh(fetcher, TORONTO, 5.0)
    assert _ids(feed.businesses) == ["local-1"]
