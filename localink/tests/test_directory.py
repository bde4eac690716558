from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from localink.directory.cache import ListingCache
from localink.directory.config import DirectoryConfig
from localink.directory.links import directions_link, sanitize_phone, sanitize_website
from localink.directory.models import BusinessRecord, Deal, Review
from localink.directory.repo import (
    add_bookmark,
    add_business,
    add_missing_businesses,
    add_review,
    get_active_deals,
    get_all_businesses,
    get_bookmarked_businesses,
    has_recent_review,
    is_bookmarked,
    list_categories,
    new_review,
    remove_bookmark,
    search_businesses,
)
from localink.directory.seed import load_seed_businesses, load_seed_store
from localink.directory.store import BUSINESSES, DEALS, REVIEWS, InMemoryStore, UnknownIndex


def _business(id: str, **overrides) -> BusinessRecord:
    fields = {
        "id": id,
        "name": f"Business {id}",
        "categories": ["food"],
        "address": "1 Main St, Toronto, ON",
        "lat": 43.65,
        "lng": -79.38,
    }
    fields.update(overrides)
    return BusinessRecord(**fields)


@pytest.fixture
def store() -> InMemoryStore:
    s = InMemoryStore()
    for business in (
        _business("a", name="Corner Cafe", categories=["food"], tags=["coffee"]),
        _business("b", name="Vinyl Shop", categories=["retail"], address="640 Queen St W"),
        _business("c", name="Book Nook", categories=["books", "retail"]),
    ):
        s.put(BUSINESSES, business)
    return s


# ── Store ────────────────────────────────────────────────────────────────


def test_store_get_put_and_replace(store):
    assert store.get(BUSINESSES, "a").name == "Corner Cafe"
    store.put(BUSINESSES, _business("a", name="Renamed"))
    assert store.get(BUSINESSES, "a").name == "Renamed"
    assert [b.id for b in store.get_all(BUSINESSES)] == ["a", "b", "c"]


def test_store_query_by_index(store):
    store.put(REVIEWS, new_review("a", "user-1", 5, "Great coffee and friendly staff"))
    store.put(REVIEWS, new_review("b", "user-1", 3, "Decent selection of records"))
    assert len(store.query_by_index(REVIEWS, "by-user", "user-1")) == 2
    assert len(store.query_by_index(REVIEWS, "by-business", "a")) == 1


def test_store_unknown_index_raises(store):
    with pytest.raises(UnknownIndex):
        store.query_by_index(BUSINESSES, "by-name", "x")


def test_store_delete_and_count(store):
    store.delete(BUSINESSES, "b")
    store.delete(BUSINESSES, "missing")
    assert store.count(BUSINESSES) == 2


# ── Businesses ───────────────────────────────────────────────────────────


def test_listing_cache_hit_and_invalidation(store):
    cache = ListingCache(ttl=60)
    assert len(get_all_businesses(store, cache)) == 3
    assert len(get_all_businesses(store, cache)) == 3
    stats = cache.get_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1

    add_business(store, _business("d"), cache)
    assert len(get_all_businesses(store, cache)) == 4


def test_listing_cache_expires():
    cache = ListingCache(ttl=0.01)
    cache.set(["x"])
    time.sleep(0.02)
    assert cache.get() is None


def test_listing_cache_skips_set_after_invalidation():
    cache = ListingCache(ttl=60)
    seen = cache.version
    cache.invalidate()
    assert not cache.set(["stale"], seen)
    assert cache.get() is None
    assert cache.set(["fresh"], cache.version)
    assert cache.get() == ["fresh"]


def test_write_during_listing_read_is_not_cached_stale(store):
    cache = ListingCache(ttl=60)

    class WriteDuringRead:
        def get_all(self, collection):
            records = store.get_all(collection)
            add_business(store, _business("late"), cache)
            return records

    assert len(get_all_businesses(WriteDuringRead(), cache)) == 3
    assert [b.id for b in get_all_businesses(store, cache)][-1] == "late"


def test_cache_clear_resets_stats():
    cache = ListingCache()
    cache.get()
    cache.clear()
    assert cache.get_stats() == {"size": 0, "hits": 0, "misses": 0, "hit_rate": 0.0}


def test_add_missing_businesses_only_adds_new(store):
    added = add_missing_businesses(store, [_business("a", name="Remote copy"), _business("osm-1")])
    assert added == 1
    assert store.get(BUSINESSES, "a").name == "Corner Cafe"
    assert store.count(BUSINESSES) == 4


def test_search_businesses_is_a_hard_filter(store):
    assert [b.id for b in search_businesses(store, "queen")] == ["b"]
    assert [b.id for b in search_businesses(store, "COFFEE")] == ["a"]
    assert [b.id for b in search_businesses(store, "o", category="books")] == ["c"]
    assert search_businesses(store, "   ") == []
    assert search_businesses(store, "cafe", category="retail") == []


def test_list_categories(store):
    assert list_categories(store) == ["books", "food", "retail"]


# ── Reviews ──────────────────────────────────────────────────────────────


def test_add_review_updates_rating_aggregate(store):
    add_review(store, new_review("a", "user-1", 5, "Lovely spot for a latte"))
    updated = add_review(store, new_review("a", "user-2", 4, "Good pastries and coffee"))
    assert updated.avg_rating == 4.5
    assert updated.rating_count == 2
    assert store.get(BUSINESSES, "a").avg_rating == 4.5


def test_add_review_rounds_to_one_decimal(store):
    for user, rating in (("u1", 5), ("u2", 4), ("u3", 4)):
        add_review(store, new_review("b", user, rating, "Some review text here"))
    assert store.get(BUSINESSES, "b").avg_rating == 4.3


def test_add_review_for_unknown_business_returns_none(store):
    assert add_review(store, new_review("ghost", "u1", 5, "Nice but does not exist")) is None


def test_add_review_invalidates_cache(store):
    cache = ListingCache(ttl=60)
    get_all_businesses(store, cache)
    add_review(store, new_review("a", "u1", 1, "Cold coffee, long wait"), cache)
    rating = next(b for b in get_all_businesses(store, cache) if b.id == "a").avg_rating
    assert rating == 1.0


def test_has_recent_review(store):
    store.put(REVIEWS, new_review("a", "user-1", 5, "Just posted this review"))
    old = Review(
        id="old",
        business_id="b",
        user_id="user-1",
        rating=4,
        text="Posted a while ago",
        created_at=(datetime.now(timezone.utc) - timedelta(minutes=5)).isoformat(),
    )
    store.put(REVIEWS, old)
    assert has_recent_review(store, "user-1", "a")
    assert not has_recent_review(store, "user-1", "b")
    assert not has_recent_review(store, "user-2", "a")


# ── Bookmarks ────────────────────────────────────────────────────────────


def test_bookmarks_round_trip(store):
    first = add_bookmark(store, "user-1", "a")
    again = add_bookmark(store, "user-1", "a")
    assert first.id == again.id
    add_bookmark(store, "user-1", "c")

    assert is_bookmarked(store, "user-1", "a")
    assert [b.id for b in get_bookmarked_businesses(store, "user-1")] == ["a", "c"]

    assert remove_bookmark(store, "user-1", "a")
    assert not remove_bookmark(store, "user-1", "a")
    assert [b.id for b in get_bookmarked_businesses(store, "user-1")] == ["c"]


def test_bookmarked_businesses_skip_dangling_ids(store):
    add_bookmark(store, "user-1", "deleted")
    add_bookmark(store, "user-1", "b")
    assert [b.id for b in get_bookmarked_businesses(store, "user-1")] == ["b"]


# ── Deals ────────────────────────────────────────────────────────────────


def test_active_deals(store):
    store.put(DEALS, Deal(id="d1", business_id="a", title="Now", start_date="2024-01-01", end_date="2024-12-31"))
    store.put(DEALS, Deal(id="d2", business_id="a", title="Past", start_date="2023-01-01", end_date="2023-02-01"))
    store.put(DEALS, Deal(id="d3", business_id="b", title="Soon", start_date="2025-01-01", end_date="2025-02-01"))
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)
    assert [d.id for d in get_active_deals(store, now)] == ["d1"]


# ── Seed ─────────────────────────────────────────────────────────────────


def test_seed_store_loads_businesses_and_deals():
    seeded = load_seed_store(DirectoryConfig())
    assert seeded.count(BUSINESSES) >= 10
    assert seeded.count(DEALS) >= 1
    first = seeded.get(BUSINESSES, "biz-1")
    assert first.categories == ["food"]
    assert first.tags == ["cafe", "coffee"]
    assert first.deals == ["deal-1"]
    assert len(first.hours) == 7


def test_seed_loading_is_skipped_for_populated_store(store):
    load_seed_store(DirectoryConfig(), store=store)
    assert store.count(BUSINESSES) == 3


def test_seed_tolerates_bad_coordinates(tmp_path: Path):
    (tmp_path / "businesses.csv").write_text(
        "id,name,categories,tags,address,lat,lng,website,phone,avg_rating,rating_count,deals\n"
        "x1,Nowhere Shop,retail,,Unknown,not-a-number,-79.4,,,4.0,3,\n"
        "x2,Somewhere Cafe,food,cafe,1 Main St,43.6,-79.4,,,,,\n"
    )
    businesses = load_seed_businesses(DirectoryConfig(seed_dir=tmp_path))
    assert [b.id for b in businesses] == ["x1", "x2"]
    assert businesses[0].model_dump()["lat"] is None
    assert businesses[1].avg_rating == 0.0
    assert businesses[1].rating_count == 0


def test_seed_missing_columns_raise(tmp_path: Path):
    (tmp_path / "businesses.csv").write_text("id,name\nx,Y\n")
    with pytest.raises(ValueError, match="missing columns"):
        load_seed_businesses(DirectoryConfig(seed_dir=tmp_path))


# ── Links ────────────────────────────────────────────────────────────────


@pytest.mark.parametrize("raw, expected", [
    ("example.com", "https://example.com"),
    ("http://shop.ca/page", "http://shop.ca/page"),
    ("  https://annexbooknook.ca ", "https://annexbooknook.ca"),
    ("   ", None),
    ("https://a", None),
    ("", None),
    (None, None),
])
def test_sanitize_website(raw, expected):
    assert sanitize_website(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    ("416-555-0101", "tel:4165550101"),
    ("+1 (416) 555-0101", "tel:+14165550101"),
    ("555-0101", None),
    (None, None),
])
def test_sanitize_phone(raw, expected):
    assert sanitize_phone(raw) == expected


def test_directions_link():
    assert directions_link(43.6, -79.4) == "https://www.google.com/maps/dir/?api=1&destination=43.6,-79.4"
    assert directions_link(0, 0, "1 Main St").endswith("destination=1%20Main%20St")
