"""
Repository helpers over a ``RecordStore``.

Every function takes the store explicitly so callers (API handlers, tests)
decide which store instance they operate on.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

from ..explore.ranker import matches_search
from .cache import ListingCache
from .models import Bookmark, BusinessRecord, Deal, Review
from .store import BOOKMARKS, BUSINESSES, DEALS, REVIEWS, RecordStore

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ── Businesses ───────────────────────────────────────────────────────────


def get_all_businesses(
    store: RecordStore, cache: ListingCache | None = None,
) -> list[BusinessRecord]:
    if cache is None:
        return store.get_all(BUSINESSES)

    cached = cache.get()
    if cached is not None:
        return list(cached)

    version = cache.version
    businesses = store.get_all(BUSINESSES)
    cache.set(businesses, version)
    return list(businesses)


def get_business(store: RecordStore, business_id: str) -> BusinessRecord | None:
    return store.get(BUSINESSES, business_id)


def add_business(
    store: RecordStore, business: BusinessRecord, cache: ListingCache | None = None,
) -> None:
    store.put(BUSINESSES, business)
    if cache is not None:
        cache.invalidate()


def add_missing_businesses(
    store: RecordStore,
    businesses: list[BusinessRecord],
    cache: ListingCache | None = None,
) -> int:
    """Persist records whose id is not stored yet. Returns how many were added."""
    added = 0
    for business in businesses:
        if store.get(BUSINESSES, business.id) is None:
            store.put(BUSINESSES, business)
            added += 1
    if added and cache is not None:
        cache.invalidate()
    return added


def search_businesses(
    store: RecordStore, text: str, category: str | None = None,
) -> list[BusinessRecord]:
    """Hard-filter search: records must match the text and, if given, the category."""
    return [
        business
        for business in store.get_all(BUSINESSES)
        if matches_search(business, text)
        and (category is None or category in business.categories)
    ]


def list_categories(store: RecordStore) -> list[str]:
    categories: set[str] = set()
    for business in store.get_all(BUSINESSES):
        categories.update(business.categories)
    return sorted(categories)


# ── Reviews ──────────────────────────────────────────────────────────────


def get_reviews_for_business(store: RecordStore, business_id: str) -> list[Review]:
    return store.query_by_index(REVIEWS, "by-business", business_id)


def add_review(
    store: RecordStore, review: Review, cache: ListingCache | None = None,
) -> BusinessRecord | None:
    """Store *review* and refresh the business rating aggregate.

    Returns the updated business, or ``None`` if the business is unknown.
    """
    store.put(REVIEWS, review)

    business = store.get(BUSINESSES, review.business_id)
    if business is None:
        logger.warning("Review %s refers to unknown business %s", review.id, review.business_id)
        return None

    reviews = get_reviews_for_business(store, review.business_id)
    avg_rating = sum(r.rating for r in reviews) / len(reviews)
    updated = business.model_copy(update={
        "avg_rating": round(avg_rating, 1),
        "rating_count": len(reviews),
    })
    add_business(store, updated, cache)
    return updated


def new_review(business_id: str, user_id: str, rating: int, text: str) -> Review:
    return Review(
        id=f"review-{uuid.uuid4().hex[:12]}",
        business_id=business_id,
        user_id=user_id,
        rating=rating,
        text=text,
        created_at=_now().isoformat(),
    )


def has_recent_review(
    store: RecordStore, user_id: str, business_id: str, seconds: int = 30,
) -> bool:
    """True if *user_id* reviewed *business_id* within the last *seconds*."""
    cutoff = _now() - timedelta(seconds=seconds)
    for review in store.query_by_index(REVIEWS, "by-user", user_id):
        if review.business_id != business_id:
            continue
        if _parse_timestamp(review.created_at) > cutoff:
            return True
    return False


# ── Bookmarks ────────────────────────────────────────────────────────────


def get_bookmarks(store: RecordStore, user_id: str) -> list[Bookmark]:
    return store.query_by_index(BOOKMARKS, "by-user", user_id)


def is_bookmarked(store: RecordStore, user_id: str, business_id: str) -> bool:
    return any(b.business_id == business_id for b in get_bookmarks(store, user_id))


def add_bookmark(store: RecordStore, user_id: str, business_id: str) -> Bookmark:
    for existing in get_bookmarks(store, user_id):
        if existing.business_id == business_id:
            return existing

    bookmark = Bookmark(
        id=f"bookmark-{uuid.uuid4().hex[:12]}",
        user_id=user_id,
        business_id=business_id,
        created_at=_now().isoformat(),
    )
    store.put(BOOKMARKS, bookmark)
    return bookmark


def remove_bookmark(store: RecordStore, user_id: str, business_id: str) -> bool:
    for bookmark in get_bookmarks(store, user_id):
        if bookmark.business_id == business_id:
            store.delete(BOOKMARKS, bookmark.id)
            return True
    return False


def get_bookmarked_businesses(store: RecordStore, user_id: str) -> list[BusinessRecord]:
    """Businesses bookmarked by *user_id*; bookmarks pointing at missing records are skipped."""
    businesses: list[BusinessRecord] = []
    for bookmark in get_bookmarks(store, user_id):
        business = store.get(BUSINESSES, bookmark.business_id)
        if business is not None:
            businesses.append(business)
    return businesses


# ── Deals ────────────────────────────────────────────────────────────────


def get_deals_for_business(store: RecordStore, business_id: str) -> list[Deal]:
    return store.query_by_index(DEALS, "by-business", business_id)


def get_active_deals(store: RecordStore, now: datetime | None = None) -> list[Deal]:
    moment = now or _now()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return [
        deal
        for deal in store.get_all(DEALS)
        if _parse_timestamp(deal.start_date) <= moment <= _parse_timestamp(deal.end_date)
    ]
