from __future__ import annotations

import logging
import os
import time
import uuid

from fastapi import Depends, FastAPI, HTTPException, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.report import build_directory_report
from .analytics.store import EventLog
from .auth.dependencies import get_current_user, require_admin, require_user
from .auth.users import authenticate
from .directory.cache import ListingCache
from .directory.config import DEFAULT_DIRECTORY_CONFIG
from .directory.links import directions_link, sanitize_phone, sanitize_website
from .directory.models import DEFAULT_HOURS, BusinessRecord, Deal, Review
from .directory.repo import (
    add_bookmark,
    add_business,
    add_missing_businesses,
    add_review,
    get_all_businesses,
    get_bookmarked_businesses,
    get_business,
    get_active_deals,
    get_deals_for_business,
    get_reviews_for_business,
    has_recent_review,
    is_bookmarked,
    list_categories,
    new_review,
    remove_bookmark,
    search_businesses,
)
from .directory.schemas import BookmarkRequest, BusinessCreate, ReviewRequest, ReviewResponse
from .directory.seed import load_seed_store
from .directory.store import RecordStore
from .explore.config import DEFAULT_EXPLORE_CONFIG, ExploreConfig
from .explore.feed import ExploreFeed, NearbyFetcher
from .explore.models import ExploreItem, ExploreRequest, ExploreResponse, RemoteStatus
from .explore.ranker import rank_businesses
from .geo.distance import Coordinate, is_valid_coordinate
from .overpass.client import OverpassClient
from .overpass.config import DEFAULT_OVERPASS_CONFIG
from .recommendations.models import (
    LoginRequest,
    RecommendationItem,
    RecommendationRequest,
    RecommendationResponse,
)
from .recommendations.recommender import get_recommendations

logger = logging.getLogger(__name__)

app = FastAPI(title="LocaLink Directory API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "localink-secret-change-in-production"),
)

app.state.store = load_seed_store(DEFAULT_DIRECTORY_CONFIG)
app.state.cache = ListingCache(ttl=DEFAULT_DIRECTORY_CONFIG.cache_ttl_seconds)
app.state.events = EventLog()
app.state.fetcher = OverpassClient(DEFAULT_OVERPASS_CONFIG) if DEFAULT_OVERPASS_CONFIG.enabled else None
app.state.explore_config = DEFAULT_EXPLORE_CONFIG


# ── Dependencies ─────────────────────────────────────────────────────────


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_cache(request: Request) -> ListingCache:
    return request.app.state.cache


def get_events(request: Request) -> EventLog:
    return request.app.state.events


def get_fetcher(request: Request) -> NearbyFetcher | None:
    return request.app.state.fetcher


def get_explore_config(request: Request) -> ExploreConfig:
    return request.app.state.explore_config


def _require_business(store: RecordStore, business_id: str) -> BusinessRecord:
    business = get_business(store, business_id)
    if business is None:
        raise HTTPException(status_code=404, detail="Business not found")
    return business


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata(store: RecordStore = Depends(get_store)) -> dict:
    return {
        "categories": list_categories(store),
        "sort_options": ["rating", "reviews", "distance", "name"],
    }


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Businesses ───────────────────────────────────────────────────────────


@app.get("/businesses/search", response_model=list[BusinessRecord])
def business_search(
    q: str,
    category: str | None = None,
    store: RecordStore = Depends(get_store),
) -> list[BusinessRecord]:
    return search_businesses(store, q, category)


@app.get("/businesses/{business_id}")
def business_detail(
    business_id: str,
    store: RecordStore = Depends(get_store),
    user: dict | None = Depends(get_current_user),
) -> dict:
    business = _require_business(store, business_id)
    directions = None
    if business.address or is_valid_coordinate(business.lat, business.lng):
        directions = directions_link(business.lat, business.lng, business.address or None)
    return {
        "business": business,
        "deals": get_deals_for_business(store, business_id),
        "links": {
            "website": sanitize_website(business.website),
            "phone": sanitize_phone(business.phone),
            "directions": directions,
        },
        "bookmarked": bool(user) and is_bookmarked(store, user["id"], business_id),
    }


@app.post("/businesses", response_model=BusinessRecord, status_code=201)
def create_business(
    body: BusinessCreate,
    store: RecordStore = Depends(get_store),
    cache: ListingCache = Depends(get_cache),
    user: dict = Depends(require_user),
) -> BusinessRecord:
    business = BusinessRecord(
        id=f"biz-{uuid.uuid4().hex[:8]}",
        name=body.name.strip(),
        categories=list(dict.fromkeys(c.strip() for c in body.categories if c.strip())),
        tags=[t.strip() for t in body.tags if t.strip()],
        address=body.address.strip(),
        lat=body.lat,
        lng=body.lng,
        website=sanitize_website(body.website),
        phone=body.phone.strip() if sanitize_phone(body.phone) else None,
        hours=[h.model_copy() for h in DEFAULT_HOURS],
    )
    add_business(store, business, cache)
    logger.info("User %s added business %s", user["id"], business.id)
    return business


# ── Explore ──────────────────────────────────────────────────────────────


@app.post("/explore", response_model=ExploreResponse)
def explore(
    body: ExploreRequest,
    store: RecordStore = Depends(get_store),
    cache: ListingCache = Depends(get_cache),
    events: EventLog = Depends(get_events),
    fetcher: NearbyFetcher | None = Depends(get_fetcher),
    config: ExploreConfig = Depends(get_explore_config),
) -> ExploreResponse:
    """
    Rank the listing for one explore request.

    The feed lives for this request only, so its stale-batch check never
    trips here; it matters to callers that keep one feed across location
    changes.
    """
    start_time = time.time()

    local = get_all_businesses(store, cache)
    feed = ExploreFeed(local)
    center = Coordinate(body.lat, body.lng) if body.lat is not None else None

    remote_status = RemoteStatus.skipped
    remote_added = 0
    if center is not None and body.include_remote and fetcher is not None:
        ok = feed.refresh(fetcher, center, body.radius_km)
        remote_status = RemoteStatus.ok if ok else RemoteStatus.failed
        remote = feed.businesses[len(local):]
        remote_added = len(remote)
        add_missing_businesses(store, remote, cache)

    entries = rank_businesses(
        feed.businesses,
        category=body.category,
        search_text=body.search_text,
        radius_km=body.radius_km,
        sort_by=body.sort_by,
        center=center,
        config=config,
    )

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    events.record_event("explore", {
        "category": body.category,
        "search_text": body.search_text,
        "sort_by": body.sort_by.value,
        "radius_km": body.radius_km,
        "located": center is not None,
        "remote_status": remote_status.value,
        "results_returned": len(entries),
        "response_time_ms": elapsed_ms,
    })

    return ExploreResponse(
        results=[
            ExploreItem(
                business=e.business,
                distance_km=e.distance_km,
                search_match=e.search_match,
            )
            for e in entries
        ],
        total=len(entries),
        remote_status=remote_status,
        remote_added=remote_added,
    )


# ── User endpoints ───────────────────────────────────────────────────────


@app.post("/recommendations", response_model=RecommendationResponse)
def recommendations(
    body: RecommendationRequest,
    store: RecordStore = Depends(get_store),
    cache: ListingCache = Depends(get_cache),
    events: EventLog = Depends(get_events),
    user: dict = Depends(require_user),
) -> RecommendationResponse:
    start_time = time.time()

    businesses = get_all_businesses(store, cache)
    result = get_recommendations(
        user["id"],
        businesses,
        lambda user_id: get_bookmarked_businesses(store, user_id),
        limit=body.limit,
    )

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    events.record_event("recommend", {
        "user_id": user["id"],
        "strategy": result.strategy,
        "results_returned": len(result.items),
        "response_time_ms": elapsed_ms,
    })

    return RecommendationResponse(
        strategy=result.strategy,
        recommendations=[
            RecommendationItem(business=item.business, score=item.score)
            for item in result.items
        ],
        total_candidates=len(businesses),
    )


@app.get("/bookmarks", response_model=list[BusinessRecord])
def list_bookmarks(
    store: RecordStore = Depends(get_store),
    user: dict = Depends(require_user),
) -> list[BusinessRecord]:
    return get_bookmarked_businesses(store, user["id"])


@app.post("/bookmarks", status_code=201)
def create_bookmark(
    body: BookmarkRequest,
    store: RecordStore = Depends(get_store),
    user: dict = Depends(require_user),
) -> dict:
    _require_business(store, body.business_id)
    bookmark = add_bookmark(store, user["id"], body.business_id)
    return {"status": "bookmarked", "bookmark": bookmark.model_dump()}


@app.delete("/bookmarks/{business_id}")
def delete_bookmark(
    business_id: str,
    store: RecordStore = Depends(get_store),
    user: dict = Depends(require_user),
) -> dict:
    if not remove_bookmark(store, user["id"], business_id):
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return {"status": "removed"}


@app.get("/businesses/{business_id}/reviews", response_model=list[Review])
def list_reviews(business_id: str, store: RecordStore = Depends(get_store)) -> list[Review]:
    _require_business(store, business_id)
    return get_reviews_for_business(store, business_id)


@app.post("/businesses/{business_id}/reviews", response_model=ReviewResponse, status_code=201)
def create_review(
    business_id: str,
    body: ReviewRequest,
    store: RecordStore = Depends(get_store),
    cache: ListingCache = Depends(get_cache),
    user: dict = Depends(require_user),
) -> ReviewResponse:
    _require_business(store, business_id)
    cooldown = DEFAULT_DIRECTORY_CONFIG.review_cooldown_seconds
    if has_recent_review(store, user["id"], business_id, cooldown):
        raise HTTPException(
            status_code=429,
            detail=f"Please wait {cooldown} seconds before reviewing this business again",
        )

    review = new_review(business_id, user["id"], body.rating, body.text)
    business = add_review(store, review, cache)
    return ReviewResponse(review=review, business=business)


@app.get("/deals", response_model=list[Deal])
def active_deals(store: RecordStore = Depends(get_store)) -> list[Deal]:
    return get_active_deals(store)


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(
    events: EventLog = Depends(get_events),
    user: dict = Depends(require_admin),
) -> dict:
    return compute_analytics(events.get_events())


@app.delete("/analytics")
def reset_analytics(
    events: EventLog = Depends(get_events),
    user: dict = Depends(require_admin),
) -> dict:
    events.clear_events()
    logger.info("Admin %s cleared the analytics event log", user["id"])
    return {"status": "cleared"}


@app.get("/report")
def report(
    store: RecordStore = Depends(get_store),
    cache: ListingCache = Depends(get_cache),
    user: dict = Depends(require_admin),
) -> dict:
    return build_directory_report(get_all_businesses(store, cache))


@app.get("/cache/stats")
def cache_stats(
    cache: ListingCache = Depends(get_cache),
    user: dict = Depends(require_admin),
) -> dict:
    return cache.get_stats()
