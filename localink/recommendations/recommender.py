from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ..directory.models import BusinessRecord
from .similarity import build_category_list, score_candidates, user_preference_vector, vectorize_all

logger = logging.getLogger(__name__)

POPULAR = "popular"
SIMILAR = "similar"

BookmarkLookup = Callable[[str], Sequence[BusinessRecord]]


@dataclass(frozen=True)
class RankedResult:
    business: BusinessRecord
    score: float | None


@dataclass
class Recommendation:
    strategy: str
    items: list[RankedResult] = field(default_factory=list)


def _popular(businesses: Sequence[BusinessRecord], limit: int) -> list[RankedResult]:
    # sorted() is stable, so equal ratings keep their input order
    ranked = sorted(businesses, key=lambda b: b.avg_rating, reverse=True)
    return [RankedResult(business=b, score=None) for b in ranked[:limit]]


def get_recommendations(
    user_id: str,
    businesses: Sequence[BusinessRecord],
    get_bookmarked: BookmarkLookup,
    limit: int = 10,
) -> Recommendation:
    """
    Rank businesses the user has not bookmarked by category similarity.

    Steps:
    - No bookmarks: fall back to the highest-rated businesses.
    - Otherwise build the category list from every candidate, derive the
      user's preference vector from their bookmarks and score each
      non-bookmarked candidate with cosine similarity.
    """
    bookmarked = list(get_bookmarked(user_id))

    if limit <= 0 or not businesses:
        return Recommendation(strategy=SIMILAR if bookmarked else POPULAR)

    if not bookmarked:
        return Recommendation(strategy=POPULAR, items=_popular(businesses, limit))

    category_list = build_category_list(businesses)
    user_vector = user_preference_vector(bookmarked, category_list)

    bookmarked_ids = {b.id for b in bookmarked}
    candidates = [b for b in businesses if b.id not in bookmarked_ids]
    if not candidates:
        return Recommendation(strategy=SIMILAR)

    scores = score_candidates(user_vector, vectorize_all(candidates, category_list))

    order = sorted(range(len(candidates)), key=lambda i: scores[i], reverse=True)
    items = [
        RankedResult(business=candidates[i], score=float(scores[i]))
        for i in order[:limit]
    ]
    logger.debug(
        "Scored %d candidates for %s across %d categories",
        len(candidates), user_id, len(category_list),
    )
    return Recommendation(strategy=SIMILAR, items=items)
