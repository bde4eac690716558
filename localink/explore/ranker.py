"""
Explore ranking pipeline.

Responsibilities:
- Merge the local listing with remote map data, deduplicating by id.
- Hard-filter by category and, when the user is located, by radius.
- Treat search text as a ranking signal: matches are placed ahead of the
  remaining records rather than filtering them out.
- Sort by rating, review count, distance or name.
"""
from __future__ import annotations

import logging
import unicodedata
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..directory.models import BusinessRecord
from ..geo.distance import Coordinate, bounding_box, distance_or_none, is_valid_coordinate
from .config import DEFAULT_EXPLORE_CONFIG, ExploreConfig
from .models import SortOption

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExploreEntry:
    business: BusinessRecord
    distance_km: float | None = None
    search_match: bool | None = None


# ── Merge ────────────────────────────────────────────────────────────────


def merge_businesses(
    current: Iterable[BusinessRecord], incoming: Iterable[BusinessRecord],
) -> list[BusinessRecord]:
    """
    Append *incoming* records whose id is not already present.

    The record seen first wins, so local data takes precedence over a remote
    copy with the same id. Merging the same batch again is a no-op.
    """
    merged = list(current)
    seen = {b.id for b in merged}
    for business in incoming:
        if business.id in seen:
            continue
        seen.add(business.id)
        merged.append(business)
    return merged


# ── Filters ──────────────────────────────────────────────────────────────


def has_valid_coordinates(business: BusinessRecord) -> bool:
    return is_valid_coordinate(business.lat, business.lng)


def filter_by_category(
    businesses: Iterable[BusinessRecord], category: str | None,
) -> list[BusinessRecord]:
    if not category:
        return list(businesses)
    return [b for b in businesses if category in b.categories]


def matches_search(business: BusinessRecord, text: str) -> bool:
    query = text.strip().lower()
    if not query:
        return False
    return (
        query in business.name.lower()
        or query in business.address.lower()
        or any(query in tag.lower() for tag in business.tags)
        or any(query in cat.lower() for cat in business.categories)
    )


def apply_search(
    entries: Iterable[ExploreEntry], text: str,
) -> tuple[list[ExploreEntry], list[ExploreEntry]]:
    """
    Split *entries* into search matches and the rest, flagging each entry.

    Relative order is kept within each group; nothing is dropped.
    """
    hits: list[ExploreEntry] = []
    misses: list[ExploreEntry] = []
    for entry in entries:
        matched = matches_search(entry.business, text)
        flagged = ExploreEntry(entry.business, entry.distance_km, matched)
        if matched:
            hits.append(flagged)
        else:
            misses.append(flagged)
    return hits, misses


def filter_by_radius(
    businesses: Iterable[BusinessRecord], center: Coordinate, radius_km: float,
) -> list[ExploreEntry]:
    """
    Keep records within *radius_km* of *center*.

    A bounding-box pass trims the candidates before the exact Haversine
    check. Records without usable coordinates are dropped.

    Raises:
        InvalidCoordinate: if *center* itself is invalid.
    """
    center = center.validated()
    box = bounding_box(center.lat, center.lng, radius_km)

    kept: list[ExploreEntry] = []
    skipped = 0
    for business in businesses:
        if not has_valid_coordinates(business):
            skipped += 1
            continue
        if not box.contains(business.lat, business.lng):
            continue
        distance = distance_or_none(center, business.lat, business.lng)
        if distance is None:
            skipped += 1
            continue
        if distance <= radius_km:
            kept.append(ExploreEntry(business=business, distance_km=distance))

    if skipped:
        logger.debug("Skipped %d records without usable coordinates", skipped)
    return kept


def attach_distances(
    businesses: Iterable[BusinessRecord], center: Coordinate | None,
) -> list[ExploreEntry]:
    """Wrap records as entries, with a distance wherever one can be computed."""
    if center is None:
        return [ExploreEntry(business=b) for b in businesses]
    return [
        ExploreEntry(business=b, distance_km=distance_or_none(center, b.lat, b.lng))
        for b in businesses
    ]


# ── Sorting ──────────────────────────────────────────────────────────────


def name_sort_key(name: str) -> tuple[str, str]:
    """Accent- and case-insensitive key, with the raw name as tie-break."""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name


def sort_entries(entries: Sequence[ExploreEntry], sort_by: SortOption) -> list[ExploreEntry]:
    """Stable sort by *sort_by*; unknown distances go last in their original order."""
    if sort_by == SortOption.rating:
        return sorted(entries, key=lambda e: e.business.avg_rating, reverse=True)
    if sort_by == SortOption.reviews:
        return sorted(entries, key=lambda e: e.business.rating_count, reverse=True)
    if sort_by == SortOption.name:
        return sorted(entries, key=lambda e: name_sort_key(e.business.name))
    if sort_by == SortOption.distance:
        known = [e for e in entries if e.distance_km is not None]
        unknown = [e for e in entries if e.distance_km is None]
        return sorted(known, key=lambda e: e.distance_km) + unknown
    return list(entries)


def effective_sort(
    sort_by: SortOption,
    center: Coordinate | None,
    config: ExploreConfig = DEFAULT_EXPLORE_CONFIG,
) -> SortOption:
    if center is not None and config.distance_priority:
        return SortOption.distance
    return sort_by


# ── Pipeline ─────────────────────────────────────────────────────────────


def rank_businesses(
    local: Iterable[BusinessRecord],
    remote: Iterable[BusinessRecord] = (),
    *,
    category: str | None = None,
    search_text: str = "",
    radius_km: float | None = None,
    sort_by: SortOption = SortOption.rating,
    center: Coordinate | None = None,
    config: ExploreConfig = DEFAULT_EXPLORE_CONFIG,
) -> list[ExploreEntry]:
    """
    Produce the ordered listing for the explore view.

    Order of operations: merge, category filter, radius filter (only when
    *center* is given), search partition, sort within each partition.
    """
    businesses = filter_by_category(merge_businesses(local, remote), category)

    if center is not None:
        radius = radius_km if radius_km is not None else config.default_radius_km
        entries = filter_by_radius(businesses, center, radius)
    else:
        entries = attach_distances(businesses, None)

    order = effective_sort(sort_by, center, config)

    if not search_text.strip():
        return sort_entries(entries, order)

    hits, misses = apply_search(entries, search_text)
    return sort_entries(hits, order) + sort_entries(misses, order)
