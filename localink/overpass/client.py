from __future__ import annotations

import logging
import math
from typing import Any

import httpx

from ..directory.models import DEFAULT_HOURS, BusinessRecord
from ..geo.distance import bounding_box
from .config import DEFAULT_OVERPASS_CONFIG, OverpassConfig
from .query import EXCLUDE_BRAND_LIST, build_overpass_query

logger = logging.getLogger(__name__)

_FOOD_AMENITIES = ("restaurant", "cafe", "bar", "fast_food")


class OverpassError(RuntimeError):
    pass


def _categories_for(tags: dict[str, Any]) -> list[str]:
    categories: list[str] = []
    if tags.get("shop"):
        categories.append("retail")

    amenity = tags.get("amenity") or ""
    if amenity:
        if any(kind in amenity for kind in _FOOD_AMENITIES):
            categories.append("food")
        elif "hairdresser" in amenity:
            categories.append("services")
        elif "pharmacy" in amenity or "clinic" in amenity:
            categories.append("health")
        elif "bicycle_repair" in amenity:
            categories.extend(["repair", "services"])
        elif "bookstore" in amenity:
            categories.append("books")

    return categories or ["services"]


def _tags_for(tags: dict[str, Any]) -> list[str]:
    return [str(tags[key]) for key in ("cuisine", "shop", "amenity") if tags.get(key)]


def _address_for(tags: dict[str, Any], config: OverpassConfig) -> str:
    if tags.get("addr:full"):
        return str(tags["addr:full"])
    street = tags.get("addr:street", "")
    city = tags.get("addr:city", config.default_city)
    return f"{street}, {city}, {config.default_region}"


def map_osm_element(
    element: dict[str, Any], config: OverpassConfig = DEFAULT_OVERPASS_CONFIG,
) -> BusinessRecord | None:
    """Map one Overpass node to a business, or ``None`` if it should be skipped."""
    if element.get("type") != "node":
        return None

    tags = element.get("tags") or {}
    if not tags.get("name"):
        return None

    brand = tags.get("brand") or tags.get("brand:en")
    if brand and brand in EXCLUDE_BRAND_LIST:
        return None
    # Branded nodes without a way to contact them are most likely chain outlets
    if brand and not tags.get("website") and not tags.get("phone"):
        return None

    try:
        lat = float(element["lat"])
        lng = float(element["lon"])
    except (KeyError, TypeError, ValueError):
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None

    return BusinessRecord(
        id=f"osm-{element.get('id')}",
        name=str(tags["name"]),
        categories=_categories_for(tags),
        tags=_tags_for(tags),
        address=_address_for(tags, config),
        lat=lat,
        lng=lng,
        website=tags.get("website") or None,
        phone=tags.get("phone") or None,
        hours=[h.model_copy() for h in DEFAULT_HOURS],
        avg_rating=0.0,
        rating_count=0,
    )


class OverpassClient:
    """Remote fetch collaborator backed by the public Overpass API."""

    def __init__(
        self,
        config: OverpassConfig = DEFAULT_OVERPASS_CONFIG,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def fetch_nearby(self, lat: float, lng: float, radius_km: float) -> list[BusinessRecord]:
        """
        Fetch businesses in the bounding box around ``(lat, lng)``.

        Raises:
            OverpassError: when the service is disabled, unreachable or returns
                an unusable payload.
        """
        if not self.config.enabled:
            raise OverpassError("Overpass fetch is disabled")

        query = build_overpass_query(bounding_box(lat, lng, radius_km))
        try:
            with httpx.Client(timeout=self.config.timeout, transport=self._transport) as client:
                response = client.post(self.config.api_url, data={"data": query})
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise OverpassError(f"Overpass API error: {e.response.status_code}") from e
        except httpx.TimeoutException as e:
            raise OverpassError("Overpass API request timed out") from e
        except (httpx.HTTPError, ValueError) as e:
            raise OverpassError(f"Overpass API request failed: {e}") from e

        if not isinstance(payload, dict):
            raise OverpassError("Overpass API returned an unexpected payload")

        businesses: list[BusinessRecord] = []
        for element in payload.get("elements") or []:
            business = map_osm_element(element, self.config)
            if business is not None:
                businesses.append(business)

        logger.info("Overpass returned %d usable businesses", len(businesses))
        return businesses
