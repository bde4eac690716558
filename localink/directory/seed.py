"""
Seed loading for the directory store.

Usage:
    python -m localink.directory.seed
"""
from __future__ import annotations

import logging
from typing import List

import pandas as pd

from .config import DEFAULT_DIRECTORY_CONFIG, DirectoryConfig
from .models import DEFAULT_HOURS, BusinessRecord, Deal
from .store import BUSINESSES, DEALS, InMemoryStore

logger = logging.getLogger(__name__)

BUSINESS_COLUMNS: List[str] = [
    "id",
    "name",
    "categories",
    "tags",
    "address",
    "lat",
    "lng",
    "website",
    "phone",
    "avg_rating",
    "rating_count",
    "deals",
]


def _split_list(value: object) -> list[str]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return []
    return [part.strip() for part in str(value).split(",") if part.strip()]


def _optional_str(value: object) -> str | None:
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _row_to_business(row: pd.Series) -> BusinessRecord:
    rating = pd.to_numeric(row.get("avg_rating"), errors="coerce")
    count = pd.to_numeric(row.get("rating_count"), errors="coerce")
    return BusinessRecord(
        id=str(row["id"]),
        name=str(row["name"]),
        categories=_split_list(row.get("categories")),
        tags=_split_list(row.get("tags")),
        address=_optional_str(row.get("address")) or "",
        lat=float(row["lat"]),
        lng=float(row["lng"]),
        website=_optional_str(row.get("website")),
        phone=_optional_str(row.get("phone")),
        hours=[h.model_copy() for h in DEFAULT_HOURS],
        avg_rating=max(0.0, min(5.0, float(rating))) if pd.notna(rating) else 0.0,
        rating_count=int(count) if pd.notna(count) else 0,
        deals=_split_list(row.get("deals")),
    )


def load_seed_businesses(config: DirectoryConfig = DEFAULT_DIRECTORY_CONFIG) -> list[BusinessRecord]:
    df = pd.read_csv(config.businesses_path, dtype={"id": str, "phone": str})
    missing = [c for c in BUSINESS_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Seed file {config.businesses_path} is missing columns: {missing}")

    # Unparseable coordinates become NaN and are excluded later by geo filters
    df["lat"] = pd.to_numeric(df["lat"], errors="coerce")
    df["lng"] = pd.to_numeric(df["lng"], errors="coerce")

    return [_row_to_business(row) for _, row in df.iterrows()]


def load_seed_deals(config: DirectoryConfig = DEFAULT_DIRECTORY_CONFIG) -> list[Deal]:
    if not config.deals_path.exists():
        return []
    df = pd.read_csv(config.deals_path, dtype=str).fillna("")
    return [Deal(**row) for row in df.to_dict(orient="records")]


def load_seed_store(
    config: DirectoryConfig = DEFAULT_DIRECTORY_CONFIG,
    store: InMemoryStore | None = None,
) -> InMemoryStore:
    """Populate *store* (a new one by default) with seed data if it holds no businesses."""
    store = store if store is not None else InMemoryStore()
    if store.count(BUSINESSES) > 0:
        return store

    businesses = load_seed_businesses(config)
    for business in businesses:
        store.put(BUSINESSES, business)
    deals = load_seed_deals(config)
    for deal in deals:
        store.put(DEALS, deal)

    logger.info("Loaded %d businesses and %d deals from %s", len(businesses), len(deals), config.seed_dir)
    return store


if __name__ == "__main__":
    seeded = load_seed_store()
    print(f"Seed load complete: {seeded.count(BUSINESSES)} businesses, {seeded.count(DEALS)} deals.")
