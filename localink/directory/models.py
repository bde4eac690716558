from __future__ import annotations

import math

from pydantic import BaseModel, Field, field_serializer


class OpeningHours(BaseModel):
    day: str
    open: str
    close: str


DEFAULT_HOURS: list[OpeningHours] = [
    OpeningHours(day="Monday", open="09:00", close="18:00"),
    OpeningHours(day="Tuesday", open="09:00", close="18:00"),
    OpeningHours(day="Wednesday", open="09:00", close="18:00"),
    OpeningHours(day="Thursday", open="09:00", close="18:00"),
    OpeningHours(day="Friday", open="09:00", close="18:00"),
    OpeningHours(day="Saturday", open="10:00", close="17:00"),
    OpeningHours(day="Sunday", open="closed", close="closed"),
]


class BusinessRecord(BaseModel):
    """A directory listing.

    Coordinates are deliberately left unvalidated here: out-of-range or
    non-finite values are excluded by the geo-aware operations instead.
    """

    id: str = Field(..., min_length=1)
    name: str
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    address: str = ""
    lat: float
    lng: float
    website: str | None = None
    phone: str | None = None
    hours: list[OpeningHours] = Field(default_factory=list)
    avg_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    rating_count: int = Field(default=0, ge=0)
    deals: list[str] = Field(default_factory=list)

    @field_serializer("lat", "lng")
    def _serialize_coordinate(self, value: float) -> float | None:
        return value if math.isfinite(value) else None


class Review(BaseModel):
    id: str
    business_id: str
    user_id: str
    rating: int = Field(..., ge=1, le=5)
    text: str
    created_at: str


class Bookmark(BaseModel):
    id: str
    user_id: str
    business_id: str
    created_at: str


class Deal(BaseModel):
    id: str
    business_id: str
    title: str
    description: str = ""
    start_date: str
    end_date: str
    code: str = ""
