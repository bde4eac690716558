from __future__ import annotations

from pydantic import BaseModel, Field

from .models import BusinessRecord, Review


class BookmarkRequest(BaseModel):
    business_id: str = Field(..., min_length=1)


class ReviewRequest(BaseModel):
    model_config = {"str_strip_whitespace": True}

    rating: int = Field(..., ge=1, le=5)
    text: str = Field(..., min_length=10, max_length=1000)


class ReviewResponse(BaseModel):
    review: Review
    business: BusinessRecord


class BusinessCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    categories: list[str] = Field(..., min_length=1)
    tags: list[str] = Field(default_factory=list)
    address: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)
    website: str | None = None
    phone: str | None = None
