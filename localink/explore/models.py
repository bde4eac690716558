from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from ..directory.models import BusinessRecord


class SortOption(str, Enum):
    rating = "rating"
    reviews = "reviews"
    distance = "distance"
    name = "name"


class RemoteStatus(str, Enum):
    ok = "ok"
    failed = "failed"
    skipped = "skipped"


class ExploreRequest(BaseModel):
    category: str | None = None
    search_text: str = Field(default="", max_length=200)
    radius_km: float = Field(default=5.0, gt=0.0, le=50.0)
    sort_by: SortOption = SortOption.rating
    lat: float | None = Field(default=None, ge=-90.0, le=90.0)
    lng: float | None = Field(default=None, ge=-180.0, le=180.0)
    include_remote: bool = Field(
        default=True, description="Fetch nearby map data when a location is given"
    )

    @model_validator(mode="after")
    def _location_pair(self) -> ExploreRequest:
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be provided together")
        return self


class ExploreItem(BaseModel):
    business: BusinessRecord
    distance_km: float | None = None
    search_match: bool | None = None


class ExploreResponse(BaseModel):
    results: list[ExploreItem]
    total: int
    remote_status: RemoteStatus
    remote_added: int = 0
