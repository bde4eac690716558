from __future__ import annotations

from pydantic import BaseModel, Field

from ..directory.models import BusinessRecord


class RecommendationRequest(BaseModel):
    limit: int = Field(default=10, ge=1, le=50)


class RecommendationItem(BaseModel):
    business: BusinessRecord
    score: float | None = Field(
        default=None, description="Cosine similarity; null for popularity fallback"
    )


class RecommendationResponse(BaseModel):
    strategy: str
    recommendations: list[RecommendationItem]
    total_candidates: int


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
