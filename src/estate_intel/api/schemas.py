# src/estate_intel/api/schemas.py
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from estate_intel.domain.property import DealQuality


class PropertyScoresOut(BaseModel):
    """Stored intelligence for one property (GET /properties/{id}/scores)."""
    model_config = ConfigDict(from_attributes=True)

    id: str

    location_score: int | None = None
    value_score: int | None = None
    investment_score: int | None = None
    overall_score: int | None = None
    deal_quality: DealQuality | None = None
    key_features: list[str] = []
    target_buyer: list[str] = []

    price_deviation: float | None = None
    estimated_rental_yield: float | None = None
    fair_value_estimate: float | None = None
    price_vs_area_avg: float | None = None
    price_vs_project_avg: float | None = None

    last_intelligence_update: datetime | None = None


class RecalculateRequest(BaseModel):
    property_id: str | None = None
    recalculate_all: bool = False
    full_intelligence: bool = False


class ScoreResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    location_score: int
    value_score: int
    investment_score: int
    overall_score: int
    key_features: list[str]
    target_buyer: list[str]
    deal_quality: DealQuality | None = None


class BatchResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    updated: int
    errors: int
    message: str = ""
