from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


def utc_now() -> datetime:
    """Timezone-aware UTC timestamp for stored audit columns."""
    return datetime.now(timezone.utc)


class PropertyCategory(str, Enum):
    CONDO = "CONDO"
    HOUSE = "HOUSE"
    INVESTMENT = "INVESTMENT"
    LAND = "LAND"


class DealQuality(str, Enum):
    SUPER_DEAL = "SUPER_DEAL"
    GOOD_VALUE = "GOOD_VALUE"
    FAIR = "FAIR"
    OVERPRICED = "OVERPRICED"
    # Valid stored value, but no scoring rule emits it yet.
    HIGH_YIELD = "HIGH_YIELD"


class PropertySnapshot(BaseModel):
    """
    Read view of a property row as seen by the comparator and the scorer.

    Every numeric field is optional: None means "no data", which is not the
    same thing as zero. Decimal / string numerics coming out of the store are
    coerced to float.
    """
    model_config = ConfigDict(extra="ignore", use_enum_values=False)

    id: str
    category: str = PropertyCategory.HOUSE.value

    price: float | None = None
    rent_price: float | None = None

    size: float | None = None
    floor: int | None = None

    area: str | None = None
    city: str | None = None
    project_id: str | None = None

    nearest_beach_km: float | None = None
    nearest_mall_km: float | None = None
    nearest_hospital_km: float | None = None
    nearest_school_km: float | None = None

    price_per_sqm: float | None = None
    area_avg_price_per_sqm: float | None = None
    project_avg_price_per_sqm: float | None = None
    price_deviation: float | None = None
    fair_value_estimate: float | None = None
    estimated_rental_yield: float | None = None

    @field_validator(
        "price", "rent_price", "size",
        "nearest_beach_km", "nearest_mall_km", "nearest_hospital_km", "nearest_school_km",
        "price_per_sqm", "area_avg_price_per_sqm", "project_avg_price_per_sqm",
        "price_deviation", "fair_value_estimate", "estimated_rental_yield",
        mode="before",
    )
    @classmethod
    def _non_finite_as_missing(cls, v):
        # NaN / inf from a bad import is no data, not a score of 100
        if isinstance(v, float) and not math.isfinite(v):
            return None
        return v

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v)

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, v):
        if isinstance(v, PropertyCategory):
            return v.value
        return str(v or "").strip().upper()

    @property
    def is_condo(self) -> bool:
        return self.category == PropertyCategory.CONDO.value


@dataclass
class MarketComparison:
    """Market-derived fields written back onto the property row."""
    price_per_sqm: float
    area_avg_price_per_sqm: float | None = None
    project_avg_price_per_sqm: float | None = None
    price_deviation: float | None = None
    fair_value_estimate: float | None = None
    estimated_rental_yield: float | None = None
    price_vs_area_avg: float | None = None
    price_vs_project_avg: float | None = None


@dataclass
class ScoreResult:
    location_score: int
    value_score: int
    investment_score: int
    overall_score: int
    key_features: list[str] = field(default_factory=list)
    target_buyer: list[str] = field(default_factory=list)
    deal_quality: DealQuality | None = None


@dataclass
class BatchResult:
    updated: int = 0
    errors: int = 0
