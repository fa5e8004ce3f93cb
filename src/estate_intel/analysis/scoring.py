# src/estate_intel/analysis/scoring.py
from __future__ import annotations

from typing import Dict, Mapping

from estate_intel.analysis.tiers import TierCurve, clamp_score, round_half_up, step_score
from estate_intel.domain.property import (
    DealQuality,
    PropertyCategory,
    PropertySnapshot,
    ScoreResult,
)

# Overall score blend
SCORE_WEIGHTS: Dict[str, float] = {
    "location": 0.30,
    "value": 0.35,
    "investment": 0.35,
}

NEUTRAL_SCORE = 50

MAX_KEY_FEATURES = 5
MAX_TARGET_BUYERS = 3


# =====================================================================
# Threshold tables
# =====================================================================

# POI distance tiers in km: excellent / good / fair / max
LOCATION_THRESHOLDS: Dict[str, Dict[str, float]] = {
    "beach": {"excellent": 0.5, "good": 1, "fair": 2, "max": 5},
    "mall": {"excellent": 1, "good": 2, "fair": 5, "max": 10},
    "hospital": {"excellent": 2, "good": 5, "fair": 10, "max": 20},
    "school": {"excellent": 1, "good": 2, "fair": 5, "max": 10},
}

# Beach is the premium amenity; hospitals matter a bit less day to day.
LOCATION_WEIGHTS: Dict[str, float] = {
    "beach": 1.2,
    "mall": 1.0,
    "hospital": 0.8,
    "school": 0.9,
}

# Points lost per km beyond the "max" tier
DISTANCE_DECAY_PER_KM = 5.0


def distance_curve(thresholds: Mapping[str, float]) -> TierCurve:
    return TierCurve.from_pairs(
        [
            (thresholds["excellent"], 100),
            (thresholds["good"], 75),
            (thresholds["fair"], 50),
            (thresholds["max"], 25),
        ],
        tail_slope=-DISTANCE_DECAY_PER_KM,
    )


LOCATION_CURVES: Dict[str, TierCurve] = {
    name: distance_curve(t) for name, t in LOCATION_THRESHOLDS.items()
}

# Price deviation vs fair value, in percent (negative = below market)
VALUE_CURVE = TierCurve.from_pairs(
    [(-15, 100), (-5, 75), (0, 50), (10, 25)],
    tail_slope=-2.0,
)

# Rental yield in percent. Below 2% the score is yield * 12.5, i.e. the
# segment through the origin.
INVESTMENT_CURVE = TierCurve.from_pairs(
    [(0, 0), (2, 25), (4, 50), (6, 75), (8, 100)],
    tail_slope=0.0,
)

# Coarse fallbacks when only raw figures are available
VALUE_FALLBACK_STEPS = [(-15.0, 100), (-5.0, 75), (5.0, 50), (15.0, 25)]
VALUE_FALLBACK_FLOOR = 10

INVESTMENT_FALLBACK_STEPS = [(8.0, 100), (6.0, 75), (4.0, 50), (2.0, 25)]
INVESTMENT_FALLBACK_FLOOR = 10

DEAL_QUALITY_BANDS = [
    (85.0, DealQuality.SUPER_DEAL),
    (70.0, DealQuality.GOOD_VALUE),
    (40.0, DealQuality.FAIR),
]


# =====================================================================
# Component scores
# =====================================================================


def calculate_distance_score(distance: float | None, poi: str) -> int | None:
    """0-100 for one POI type, None when the distance is unknown."""
    if distance is None:
        return None
    return LOCATION_CURVES[poi].score(float(distance))


def calculate_location_score(prop: PropertySnapshot) -> int:
    distances = {
        "beach": prop.nearest_beach_km,
        "mall": prop.nearest_mall_km,
        "hospital": prop.nearest_hospital_km,
        "school": prop.nearest_school_km,
    }

    weighted: list[float] = []
    for poi, distance in distances.items():
        sub = calculate_distance_score(distance, poi)
        if sub is not None:
            weighted.append(sub * LOCATION_WEIGHTS[poi])

    # No POI data is not a bad location
    if not weighted:
        return NEUTRAL_SCORE

    avg = sum(weighted) / len(weighted)
    return round_half_up(clamp_score(avg))


def calculate_value_score(prop: PropertySnapshot) -> int:
    """
    Priority:
      1) price_deviation from the fair value model (smooth curve)
      2) own price/sqm vs area average (coarse steps)
      3) neutral 50
    """
    if prop.price_deviation is not None:
        return VALUE_CURVE.score(float(prop.price_deviation))

    if prop.price_per_sqm is not None and prop.area_avg_price_per_sqm:
        deviation = (prop.price_per_sqm - prop.area_avg_price_per_sqm) / prop.area_avg_price_per_sqm * 100.0
        return step_score(deviation, VALUE_FALLBACK_STEPS, VALUE_FALLBACK_FLOOR)

    return NEUTRAL_SCORE


def calculate_investment_score(prop: PropertySnapshot) -> int:
    """
    Priority:
      1) estimated_rental_yield (smooth curve)
      2) yield from rent_price / price (coarse steps)
      3) neutral 50
    """
    if prop.estimated_rental_yield is not None:
        return INVESTMENT_CURVE.score(float(prop.estimated_rental_yield))

    if prop.rent_price is not None and prop.price is not None and prop.price > 0:
        yield_pct = (prop.rent_price * 12.0) / prop.price * 100.0
        return step_score(
            yield_pct,
            INVESTMENT_FALLBACK_STEPS,
            INVESTMENT_FALLBACK_FLOOR,
            ascending=False,
        )

    return NEUTRAL_SCORE


def calculate_overall_score(location: int, value: int, investment: int) -> int:
    overall = (
        location * SCORE_WEIGHTS["location"]
        + value * SCORE_WEIGHTS["value"]
        + investment * SCORE_WEIGHTS["investment"]
    )
    return round_half_up(clamp_score(overall))


# =====================================================================
# Labels
# =====================================================================


def classify_deal(combined_score: float) -> DealQuality:
    for floor, label in DEAL_QUALITY_BANDS:
        if combined_score >= floor:
            return label
    return DealQuality.OVERPRICED


def determine_deal_quality(value_score: int, investment_score: int) -> DealQuality:
    # Integer weights keep the 85.0 boundary exact.
    combined = (value_score * 60 + investment_score * 40) / 100
    return classify_deal(combined)


def generate_key_features(prop: PropertySnapshot, location: int, value: int, investment: int) -> list[str]:
    features: list[str] = []

    beach = prop.nearest_beach_km
    if beach is not None and beach <= 0.5:
        features.append("Beachfront")
    elif beach is not None and beach <= 1:
        features.append("Near Beach")

    if prop.nearest_mall_km is not None and prop.nearest_mall_km <= 1:
        features.append("Near Shopping")

    if value >= 85:
        features.append("Below Market")
    elif value >= 70:
        features.append("Good Value")

    if investment >= 85:
        features.append("High Yield")
    elif investment >= 70:
        features.append("Good ROI")

    if location >= 80:
        features.append("Prime Location")

    return features[:MAX_KEY_FEATURES]


def generate_target_buyer(prop: PropertySnapshot, value: int, investment: int) -> list[str]:
    buyers: list[str] = []

    if investment >= 70:
        buyers.append("Investor")

    beach = prop.nearest_beach_km
    hospital = prop.nearest_hospital_km
    if beach is not None and beach <= 2 and hospital is not None and hospital <= 5:
        buyers.append("Retiree")

    if prop.nearest_school_km is not None and prop.nearest_school_km <= 2:
        buyers.append("Family")

    if value >= 75:
        buyers.append("Value Seeker")

    if prop.size is not None and prop.size <= 50 and prop.category == PropertyCategory.CONDO.value:
        buyers.append("First-Time Buyer")

    return buyers[:MAX_TARGET_BUYERS]


# =====================================================================
# Entry point
# =====================================================================


def calculate_property_scores(prop: PropertySnapshot) -> ScoreResult:
    """
    Pure scoring of one property snapshot. Never raises for well-formed
    snapshots: every branch falls back to a neutral 50.
    """
    location = calculate_location_score(prop)
    value = calculate_value_score(prop)
    investment = calculate_investment_score(prop)

    return ScoreResult(
        location_score=location,
        value_score=value,
        investment_score=investment,
        overall_score=calculate_overall_score(location, value, investment),
        key_features=generate_key_features(prop, location, value, investment),
        target_buyer=generate_target_buyer(prop, value, investment),
        deal_quality=determine_deal_quality(value, investment),
    )
