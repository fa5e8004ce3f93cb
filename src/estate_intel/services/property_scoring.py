# src/estate_intel/services/property_scoring.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from loguru import logger

from estate_intel.analysis.scoring import calculate_property_scores
from estate_intel.domain.ports import PropertyRepository
from estate_intel.domain.property import BatchResult, ScoreResult, utc_now


def score_fields(scores: ScoreResult, *, now: datetime | None = None) -> dict[str, Any]:
    """Columns written back to the property row for one scoring pass."""
    return {
        "location_score": scores.location_score,
        "value_score": scores.value_score,
        "investment_score": scores.investment_score,
        "overall_score": scores.overall_score,
        "key_features": list(scores.key_features),
        "target_buyer": list(scores.target_buyer),
        "deal_quality": scores.deal_quality.value if scores.deal_quality else None,
        "last_intelligence_update": now or utc_now(),
    }


def update_property_scores(repo: PropertyRepository, property_id: str) -> ScoreResult | None:
    """Fetch, score and persist one property. None when it does not exist."""
    prop = repo.get_property(property_id)
    if prop is None:
        return None

    scores = calculate_property_scores(prop)
    repo.update_fields(prop.id, score_fields(scores))
    return scores


def run_batch(
    repo: PropertyRepository,
    property_ids: list[str],
    step: Callable[[PropertyRepository, str], object],
    *,
    label: str,
) -> BatchResult:
    """
    Apply `step` to each id in order, one at a time.

    A failure on one property is logged and counted; the loop moves on and
    earlier writes are kept.
    """
    result = BatchResult()
    for pid in property_ids:
        try:
            step(repo, pid)
            result.updated += 1
        except Exception:
            logger.exception("Error updating {label} for property {pid}", label=label, pid=pid)
            result.errors += 1

    logger.info(
        "{label} batch finished",
        label=label,
        updated=result.updated,
        errors=result.errors,
    )
    return result


def recalculate_all_property_scores(repo: PropertyRepository) -> BatchResult:
    return run_batch(repo, repo.list_property_ids(), update_property_scores, label="scores")
