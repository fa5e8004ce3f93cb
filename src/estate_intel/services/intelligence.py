# src/estate_intel/services/intelligence.py
from __future__ import annotations

from datetime import datetime, timedelta

from loguru import logger

from estate_intel.adapters.config import config
from estate_intel.analysis.area_stats import compute_area_stats
from estate_intel.domain.ports import AreaStatsRepository, PropertyRepository
from estate_intel.domain.property import BatchResult, ScoreResult, utc_now
from estate_intel.services.market_comparison import update_market_comparison
from estate_intel.services.property_scoring import run_batch, update_property_scores


def update_property_intelligence(repo: PropertyRepository, property_id: str) -> ScoreResult | None:
    """
    Full refresh for one property: market comparison first so the scorer
    sees fresh deviation / yield figures, then scores.
    """
    update_market_comparison(repo, property_id)
    return update_property_scores(repo, property_id)


def update_all_property_intelligence(repo: PropertyRepository) -> BatchResult:
    return run_batch(
        repo,
        repo.list_property_ids(),
        update_property_intelligence,
        label="intelligence",
    )


def update_stale_property_intelligence(
    repo: PropertyRepository,
    *,
    max_age: timedelta | None = None,
    limit: int | None = None,
    now: datetime | None = None,
) -> BatchResult:
    """
    Refresh only properties never scored or scored longer than `max_age` ago,
    at most `limit` of them. Meant for a frequent cron.
    """
    max_age = max_age if max_age is not None else timedelta(hours=config.STALE_AFTER_HOURS)
    limit = limit if limit is not None else config.STALE_BATCH_LIMIT
    cutoff = (now or utc_now()) - max_age

    ids = repo.list_stale_property_ids(updated_before=cutoff, limit=limit)
    logger.info("Refreshing stale properties", count=len(ids), cutoff=cutoff.isoformat())
    return run_batch(repo, ids, update_property_intelligence, label="stale intelligence")


def refresh_area_stats(repo: PropertyRepository, stats_repo: AreaStatsRepository) -> int:
    """Recompute the per-area price/sqm table from current listings."""
    stats = compute_area_stats(repo.list_market_rows())
    written = stats_repo.replace_all(stats)
    logger.info("Area stats refreshed", groups=written)
    return written
