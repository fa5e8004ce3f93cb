from __future__ import annotations

from datetime import timedelta
from typing import Optional

import typer
from loguru import logger

from estate_intel.adapters.config import config
from estate_intel.adapters.logging_utils import configure_logging
from estate_intel.adapters.sql_repo import SqlAreaStatsRepository, SqlPropertyRepository
from estate_intel.services.intelligence import (
    refresh_area_stats,
    update_all_property_intelligence,
    update_property_intelligence,
    update_stale_property_intelligence,
)
from estate_intel.services.property_scoring import (
    recalculate_all_property_scores,
    update_property_scores,
)

app = typer.Typer(help="Property intelligence jobs (market comparison + scoring).")


def _repo(db_uri: Optional[str]) -> SqlPropertyRepository:
    return SqlPropertyRepository(db_uri or config.DB_URI)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override ESTATE_INTEL_LOG_LEVEL"),
) -> None:
    configure_logging(log_level)


@app.command("update-one")
def update_one(
    property_id: str = typer.Argument(..., help="Property id"),
    full: bool = typer.Option(True, "--full/--scores-only", help="Refresh market comparison first"),
    db_uri: Optional[str] = typer.Option(None, "--db-uri"),
) -> None:
    """
    Recalculate intelligence for a single property.
    """
    repo = _repo(db_uri)
    scores = update_property_intelligence(repo, property_id) if full else update_property_scores(repo, property_id)
    if scores is None:
        typer.echo(f"Property {property_id} not found", err=True)
        raise typer.Exit(code=1)

    typer.echo(
        f"{property_id}: overall={scores.overall_score} location={scores.location_score} "
        f"value={scores.value_score} investment={scores.investment_score} "
        f"deal={scores.deal_quality.value if scores.deal_quality else '-'}"
    )


@app.command("update-all")
def update_all(
    full: bool = typer.Option(True, "--full/--scores-only", help="Refresh market comparison first"),
    db_uri: Optional[str] = typer.Option(None, "--db-uri"),
) -> None:
    """
    Recalculate every stored property, one at a time.
    """
    repo = _repo(db_uri)
    result = update_all_property_intelligence(repo) if full else recalculate_all_property_scores(repo)
    typer.echo(f"Updated {result.updated} properties, {result.errors} errors")


@app.command("update-stale")
def update_stale(
    max_age_hours: float = typer.Option(config.STALE_AFTER_HOURS, help="Refresh rows older than this"),
    limit: int = typer.Option(config.STALE_BATCH_LIMIT, help="Max properties per run"),
    db_uri: Optional[str] = typer.Option(None, "--db-uri"),
) -> None:
    """
    Refresh properties that were never scored or whose scores are stale.
    """
    repo = _repo(db_uri)
    result = update_stale_property_intelligence(
        repo,
        max_age=timedelta(hours=max_age_hours),
        limit=limit,
    )
    typer.echo(f"Updated {result.updated} properties, {result.errors} errors")


@app.command("area-stats")
def area_stats(db_uri: Optional[str] = typer.Option(None, "--db-uri")) -> None:
    """
    Rebuild the per-area price/sqm statistics table.
    """
    uri = db_uri or config.DB_URI
    written = refresh_area_stats(SqlPropertyRepository(uri), SqlAreaStatsRepository(uri))
    logger.info("area-stats done", groups=written)
    typer.echo(f"Wrote {written} area groups")


if __name__ == "__main__":
    app()
