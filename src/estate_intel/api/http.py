# src/estate_intel/api/http.py
from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException
from loguru import logger

from estate_intel.adapters.config import config
from estate_intel.adapters.logging_utils import configure_logging
from estate_intel.adapters.sql_repo import SqlPropertyRepository
from estate_intel.services.intelligence import (
    update_all_property_intelligence,
    update_property_intelligence,
)
from estate_intel.services.property_scoring import (
    recalculate_all_property_scores,
    update_property_scores,
)
from .schemas import BatchResultOut, PropertyScoresOut, RecalculateRequest, ScoreResultOut

configure_logging()

app = FastAPI(title="estate-intel")

_property_repo: SqlPropertyRepository | None = None


def get_repo() -> SqlPropertyRepository:
    # Single engine per process, created lazily so tests can override.
    global _property_repo
    if _property_repo is None:
        _property_repo = SqlPropertyRepository(config.DB_URI)
    return _property_repo


@app.get("/properties/{property_id}/scores", response_model=PropertyScoresOut)
def get_property_scores(
    property_id: str,
    repo: SqlPropertyRepository = Depends(get_repo),
) -> PropertyScoresOut:
    row = repo.get_row(property_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Property not found")
    return PropertyScoresOut.model_validate(row)


@app.post("/properties/scores", response_model=ScoreResultOut | BatchResultOut)
def recalculate_scores(
    body: RecalculateRequest,
    repo: SqlPropertyRepository = Depends(get_repo),
) -> ScoreResultOut | BatchResultOut:
    """
    Recalculate scores for one property or for all of them.

    full_intelligence=True also refreshes the market comparison first.
    """
    if body.recalculate_all:
        try:
            result = (
                update_all_property_intelligence(repo)
                if body.full_intelligence
                else recalculate_all_property_scores(repo)
            )
        except Exception as e:
            logger.exception("Batch recalculation failed")
            raise HTTPException(status_code=500, detail="Failed to calculate property scores") from e

        return BatchResultOut(
            updated=result.updated,
            errors=result.errors,
            message=f"Updated {result.updated} properties, {result.errors} errors",
        )

    if body.property_id:
        try:
            scores = (
                update_property_intelligence(repo, body.property_id)
                if body.full_intelligence
                else update_property_scores(repo, body.property_id)
            )
        except Exception as e:
            logger.exception("Recalculation failed", property_id=body.property_id)
            raise HTTPException(status_code=500, detail="Failed to calculate property scores") from e

        if scores is None:
            raise HTTPException(status_code=404, detail="Property not found")
        return ScoreResultOut.model_validate(scores)

    raise HTTPException(status_code=400, detail="property_id or recalculate_all is required")
