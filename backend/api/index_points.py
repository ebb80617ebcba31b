"""Index point API endpoints (inflation prints and FX quotes)."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.helpers import committing, get_or_404
from database import get_db
from models import IndexPoint
from schemas.index_point import (
    IndexPointCreate,
    IndexPointResponse,
    IndexPointUpsertResponse,
)
from schemas.regeneration import RegenerationFailureResponse
from services.index_point_service import IndexPointService
from services.regeneration_service import IndexDependentScope, RegenerationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/index-points", tags=["index-points"])


@router.get("", response_model=list[IndexPointResponse])
def list_index_points(
    type: str = Query(...),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    limit: Optional[int] = Query(None, gt=0),
    db: Session = Depends(get_db),
):
    """Points of one series, newest first."""
    return IndexPointService.list_points(db, type, start, end, limit)


@router.get("/latest", response_model=IndexPointResponse)
def get_latest_index_point(type: str = Query(...), db: Session = Depends(get_db)):
    point = IndexPointService.latest(db, type)
    if point is None:
        raise HTTPException(status_code=404, detail=f"No {type.upper()} points recorded")
    return point


@router.post("", response_model=IndexPointUpsertResponse)
def upsert_index_point(
    data: IndexPointCreate,
    force: bool = Query(False),
    db: Session = Depends(get_db),
):
    """
    Save an index point and regenerate every entity that reads it.

    A scraped value (``is_manual=false``) does not replace a manual one
    unless ``force`` is set. An FX quote also re-matches the instruments
    whose trades are converted through that pair. Entities that fail to
    regenerate keep their previous rows and are listed in ``failures``.
    """
    with committing(db):
        outcome = IndexPointService.upsert(db, data, force=force)
        result = None
        if outcome.changed:
            result = RegenerationService().regenerate(db, IndexDependentScope(outcome.point.type))
    db.refresh(outcome.point)

    return {
        "point": outcome.point,
        "created": outcome.created,
        "changed": outcome.changed,
        "kept_manual": outcome.kept_manual,
        "regenerated_contracts": len(result.regenerated_of("contract")) if result else 0,
        "regenerated_instruments": len(result.regenerated_of("instrument")) if result else 0,
        "failures": [
            RegenerationFailureResponse.from_failure(f) for f in result.failures
        ] if result else [],
    }


@router.delete("/{point_id}", status_code=204)
def delete_index_point(point_id: str, db: Session = Depends(get_db)):
    """Delete a point and regenerate the entities that read its series."""
    get_or_404(db, IndexPoint, point_id, "Index point not found")
    with committing(db):
        index_type = IndexPointService.delete_point(db, point_id)
        RegenerationService().regenerate(db, IndexDependentScope(index_type))
