"""Realized gains API endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from schemas.instrument import RealizedGainResponse
from services.position_service import PositionService, realized_gain_dict

router = APIRouter(prefix="/api/realized-gains", tags=["positions"])


@router.get("", response_model=list[RealizedGainResponse])
def list_realized_gains(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    instrument_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Realized gains across instruments.

    Args:
        start: Only sales on or after this date
        end: Only sales on or before this date
        instrument_id: Restrict to one instrument
    """
    gains = PositionService.list_realized_gains(db, start, end, instrument_id)
    return [realized_gain_dict(g) for g in gains]
