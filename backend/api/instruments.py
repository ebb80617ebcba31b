"""Instrument API endpoints."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.helpers import committing, get_or_404
from database import get_db
from models import Instrument
from schemas.instrument import (
    CashflowResponse,
    InstrumentCreate,
    InstrumentResponse,
    InstrumentUpdate,
    PositionResponse,
    TransactionCreate,
    TransactionResponse,
)
from services.instrument_service import InstrumentService
from services.position_service import PositionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/instruments", tags=["instruments"])


@router.get("", response_model=list[InstrumentResponse])
def list_instruments(
    asset_type: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List instruments, optionally filtered by asset type."""
    return InstrumentService.list_instruments(db, asset_type)


@router.post("", response_model=InstrumentResponse, status_code=201)
def create_instrument(data: InstrumentCreate, db: Session = Depends(get_db)):
    """Create an instrument and generate its cashflow schedule."""
    with committing(db):
        instrument = InstrumentService.create_instrument(db, data)
    db.refresh(instrument)
    return instrument


@router.get("/{instrument_id}", response_model=InstrumentResponse)
def get_instrument(instrument_id: str, db: Session = Depends(get_db)):
    return get_or_404(db, Instrument, instrument_id, "Instrument not found")


@router.put("/{instrument_id}", response_model=InstrumentResponse)
def update_instrument(
    instrument_id: str,
    data: InstrumentUpdate,
    db: Session = Depends(get_db),
):
    """Update instrument terms. The cashflow schedule is regenerated."""
    instrument = get_or_404(db, Instrument, instrument_id, "Instrument not found")
    with committing(db):
        InstrumentService.update_instrument(db, instrument, data)
    db.refresh(instrument)
    return instrument


@router.delete("/{instrument_id}", status_code=204)
def delete_instrument(instrument_id: str, db: Session = Depends(get_db)):
    """Delete an instrument with its trades and derived rows."""
    instrument = get_or_404(db, Instrument, instrument_id, "Instrument not found")
    with committing(db):
        InstrumentService.delete_instrument(db, instrument)


@router.get("/{instrument_id}/cashflows", response_model=list[CashflowResponse])
def get_cashflows(
    instrument_id: str,
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    holding: bool = Query(False),
    db: Session = Depends(get_db),
):
    """
    Projected coupon and amortization payments, in payment order.

    Args:
        holding: Scale each payment by the quantity held on its date and
            skip dates when nothing is held.
    """
    instrument = get_or_404(db, Instrument, instrument_id, "Instrument not found")
    if holding:
        return PositionService.list_holder_cashflows(db, instrument, start, end)
    return PositionService.list_cashflows(db, instrument_id, start, end)


@router.get("/{instrument_id}/position", response_model=PositionResponse)
def get_position(
    instrument_id: str,
    market_price: Optional[Decimal] = Query(None, ge=0),
    db: Session = Depends(get_db),
):
    """
    Open lots and realized gains of an instrument.

    Args:
        market_price: Optional price per unit; when given the response
            includes market value and unrealized gain.
    """
    instrument = get_or_404(db, Instrument, instrument_id, "Instrument not found")
    return PositionService.get_position(db, instrument, market_price)


@router.get("/{instrument_id}/transactions", response_model=list[TransactionResponse])
def list_transactions(instrument_id: str, db: Session = Depends(get_db)):
    get_or_404(db, Instrument, instrument_id, "Instrument not found")
    return InstrumentService.list_transactions(db, instrument_id)


@router.post(
    "/{instrument_id}/transactions",
    response_model=TransactionResponse,
    status_code=201,
)
def create_transaction(
    instrument_id: str,
    data: TransactionCreate,
    db: Session = Depends(get_db),
):
    """Record a trade. A SELL larger than the open position is rejected with 422."""
    instrument = get_or_404(db, Instrument, instrument_id, "Instrument not found")
    with committing(db):
        tx = InstrumentService.add_transaction(db, instrument, data)
    db.refresh(tx)
    return tx
