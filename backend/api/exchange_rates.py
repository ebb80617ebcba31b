"""Exchange-rate lookup endpoint."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from schemas.index_point import ExchangeRateResponse
from services.exceptions import NoRateAvailable
from services.exchange_rate_service import CurrencyPair, ExchangeRateService

router = APIRouter(prefix="/api/exchange-rates", tags=["exchange-rates"])


@router.get("/{base}/{quote}", response_model=ExchangeRateResponse)
def get_exchange_rate(
    base: str,
    quote: str,
    on: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Rate of ``base`` in ``quote`` as of a date (default today).

    Falls back to the nearest earlier quote within the look-back window, then
    to the latest quote on record.
    """
    pair = CurrencyPair(base.upper(), quote.upper())
    on = on or date.today()
    try:
        rate = ExchangeRateService.get_rate(db, on, pair)
    except NoRateAvailable as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"pair": str(pair), "date": on, "rate": rate}
