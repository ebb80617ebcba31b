"""Tests for shared API helpers."""

from datetime import date

import pytest
from fastapi import HTTPException
from sqlalchemy.orm import Session

from api.helpers import committing, get_or_404
from models import Contract, Instrument
from services.exceptions import (
    InconsistentAmortizationSchedule,
    InsufficientPosition,
    NoRateAvailable,
    RegenerationFailure,
)


class TestGetOr404:
    def test_found(self, db: Session, equity):
        assert get_or_404(db, Instrument, equity.id) is equity

    def test_missing(self, db: Session):
        with pytest.raises(HTTPException) as exc_info:
            get_or_404(db, Contract, "missing", "Contract not found")
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Contract not found"


class TestCommitting:
    def test_commits_on_success(self, db: Session):
        with committing(db):
            db.add(Instrument(ticker="QQQ", asset_type="ETF", currency="USD"))
        db.rollback()
        assert db.query(Instrument).filter_by(ticker="QQQ").count() == 1

    @pytest.mark.parametrize(
        "error, status",
        [
            (ValueError("bad input"), 400),
            (InsufficientPosition(5, 3, date(2024, 1, 1)), 422),
            (InconsistentAmortizationSchedule("sum is 90%"), 422),
            (NoRateAvailable("USD/ARS"), 422),
            (RegenerationFailure("abc", TimeoutError("busy")), 409),
        ],
    )
    def test_maps_errors_and_rolls_back(self, db: Session, error, status):
        with pytest.raises(HTTPException) as exc_info:
            with committing(db):
                db.add(Instrument(ticker="QQQ", asset_type="ETF", currency="USD"))
                db.flush()
                raise error
        assert exc_info.value.status_code == status
        assert db.query(Instrument).filter_by(ticker="QQQ").count() == 0
