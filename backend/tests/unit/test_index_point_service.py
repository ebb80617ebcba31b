"""Tests for the IndexPointService and index point validation."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy.orm import Session

from models import IndexPoint
from schemas.index_point import IndexPointCreate
from services.index_point_service import IndexPointService


def point(index_type="IPC", day=date(2024, 3, 1), value="4.2", **kwargs) -> IndexPointCreate:
    return IndexPointCreate(type=index_type, date=day, value=Decimal(value), **kwargs)


class TestUpsert:
    def test_creates_point(self, db: Session):
        outcome = IndexPointService.upsert(db, point())

        assert outcome.created
        assert outcome.changed
        assert outcome.point.id is not None
        assert outcome.point.value == Decimal("4.2")
        assert outcome.point.is_manual

    def test_monthly_series_stored_on_first_of_month(self, db: Session):
        outcome = IndexPointService.upsert(db, point(day=date(2024, 3, 31)))
        assert outcome.point.date == date(2024, 3, 1)

    def test_fx_series_keeps_its_day(self, db: Session):
        outcome = IndexPointService.upsert(db, point("FX_USD_ARS", date(2024, 3, 14), "850"))
        assert outcome.point.date == date(2024, 3, 14)

    def test_updates_existing_point(self, db: Session):
        IndexPointService.upsert(db, point(value="4.2"))
        outcome = IndexPointService.upsert(db, point(value="4.5"))

        assert not outcome.created
        assert outcome.changed
        assert db.query(IndexPoint).count() == 1
        assert db.query(IndexPoint).one().value == Decimal("4.5")

    def test_same_value_is_not_a_change(self, db: Session):
        IndexPointService.upsert(db, point(value="4.2"))
        outcome = IndexPointService.upsert(db, point(value="4.2"))
        assert not outcome.changed

    def test_scraped_value_does_not_overwrite_manual(self, db: Session):
        IndexPointService.upsert(db, point(value="4.2", is_manual=True))
        outcome = IndexPointService.upsert(db, point(value="9.9", is_manual=False))

        assert outcome.kept_manual
        assert not outcome.changed
        assert outcome.point.value == Decimal("4.2")
        assert outcome.point.is_manual

    def test_force_overwrites_manual(self, db: Session):
        IndexPointService.upsert(db, point(value="4.2", is_manual=True))
        outcome = IndexPointService.upsert(db, point(value="9.9", is_manual=False), force=True)

        assert outcome.changed
        assert outcome.point.value == Decimal("9.9")
        assert not outcome.point.is_manual

    def test_manual_overwrites_scraped(self, db: Session):
        IndexPointService.upsert(db, point(value="4.2", is_manual=False))
        outcome = IndexPointService.upsert(db, point(value="4.3", is_manual=True))

        assert outcome.changed
        assert outcome.point.is_manual

    def test_interannual_value_kept_when_not_sent(self, db: Session):
        IndexPointService.upsert(db, point(interannual_value=Decimal("211.4")))
        outcome = IndexPointService.upsert(db, point(value="4.4"))
        assert outcome.point.interannual_value == Decimal("211.4")


class TestQueries:
    @pytest.fixture
    def series(self, db: Session):
        for month, value in ((1, "20.6"), (2, "13.2"), (3, "11.0")):
            IndexPointService.upsert(db, point(day=date(2024, month, 1), value=value))

    def test_list_newest_first(self, db: Session, series):
        points = IndexPointService.list_points(db, "ipc")
        assert [p.date.month for p in points] == [3, 2, 1]

    def test_list_with_range_and_limit(self, db: Session, series):
        points = IndexPointService.list_points(db, "IPC", start=date(2024, 2, 1), limit=1)
        assert [p.date for p in points] == [date(2024, 3, 1)]

    def test_latest(self, db: Session, series):
        assert IndexPointService.latest(db, "IPC").value == Decimal("11.0")
        assert IndexPointService.latest(db, "CER") is None

    def test_delete(self, db: Session, series):
        target = IndexPointService.latest(db, "IPC")
        assert IndexPointService.delete_point(db, target.id) == "IPC"
        assert IndexPointService.latest(db, "IPC").date == date(2024, 2, 1)

    def test_delete_missing(self, db: Session):
        with pytest.raises(ValueError, match="not found"):
            IndexPointService.delete_point(db, "missing")


class TestIndexPointCreateValidation:
    def test_type_is_normalized(self):
        assert point(index_type=" ipc ").type == "IPC"

    @pytest.mark.parametrize("value", ["50.1", "-50.1", "350"])
    def test_inflation_out_of_range(self, value):
        with pytest.raises(ValidationError, match="between"):
            point(value=value)

    @pytest.mark.parametrize("value", ["50", "-50", "0"])
    def test_inflation_range_is_inclusive(self, value):
        assert point(value=value).value == Decimal(value)

    def test_fx_quote_may_exceed_inflation_range(self):
        assert point("FX_USD_ARS", value="1050").value == Decimal("1050")

    def test_fx_quote_must_be_positive(self):
        with pytest.raises(ValidationError, match="positive"):
            point("FX_USD_ARS", value="0")

    def test_future_date_rejected(self):
        with pytest.raises(ValidationError, match="future"):
            point(day=date.today() + timedelta(days=40))
