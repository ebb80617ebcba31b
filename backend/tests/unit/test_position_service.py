"""Tests for the PositionService."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from services.position_service import PositionService
from services.regeneration_service import InstrumentScope, RegenerationService
from tests.fixtures import add_trade


@pytest.fixture
def traded_equity(db: Session, equity):
    add_trade(db, equity, date(2024, 1, 10), "BUY", "10", "100", "5")
    add_trade(db, equity, date(2024, 2, 10), "SELL", "4", "120", "2")
    RegenerationService().regenerate(db, InstrumentScope(equity.id))
    return equity


class TestGetPosition:
    def test_totals(self, db: Session, traded_equity):
        position = PositionService.get_position(db, traded_equity)

        assert position["open_quantity"] == Decimal("6")
        assert position["open_cost_basis"] == Decimal("600")
        assert position["open_commission"] == Decimal("3")
        assert position["average_cost"] == Decimal("100")
        assert position["realized_gain"] == Decimal("76")
        assert position["unrealized_gain"] is None
        assert len(position["lots"]) == 1
        assert position["realized_gains"][0]["buy_dates"] == [date(2024, 1, 10)]

    def test_with_market_price(self, db: Session, traded_equity):
        position = PositionService.get_position(db, traded_equity, Decimal("130"))

        assert position["market_value"] == Decimal("780")
        assert position["unrealized_gain"] == Decimal("177")

    def test_empty_position(self, db: Session, equity):
        position = PositionService.get_position(db, equity, Decimal("130"))

        assert position["open_quantity"] == 0
        assert position["average_cost"] is None
        assert position["unrealized_gain"] == 0


class TestListRealizedGains:
    def test_date_filters(self, db: Session, traded_equity):
        assert len(PositionService.list_realized_gains(db)) == 1
        assert len(PositionService.list_realized_gains(db, start=date(2024, 2, 10))) == 1
        assert PositionService.list_realized_gains(db, end=date(2024, 2, 9)) == []

    def test_instrument_filter(self, db: Session, traded_equity, bond):
        assert PositionService.list_realized_gains(db, instrument_id=bond.id) == []
        assert len(PositionService.list_realized_gains(db, instrument_id=traded_equity.id)) == 1


class TestListCashflows:
    def test_payment_order(self, db: Session, bond):
        RegenerationService().regenerate(db, InstrumentScope(bond.id))
        rows = PositionService.list_cashflows(db, bond.id)

        assert [r.kind for r in rows[-2:]] == ["INTEREST", "AMORTIZATION"]
        assert rows[-1].residual_capital == 0

    def test_range(self, db: Session, bond):
        RegenerationService().regenerate(db, InstrumentScope(bond.id))
        rows = PositionService.list_cashflows(db, bond.id, start=date(2025, 1, 1), end=date(2025, 12, 31))
        assert [r.payment_date for r in rows] == [date(2025, 1, 15), date(2025, 7, 15)]


class TestListHolderCashflows:
    def test_scaled_by_quantity_held(self, db: Session, bond):
        add_trade(db, bond, date(2024, 9, 1), "BUY", "10", "980")
        add_trade(db, bond, date(2025, 3, 1), "SELL", "4", "1010")
        RegenerationService().regenerate(db, InstrumentScope(bond.id))

        rows = PositionService.list_holder_cashflows(db, bond)

        # The July 2024 coupon predates the purchase
        assert [(r["payment_date"], r["kind"], r["amount"], r["quantity"]) for r in rows] == [
            (date(2025, 1, 15), "INTEREST", Decimal("500.00"), Decimal("10")),
            (date(2025, 7, 15), "INTEREST", Decimal("300.00"), Decimal("6")),
            (date(2026, 1, 15), "INTEREST", Decimal("300.00"), Decimal("6")),
            (date(2026, 1, 15), "AMORTIZATION", Decimal("6000.00"), Decimal("6")),
        ]
        assert rows[0]["residual_capital"] == Decimal("10000.00")
        assert rows[-1]["residual_capital"] == 0

    def test_nothing_held(self, db: Session, bond):
        add_trade(db, bond, date(2024, 9, 1), "BUY", "5", "980")
        add_trade(db, bond, date(2024, 10, 1), "SELL", "5", "990")
        RegenerationService().regenerate(db, InstrumentScope(bond.id))

        assert PositionService.list_holder_cashflows(db, bond) == []

    def test_range(self, db: Session, bond):
        add_trade(db, bond, date(2024, 1, 15), "BUY", "2", "1000")
        RegenerationService().regenerate(db, InstrumentScope(bond.id))

        rows = PositionService.list_holder_cashflows(
            db, bond, start=date(2025, 1, 1), end=date(2025, 12, 31)
        )
        assert [r["amount"] for r in rows] == [Decimal("100.00"), Decimal("100.00")]
