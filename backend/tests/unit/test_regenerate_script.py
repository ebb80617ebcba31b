"""Tests for the regenerate script."""

from datetime import date
from decimal import Decimal

import pytest

from models import Cashflow, Contract, RentalCashflow
from scripts.regenerate import regenerate


@pytest.fixture
def script_db(db, monkeypatch):
    monkeypatch.setattr(
        "scripts.regenerate.get_session_local",
        lambda: lambda: db,
    )
    monkeypatch.setattr(db, "close", lambda: None)
    return db


class TestRegenerateScript:
    def test_contracts(self, script_db, ipc_contract, ipc_points, fixed_contract, capsys):
        failed = regenerate("contracts")

        assert failed == 0
        assert script_db.query(RentalCashflow).count() == 18
        assert "Regenerated 2 entities (18 rows)" in capsys.readouterr().out

    def test_instruments(self, script_db, bond, equity):
        assert regenerate("instruments") == 0
        assert script_db.query(Cashflow).filter_by(instrument_id=bond.id).count() == 5
        assert script_db.query(Cashflow).filter_by(instrument_id=equity.id).count() == 0

    def test_index(self, script_db, ipc_contract, fixed_contract, ipc_points):
        assert regenerate("index", "ipc") == 0
        ids = {r.contract_id for r in script_db.query(RentalCashflow).all()}
        assert ipc_contract.id in ids

    def test_reports_failures(self, script_db, fixed_contract, capsys):
        script_db.add(
            Contract(
                property_name="Broken",
                start_date=date(2023, 1, 1),
                duration_months=6,
                initial_rent=Decimal("100"),
                currency="ARS",
                adjustment_type="INDEX_LINKED",
                adjustment_frequency=3,
                index_type=None,
            )
        )
        script_db.flush()

        failed = regenerate("contracts")

        assert failed == 1
        assert script_db.query(RentalCashflow).filter_by(contract_id=fixed_contract.id).count() == 6
        assert "1 failed (previous rows kept)" in capsys.readouterr().out
