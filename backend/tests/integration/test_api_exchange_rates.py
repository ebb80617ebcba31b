"""Integration tests for the exchange-rate lookup endpoint."""

from datetime import date
from decimal import Decimal

from fastapi.testclient import TestClient

from tests.fixtures import add_index_points


def _add_quotes(db):
    add_index_points(
        db,
        "FX_USD_ARS",
        {date(2023, 1, 1): "100", date(2023, 2, 1): "110", date(2023, 3, 1): "120"},
    )
    db.commit()


class TestExchangeRatesAPI:
    """Integration tests for /api/exchange-rates endpoints."""

    def test_exact_day(self, client: TestClient, db):
        _add_quotes(db)
        response = client.get("/api/exchange-rates/usd/ars?on=2023-02-01")
        assert response.status_code == 200
        data = response.json()
        assert data["pair"] == "USD/ARS"
        assert data["date"] == "2023-02-01"
        assert Decimal(data["rate"]) == Decimal("110")

    def test_lookback_window(self, client: TestClient, db):
        _add_quotes(db)
        data = client.get("/api/exchange-rates/USD/ARS?on=2023-02-08").json()
        assert Decimal(data["rate"]) == Decimal("110")

    def test_falls_back_to_latest_quote(self, client: TestClient, db):
        _add_quotes(db)
        data = client.get("/api/exchange-rates/USD/ARS?on=2023-02-20").json()
        assert Decimal(data["rate"]) == Decimal("120")

    def test_inverse_pair(self, client: TestClient, db):
        _add_quotes(db)
        data = client.get("/api/exchange-rates/ARS/USD?on=2023-01-01").json()
        assert Decimal(data["rate"]) == Decimal("0.01")

    def test_no_quotes(self, client: TestClient):
        response = client.get("/api/exchange-rates/USD/ARS?on=2023-01-01")
        assert response.status_code == 404
        assert "No exchange rate" in response.json()["detail"]
