"""Integration tests for rental contract endpoints."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

IPC_CONTRACT = {
    "property_name": "Depto Palermo",
    "tenant_name": "J. Perez",
    "start_date": "2023-01-01",
    "duration_months": 12,
    "initial_rent": "1000",
    "currency": "ars",
    "adjustment_type": "INDEX_LINKED",
    "adjustment_frequency": 3,
    "index_type": "ipc",
}


def _post_point(client, index_type, day, value, **extra):
    return client.post(
        "/api/index-points",
        json={"type": index_type, "date": day, "value": value, **extra},
    )


@pytest.fixture
def ipc_prints(client: TestClient):
    for day, value in (("2023-01-01", "2"), ("2023-02-01", "3"), ("2023-03-01", "1")):
        assert _post_point(client, "IPC", day, value).status_code == 200


class TestContractsAPI:
    """Integration tests for /api/contracts endpoints."""

    def test_list_contracts_empty(self, client: TestClient):
        response = client.get("/api/contracts")
        assert response.status_code == 200
        assert response.json() == []

    def test_create_index_linked_contract(self, client: TestClient, ipc_prints):
        response = client.post("/api/contracts", json=IPC_CONTRACT)
        assert response.status_code == 201
        contract = response.json()
        assert contract["currency"] == "ARS"
        assert contract["index_type"] == "IPC"

        rows = client.get(f"/api/contracts/{contract['id']}/cashflows").json()
        assert [r["month_index"] for r in rows] == list(range(1, 13))
        assert Decimal(rows[0]["amount"]) == Decimal("1000")
        assert rows[3]["is_adjustment"] is True
        assert Decimal(rows[3]["amount"]) == Decimal("1061.11")
        assert rows[3]["is_provisional"] is False
        # April onwards has no print yet
        assert rows[6]["is_provisional"] is True

    def test_fixed_percentage_contract(self, client: TestClient):
        payload = {
            "property_name": "Local Centro",
            "start_date": "2023-01-01",
            "duration_months": 6,
            "initial_rent": "500",
            "currency": "USD",
            "adjustment_type": "FIXED_PERCENTAGE",
            "adjustment_frequency": 3,
            "adjustment_rate": "5",
        }
        contract = client.post("/api/contracts", json=payload).json()

        rows = client.get(f"/api/contracts/{contract['id']}/cashflows").json()
        assert [Decimal(r["amount"]) for r in rows] == [Decimal("500")] * 3 + [Decimal("525")] * 3
        assert all(r["is_provisional"] is False for r in rows)

    def test_index_linked_requires_index_type(self, client: TestClient):
        payload = {**IPC_CONTRACT, "index_type": None}
        response = client.post("/api/contracts", json=payload)
        assert response.status_code == 422

    def test_fixed_percentage_requires_rate(self, client: TestClient):
        payload = {**IPC_CONTRACT, "adjustment_type": "FIXED_PERCENTAGE", "index_type": None}
        response = client.post("/api/contracts", json=payload)
        assert response.status_code == 422

    def test_invalid_duration(self, client: TestClient):
        response = client.post("/api/contracts", json={**IPC_CONTRACT, "duration_months": 0})
        assert response.status_code == 422

    def test_update_regenerates_schedule(self, client: TestClient):
        contract = client.post("/api/contracts", json=IPC_CONTRACT).json()

        response = client.put(f"/api/contracts/{contract['id']}", json={"duration_months": 24})
        assert response.status_code == 200
        assert response.json()["duration_months"] == 24

        rows = client.get(f"/api/contracts/{contract['id']}/cashflows").json()
        assert len(rows) == 24

    def test_switch_to_index_linked_without_index(self, client: TestClient):
        payload = {**IPC_CONTRACT, "adjustment_type": "FIXED_PERCENTAGE", "adjustment_rate": "5", "index_type": None}
        contract = client.post("/api/contracts", json=payload).json()

        response = client.put(
            f"/api/contracts/{contract['id']}", json={"adjustment_type": "INDEX_LINKED"}
        )
        assert response.status_code == 400
        assert client.get(f"/api/contracts/{contract['id']}").json()["adjustment_type"] == "FIXED_PERCENTAGE"

    def test_null_for_required_term_is_ignored(self, client: TestClient):
        contract = client.post("/api/contracts", json=IPC_CONTRACT).json()

        response = client.put(f"/api/contracts/{contract['id']}", json={"duration_months": None})
        assert response.status_code == 200
        assert response.json()["duration_months"] == 12
        assert len(client.get(f"/api/contracts/{contract['id']}/cashflows").json()) == 12

    def test_switch_to_fixed_percentage_without_rate(self, client: TestClient):
        contract = client.post("/api/contracts", json=IPC_CONTRACT).json()

        response = client.put(
            f"/api/contracts/{contract['id']}", json={"adjustment_type": "FIXED_PERCENTAGE"}
        )
        assert response.status_code == 400
        assert "adjustment_rate" in response.json()["detail"]
        assert client.get(f"/api/contracts/{contract['id']}").json()["adjustment_type"] == "INDEX_LINKED"

    def test_new_print_regenerates_contract(self, client: TestClient, ipc_prints):
        contract = client.post("/api/contracts", json=IPC_CONTRACT).json()

        response = _post_point(client, "IPC", "2023-04-01", "4")
        assert response.json()["regenerated_contracts"] == 1

        rows = client.get(f"/api/contracts/{contract['id']}/cashflows").json()
        assert Decimal(rows[4]["index_monthly"]) == Decimal("4")
        assert rows[4]["is_provisional"] is False

    def test_fx_quotes_fill_reporting_amounts(self, client: TestClient, ipc_prints):
        for day, value in (("2023-01-01", "100"), ("2023-02-01", "110")):
            _post_point(client, "FX_USD_ARS", day, value)
        contract = client.post("/api/contracts", json=IPC_CONTRACT).json()

        rows = client.get(f"/api/contracts/{contract['id']}/cashflows").json()
        assert Decimal(rows[0]["amount_local"]) == Decimal("1000")
        assert Decimal(rows[0]["amount_reporting"]) == Decimal("10")
        assert Decimal(rows[1]["fx_rate"]) == Decimal("110")
        assert Decimal(rows[1]["devaluation_accumulated"]) == Decimal("10")

    def test_delete_contract(self, client: TestClient):
        contract = client.post("/api/contracts", json=IPC_CONTRACT).json()

        response = client.delete(f"/api/contracts/{contract['id']}")
        assert response.status_code == 204
        assert client.get(f"/api/contracts/{contract['id']}/cashflows").status_code == 404

    def test_contract_not_found(self, client: TestClient):
        response = client.get("/api/contracts/nonexistent")
        assert response.status_code == 404
        assert response.json()["detail"] == "Contract not found"
