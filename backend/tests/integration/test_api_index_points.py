"""Integration tests for index point endpoints."""

from decimal import Decimal

from fastapi.testclient import TestClient


def _post_point(client, index_type, day, value, params="", **extra):
    return client.post(
        f"/api/index-points{params}",
        json={"type": index_type, "date": day, "value": value, **extra},
    )


class TestIndexPointsAPI:
    """Integration tests for /api/index-points endpoints."""

    def test_create_point(self, client: TestClient):
        response = _post_point(client, "ipc", "2024-03-15", "3.7", interannual_value="287.9")
        assert response.status_code == 200
        data = response.json()
        assert data["created"] is True
        assert data["changed"] is True
        assert data["regenerated_contracts"] == 0
        assert data["point"]["type"] == "IPC"
        # Monthly series are stored on the first of the month
        assert data["point"]["date"] == "2024-03-01"
        assert data["point"]["is_manual"] is True

    def test_same_value_does_not_change(self, client: TestClient):
        _post_point(client, "IPC", "2024-03-01", "3.7")
        data = _post_point(client, "IPC", "2024-03-01", "3.7").json()
        assert data["created"] is False
        assert data["changed"] is False

    def test_scraped_value_keeps_manual(self, client: TestClient):
        _post_point(client, "IPC", "2024-03-01", "3.7")

        data = _post_point(client, "IPC", "2024-03-01", "3.9", is_manual=False).json()
        assert data["kept_manual"] is True
        assert Decimal(data["point"]["value"]) == Decimal("3.7")

        data = _post_point(client, "IPC", "2024-03-01", "3.9", params="?force=true", is_manual=False).json()
        assert data["changed"] is True
        assert Decimal(data["point"]["value"]) == Decimal("3.9")
        assert data["point"]["is_manual"] is False

    def test_future_date_rejected(self, client: TestClient):
        response = _post_point(client, "IPC", "2999-01-01", "3")
        assert response.status_code == 422

    def test_out_of_range_value_rejected(self, client: TestClient):
        response = _post_point(client, "IPC", "2024-03-01", "75")
        assert response.status_code == 422

    def test_non_positive_fx_rejected(self, client: TestClient):
        response = _post_point(client, "FX_USD_ARS", "2024-03-01", "0")
        assert response.status_code == 422

    def test_fx_keeps_day(self, client: TestClient):
        data = _post_point(client, "FX_USD_ARS", "2024-03-15", "1050").json()
        assert data["point"]["date"] == "2024-03-15"

    def test_list_and_latest(self, client: TestClient):
        for day, value in (("2024-01-01", "20.6"), ("2024-02-01", "13.2"), ("2024-03-01", "11")):
            _post_point(client, "IPC", day, value)

        data = client.get("/api/index-points?type=ipc").json()
        assert [p["date"] for p in data] == ["2024-03-01", "2024-02-01", "2024-01-01"]

        data = client.get("/api/index-points?type=IPC&start=2024-02-01&limit=1").json()
        assert [p["date"] for p in data] == ["2024-03-01"]

        response = client.get("/api/index-points/latest?type=IPC")
        assert response.status_code == 200
        assert Decimal(response.json()["value"]) == Decimal("11")

    def test_latest_not_found(self, client: TestClient):
        response = client.get("/api/index-points/latest?type=CAC")
        assert response.status_code == 404

    def test_delete_point(self, client: TestClient):
        point = _post_point(client, "IPC", "2024-03-01", "3.7").json()["point"]

        response = client.delete(f"/api/index-points/{point['id']}")
        assert response.status_code == 204
        assert client.get("/api/index-points?type=IPC").json() == []

    def test_delete_point_not_found(self, client: TestClient):
        response = client.delete("/api/index-points/nonexistent")
        assert response.status_code == 404
