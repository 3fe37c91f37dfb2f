"""Tests for the cases API using TestClient with a mocked warehouse."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from app.api.cases import compute_stats
from app.db.connection import WarehouseError
from app.db.queries import OFFENSE_HISTORY_QUERY, USER_INFO_QUERY
from app.schemas.aml_case import AMLCase


class TestListCases:
    def test_empty_cache_fetches(self, client: TestClient, mock_warehouse):
        resp = client.get("/api/cases")

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["count"] == 3
        assert body["cached"] is False
        assert body["cacheAge"] == 0
        assert body["cachedAt"] is not None
        assert [c["user_id"] for c in body["data"]] == [101, 202, 303]
        assert body["data"][1]["created_at"] == "2024-05-10T09:00:00"
        mock_warehouse.run_query.assert_awaited_once()

    def test_second_read_served_from_cache(self, client: TestClient, mock_warehouse, clock):
        first = client.get("/api/cases").json()
        clock.advance(120)
        second = client.get("/api/cases").json()

        assert second["cached"] is True
        assert second["cacheAge"] == 120
        assert second["data"] == first["data"]
        assert second["cachedAt"] == first["cachedAt"]
        assert mock_warehouse.run_query.await_count == 1

    def test_refresh_flag_forces_fetch(self, client: TestClient, mock_warehouse):
        client.get("/api/cases")
        resp = client.get("/api/cases", params={"refresh": "true"})

        assert resp.json()["cached"] is False
        assert mock_warehouse.run_query.await_count == 2

    def test_fetch_failure_without_snapshot_is_500(self, client: TestClient, mock_warehouse):
        mock_warehouse.run_query.side_effect = WarehouseError("permission denied")
        resp = client.get("/api/cases")

        assert resp.status_code == 500
        detail = resp.json()["detail"]
        assert detail["success"] is False
        assert detail["error"] == "Failed to fetch cases"
        assert detail["message"] == "permission denied"

    def test_null_analyst_is_served(self, client: TestClient, pending_rows):
        pending_rows[2]["analyst"] = None
        resp = client.get("/api/cases")

        assert resp.status_code == 200
        body = resp.json()
        assert body["count"] == 3
        assert body["data"][2]["analyst"] is None

    def test_malformed_row_is_500_envelope(self, client: TestClient, pending_rows):
        pending_rows[0]["high_value"] = "maybe"
        resp = client.get("/api/cases")

        assert resp.status_code == 500
        detail = resp.json()["detail"]
        assert detail["error"] == "Failed to fetch cases"
        assert "Malformed pending-case row" in detail["message"]


class TestRefreshCases:
    def test_post_refresh(self, client: TestClient, mock_warehouse):
        client.get("/api/cases")
        resp = client.post("/api/cases/refresh")

        assert resp.status_code == 200
        body = resp.json()
        assert body["count"] == 3
        assert "refreshedAt" in body
        assert mock_warehouse.run_query.await_count == 2

    def test_post_refresh_failure(self, client: TestClient, mock_warehouse):
        mock_warehouse.run_query.side_effect = WarehouseError("timeout")
        resp = client.post("/api/cases/refresh")
        assert resp.status_code == 500
        assert resp.json()["detail"]["error"] == "Failed to refresh cases"


class TestStats:
    def test_stats_over_collection(self, client: TestClient):
        resp = client.get("/api/cases/stats")

        assert resp.status_code == 200
        body = resp.json()
        assert body["data"] == {
            "total": 3,
            "pending": 3,
            "in_review": 0,
            "resolved": 0,
            "high_value_count": 1,
            "avg_days_pending": 22,
        }
        assert body["cached"] is True

    def test_stats_empty_collection(self):
        stats = compute_stats([])
        assert stats.total == 0
        assert stats.avg_days_pending == 0

    def test_average_rounds_half_up(self):
        cases = [
            AMLCase(
                user_id=i,
                created_at="2024-05-01",
                analyst="A",
                days_since_creation=days,
                status="active",
                high_value="no",
            )
            for i, days in enumerate([2, 3])
        ]
        assert compute_stats(cases).avg_days_pending == 3


class TestGetCase:
    def test_cached_case(self, client: TestClient, mock_warehouse):
        client.get("/api/cases")
        resp = client.get("/api/cases/202")

        assert resp.status_code == 200
        assert resp.json()["cached"] is True
        assert resp.json()["data"]["analyst"] == "Joao Souza"
        assert mock_warehouse.run_query.await_count == 1

    def test_not_found(self, client: TestClient, mock_warehouse):
        mock_warehouse.run_query = AsyncMock(return_value=[])
        resp = client.get("/api/cases/999")

        assert resp.status_code == 404
        assert resp.json()["detail"]["error"] == "Case not found"

    def test_invalid_user_id(self, client: TestClient, mock_warehouse):
        resp = client.get("/api/cases/abc")
        assert resp.status_code == 422
        mock_warehouse.run_query.assert_not_awaited()


class TestUserInfo:
    def test_user_info(self, client: TestClient, mock_warehouse):
        mock_warehouse.run_query = AsyncMock(
            return_value=[
                {
                    "user_id": 101,
                    "name": "Loja Exemplo",
                    "merchant_name": "Loja Exemplo LTDA",
                    "email": "owner@example.com",
                    "age": 41,
                    "status": "active",
                    "status_reason": None,
                    "role_type": "merchant",
                    "business_category": "retail",
                    "document_number": "12345678000199",
                    "cardholder_created_at": None,
                    "merchant_created_at": datetime(2021, 3, 4, tzinfo=timezone.utc),
                    "address": "Rua A, 10, Centro",
                    "city": "Sao Paulo",
                    "state": "SP",
                }
            ]
        )
        resp = client.get("/api/cases/101/user-info")

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["merchant_created_at"] == "2021-03-04T00:00:00+00:00"
        assert data["cardholder_created_at"] is None
        mock_warehouse.run_query.assert_awaited_once_with(USER_INFO_QUERY, {"user_id": 101})

    def test_user_not_found(self, client: TestClient, mock_warehouse):
        mock_warehouse.run_query = AsyncMock(return_value=[])
        resp = client.get("/api/cases/101/user-info")
        assert resp.status_code == 404
        assert resp.json()["detail"]["error"] == "User not found"


class TestOffenseHistory:
    def test_offense_history(self, client: TestClient, mock_warehouse):
        mock_warehouse.run_query = AsyncMock(
            return_value=[
                {
                    "offense_date": "2024-04-02",
                    "offense_date_original": "02-04-2024",
                    "conclusion": "suspicious",
                    "priority": "low",
                    "description": "Structuring pattern",
                    "analyst": "Maria Silva",
                    "offense_name": "money_laundering",
                },
                {
                    "offense_date": {"value": "2023-11-15"},
                    "offense_date_original": "15/11/2023 10:00",
                    "conclusion": "normal",
                    "priority": None,
                    "description": None,
                    "analyst": None,
                    "offense_name": "money_laundering",
                },
            ]
        )
        resp = client.get("/api/cases/101/offense-history")

        assert resp.status_code == 200
        body = resp.json()
        assert body["count"] == 2
        assert [e["offense_date"] for e in body["data"]] == ["2024-04-02", "2023-11-15"]
        assert "offense_date_original" not in body["data"][0]
        mock_warehouse.run_query.assert_awaited_once_with(OFFENSE_HISTORY_QUERY, {"user_id": 101})

    def test_offense_history_failure(self, client: TestClient, mock_warehouse):
        mock_warehouse.run_query = AsyncMock(side_effect=WarehouseError("bad"))
        resp = client.get("/api/cases/101/offense-history")
        assert resp.status_code == 500
