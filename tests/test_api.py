"""Tests for the HTTP API routes."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from tradejournal.api import analytics as analytics_api
from tradejournal.api import milestones as milestones_api
from tradejournal.config import settings
from tradejournal.main import app
from tradejournal.services.preferences import get_preferences_store

NOW = "2024-01-03T18:00:00Z"

WEEK = [
    {"_id": "mon", "date": "2024-01-01T12:00:00Z", "amount": 100, "type": "profit", "pair": "EURUSD"},
    {"_id": "tue", "date": "2024-01-02T12:00:00Z", "amount": 30, "type": "loss", "pair": "GBPJPY"},
    {"_id": "wed", "date": "2024-01-03T12:00:00Z", "amount": 50, "type": "profit", "pair": "EURUSD"},
]


@pytest.fixture
def client(store, monkeypatch):
    monkeypatch.setattr(settings, "calendar_timezone", "UTC")
    monkeypatch.setattr(settings, "alert_webhook_url", "")
    milestones_api._trackers.clear()
    app.dependency_overrides[get_preferences_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
    milestones_api._trackers.clear()


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["name"] == "tradejournal"


class TestDashboard:
    def test_full_dashboard(self, client):
        resp = client.post(
            "/api/analytics/dashboard",
            json={"trades": WEEK, "now": NOW, "initial_balance": 1000},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["current_equity"] == 1120
        assert [p["equity"] for p in data["equity_curve"]] == [1100, 1070, 1120]
        assert data["drawdown"]["max_drawdown"] == 30
        assert data["drawdown"]["max_equity"] == 1100
        assert data["daily_drawdown"] == 30
        assert data["streaks"] == {"daily": 1, "weekly": 1, "monthly": 1}
        assert data["stats"]["total_trades"] == 3
        assert set(data["breakdowns"]["pair"]) == {"EURUSD", "GBPJPY"}
        assert [d["net"] for d in data["daily_pnl"]] == [100, -30, 50]
        assert len(data["activity"]) == 365
        assert data["activity"][-1] == {"date": "2024-01-03", "count": 1}
        assert data["rejected"] == []

    def test_window_scopes_stats_only(self, client):
        resp = client.post(
            "/api/analytics/dashboard",
            json={"trades": WEEK, "now": NOW, "initial_balance": 1000, "window": "daily"},
        )
        data = resp.json()
        assert data["stats"]["total_trades"] == 1
        assert [p["equity"] for p in data["equity_curve"]] == [1050]
        assert data["current_equity"] == 1120
        assert data["lifetime_stats"]["total_trades"] == 3

    def test_falls_back_to_stored_preferences(self, client, store):
        store.save_initial_balance("alice", 500)
        store.save_target("alice", 240)
        resp = client.post(
            "/api/analytics/dashboard",
            json={"trades": WEEK, "now": NOW, "user": "alice"},
        )
        data = resp.json()
        assert data["initial_balance"] == 500
        assert data["current_equity"] == 620
        assert data["target"] == 240
        assert data["target_progress_pct"] == 50.0

    def test_goals_in_request(self, client):
        resp = client.post(
            "/api/analytics/dashboard",
            json={"trades": WEEK, "now": NOW, "goals": {"daily": 25, "weekly": 240}},
        )
        goals = {g["period"]: g for g in resp.json()["goals"]}
        assert goals["daily"]["reached"] is True
        assert goals["weekly"]["percentage"] == 50.0
        assert goals["monthly"]["applicable"] is False

    def test_malformed_records_reported(self, client):
        trades = WEEK + [{"_id": "bad", "date": "2024-01-03T13:00:00Z", "amount": -5, "type": "profit"}]
        resp = client.post("/api/analytics/dashboard", json={"trades": trades, "now": NOW})
        data = resp.json()
        assert resp.status_code == 200
        assert data["stats"]["total_trades"] == 3
        assert [r["index"] for r in data["rejected"]] == [3]

    def test_strict_rejects_request(self, client):
        trades = WEEK + [{"_id": "bad", "date": "nope", "amount": 5, "type": "profit"}]
        resp = client.post(
            "/api/analytics/dashboard",
            json={"trades": trades, "now": NOW, "strict": True},
        )
        assert resp.status_code == 422
        assert resp.json()["detail"]["rejected"][0]["index"] == 3

    def test_empty_history(self, client):
        resp = client.post(
            "/api/analytics/dashboard",
            json={"trades": [], "now": NOW, "initial_balance": 1000},
        )
        data = resp.json()
        assert data["current_equity"] == 1000
        assert data["equity_curve"] == []
        assert data["drawdown"]["max_drawdown"] == 0
        assert data["streaks"]["daily"] == 0


class TestEquityCurveAndStreaks:
    def test_equity_curve(self, client):
        resp = client.post(
            "/api/analytics/equity-curve",
            json={"trades": WEEK, "now": NOW, "initial_balance": 1000, "window": "weekly"},
        )
        data = resp.json()
        assert data["final_equity"] == 1120
        assert [p["net"] for p in data["points"]] == [100, -30, 50]

    def test_streaks(self, client):
        resp = client.post("/api/analytics/streaks", json={"trades": WEEK})
        assert resp.json() == {
            "daily": 1,
            "weekly": 1,
            "monthly": 1,
            "longest_daily": 1,
            "rejected": [],
        }

    @pytest.mark.parametrize(
        "path",
        ["/api/analytics/dashboard", "/api/analytics/equity-curve", "/api/analytics/streaks"],
    )
    def test_rejected_records_alerted(self, client, path):
        trades = WEEK + [{"_id": "bad", "date": "2024-01-03T13:00:00Z", "amount": True, "type": "profit"}]
        with patch.object(analytics_api._alerts, "data_integrity", new_callable=AsyncMock) as mock_alert:
            resp = client.post(path, json={"trades": trades, "now": NOW, "user": "alice"})
        assert resp.status_code == 200
        user, rejected = mock_alert.call_args.args
        assert user == "alice"
        assert [m.index for m in rejected] == [3]


class TestMilestonesApi:
    def test_evaluate_unlocks_and_persists(self, client, store):
        resp = client.post("/api/milestones/evaluate", json={"user": "alice", "trades": WEEK})
        data = resp.json()
        assert [m["id"] for m in data["newly_unlocked"]] == ["first_trade"]
        assert data["unlocked_count"] == 1
        assert store.load_unlocked("alice") == {"first_trade"}

    def test_repeat_snapshot_skipped(self, client):
        client.post("/api/milestones/evaluate", json={"user": "alice", "trades": WEEK})
        resp = client.post("/api/milestones/evaluate", json={"user": "alice", "trades": WEEK})
        assert resp.json()["newly_unlocked"] == []
        assert resp.json()["unlocked_count"] == 1

    def test_list_awards(self, client, store):
        store.save_unlocked("bob", ["first_trade", "streak_3"])
        data = client.get("/api/milestones/bob").json()
        assert data["unlocked_count"] == 2
        assert data["total"] == 6

    def test_user_required(self, client):
        resp = client.post("/api/milestones/evaluate", json={"trades": WEEK})
        assert resp.status_code == 422

    def test_trackers_bounded(self, client, store, monkeypatch):
        monkeypatch.setattr(milestones_api, "MAX_TRACKERS", 2)
        for user in ("alice", "bob", "carol"):
            client.post("/api/milestones/evaluate", json={"user": user, "trades": WEEK})
        assert list(milestones_api._trackers) == ["bob", "carol"]
        assert store.load_unlocked("alice") == {"first_trade"}



class TestPreferencesApi:
    def test_goals(self, client):
        assert client.get("/api/preferences/alice/goals").json()["daily"] == 0
        resp = client.put("/api/preferences/alice/goals", json={"daily": 50, "weekly": 250})
        assert resp.status_code == 200
        assert client.get("/api/preferences/alice/goals").json()["weekly"] == 250

    def test_negative_goal_rejected(self, client):
        resp = client.put("/api/preferences/alice/goals", json={"daily": -1})
        assert resp.status_code == 422

    def test_initial_balance(self, client):
        client.put("/api/preferences/alice/initial-balance", json={"balance": 2500})
        assert client.get("/api/preferences/alice/initial-balance").json() == {"balance": 2500}

    def test_target(self, client):
        assert client.put("/api/preferences/alice/target", json={"target": -10}).status_code == 422
        client.put("/api/preferences/alice/target", json={"target": 600})
        assert client.get("/api/preferences/alice/target").json() == {"target": 600}


class TestToolsApi:
    def test_sessions(self, client):
        resp = client.get("/api/tools/sessions", params={"at": "2024-01-03T14:00:00Z"})
        data = resp.json()
        assert data["overlap"] == ["London", "New York"]
        assert len(data["sessions"]) == 4

    def test_pips(self, client):
        resp = client.post(
            "/api/tools/pips",
            json={"entry_price": 150.0, "exit_price": 150.5, "lot_size": 1, "symbol": "USDJPY"},
        )
        assert resp.json() == {"pips": 50.0, "profit": 50.0, "points": None}

    def test_pips_rejects_zero_price(self, client):
        resp = client.post("/api/tools/pips", json={"entry_price": 0, "exit_price": 1.1})
        assert resp.status_code == 422
