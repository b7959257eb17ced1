"""Tests for the HTTP API, wired to in-memory repositories."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from tradejournal.api.deps import get_chat_repository, get_coach, get_journal_service
from tradejournal.main import app
from tradejournal.services.ai.coach import COACH_UNAVAILABLE
from tradejournal.services.journal.service import JournalService
from tradejournal.services.repository import InMemoryTradeRepository

ACCOUNT_ID = "acc-main"

TRADE_BODY = {
    "account_id": ACCOUNT_ID,
    "market": "forex",
    "asset": "EURUSD",
    "direction": "long",
    "trade_datetime": "2026-03-04T14:30:00Z",
    "setup": "Pullback",
    "macro_trend": {"macro": "bullish", "micro": "bullish"},
    "thesis": "Pullback into the daily demand zone",
    "images": [{"data": "aGVsbG8=", "name": "chart.png", "content_type": "image/png"}],
    "risk_r": 1.0,
    "entry": 100.0,
    "stop_loss": 90.0,
    "take_profits": [120.0],
    "mental_state": "Calm",
    "motive": "Following my plan",
}


@pytest.fixture
def journal(trade_repo, profile_repo) -> JournalService:
    return JournalService(trade_repo, profile_repo)


@pytest.fixture
def coach():
    mock = MagicMock()
    mock.trade_notes = AsyncMock(return_value="Solid plan, respect the stop.")
    mock.chat = AsyncMock(return_value="Quick diagnosis: you are fine.")
    return mock


@pytest.fixture
def client(journal, chat_repo, coach):
    app.dependency_overrides[get_journal_service] = lambda: journal
    app.dependency_overrides[get_chat_repository] = lambda: chat_repo
    app.dependency_overrides[get_coach] = lambda: coach
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_trade(client, **overrides) -> dict:
    resp = client.post("/api/trades/", json={**TRADE_BODY, **overrides})
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestTradeEndpoints:
    def test_create(self, client):
        data = create_trade(client)
        assert data["status"] == "Open"
        assert data["position_size_units"] == pytest.approx(10)
        assert data["remaining_pct"] == 100
        assert data["rr"] == pytest.approx(2.0)
        # RR +0.2, trend aligned +0.2, setup +0.1, calm +0.1
        assert data["quality_score"] == pytest.approx(7.6)
        assert data["execution_quality"] == "B"
        assert data["trade_datetime"].startswith("2026-03-04T14:30:00")

    def test_create_invalid_stop(self, client):
        resp = client.post("/api/trades/", json={**TRADE_BODY, "stop_loss": 110.0})
        assert resp.status_code == 422
        assert resp.json()["error"] == "InvalidStopLoss"

    def test_create_bad_enum(self, client):
        resp = client.post("/api/trades/", json={**TRADE_BODY, "direction": "sideways"})
        assert resp.status_code == 422

    def test_list_and_get(self, client):
        first = create_trade(client)
        create_trade(client, asset="GBPUSD", trade_datetime="2026-03-05T09:00:00Z")

        resp = client.get("/api/trades/", params={"asset": "eur"})
        assert [t["id"] for t in resp.json()["trades"]] == [first["id"]]

        resp = client.get("/api/trades/", params={"limit": 1})
        assert resp.json()["trades"][0]["asset"] == "GBPUSD"

        resp = client.get(f"/api/trades/{first['id']}")
        assert resp.status_code == 200
        assert resp.json()["asset"] == "EURUSD"

    def test_get_missing(self, client):
        resp = client.get("/api/trades/nope")
        assert resp.status_code == 404
        assert resp.json()["error"] == "TradeNotFound"

    def test_partial_then_close(self, client):
        trade = create_trade(client)
        resp = client.post(
            f"/api/trades/{trade['id']}/partial-close", json={"percentage": 50, "price": 105, "note": "TP1"}
        )
        assert resp.status_code == 200
        assert resp.json()["remaining_pct"] == pytest.approx(50)
        assert resp.json()["realized_dollars"] == pytest.approx(25)

        resp = client.post(f"/api/trades/{trade['id']}/partial-close", json={"percentage": 60, "price": 108})
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Only 50.0% available"

        resp = client.post(
            f"/api/trades/{trade['id']}/close", json={"exit_price": 110, "closing_note": "Runner hit target"}
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "Closed"
        assert body["pnl"]["r_multiple"] == pytest.approx(0.75)
        assert body["remaining_position_size_units"] == 0

    def test_close_requires_note(self, client):
        trade = create_trade(client)
        resp = client.post(f"/api/trades/{trade['id']}/close", json={"exit_price": 110})
        assert resp.status_code == 422
        assert resp.json()["error"] == "MissingClosingNote"
        assert client.get(f"/api/trades/{trade['id']}").json()["status"] == "Open"

    def test_non_finite_close_price_rejected(self, client):
        trade = create_trade(client)
        resp = client.post(
            f"/api/trades/{trade['id']}/close",
            content='{"exit_price": 1e999, "closing_note": "x"}',
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 422
        assert resp.json()["error"] == "RequestValidationError"
        assert client.get(f"/api/trades/{trade['id']}").json()["status"] == "Open"

    @pytest.mark.parametrize("body", [{"percentage": 50, "price": "abc"}, {"percentage": 50, "price": -1}])
    def test_bad_partial_price_rejected(self, client, body):
        trade = create_trade(client)
        resp = client.post(f"/api/trades/{trade['id']}/partial-close", json=body)
        assert resp.status_code == 422
        assert client.get(f"/api/trades/{trade['id']}").json()["remaining_pct"] == 100

    def test_nan_entry_rejected(self, client):
        body = '{"entry": NaN, "stop_loss": 90, "take_profits": [120], "asset": "EURUSD"}'
        resp = client.post("/api/trades/", content=body, headers={"Content-Type": "application/json"})
        assert resp.status_code == 422
        assert client.get("/api/trades/").json()["trades"] == []

    def test_persistence_failure_returns_trade(self, client, journal):
        journal._repository = InMemoryTradeRepository()
        journal._repository.save = AsyncMock(side_effect=OSError("read-only"))
        resp = client.post("/api/trades/", json=TRADE_BODY)
        assert resp.status_code == 503
        assert resp.json()["error"] == "PersistenceUnavailable"
        assert resp.json()["trade"]["asset"] == "EURUSD"


class TestAnalyticsEndpoints:
    def test_summary_and_equity(self, client):
        trade = create_trade(client)
        client.post(f"/api/trades/{trade['id']}/close", json={"exit_price": 110, "closing_note": "done"})

        summary = client.get("/api/analytics/summary").json()
        assert summary["total_trades"] == 1
        assert summary["total_pnl"] == pytest.approx(100)

        equity = client.get("/api/analytics/equity", params={"mode": "r"}).json()
        assert equity["points"][-1]["value"] == pytest.approx(1.0)

    def test_bad_equity_mode(self, client):
        assert client.get("/api/analytics/equity", params={"mode": "pips"}).status_code == 422

    def test_export(self, client):
        create_trade(client)
        resp = client.get("/api/analytics/export.csv", params={"include_open": True})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert resp.text.splitlines()[0].startswith("ID,Date,Asset")
        assert len(resp.text.strip().splitlines()) == 2


    def test_export_json(self, client):
        trade = create_trade(client)
        resp = client.get("/api/analytics/export.json")
        assert resp.status_code == 200
        assert resp.json() == []

        resp = client.get("/api/analytics/export.json", params={"include_open": True})
        assert "trades_export.json" in resp.headers["content-disposition"]
        records = resp.json()
        assert [r["id"] for r in records] == [trade["id"]]
        assert records[0]["thesis"] == TRADE_BODY["thesis"]
        assert records[0]["quality_score"] == pytest.approx(7.6)


class TestCatalogEndpoint:
    def test_vocabularies(self, client):
        data = client.get("/api/catalog").json()
        assert "Pullback" in data["setups"]["all"]
        assert data["setups"]["other"] in data["setups"]["all"]
        assert set(data["setups"]["negative"]) <= set(data["setups"]["all"])
        assert data["motives"]["default"] == "No motive"
        assert "Revenge" in data["mental_states"]["critical"]
        assert "Daily" in data["timeframes"]
        assert "forex" in data["assets"]


class TestProfileEndpoints:
    def test_get_and_put(self, client):
        assert client.get("/api/profile").json()["accounts"][0]["id"] == ACCOUNT_ID

        resp = client.put("/api/profile", json={"name": "New", "trader_style": "SwingTrader", "accounts": []})
        assert resp.status_code == 200
        assert resp.json()["trader_style"] == "SwingTrader"
        assert client.get("/api/profile").json()["name"] == "New"


class TestCoachEndpoints:
    def test_trade_notes(self, client, coach):
        trade = create_trade(client)
        resp = client.post(f"/api/coach/trades/{trade['id']}/notes")
        assert resp.json()["notes"] == "Solid plan, respect the stop."
        coach.trade_notes.assert_awaited_once()

    def test_notes_saved_on_trade(self, client, coach):
        trade = create_trade(client)
        first = client.post(f"/api/coach/trades/{trade['id']}/notes").json()
        assert first["saved"] is True

        second = client.post(f"/api/coach/trades/{trade['id']}/notes").json()
        assert second["notes"] == first["notes"]
        coach.trade_notes.assert_awaited_once()

        stored = client.get(f"/api/trades/{trade['id']}").json()
        assert stored["coach_notes"] == "Solid plan, respect the stop."

    def test_unavailable_coach_not_saved(self, client, coach):
        coach.trade_notes = AsyncMock(return_value=COACH_UNAVAILABLE)
        trade = create_trade(client)
        resp = client.post(f"/api/coach/trades/{trade['id']}/notes").json()
        assert resp["saved"] is False
        assert client.get(f"/api/trades/{trade['id']}").json()["coach_notes"] is None

        client.post(f"/api/coach/trades/{trade['id']}/notes")
        assert coach.trade_notes.await_count == 2

    def test_chat_appends_history(self, client, chat_repo):
        resp = client.post("/api/coach/chat", json={"message": "I keep moving my stop"})
        assert resp.status_code == 200
        assert resp.json()["reply"].startswith("Quick diagnosis")
        assert [m["role"] for m in chat_repo.payloads] == ["user", "assistant"]

        history = client.get("/api/coach/history").json()["messages"]
        assert history[0]["content"] == "I keep moving my stop"

    def test_empty_chat_message_rejected(self, client):
        assert client.post("/api/coach/chat", json={"message": ""}).status_code == 422


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
