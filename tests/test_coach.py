"""Tests for the AI coach: prompt building, caching and fallbacks."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tradejournal.services.ai.coach import (
    CHAT_FALLBACK,
    CHAT_UNAVAILABLE,
    COACH_UNAVAILABLE,
    NOTES_EMPTY,
    NOTES_FALLBACK,
    TradeCoach,
    _to_api_messages,
)
from tradejournal.services.journal.types import (
    ChatMessage,
    Direction,
    Trade,
    TradePnL,
    TradeStatus,
    UserProfile,
)


class FakeCache:
    def __init__(self, stored: dict | None = None) -> None:
        self.stored = dict(stored or {})

    async def get(self, trade_id: str) -> str | None:
        return self.stored.get(trade_id)

    async def set(self, trade_id: str, notes: str) -> None:
        self.stored[trade_id] = notes


def make_response(text: str) -> MagicMock:
    response = MagicMock()
    response.content = [MagicMock(text=text)]
    return response


def make_coach(cache=None, response=None, error=None) -> TradeCoach:
    coach = TradeCoach(cache=cache or FakeCache())
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=response, side_effect=error)
    coach._client = client
    return coach


@pytest.fixture
def trade() -> Trade:
    return Trade(
        id="t-1",
        asset="SOL/USDT",
        direction=Direction.LONG,
        quality_score=6.2,
        alerts_triggered=["No chart attached."],
        status=TradeStatus.CLOSED,
        pnl=TradePnL(dollars=-40.0, percent=-0.4, r_multiple=-0.4),
    )


class TestTradeNotes:
    @pytest.mark.asyncio
    async def test_notes_cached_after_call(self, trade, profile):
        cache = FakeCache()
        coach = make_coach(cache=cache, response=make_response("  Keep the stop.  "))
        assert await coach.trade_notes(trade, profile) == "Keep the stop."
        assert cache.stored["t-1"] == "Keep the stop."

        prompt = coach._client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert "SOL/USDT" in prompt
        assert "No chart attached." in prompt
        assert "-0.40R" in prompt

    @pytest.mark.asyncio
    async def test_cache_hit_skips_api(self, trade, profile):
        coach = make_coach(cache=FakeCache({"t-1": "cached notes"}))
        assert await coach.trade_notes(trade, profile) == "cached notes"
        coach._client.messages.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_api_error_falls_back(self, trade, profile):
        coach = make_coach(error=RuntimeError("overloaded"))
        assert await coach.trade_notes(trade, profile) == NOTES_FALLBACK

    @pytest.mark.asyncio
    async def test_empty_response(self, trade, profile):
        cache = FakeCache()
        coach = make_coach(cache=cache, response=MagicMock(content=[]))
        assert await coach.trade_notes(trade, profile) == NOTES_EMPTY
        assert cache.stored == {}

    @pytest.mark.asyncio
    async def test_no_api_key(self, trade, profile):
        with patch("tradejournal.services.ai.coach.settings") as mock_settings:
            mock_settings.anthropic_api_key = ""
            coach = TradeCoach(cache=FakeCache())
            assert await coach.trade_notes(trade, profile) == COACH_UNAVAILABLE


class TestChat:
    @pytest.mark.asyncio
    async def test_chat_sends_stats_context(self, trade, profile):
        coach = make_coach(response=make_response("Quick diagnosis: fine."))
        history = [ChatMessage(role="assistant", content="Welcome"), ChatMessage(role="user", content="hi")]
        reply = await coach.chat(history, "How am I doing?", profile, [trade])
        assert reply == "Quick diagnosis: fine."

        kwargs = coach._client.messages.create.call_args.kwargs
        assert "Closed trades: 1" in kwargs["system"]
        assert "Win rate: 0.0%" in kwargs["system"]
        assert kwargs["messages"][0] == {"role": "user", "content": "hi"}
        assert kwargs["messages"][-1] == {"role": "user", "content": "How am I doing?"}

    @pytest.mark.asyncio
    async def test_chat_error(self, profile):
        coach = make_coach(error=RuntimeError("timeout"))
        assert await coach.chat([], "hello", profile, []) == CHAT_FALLBACK

    @pytest.mark.asyncio
    async def test_chat_without_key(self):
        with patch("tradejournal.services.ai.coach.settings") as mock_settings:
            mock_settings.anthropic_api_key = ""
            assert await TradeCoach(cache=FakeCache()).chat([], "hello", UserProfile(), []) == CHAT_UNAVAILABLE


class TestApiMessages:
    def test_drops_leading_assistant_and_empty(self):
        history = [
            ChatMessage(role="assistant", content="Hello, I am your coach"),
            ChatMessage(role="user", content=""),
            ChatMessage(role="user", content="first"),
            ChatMessage(role="assistant", content="answer"),
        ]
        assert _to_api_messages(history, "next") == [
            {"role": "user", "content": "first"},
            {"role": "assistant", "content": "answer"},
            {"role": "user", "content": "next"},
        ]
