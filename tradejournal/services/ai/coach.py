"""AI trading coach backed by Claude.

Opaque text-in, text-out collaborator: the journal never depends on what it
says. Per-trade notes are cached in Redis so reopening a trade does not call
the API again. Without an API key, or when the call fails, a fixed fallback
text is returned instead of raising.
"""

import logging
from typing import Protocol

import anthropic
import redis.asyncio as aioredis

from tradejournal.config import settings
from tradejournal.services.analytics import compute_performance
from tradejournal.services.journal.types import ChatMessage, Trade, UserProfile

logger = logging.getLogger(__name__)

REDIS_KEY_NOTES = "tradejournal:coach_notes:{trade_id}"

NOTES_SYSTEM_PROMPT = """You are the trading coach inside a personal trading journal.
Your tone is professional and brief.
Review the given trade with a focus on trading psychology and risk management.
Never give trade signals. Three sentences at most."""

CHAT_SYSTEM_PROMPT = """You are the trading coach inside a personal trading journal.
Your role is psychological and process coaching.
You do NOT give signals, you do NOT analyse live charts, you do NOT make predictions.

MANDATORY RESPONSE FORMAT:
1) Quick diagnosis
2) What matters most right now
3) Smallest next action
4) A question back to the trader

RULES:
Professional, empathetic, chat-style tone
At most 10 lines"""

COACH_UNAVAILABLE = "AI coach is not available in this environment."
NOTES_FALLBACK = "Could not reach the AI coach."
NOTES_EMPTY = "No feedback available."
CHAT_UNAVAILABLE = (
    "Quick diagnosis: AI coach is disabled.\n"
    "What matters most right now: no API key is configured.\n"
    "Smallest next action: set ANTHROPIC_API_KEY and try again."
)
CHAT_FALLBACK = (
    "Quick diagnosis: connection error.\n"
    "What matters most right now: stay calm.\n"
    "Smallest next action: send the message again."
)
CHAT_EMPTY = "The response could not be processed."

# Fixed texts returned instead of real feedback; never stored on a trade
NOTES_PLACEHOLDERS = frozenset({COACH_UNAVAILABLE, NOTES_FALLBACK, NOTES_EMPTY})


class NotesCache(Protocol):
    async def get(self, trade_id: str) -> str | None: ...

    async def set(self, trade_id: str, notes: str) -> None: ...


class RedisNotesCache:
    """Coach notes in Redis with a TTL. Redis being down only costs a cache miss."""

    async def get(self, trade_id: str) -> str | None:
        try:
            r = aioredis.from_url(settings.redis_url, decode_responses=True)
            try:
                return await r.get(REDIS_KEY_NOTES.format(trade_id=trade_id))
            finally:
                await r.aclose()
        except Exception as e:
            logger.warning("Redis unavailable for coach notes cache: %s", e)
            return None

    async def set(self, trade_id: str, notes: str) -> None:
        try:
            r = aioredis.from_url(settings.redis_url, decode_responses=True)
            try:
                await r.set(
                    REDIS_KEY_NOTES.format(trade_id=trade_id),
                    notes,
                    ex=settings.coach_cache_ttl_seconds,
                )
            finally:
                await r.aclose()
        except Exception as e:
            logger.warning("Failed to cache coach notes for %s: %s", trade_id, e)


class TradeCoach:
    """Generates coaching text for single trades and for the chat."""

    def __init__(self, cache: NotesCache | None = None) -> None:
        self._client: anthropic.AsyncAnthropic | None = None
        self._cache = cache or RedisNotesCache()

    def _get_client(self) -> anthropic.AsyncAnthropic | None:
        if self._client is None:
            if not settings.anthropic_api_key:
                return None
            self._client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
        return self._client

    async def trade_notes(self, trade: Trade, profile: UserProfile) -> str:
        """Short coaching feedback on one trade."""
        cached = await self._cache.get(trade.id)
        if cached:
            return cached

        client = self._get_client()
        if client is None:
            logger.warning("Coach notes requested but ANTHROPIC_API_KEY is not configured")
            return COACH_UNAVAILABLE

        try:
            response = await client.messages.create(
                model=settings.coach_model,
                max_tokens=settings.coach_max_tokens,
                system=NOTES_SYSTEM_PROMPT,
                messages=[{"role": "user", "content": self._build_trade_prompt(trade, profile)}],
            )
        except Exception as e:
            logger.error("Coach trade analysis failed for %s: %s", trade.id, e)
            return NOTES_FALLBACK

        notes = _response_text(response)
        if not notes:
            return NOTES_EMPTY
        await self._cache.set(trade.id, notes)
        return notes

    async def chat(
        self,
        history: list[ChatMessage],
        message: str,
        profile: UserProfile,
        trades: list[Trade],
    ) -> str:
        """Answer a chat message with the trader's closed-trade stats as context."""
        client = self._get_client()
        if client is None:
            return CHAT_UNAVAILABLE

        system = f"{CHAT_SYSTEM_PROMPT}\n\nREAL CONTEXT:\n{self._build_stats_context(profile, trades)}"
        try:
            response = await client.messages.create(
                model=settings.coach_model,
                max_tokens=settings.coach_max_tokens,
                system=system,
                messages=_to_api_messages(history, message),
            )
        except Exception as e:
            logger.error("Coach chat failed: %s", e)
            return CHAT_FALLBACK

        return _response_text(response) or CHAT_EMPTY

    def _build_trade_prompt(self, trade: Trade, profile: UserProfile) -> str:
        lines = [
            f"Review this {trade.direction.value} trade on {trade.asset} "
            f"(quality {trade.quality_score}/10, grade {trade.execution_quality.value}).",
            f"Trader style: {profile.trader_style.value}.",
            f"Setup: {trade.setup or 'none'}.",
            f"Motive: {trade.motive}.",
            f"Mental state: {trade.mental_state}.",
            f"Risk: {trade.risk_r}% of capital, reward:risk {trade.rr:.2f}.",
        ]
        if trade.alerts_triggered:
            lines.append("Alerts at entry: " + "; ".join(trade.alerts_triggered))
        if trade.is_closed and trade.pnl is not None:
            lines.append(f"Result: {trade.pnl.dollars:.2f} ({trade.pnl.r_multiple:.2f}R).")
        return "\n".join(lines)

    def _build_stats_context(self, profile: UserProfile, trades: list[Trade]) -> str:
        summary = compute_performance(trades)
        markets = ", ".join(m.value for m in profile.primary_markets)
        return "\n".join(
            [
                f"TRADER STATS ({profile.name})",
                f"Style: {profile.trader_style.value}",
                f"Markets: {markets}",
                f"Closed trades: {summary.total_trades}",
                f"Win rate: {summary.win_rate_pct:.1f}%",
                f"Average score: {summary.avg_score:.1f}/10",
                f"Average reward:risk: {summary.avg_rr:.2f}",
                f"Strengths: {', '.join(profile.strengths)}",
                f"Weaknesses: {', '.join(profile.weaknesses)}",
            ]
        )


def _to_api_messages(history: list[ChatMessage], message: str) -> list[dict]:
    """Chat history in API form. The conversation has to open with a user turn."""
    messages = [{"role": m.role, "content": m.content} for m in history if m.content]
    while messages and messages[0]["role"] != "user":
        messages.pop(0)
    messages.append({"role": "user", "content": message})
    return messages


def _response_text(response) -> str:
    if not response.content:
        return ""
    return (response.content[0].text or "").strip()
