"""Persistence contracts for the journal and their implementations.

The core only ever sees whole collections: load everything, compute the next
collection, save everything. Every read goes through the normalizers in
``services.journal.normalize`` so older or damaged payloads still load.
"""

import logging
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import delete, select

from tradejournal.database import async_session
from tradejournal.models import ChatMessageRecord, ProfileRecord, TradeRecord
from tradejournal.models.profile import PROFILE_ROW_ID
from tradejournal.services.journal.normalize import (
    normalize_chat,
    normalize_profile,
    normalize_trade,
    profile_to_dict,
    to_jsonable,
    trade_to_dict,
)
from tradejournal.services.journal.types import ChatMessage, Trade, UserProfile

logger = logging.getLogger(__name__)


class TradeRepository(Protocol):
    async def load(self) -> list[Trade]: ...

    async def save(self, trades: list[Trade]) -> None: ...


class ProfileRepository(Protocol):
    async def load(self) -> UserProfile | None: ...

    async def save(self, profile: UserProfile) -> None: ...


class ChatRepository(Protocol):
    async def load(self) -> list[ChatMessage]: ...

    async def save(self, messages: list[ChatMessage]) -> None: ...


class SqlTradeRepository:
    """Trades as JSON payload rows, one per trade, ordered by journal position."""

    def __init__(self, session_factory=None) -> None:
        self._session_factory = session_factory or async_session

    async def load(self) -> list[Trade]:
        async with self._session_factory() as session:
            result = await session.execute(select(TradeRecord).order_by(TradeRecord.position.asc()))
            rows = result.scalars().all()
        return [normalize_trade(row.payload) for row in rows]

    async def save(self, trades: list[Trade]) -> None:
        now = datetime.now(timezone.utc)
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(delete(TradeRecord))
                session.add_all(
                    TradeRecord(
                        id=trade.id,
                        position=i,
                        asset=trade.asset[:40],
                        status=trade.status.value,
                        payload=trade_to_dict(trade),
                        updated_at=now,
                    )
                    for i, trade in enumerate(trades)
                )
        logger.debug("Saved %d trades", len(trades))


class SqlProfileRepository:
    def __init__(self, session_factory=None) -> None:
        self._session_factory = session_factory or async_session

    async def load(self) -> UserProfile | None:
        async with self._session_factory() as session:
            row = await session.get(ProfileRecord, PROFILE_ROW_ID)
        if row is None:
            return None
        return normalize_profile(row.payload)

    async def save(self, profile: UserProfile) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.merge(
                    ProfileRecord(
                        id=PROFILE_ROW_ID,
                        payload=profile_to_dict(profile),
                        updated_at=datetime.now(timezone.utc),
                    )
                )


class SqlChatRepository:
    def __init__(self, session_factory=None) -> None:
        self._session_factory = session_factory or async_session

    async def load(self) -> list[ChatMessage]:
        async with self._session_factory() as session:
            result = await session.execute(select(ChatMessageRecord).order_by(ChatMessageRecord.id.asc()))
            rows = result.scalars().all()
        return [ChatMessage(role=row.role, content=row.content, timestamp=row.sent_at) for row in rows]

    async def save(self, messages: list[ChatMessage]) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(delete(ChatMessageRecord))
                session.add_all(
                    ChatMessageRecord(role=m.role, content=m.content, sent_at=m.timestamp)
                    for m in messages
                )


class InMemoryTradeRepository:
    """Keeps serialized payloads so reads go through the same normalization as SQL."""

    def __init__(self, payloads: list[dict] | None = None) -> None:
        self.payloads: list[dict] = list(payloads or [])

    async def load(self) -> list[Trade]:
        return [normalize_trade(p) for p in self.payloads]

    async def save(self, trades: list[Trade]) -> None:
        self.payloads = [trade_to_dict(t) for t in trades]


class InMemoryProfileRepository:
    def __init__(self, payload: dict | None = None) -> None:
        self.payload = payload

    async def load(self) -> UserProfile | None:
        if self.payload is None:
            return None
        return normalize_profile(self.payload)

    async def save(self, profile: UserProfile) -> None:
        self.payload = profile_to_dict(profile)


class InMemoryChatRepository:
    def __init__(self, payloads: list[dict] | None = None) -> None:
        self.payloads: list[dict] = list(payloads or [])

    async def load(self) -> list[ChatMessage]:
        return normalize_chat(self.payloads)

    async def save(self, messages: list[ChatMessage]) -> None:
        self.payloads = [
            {"role": m.role, "content": m.content, "timestamp": to_jsonable(m.timestamp)}
            for m in messages
        ]
