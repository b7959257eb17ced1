"""Journal service: load the collection, compute the next one, persist it.

Validation errors propagate untouched (nothing was saved and nothing needs
to be). A missing or failing repository surfaces as PersistenceUnavailable
carrying the computed trade, never as a silent success.
"""

import logging
from dataclasses import replace
from datetime import datetime

from tradejournal.config import settings
from tradejournal.services.journal.closure import close_full
from tradejournal.services.journal.errors import PersistenceUnavailable, TradeNotFound
from tradejournal.services.journal.ledger import record_partial_exit
from tradejournal.services.journal.lifecycle import last_closed_trades, open_trade
from tradejournal.services.journal.types import Trade, UserProfile
from tradejournal.services.repository import ProfileRepository, TradeRepository

logger = logging.getLogger(__name__)


class JournalService:
    """Entry point for every trade mutation.

    Single user, single writer: each mutation is a whole-collection replace.
    Multi-device sync would need a per-trade version check here.
    """

    def __init__(
        self,
        repository: TradeRepository | None,
        profiles: ProfileRepository | None = None,
        *,
        trades: list[Trade] | None = None,
        history_window: int | None = None,
    ) -> None:
        self._repository = repository
        self._profiles = profiles
        self._trades = list(trades or [])  # working copy when no repository is wired
        self._history_window = history_window or settings.history_window

    async def list_trades(self) -> list[Trade]:
        if self._repository is None:
            return list(self._trades)
        return await self._repository.load()

    async def get_trade(self, trade_id: str) -> Trade:
        return _find(await self.list_trades(), trade_id)

    async def recent_closed(self) -> list[Trade]:
        return last_closed_trades(await self.list_trades(), self._history_window)

    async def get_profile(self) -> UserProfile:
        if self._profiles is None:
            return UserProfile()
        return await self._profiles.load() or UserProfile()

    async def save_profile(self, profile: UserProfile) -> UserProfile:
        if self._profiles is None:
            raise PersistenceUnavailable("Profile repository is not configured")
        try:
            await self._profiles.save(profile)
        except Exception as e:
            logger.error("Failed to save profile: %s", e)
            raise PersistenceUnavailable(f"Could not save profile: {e}") from e
        return profile

    async def open_trade(self, draft: Trade) -> Trade:
        trades = await self.list_trades()
        profile = await self.get_profile()
        trade = open_trade(draft, profile, last_closed_trades(trades, self._history_window))
        await self._persist([*trades, trade], trade)
        return trade

    async def record_partial_exit(
        self,
        trade_id: str,
        percentage: float,
        price: float,
        date_time: datetime,
        note: str = "",
    ) -> Trade:
        trades = await self.list_trades()
        current = _find(trades, trade_id)
        updated = record_partial_exit(current, percentage, price, date_time, note)
        await self._persist(_replace_in(trades, updated), updated)
        return updated

    async def close_trade(
        self, trade_id: str, exit_price: float, exit_datetime: datetime, closing_note: str
    ) -> Trade:
        trades = await self.list_trades()
        current = _find(trades, trade_id)
        updated = close_full(current, exit_price, exit_datetime, closing_note)
        await self._persist(_replace_in(trades, updated), updated)
        return updated

    async def save_coach_notes(self, trade_id: str, notes: str) -> Trade:
        """Attach coach feedback to a trade. Scoring fields are left untouched."""
        trades = await self.list_trades()
        updated = replace(_find(trades, trade_id), coach_notes=notes)
        await self._persist(_replace_in(trades, updated), updated)
        return updated

    async def _persist(self, trades: list[Trade], changed: Trade) -> None:
        if self._repository is None:
            # Working copy still advances so the next operation sees this result
            self._trades = list(trades)
            raise PersistenceUnavailable("Trade repository is not configured", trade=changed)
        try:
            await self._repository.save(trades)
        except Exception as e:
            logger.error("Failed to save trade %s: %s", changed.id, e)
            raise PersistenceUnavailable(f"Could not save trade: {e}", trade=changed) from e


def _find(trades: list[Trade], trade_id: str) -> Trade:
    for trade in trades:
        if trade.id == trade_id:
            return trade
    raise TradeNotFound(trade_id)


def _replace_in(trades: list[Trade], updated: Trade) -> list[Trade]:
    return [updated if t.id == updated.id else t for t in trades]
