"""Shared service singletons, injected with Depends so tests can override them."""

from tradejournal.services.ai.coach import TradeCoach
from tradejournal.services.journal.service import JournalService
from tradejournal.services.repository import (
    ChatRepository,
    SqlChatRepository,
    SqlProfileRepository,
    SqlTradeRepository,
)

_journal: JournalService | None = None
_chat_repository: ChatRepository | None = None
_coach: TradeCoach | None = None


def get_journal_service() -> JournalService:
    global _journal
    if _journal is None:
        _journal = JournalService(SqlTradeRepository(), SqlProfileRepository())
    return _journal


def get_chat_repository() -> ChatRepository:
    global _chat_repository
    if _chat_repository is None:
        _chat_repository = SqlChatRepository()
    return _chat_repository


def get_coach() -> TradeCoach:
    global _coach
    if _coach is None:
        _coach = TradeCoach()
    return _coach
