"""SQLAlchemy models for the trading journal."""

from tradejournal.models.chat import ChatMessageRecord
from tradejournal.models.profile import ProfileRecord
from tradejournal.models.trade import TradeRecord

__all__ = ["ChatMessageRecord", "ProfileRecord", "TradeRecord"]
