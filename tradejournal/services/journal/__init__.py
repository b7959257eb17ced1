"""Trade lifecycle and quality scoring."""

from tradejournal.services.journal.closure import close_full
from tradejournal.services.journal.ledger import record_partial_exit
from tradejournal.services.journal.lifecycle import last_closed_trades, open_trade
from tradejournal.services.journal.scoring import evaluate_quality

__all__ = [
    "close_full",
    "evaluate_quality",
    "last_closed_trades",
    "open_trade",
    "record_partial_exit",
]
