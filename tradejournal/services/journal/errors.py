"""Journal error taxonomy.

Every validation runs before a trade is touched, so catching one of these
means nothing changed.
"""


class JournalError(Exception):
    """Base class for all journal errors."""


class TradeValidationError(JournalError, ValueError):
    """User input that has to be corrected and resubmitted."""


class InvalidPrice(TradeValidationError):
    pass


class InvalidStopLoss(TradeValidationError):
    pass


class InvalidTakeProfit(TradeValidationError):
    pass


class InvalidPercentage(TradeValidationError):
    pass


class InvalidPositionSize(TradeValidationError):
    pass


class MissingClosingNote(TradeValidationError):
    pass


class NothingToClose(TradeValidationError):
    pass


class InsufficientRemainingSize(TradeValidationError):
    """Requested more units than remain. Reports what is still available."""

    def __init__(self, available_pct: float) -> None:
        self.available_pct = available_pct
        super().__init__(f"Only {available_pct:.1f}% available")


class TradeNotFound(JournalError, LookupError):
    def __init__(self, trade_id: str) -> None:
        self.trade_id = trade_id
        super().__init__(f"Trade {trade_id} not found")


class PersistenceUnavailable(JournalError):
    """The result was computed but could not be saved.

    `trade` holds the unsaved result so the caller can show it while telling
    the user it was not persisted.
    """

    def __init__(self, message: str, trade=None) -> None:
        self.trade = trade
        super().__init__(message)
