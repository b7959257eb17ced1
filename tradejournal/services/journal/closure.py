"""Closure resolver: the single place a trade becomes Closed."""

import logging
from dataclasses import replace
from datetime import datetime

from tradejournal.services.journal.accounting import (
    UNIT_TOLERANCE,
    compute_dollars,
    final_pnl,
    is_positive_number,
    round_units,
)
from tradejournal.services.journal.errors import (
    InvalidPrice,
    MissingClosingNote,
    NothingToClose,
)
from tradejournal.services.journal.types import PartialExit, Trade, TradeStatus

logger = logging.getLogger(__name__)


def finalize(
    trade: Trade,
    exit_price: float,
    exit_datetime: datetime,
    closing_note: str,
    partial_exits: list[PartialExit],
    total_realized_dollars: float,
) -> Trade:
    """Build the Closed version of `trade` from an already-validated closing event."""
    pnl = final_pnl(trade, total_realized_dollars)
    closed = replace(
        trade,
        status=TradeStatus.CLOSED,
        exit_price=exit_price,
        exit_datetime=exit_datetime,
        closing_note=closing_note,
        pnl=pnl,
        remaining_position_size_units=0.0,
        partial_exits=list(partial_exits),
    )
    logger.info(
        "Trade %s closed @ %s: %.2f (%.2fR)",
        trade.id,
        exit_price,
        pnl.dollars,
        pnl.r_multiple,
    )
    return closed


def close_full(
    trade: Trade, exit_price: float, exit_datetime: datetime, closing_note: str
) -> Trade:
    """Close whatever size remains at `exit_price`.

    Realized P&L of earlier partial exits is added to the final slice; the
    result is reported against the original size and risk.
    """
    if trade.is_closed:
        raise NothingToClose("Trade is already closed")
    if not is_positive_number(exit_price):
        raise InvalidPrice("Exit price must be a positive number")
    if not closing_note or not closing_note.strip():
        raise MissingClosingNote("A closing note is required to fully close a trade")

    units_to_close = round_units(trade.remaining_position_size_units)
    if units_to_close <= UNIT_TOLERANCE:
        raise NothingToClose("No position size left to close")

    slice_dollars = compute_dollars(trade.entry, exit_price, units_to_close, trade.direction)
    total = sum(p.pnl_dollars for p in trade.partial_exits) + slice_dollars
    return finalize(trade, exit_price, exit_datetime, closing_note, trade.partial_exits, total)
