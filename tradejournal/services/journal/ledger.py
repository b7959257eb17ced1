"""Partial exit ledger.

Percentages are always of the ORIGINAL size, so 25% + 25% + 50% closes the
whole position whatever order the exits happen in. A 100% exit always closes
what is left, even if earlier percentages do not add up cleanly.
"""

import logging
from dataclasses import replace
from datetime import datetime

from tradejournal.services.journal.accounting import (
    UNIT_TOLERANCE,
    compute_dollars,
    is_positive_number,
    round_units,
    to_r_multiple,
)
from tradejournal.services.journal.closure import finalize
from tradejournal.services.journal.errors import (
    InsufficientRemainingSize,
    InvalidPercentage,
    InvalidPositionSize,
    InvalidPrice,
    NothingToClose,
)
from tradejournal.services.journal.types import PartialExit, Trade

logger = logging.getLogger(__name__)

PERCENT_TOLERANCE = 1e-9


def record_partial_exit(
    trade: Trade,
    percentage: float,
    price: float,
    date_time: datetime,
    note: str = "",
) -> Trade:
    """Realize `percentage` of the original size at `price`.

    Returns the next version of the trade. If the exit exhausts the position
    the trade is closed using this exit as the closing event.
    """
    if trade.is_closed:
        raise NothingToClose("Trade is already closed")
    if not is_positive_number(percentage) or percentage > 100:
        raise InvalidPercentage("Percentage must be greater than 0 and at most 100")
    if not is_positive_number(price):
        raise InvalidPrice("Exit price must be a positive number")

    original = trade.position_size_units
    remaining = round_units(trade.remaining_position_size_units)
    if not original or original <= 0:
        raise InvalidPositionSize("Trade has no valid position size")
    if remaining <= 0:
        raise NothingToClose("No position size left to close")

    closing_all = abs(percentage - 100) < PERCENT_TOLERANCE
    units_to_close = remaining if closing_all else percentage / 100 * original
    if units_to_close <= 0:
        raise InvalidPercentage("Percentage does not close any units")
    if units_to_close > remaining + UNIT_TOLERANCE:
        raise InsufficientRemainingSize(remaining / original * 100)

    pnl_dollars = compute_dollars(trade.entry, price, units_to_close, trade.direction)
    exit_ = PartialExit(
        percentage=percentage,
        price=price,
        date_time=date_time,
        note=note or "",
        pnl_dollars=pnl_dollars,
        pnl_r=to_r_multiple(trade, pnl_dollars),
        units=units_to_close,
    )
    partial_exits = [*trade.partial_exits, exit_]
    next_remaining = round_units(remaining - units_to_close)

    logger.info(
        "Partial exit on %s: %.1f%% (%s units) @ %s, %s units left",
        trade.id,
        percentage,
        units_to_close,
        price,
        next_remaining,
    )

    if next_remaining <= UNIT_TOLERANCE:
        total = sum(p.pnl_dollars for p in partial_exits)
        return finalize(trade, price, date_time, note or "", partial_exits, total)

    return replace(
        trade,
        remaining_position_size_units=next_remaining,
        partial_exits=partial_exits,
    )
