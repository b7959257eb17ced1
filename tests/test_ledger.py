"""Tests for partial exits. Percentages are always of the original size."""

import math
from datetime import datetime, timezone

import pytest

from tradejournal.services.journal.errors import (
    InsufficientRemainingSize,
    InvalidPercentage,
    InvalidPositionSize,
    InvalidPrice,
    NothingToClose,
)
from tradejournal.services.journal.closure import close_full
from tradejournal.services.journal.ledger import record_partial_exit
from tradejournal.services.journal.types import Direction, Trade, TradeStatus

EXIT_TIME = datetime(2026, 3, 5, 10, 0, tzinfo=timezone.utc)


def make_trade(**kwargs) -> Trade:
    """Long 10 units from 100, stop 90: $100 initial risk."""
    defaults = {
        "asset": "EURUSD",
        "entry": 100.0,
        "stop_loss": 90.0,
        "take_profits": [120.0],
        "direction": Direction.LONG,
        "risk_r": 1.0,
        "position_size_units": 10.0,
        "remaining_position_size_units": 10.0,
    }
    defaults.update(kwargs)
    return Trade(**defaults)


class TestPartialExit:
    def test_half_exit(self):
        trade = record_partial_exit(make_trade(), 50, 105, EXIT_TIME, "first target")
        assert trade.status == TradeStatus.OPEN
        assert trade.remaining_position_size_units == pytest.approx(5)
        assert len(trade.partial_exits) == 1
        exit_ = trade.partial_exits[0]
        assert exit_.units == pytest.approx(5)
        assert exit_.pnl_dollars == pytest.approx(25)
        assert exit_.pnl_r == pytest.approx(0.25)
        assert exit_.note == "first target"

    def test_input_trade_not_mutated(self):
        original = make_trade()
        record_partial_exit(original, 50, 105, EXIT_TIME)
        assert original.remaining_position_size_units == 10.0
        assert original.partial_exits == []

    def test_short_partial_exit(self):
        trade = make_trade(direction=Direction.SHORT, stop_loss=110.0, take_profits=[80.0])
        updated = record_partial_exit(trade, 20, 95, EXIT_TIME)
        assert updated.partial_exits[0].pnl_dollars == pytest.approx(10)

    def test_percentage_is_of_original_size(self):
        trade = record_partial_exit(make_trade(), 50, 105, EXIT_TIME)
        trade = record_partial_exit(trade, 25, 106, EXIT_TIME)
        # 25% of 10 units, not 25% of the 5 remaining
        assert trade.partial_exits[1].units == pytest.approx(2.5)
        assert trade.remaining_position_size_units == pytest.approx(2.5)

    def test_over_remaining_rejected(self):
        trade = record_partial_exit(make_trade(), 50, 105, EXIT_TIME)
        with pytest.raises(InsufficientRemainingSize) as exc_info:
            record_partial_exit(trade, 60, 108, EXIT_TIME)
        assert exc_info.value.available_pct == pytest.approx(50.0)
        assert "50.0% available" in str(exc_info.value)

    def test_exits_summing_to_full_size_close_trade(self):
        trade = make_trade()
        for pct, price in ((25, 104), (25, 106), (50, 110)):
            trade = record_partial_exit(trade, pct, price, EXIT_TIME, "scale out")
        assert trade.status == TradeStatus.CLOSED
        assert trade.remaining_position_size_units == 0.0
        assert trade.exit_price == 110
        assert trade.pnl.dollars == pytest.approx(10 + 15 + 50)
        assert trade.pnl.r_multiple == pytest.approx(0.75)

    def test_hundred_percent_closes_remainder(self):
        trade = record_partial_exit(make_trade(), 100 / 3, 105, EXIT_TIME)
        closed = record_partial_exit(trade, 100, 110, EXIT_TIME)
        assert closed.status == TradeStatus.CLOSED
        assert closed.partial_exits[-1].units == pytest.approx(10 - 10 / 3)
        assert closed.remaining_position_size_units == 0.0

    def test_hundred_percent_on_fresh_trade(self):
        closed = record_partial_exit(make_trade(), 100, 90, EXIT_TIME, "stopped")
        assert closed.is_closed
        assert closed.pnl.r_multiple == pytest.approx(-1.0)
        assert closed.closing_note == "stopped"

    def test_thirds_leave_dust_until_full_exit(self):
        trade = make_trade()
        for _ in range(3):
            trade = record_partial_exit(trade, 100 / 3, 105, EXIT_TIME)
        assert 0 <= trade.remaining_position_size_units < 1e-6
        closed = record_partial_exit(trade, 100, 105, EXIT_TIME)
        assert closed.is_closed
        assert closed.remaining_position_size_units == 0.0


class TestPartialExitValidation:
    @pytest.mark.parametrize("pct", [0, -5, 100.5, math.nan, math.inf, "50", None])
    def test_invalid_percentage(self, pct):
        with pytest.raises(InvalidPercentage):
            record_partial_exit(make_trade(), pct, 105, EXIT_TIME)

    @pytest.mark.parametrize("price", [0, -1, math.inf, math.nan, "105", None, True])
    def test_invalid_price(self, price):
        with pytest.raises(InvalidPrice):
            record_partial_exit(make_trade(), 50, price, EXIT_TIME)

    def test_closed_trade(self):
        trade = make_trade(status=TradeStatus.CLOSED, remaining_position_size_units=0.0)
        with pytest.raises(NothingToClose):
            record_partial_exit(trade, 50, 105, EXIT_TIME)

    def test_zero_size_trade(self):
        trade = make_trade(position_size_units=0.0, remaining_position_size_units=0.0)
        with pytest.raises(InvalidPositionSize):
            record_partial_exit(trade, 50, 105, EXIT_TIME)

    def test_nothing_left(self):
        trade = make_trade(remaining_position_size_units=0.0)
        with pytest.raises(NothingToClose):
            record_partial_exit(trade, 50, 105, EXIT_TIME)

    def test_percentage_checked_before_price(self):
        with pytest.raises(InvalidPercentage):
            record_partial_exit(make_trade(), 0, 0, EXIT_TIME)


class TestSizeInvariants:
    def test_mixed_lifecycle_accounts_for_every_unit(self):
        trade = make_trade(position_size_units=7.3, remaining_position_size_units=7.3)
        original = trade.position_size_units
        remainders = [trade.remaining_position_size_units]

        for pct, price in ((33.3, 104), (25, 107)):
            trade = record_partial_exit(trade, pct, price, EXIT_TIME)
            remainders.append(trade.remaining_position_size_units)

        pre_close_remaining = trade.remaining_position_size_units
        closed = close_full(trade, 110, EXIT_TIME, "Runner closed")
        remainders.append(closed.remaining_position_size_units)

        assert all(later <= earlier for earlier, later in zip(remainders, remainders[1:]))
        assert all(r >= 0 for r in remainders)
        assert remainders[-1] == 0.0
        exited = sum(p.units for p in closed.partial_exits)
        assert exited + pre_close_remaining == pytest.approx(original, abs=1e-6)

    def test_full_exit_sequence_sums_to_original(self):
        trade = make_trade(position_size_units=3.0, remaining_position_size_units=3.0)
        remainders = []
        for pct in (10, 20, 30, 100):
            trade = record_partial_exit(trade, pct, 105, EXIT_TIME)
            remainders.append(trade.remaining_position_size_units)
        assert trade.is_closed
        assert remainders == sorted(remainders, reverse=True)
        assert sum(p.units for p in trade.partial_exits) == pytest.approx(3.0, abs=1e-6)
