"""Position accounting: price movement to dollars, R-multiples and sizing.

All functions are pure. Units are instrument units (shares, coins, lots),
prices are plain floats in the account currency.
"""

import math

from tradejournal.services.journal.types import Direction, Trade, TradePnL

UNIT_TOLERANCE = 1e-9
UNIT_DECIMALS = 8


def is_positive_number(value) -> bool:
    """Finite real number above zero. Booleans and strings do not count."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def round_units(units: float) -> float:
    """Clamp to zero and round away float drift."""
    return round(max(0.0, units), UNIT_DECIMALS)


def compute_dollars(entry: float, exit_price: float, units: float, direction: Direction) -> float:
    """Realized P&L for `units` closed at `exit_price`."""
    multiplier = 1 if direction == Direction.LONG else -1
    return (exit_price - entry) * units * multiplier


def initial_risk_amount(trade: Trade) -> float:
    """Dollars at risk on the original size: |entry - stop| * original units."""
    return abs(trade.entry - trade.stop_loss) * trade.position_size_units


def to_r_multiple(trade: Trade, dollars: float) -> float:
    """Dollars as a multiple of the initial risk. Zero risk yields 0, not a division error."""
    risk = initial_risk_amount(trade)
    if risk == 0:
        return 0.0
    return dollars / risk


def final_pnl(trade: Trade, total_realized_dollars: float) -> TradePnL:
    """Aggregate result of a closed trade.

    percent = rMultiple * riskR. This is deliberately not dollars/capital:
    historical analytics were recorded with this definition.
    """
    r_multiple = to_r_multiple(trade, total_realized_dollars)
    return TradePnL(
        dollars=total_realized_dollars,
        percent=r_multiple * trade.risk_r,
        r_multiple=r_multiple,
    )


def is_stop_loss_coherent(entry: float, stop_loss: float, direction: Direction) -> bool:
    if not entry or not stop_loss:
        return True
    if direction == Direction.LONG:
        return stop_loss < entry
    return stop_loss > entry


def is_take_profit_coherent(entry: float, target: float, direction: Direction) -> bool:
    if not entry or not target:
        return True
    if direction == Direction.LONG:
        return target > entry
    return target < entry


def reward_to_risk(entry: float, stop_loss: float, target: float, direction: Direction) -> float:
    """Reward:risk of the primary target. 0 when any level is missing or incoherent."""
    if not entry or not stop_loss or not target:
        return 0.0
    if not is_stop_loss_coherent(entry, stop_loss, direction):
        return 0.0
    if not is_take_profit_coherent(entry, target, direction):
        return 0.0
    risk = abs(entry - stop_loss)
    if risk == 0:
        return 0.0
    return abs(target - entry) / risk


def position_size_units(
    capital: float, risk_pct: float, entry: float, stop_loss: float, direction: Direction
) -> float:
    """Units such that hitting the stop loses `risk_pct` percent of `capital`."""
    if not entry or not stop_loss or not is_stop_loss_coherent(entry, stop_loss, direction):
        return 0.0
    distance = abs(entry - stop_loss)
    if distance == 0:
        return 0.0
    risk_amount = capital * (risk_pct or 0) / 100
    return risk_amount / distance
