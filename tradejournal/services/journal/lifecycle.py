"""Trade creation: validate levels, size the position, score it and freeze."""

import logging
from dataclasses import replace
from datetime import datetime

from tradejournal.services.journal import catalog
from tradejournal.services.journal.accounting import (
    is_positive_number,
    is_stop_loss_coherent,
    is_take_profit_coherent,
    position_size_units,
    reward_to_risk,
)
from tradejournal.services.journal.errors import InvalidPrice, InvalidStopLoss, InvalidTakeProfit
from tradejournal.services.journal.scoring import evaluate_quality
from tradejournal.services.journal.types import Trade, TradeStatus, UserProfile, utcnow

logger = logging.getLogger(__name__)


def validate_levels(draft: Trade) -> None:
    """Entry, stop and primary target must be positive and on the right sides."""
    if not is_positive_number(draft.entry):
        raise InvalidPrice("Entry price must be a positive number")
    if not is_positive_number(draft.stop_loss):
        raise InvalidStopLoss("Stop loss is required")
    if not is_stop_loss_coherent(draft.entry, draft.stop_loss, draft.direction):
        raise InvalidStopLoss(f"Stop loss is on the wrong side of entry for a {draft.direction.value}")
    target = draft.primary_target
    if target and not is_positive_number(target):
        raise InvalidTakeProfit("Take profit must be a positive number")
    if not is_take_profit_coherent(draft.entry, target, draft.direction):
        raise InvalidTakeProfit(f"Take profit is on the wrong side of entry for a {draft.direction.value}")


def open_trade(
    draft: Trade,
    profile: UserProfile,
    history: list[Trade] | None = None,
    now: datetime | None = None,
) -> Trade:
    """Turn a declared trade into a saved, scored, Open journal entry.

    The account's current capital sizes the position. An unknown account
    still logs the trade, with zero size.
    """
    validate_levels(draft)

    account = profile.find_account(draft.account_id)
    capital = account.current_capital if account else 0.0
    if account is None:
        logger.warning("Account %r not in profile, trade %s sized at 0", draft.account_id, draft.id)

    units = position_size_units(capital, draft.risk_r, draft.entry, draft.stop_loss, draft.direction)
    rr = reward_to_risk(draft.entry, draft.stop_loss, draft.primary_target, draft.direction)
    evaluation = evaluate_quality(draft, profile, history)

    trade = replace(
        draft,
        created_at=now or utcnow(),
        status=TradeStatus.OPEN,
        position_size_units=units,
        remaining_position_size_units=units,
        rr=rr,
        partial_exits=[],
        pnl=None,
        exit_price=None,
        exit_datetime=None,
        closing_note=None,
        quality_score=evaluation.score,
        execution_quality=evaluation.grade,
        alerts_triggered=evaluation.alerts,
        motive=draft.motive.strip() or catalog.DEFAULT_MOTIVE,
    )
    logger.info(
        "Trade %s opened: %s %s %s units, score %.1f (%s)",
        trade.id,
        trade.direction.value,
        trade.asset,
        units,
        trade.quality_score,
        trade.execution_quality.value,
    )
    return trade


def last_closed_trades(trades: list[Trade], n: int = 10) -> list[Trade]:
    """The last `n` closed trades in journal order."""
    closed = [t for t in trades if t.is_closed]
    return closed[-n:] if n > 0 else []
