"""Execution quality scoring.

A trade starts at 7.0 and every rule that fires adds its impact. Red flags
then cap the result: two or more reds cap at 7.0, a single red from a
critical rule caps at 8.0. The final score is clamped to [1.0, 10.0] and
rounded to one decimal.

The scorer is a pure function of the trade, the trader profile and a short
window of previously closed trades, so the same inputs always give the same
score and breakdown.
"""

from tradejournal.services.journal import catalog
from tradejournal.services.journal.accounting import reward_to_risk
from tradejournal.services.journal.types import (
    Confirmation,
    Direction,
    DominanceLevel,
    Market,
    QualityEvaluation,
    ScoreImpact,
    Sentiment,
    Severity,
    Trade,
    TradeDevice,
    TradeLocation,
    TraderStyle,
    Trend,
    UserProfile,
)

BASELINE_SCORE = 7.0
MIN_SCORE = 1.0
MAX_SCORE = 10.0
MULTI_RED_CAP = 7.0
CRITICAL_RED_CAP = 8.0

RULE_RISK = "Risk-in-R"
RULE_RR = "Risk:Reward"
RULE_EVIDENCE = "Evidence"
RULE_PLANNING = "Planning"
RULE_TREND = "Trend"
RULE_REVERSAL = "Reversal evidence"
RULE_MARKET_SENTIMENT = "Market sentiment"
RULE_ASSET_SENTIMENT = "Asset sentiment"
RULE_SETUP = "Setup"
RULE_MOTIVE = "Motive"
RULE_PSYCHOLOGY = "Psychology"
RULE_PATTERN = "Repeated pattern"
RULE_CRYPTO = "Crypto dominance"
RULE_CONTEXT = "Operating context"
RULE_DEVICE = "Device"

# A single red flag from one of these caps the score at 8.0
CRITICAL_RULES = frozenset(
    {RULE_RR, RULE_RISK, RULE_PSYCHOLOGY, RULE_MOTIVE, RULE_PATTERN, RULE_CRYPTO, RULE_SETUP, RULE_TREND}
)

# High R:R is normal for these styles
LONG_HORIZON_STYLES = frozenset({TraderStyle.SWING_TRADER, TraderStyle.POSITION_TRADER})

PATTERN_RED_COUNT = 3
PATTERN_YELLOW_COUNT = 2


class _Breakdown:
    """Accumulates rule hits in evaluation order."""

    def __init__(self) -> None:
        self.items: list[ScoreImpact] = []

    def add(self, rule: str, impact: float, severity: Severity, message: str) -> None:
        self.items.append(ScoreImpact(rule=rule, impact=impact, severity=severity, message=message))


def evaluate_quality(
    trade: Trade, profile: UserProfile, history: list[Trade] | None = None
) -> QualityEvaluation:
    """Score `trade` at entry. `history` is the recent window of closed trades."""
    rr = reward_to_risk(trade.entry, trade.stop_loss, trade.primary_target, trade.direction)
    out = _Breakdown()

    _risk_rule(out, trade)
    _reward_to_risk_rule(out, trade, rr, profile.trader_style)
    _evidence_rule(out, trade)
    _planning_rule(out, trade)
    _trend_rules(out, trade)
    _market_sentiment_rule(out, trade)
    _asset_sentiment_rule(out, trade)
    _setup_rule(out, trade)
    _motive_rule(out, trade)
    _psychology_rule(out, trade)
    _repeated_pattern_rule(out, trade, history or [])
    _crypto_dominance_rules(out, trade)
    _context_rules(out, trade)

    return QualityEvaluation(score=_final_score(out.items), breakdown=out.items)


def _final_score(items: list[ScoreImpact]) -> float:
    score = BASELINE_SCORE + sum(item.impact for item in items)
    score = max(MIN_SCORE, min(MAX_SCORE, score))

    reds = [item for item in items if item.severity == Severity.RED]
    if len(reds) >= 2:
        score = min(MULTI_RED_CAP, score)
    elif reds and any(item.rule in CRITICAL_RULES for item in reds):
        score = min(CRITICAL_RED_CAP, score)

    return round(score, 1)


def _risk_rule(out: _Breakdown, trade: Trade) -> None:
    risk = trade.risk_r
    if not risk:
        return
    if risk > 5:
        out.add(RULE_RISK, -2.2, Severity.RED, "Risk above 5% of the account. This is aggressive.")
    elif risk > 4:
        out.add(RULE_RISK, -1.2, Severity.YELLOW, "Elevated risk (4% to 5%).")
    elif risk > 3:
        out.add(RULE_RISK, -0.5, Severity.YELLOW, "Risk above the usual standard (over 3%).")


def _reward_to_risk_rule(out: _Breakdown, trade: Trade, rr: float, style: TraderStyle) -> None:
    if rr <= 0:
        return
    if rr < 1.0:
        out.add(RULE_RR, -2.0, Severity.RED, "Reward:risk below 1. This trade has no statistical edge.")
    elif rr < 1.5:
        out.add(RULE_RR, -1.0, Severity.YELLOW, "Low reward:risk (1.0 to 1.5).")
    elif rr < 2.0:
        out.add(RULE_RR, -0.3, Severity.YELLOW, "Acceptable but tight reward:risk (below 2.0).")
    elif rr <= 8.0:
        out.add(RULE_RR, 0.2, Severity.BLUE, "Good reward:risk ratio.")
    elif style not in LONG_HORIZON_STYLES:
        out.add(RULE_RR, -0.6, Severity.YELLOW, "Reward:risk above 8 may be unrealistic. Check your levels.")


def _evidence_rule(out: _Breakdown, trade: Trade) -> None:
    if not trade.images:
        out.add(RULE_EVIDENCE, -0.8, Severity.YELLOW, "No chart attached. Recording the chart builds discipline.")


def _planning_rule(out: _Breakdown, trade: Trade) -> None:
    if not trade.thesis or not trade.thesis.strip():
        out.add(RULE_PLANNING, -0.9, Severity.YELLOW, "No clear thesis. A weak plan tends to end badly.")


def _is_against(direction: Direction, trend: Trend) -> bool:
    if direction == Direction.LONG:
        return trend == Trend.BEARISH
    return trend == Trend.BULLISH


def _trend_rules(out: _Breakdown, trade: Trade) -> None:
    macro = trade.macro_trend.macro
    micro = trade.macro_trend.micro
    confirmed = trade.macro_trend.reversal_evidence == Confirmation.YES
    macro_against = _is_against(trade.direction, macro)
    micro_against = _is_against(trade.direction, micro)

    if macro_against and micro_against:
        out.add(RULE_TREND, -1.4, Severity.RED, "Trading against both macro and micro trend. High risk.")
        if not confirmed:
            out.add(RULE_REVERSAL, -0.6, Severity.YELLOW, "No clear reversal evidence while trading against the trend.")
    elif macro_against or micro_against:
        out.add(RULE_TREND, -0.3, Severity.YELLOW, "Trading against one of the main structures.")
        if macro_against and not confirmed:
            out.add(RULE_REVERSAL, -0.6, Severity.YELLOW, "Against the macro trend without clear reversal evidence.")
    elif macro != Trend.UNSURE and micro != Trend.UNSURE:
        out.add(RULE_TREND, 0.2, Severity.BLUE, "Market structure aligned.")


def _market_sentiment_rule(out: _Breakdown, trade: Trade) -> None:
    s = trade.market_sentiment
    if trade.direction == Direction.LONG:
        if s == Sentiment.EXTREME_EUPHORIA:
            out.add(RULE_MARKET_SENTIMENT, -1.0, Severity.RED, "Extreme euphoria on a long. Risk of buying the top.")
        elif s == Sentiment.EUPHORIA:
            out.add(RULE_MARKET_SENTIMENT, -0.5, Severity.YELLOW, "Euphoric market. Watch for distribution.")
        elif s == Sentiment.PESSIMISM:
            out.add(RULE_MARKET_SENTIMENT, 0.1, Severity.BLUE, "Pessimistic sentiment favours buying.")
        elif s == Sentiment.EXTREME_PESSIMISM:
            out.add(RULE_MARKET_SENTIMENT, 0.2, Severity.BLUE, "Market panic. Value opportunity.")
    else:
        if s == Sentiment.EXTREME_PESSIMISM:
            out.add(RULE_MARKET_SENTIMENT, -1.0, Severity.RED, "Extreme panic on a short. Risk of selling the bottom.")
        elif s == Sentiment.PESSIMISM:
            out.add(RULE_MARKET_SENTIMENT, -0.5, Severity.YELLOW, "Pessimistic market. Watch for violent bounces.")
        elif s == Sentiment.EUPHORIA:
            out.add(RULE_MARKET_SENTIMENT, 0.1, Severity.BLUE, "Euphoric market favours selling.")
        elif s == Sentiment.EXTREME_EUPHORIA:
            out.add(RULE_MARKET_SENTIMENT, 0.2, Severity.BLUE, "Irrational euphoria. Short opportunity.")


def _asset_sentiment_rule(out: _Breakdown, trade: Trade) -> None:
    s = trade.asset_sentiment
    if trade.direction == Direction.LONG:
        if s == Sentiment.EXTREME_EUPHORIA:
            out.add(RULE_ASSET_SENTIMENT, -0.7, Severity.RED, "Asset in extreme euphoria.")
        elif s == Sentiment.EUPHORIA:
            out.add(RULE_ASSET_SENTIMENT, -0.3, Severity.YELLOW, "Asset is euphoric.")
        elif s == Sentiment.EXTREME_PESSIMISM:
            out.add(RULE_ASSET_SENTIMENT, 0.1, Severity.BLUE, "Asset in panic.")
    else:
        if s == Sentiment.EXTREME_PESSIMISM:
            out.add(RULE_ASSET_SENTIMENT, -0.7, Severity.RED, "Asset in extreme panic.")
        elif s == Sentiment.PESSIMISM:
            out.add(RULE_ASSET_SENTIMENT, -0.3, Severity.YELLOW, "Asset is pessimistic.")
        elif s == Sentiment.EXTREME_EUPHORIA:
            out.add(RULE_ASSET_SENTIMENT, 0.1, Severity.BLUE, "Asset in euphoria.")


def _setup_rule(out: _Breakdown, trade: Trade) -> None:
    if not trade.setup:
        return
    if trade.setup in catalog.SETUPS_NEGATIVE:
        out.add(RULE_SETUP, -1.2, Severity.RED, "Negative setup selected. You are trading on influence, not on a plan.")
    elif trade.setup == catalog.OTHER_SETUP:
        out.add(RULE_SETUP, -0.4, Severity.YELLOW, "Uncategorized setup. Could mean a missing system.")
    else:
        out.add(RULE_SETUP, 0.1, Severity.BLUE, "Typified strategy detected.")


def _motive_rule(out: _Breakdown, trade: Trade) -> None:
    if trade.motive in catalog.MOTIVES_NEGATIVE:
        out.add(RULE_MOTIVE, -1.0, Severity.RED, "Risky, emotional trade motive detected.")


def _psychology_rule(out: _Breakdown, trade: Trade) -> None:
    state = trade.mental_state
    if state in catalog.MENTAL_STATES_CRITICAL:
        out.add(RULE_PSYCHOLOGY, -1.2, Severity.RED, "Critical mental state (FOMO or revenge). High risk of error.")
    elif state in catalog.MENTAL_STATES_UNSTABLE:
        out.add(RULE_PSYCHOLOGY, -0.5, Severity.YELLOW, "Unstable mental state detected.")
    elif state in catalog.MENTAL_STATES_OPTIMAL:
        out.add(RULE_PSYCHOLOGY, 0.1, Severity.BLUE, "Optimal mental state for trading.")


def _repeated_pattern_rule(out: _Breakdown, trade: Trade, history: list[Trade]) -> None:
    if not history:
        return
    motive_count = sum(
        1 for t in history if t.motive == trade.motive and t.motive in catalog.MOTIVES_NEGATIVE
    )
    state_count = sum(
        1
        for t in history
        if t.mental_state == trade.mental_state and t.mental_state in catalog.MENTAL_STATES_RECURRING
    )
    if motive_count >= PATTERN_RED_COUNT or state_count >= PATTERN_RED_COUNT:
        out.add(RULE_PATTERN, -0.8, Severity.RED, "Repeated pattern in your recent trades. Fix it before going on.")
    elif motive_count == PATTERN_YELLOW_COUNT or state_count == PATTERN_YELLOW_COUNT:
        out.add(RULE_PATTERN, -0.4, Severity.YELLOW, "Signs of a recurring negative pattern.")


def _crypto_dominance_rules(out: _Breakdown, trade: Trade) -> None:
    if trade.market != Market.CRYPTO:
        return
    dominance = trade.crypto_dominance
    if dominance is None:
        return

    if trade.direction == Direction.SHORT:
        if dominance.usdt_d == DominanceLevel.SUPPORT:
            out.add(RULE_CRYPTO, 0.1, Severity.BLUE, "USDT.D at support favours shorts.")
        return

    if dominance.usdt_d == DominanceLevel.SUPPORT:
        out.add(RULE_CRYPTO, -0.8, Severity.RED, "USDT.D at support. Risk of a broad crypto drop.")
    elif dominance.usdt_d == DominanceLevel.RESISTANCE:
        out.add(RULE_CRYPTO, 0.1, Severity.BLUE, "USDT.D at resistance favours longs.")

    if catalog.is_bitcoin(trade.asset):
        return
    if dominance.btc_d == DominanceLevel.SUPPORT:
        out.add(RULE_CRYPTO, -0.8, Severity.RED, "BTC.D at support. High risk for altcoins.")
    elif dominance.btc_d == DominanceLevel.RESISTANCE:
        out.add(RULE_CRYPTO, 0.1, Severity.BLUE, "BTC.D at resistance favours altcoins.")


def _context_rules(out: _Breakdown, trade: Trade) -> None:
    if trade.trade_location == TradeLocation.WORK:
        out.add(RULE_CONTEXT, -0.6, Severity.YELLOW, "Traded from work. Less focus, more execution risk.")
    elif trade.trade_location == TradeLocation.STREET:
        out.add(RULE_CONTEXT, -0.4, Severity.YELLOW, "Traded on the street. Risk of distraction.")

    if trade.trade_device == TradeDevice.PHONE:
        out.add(RULE_DEVICE, -0.2, Severity.YELLOW, "Traded from a phone. Slight risk of poor execution.")
