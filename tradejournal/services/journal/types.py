"""Journal domain types.

Plain dataclasses, independent of storage. Lifecycle operations never mutate a
Trade in place: they build the next version with ``dataclasses.replace`` so the
caller can swap it into the collection and persist the whole thing.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"


class TradeStatus(str, Enum):
    OPEN = "Open"
    CLOSED = "Closed"


class Market(str, Enum):
    CRYPTO = "crypto"
    FOREX = "forex"
    INDICES = "indices"
    STOCKS = "stocks"
    OPTIONS = "options"
    COMMODITIES = "commodities"


class TraderStyle(str, Enum):
    SCALPER = "Scalper"
    DAY_TRADER = "DayTrader"
    SWING_TRADER = "SwingTrader"
    POSITION_TRADER = "PositionTrader"
    INVESTOR = "Investor"


class Sentiment(str, Enum):
    EXTREME_EUPHORIA = "extreme_euphoria"
    EUPHORIA = "euphoria"
    NEUTRAL = "neutral"
    PESSIMISM = "pessimism"
    EXTREME_PESSIMISM = "extreme_pessimism"


class Trend(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    RANGE = "range"
    UNSURE = "unsure"


class Confirmation(str, Enum):
    YES = "yes"
    NO = "no"
    UNSURE = "unsure"


class DominanceLevel(str, Enum):
    SUPPORT = "support"
    RESISTANCE = "resistance"
    MID_RANGE = "mid_range"
    UNSURE = "unsure"


class TradeLocation(str, Enum):
    HOME = "Home"
    WORK = "Work"
    STREET = "Street"


class TradeDevice(str, Enum):
    LAPTOP = "Laptop"
    PHONE = "Phone"


class Severity(str, Enum):
    RED = "red"
    YELLOW = "yellow"
    BLUE = "blue"  # positive reinforcement, not a warning


class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    F = "F"


@dataclass
class MacroTrend:
    macro: Trend = Trend.UNSURE
    micro: Trend = Trend.UNSURE
    reversal_evidence: Confirmation = Confirmation.UNSURE
    htf_levels_checked: Confirmation = Confirmation.UNSURE


@dataclass
class CryptoDominance:
    usdt_d: DominanceLevel = DominanceLevel.UNSURE
    btc_d: DominanceLevel | None = None


@dataclass
class TradeImage:
    """Chart screenshot attached as evidence. `data` is base64."""

    data: str
    name: str = ""
    content_type: str = ""


@dataclass
class TradePnL:
    """Final result of a closed trade.

    `percent` is the R-multiple scaled by the risked percentage of capital,
    not dollars over capital.
    """

    dollars: float
    percent: float
    r_multiple: float


@dataclass
class PartialExit:
    """One realized slice of a position.

    `percentage` is relative to the ORIGINAL position size. P&L is computed
    when the slice is recorded and never recomputed.
    """

    percentage: float
    price: float
    date_time: datetime
    pnl_dollars: float
    pnl_r: float
    units: float
    note: str = ""
    id: str = field(default_factory=new_id)


@dataclass
class Trade:
    """A discretionary position, from entry through partial exits to close."""

    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    trade_datetime: datetime = field(default_factory=utcnow)
    status: TradeStatus = TradeStatus.OPEN

    # Market context
    account_id: str = ""
    market: Market = Market.FOREX
    asset: str = ""
    direction: Direction = Direction.LONG
    timeframe: str = "1h"

    # Setup
    setup: str = ""
    custom_setup_name: str | None = None

    # Scoring inputs, frozen at save time
    market_sentiment: Sentiment = Sentiment.NEUTRAL
    asset_sentiment: Sentiment = Sentiment.NEUTRAL
    crypto_dominance: CryptoDominance | None = None
    macro_trend: MacroTrend = field(default_factory=MacroTrend)
    mental_state: str = "Neutral"
    reason: str = ""
    motive: str = ""
    trade_location: TradeLocation = TradeLocation.HOME
    trade_device: TradeDevice = TradeDevice.LAPTOP

    notes_user: str = ""
    thesis: str = ""
    images: list[TradeImage] = field(default_factory=list)

    # Risk and prices. risk_r is the percent of capital risked, not an R-multiple.
    risk_r: float = 1.0
    entry: float = 0.0
    stop_loss: float = 0.0
    take_profits: list[float] = field(default_factory=lambda: [0.0])

    # Sizing
    position_size_units: float = 0.0
    remaining_position_size_units: float = 0.0
    rr: float = 0.0

    # Results
    partial_exits: list[PartialExit] = field(default_factory=list)
    pnl: TradePnL | None = None
    exit_price: float | None = None
    exit_datetime: datetime | None = None
    closing_note: str | None = None

    # Scoring output
    quality_score: float = 0.0
    execution_quality: Grade = Grade.C
    alerts_triggered: list[str] = field(default_factory=list)
    coach_notes: str | None = None

    @property
    def is_closed(self) -> bool:
        return self.status == TradeStatus.CLOSED

    @property
    def primary_target(self) -> float:
        return self.take_profits[0] if self.take_profits else 0.0

    @property
    def realized_dollars(self) -> float:
        """Final P&L once closed, otherwise what the partial exits banked."""
        if self.is_closed:
            return self.pnl.dollars if self.pnl else 0.0
        return sum(p.pnl_dollars for p in self.partial_exits)

    @property
    def realized_r(self) -> float:
        if self.is_closed:
            return self.pnl.r_multiple if self.pnl else 0.0
        return sum(p.pnl_r for p in self.partial_exits)

    @property
    def realized_percent(self) -> float:
        if self.is_closed and self.pnl:
            return self.pnl.percent
        return 0.0

    @property
    def remaining_pct(self) -> float:
        """Remaining size as a percentage of the original size."""
        if self.position_size_units <= 0:
            return 0.0
        return self.remaining_position_size_units / self.position_size_units * 100


@dataclass
class Account:
    """Trading account. Read-only to the journal core."""

    id: str
    name: str = ""
    currency: str = "USD"
    starting_capital: float = 0.0
    current_capital: float = 0.0
    markets: list[Market] = field(default_factory=list)


@dataclass
class UserProfile:
    name: str = ""
    trader_style: TraderStyle = TraderStyle.DAY_TRADER
    secondary_styles: list[TraderStyle] = field(default_factory=list)
    primary_markets: list[Market] = field(default_factory=list)
    secondary_markets: list[Market] = field(default_factory=list)
    accounts: list[Account] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    setups_by_account: dict[str, list[str]] = field(default_factory=dict)
    assets_by_account: dict[str, list[str]] = field(default_factory=dict)

    def find_account(self, account_id: str) -> Account | None:
        for account in self.accounts:
            if account.id == account_id:
                return account
        return None


@dataclass
class ChatMessage:
    role: str  # user, assistant
    content: str
    timestamp: datetime = field(default_factory=utcnow)


@dataclass
class ScoreImpact:
    """One scoring rule that fired."""

    rule: str
    impact: float
    severity: Severity
    message: str


@dataclass
class QualityEvaluation:
    """Quality score plus the ordered rules that produced it."""

    score: float
    breakdown: list[ScoreImpact] = field(default_factory=list)

    @property
    def grade(self) -> Grade:
        return grade_for_score(self.score)

    @property
    def alerts(self) -> list[str]:
        """Messages of every non-positive rule, in evaluation order."""
        return [item.message for item in self.breakdown if item.impact <= 0]


def grade_for_score(score: float) -> Grade:
    if score >= 8:
        return Grade.A
    if score >= 6:
        return Grade.B
    if score >= 4:
        return Grade.C
    return Grade.F
