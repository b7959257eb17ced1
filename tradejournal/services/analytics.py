"""Performance analytics over the journal.

Summary stats use closed trades only. Open trades show up in the equity curve
through what their partial exits already realized.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

import pandas as pd

from tradejournal.services.journal.catalog import MOTIVES_NEGATIVE
from tradejournal.services.journal.normalize import trade_to_dict
from tradejournal.services.journal.types import Direction, Market, Trade, TradeStatus

DAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
HOUR_LABELS = [f"{h}h" for h in range(24)]
WEEK_LABELS = [f"Week {w + 1}" for w in range(5)]

EQUITY_MODES = ("usd", "percent", "r")


@dataclass
class BucketStats:
    """Closed-trade stats for one group (setup, weekday, hour...)."""

    name: str
    count: int
    wins: int
    pnl: float
    win_rate_pct: int
    avg_score: float


@dataclass
class MotiveStats:
    name: str
    count: int
    pnl: float
    avg_score: float
    is_negative: bool


@dataclass
class PerformanceSummary:
    """Aggregate performance of a set of trades."""

    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate_pct: float
    total_pnl: float
    total_pnl_r: float
    avg_score: float
    avg_rr: float
    profit_factor: float
    avg_win: float
    avg_loss: float
    max_consecutive_wins: int
    max_consecutive_losses: int

    setups: list[BucketStats] = field(default_factory=list)
    motives: list[MotiveStats] = field(default_factory=list)
    by_day: list[BucketStats] = field(default_factory=list)
    by_hour: list[BucketStats] = field(default_factory=list)
    by_month: list[BucketStats] = field(default_factory=list)
    by_week: list[BucketStats] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict for API response."""

        def buckets(items: list[BucketStats]) -> list[dict]:
            return [
                {
                    "name": b.name,
                    "count": b.count,
                    "wins": b.wins,
                    "pnl": round(b.pnl, 2),
                    "win_rate_pct": b.win_rate_pct,
                    "avg_score": b.avg_score,
                }
                for b in items
            ]

        return {
            "total_trades": self.total_trades,
            "winning_trades": self.winning_trades,
            "losing_trades": self.losing_trades,
            "win_rate_pct": round(self.win_rate_pct, 1),
            "total_pnl": round(self.total_pnl, 2),
            "total_pnl_r": round(self.total_pnl_r, 2),
            "avg_score": round(self.avg_score, 1),
            "avg_rr": round(self.avg_rr, 2),
            "profit_factor": round(self.profit_factor, 2),
            "avg_win": round(self.avg_win, 2),
            "avg_loss": round(self.avg_loss, 2),
            "max_consecutive_wins": self.max_consecutive_wins,
            "max_consecutive_losses": self.max_consecutive_losses,
            "setups": buckets(self.setups),
            "motives": [
                {
                    "name": m.name,
                    "count": m.count,
                    "pnl": round(m.pnl, 2),
                    "avg_score": round(m.avg_score, 1),
                    "is_negative": m.is_negative,
                }
                for m in self.motives
            ],
            "by_day": buckets(self.by_day),
            "by_hour": buckets(self.by_hour),
            "by_month": buckets(self.by_month),
            "by_week": buckets(self.by_week),
        }


def as_utc(dt: datetime) -> datetime:
    """Naive timestamps are treated as UTC so mixed data still sorts."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def filter_trades(
    trades: list[Trade],
    status: TradeStatus | None = None,
    direction: Direction | None = None,
    market: Market | None = None,
    asset: str = "",
    setup: str | None = None,
    limit: int = 50,
) -> list[Trade]:
    """Filter, sort by trade time and keep the most recent `limit`."""
    result = list(trades)
    if status is not None:
        result = [t for t in result if t.status == status]
    if direction is not None:
        result = [t for t in result if t.direction == direction]
    if market is not None:
        result = [t for t in result if t.market == market]
    if asset:
        needle = asset.lower()
        result = [t for t in result if needle in t.asset.lower()]
    if setup:
        result = [t for t in result if t.setup == setup]
    result.sort(key=lambda t: as_utc(t.trade_datetime))
    if limit <= 0:
        return []
    return result[-limit:]


def compute_performance(trades: list[Trade]) -> PerformanceSummary:
    """Compute all metrics from the closed trades in `trades`."""
    closed = sorted((t for t in trades if t.is_closed), key=lambda t: as_utc(t.trade_datetime))
    stats = _compute_trade_stats(closed)
    frame = _closed_frame(closed)

    return PerformanceSummary(
        **stats,
        setups=_setup_stats(frame),
        motives=_motive_stats(frame),
        by_day=_bucket_stats(frame, "day", DAY_LABELS),
        by_hour=_bucket_stats(frame, "hour", HOUR_LABELS),
        by_month=_bucket_stats(frame, "month", MONTH_LABELS),
        by_week=_bucket_stats(frame, "week", WEEK_LABELS),
    )


def _compute_trade_stats(trades: list[Trade]) -> dict:
    """Win rate, P&L totals, profit factor, avg win/loss, consecutive streaks."""
    if not trades:
        return {
            "total_trades": 0,
            "winning_trades": 0,
            "losing_trades": 0,
            "win_rate_pct": 0.0,
            "total_pnl": 0.0,
            "total_pnl_r": 0.0,
            "avg_score": 0.0,
            "avg_rr": 0.0,
            "profit_factor": 0.0,
            "avg_win": 0.0,
            "avg_loss": 0.0,
            "max_consecutive_wins": 0,
            "max_consecutive_losses": 0,
        }

    pnls = [t.realized_dollars for t in trades]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p <= 0]
    gross_profit = sum(wins)
    gross_loss = abs(sum(losses))

    max_wins = 0
    max_losses = 0
    current_wins = 0
    current_losses = 0
    for pnl in pnls:
        if pnl > 0:
            current_wins += 1
            current_losses = 0
            max_wins = max(max_wins, current_wins)
        else:
            current_losses += 1
            current_wins = 0
            max_losses = max(max_losses, current_losses)

    total = len(trades)
    return {
        "total_trades": total,
        "winning_trades": len(wins),
        "losing_trades": len(losses),
        "win_rate_pct": len(wins) / total * 100,
        "total_pnl": sum(pnls),
        "total_pnl_r": sum(t.realized_r for t in trades),
        "avg_score": sum(t.quality_score for t in trades) / total,
        "avg_rr": sum(t.rr for t in trades) / total,
        "profit_factor": gross_profit / gross_loss if gross_loss > 0 else 9999.0 if gross_profit > 0 else 0.0,
        "avg_win": gross_profit / len(wins) if wins else 0.0,
        "avg_loss": -gross_loss / len(losses) if losses else 0.0,
        "max_consecutive_wins": max_wins,
        "max_consecutive_losses": max_losses,
    }


def _closed_frame(trades: list[Trade]) -> pd.DataFrame:
    """One row per closed trade with its grouping keys."""
    return pd.DataFrame(
        {
            "setup": [t.setup or "No setup" for t in trades],
            "motive": [t.motive or "No motive" for t in trades],
            "pnl": [t.realized_dollars for t in trades],
            "win": [t.realized_dollars > 0 for t in trades],
            "score": [t.quality_score for t in trades],
            "day": [(t.trade_datetime.weekday() + 1) % 7 for t in trades],  # Sunday first
            "hour": [t.trade_datetime.hour for t in trades],
            "month": [t.trade_datetime.month - 1 for t in trades],
            "week": [(t.trade_datetime.day - 1) // 7 for t in trades],
        },
        columns=["setup", "motive", "pnl", "win", "score", "day", "hour", "month", "week"],
    )


def _aggregate(frame: pd.DataFrame, key: str) -> pd.DataFrame:
    return frame.groupby(key).agg(
        trades=("pnl", "size"),
        wins=("win", "sum"),
        pnl=("pnl", "sum"),
        score=("score", "sum"),
    )


def _bucket(name: str, trades: int, wins: int, pnl: float, score: float) -> BucketStats:
    return BucketStats(
        name=name,
        count=trades,
        wins=wins,
        pnl=pnl,
        win_rate_pct=round(wins / trades * 100) if trades else 0,
        avg_score=round(score / trades, 1) if trades else 0.0,
    )


def _bucket_stats(frame: pd.DataFrame, key: str, labels: list[str]) -> list[BucketStats]:
    """Stats per fixed bucket; empty buckets are kept with zeros."""
    if frame.empty:
        return [_bucket(label, 0, 0, 0.0, 0.0) for label in labels]
    grouped = _aggregate(frame, key).reindex(range(len(labels)), fill_value=0)
    return [
        _bucket(
            label,
            int(grouped.loc[i, "trades"]),
            int(grouped.loc[i, "wins"]),
            float(grouped.loc[i, "pnl"]),
            float(grouped.loc[i, "score"]),
        )
        for i, label in enumerate(labels)
    ]


def _setup_stats(frame: pd.DataFrame) -> list[BucketStats]:
    """Per setup, best P&L first."""
    if frame.empty:
        return []
    grouped = _aggregate(frame, "setup").sort_values("pnl", ascending=False, kind="stable")
    return [
        _bucket(str(name), int(row["trades"]), int(row["wins"]), float(row["pnl"]), float(row["score"]))
        for name, row in grouped.iterrows()
    ]


def _motive_stats(frame: pd.DataFrame) -> list[MotiveStats]:
    """Per motive, most frequent first. Flags emotional motives and losing ones."""
    if frame.empty:
        return []
    grouped = _aggregate(frame, "motive").sort_values("trades", ascending=False, kind="stable")
    stats = []
    for name, row in grouped.iterrows():
        count = int(row["trades"])
        pnl = float(row["pnl"])
        stats.append(
            MotiveStats(
                name=str(name),
                count=count,
                pnl=pnl,
                avg_score=float(row["score"]) / count if count else 0.0,
                is_negative=name in MOTIVES_NEGATIVE or pnl < 0,
            )
        )
    return stats


def equity_curve(trades: list[Trade], mode: str = "usd") -> list[dict]:
    """Cumulative realized result in trade-time order.

    mode: "usd" (dollars), "percent" (risk-scaled percent, closed trades
    only) or "r" (R-multiples).
    """
    if mode not in EQUITY_MODES:
        raise ValueError(f"Unknown equity mode {mode!r}, expected one of {EQUITY_MODES}")

    points = []
    cumulative = 0.0
    for i, trade in enumerate(sorted(trades, key=lambda t: as_utc(t.trade_datetime)), start=1):
        if mode == "usd":
            cumulative += trade.realized_dollars
        elif mode == "percent":
            cumulative += trade.realized_percent
        else:
            cumulative += trade.realized_r
        points.append(
            {
                "index": i,
                "trade_id": trade.id,
                "date": trade.trade_datetime.date().isoformat(),
                "value": cumulative,
            }
        )
    return points


def export_csv(trades: list[Trade], include_open: bool = False) -> str:
    """Mass export of the journal as CSV text."""
    rows = [t for t in trades if include_open or t.is_closed]
    frame = pd.DataFrame(
        {
            "ID": [t.id[:8] for t in rows],
            "Date": [t.trade_datetime.isoformat() for t in rows],
            "Asset": [t.asset for t in rows],
            "Direction": [t.direction.value for t in rows],
            "Setup": [t.setup for t in rows],
            "Score": [t.quality_score for t in rows],
            "PnL_USD": [t.realized_dollars for t in rows],
            "PnL_R": [t.realized_r for t in rows],
            "Status": [t.status.value for t in rows],
            "Thesis": [t.thesis for t in rows],
        },
        columns=["ID", "Date", "Asset", "Direction", "Setup", "Score", "PnL_USD", "PnL_R", "Status", "Thesis"],
    )
    return frame.to_csv(index=False)


def export_json(trades: list[Trade], include_open: bool = False) -> list[dict]:
    """Mass export of full trade records, in stored form."""
    return [trade_to_dict(t) for t in trades if include_open or t.is_closed]
