"""CLI performance report straight from the journal database.

Usage:
    python scripts/report.py
    python scripts/report.py --market crypto --limit 100
    python scripts/report.py --json
"""

import argparse
import asyncio
import json
import logging

from tradejournal.database import engine, init_models
from tradejournal.services.analytics import PerformanceSummary, compute_performance, filter_trades
from tradejournal.services.journal.types import Direction, Market, TradeStatus
from tradejournal.services.repository import SqlTradeRepository


def format_report(summary: PerformanceSummary) -> str:
    """Format the summary as a readable console report."""
    lines = []
    sep = "=" * 60

    lines.append(sep)
    lines.append("  Trade Journal Performance Report")
    lines.append(sep)
    lines.append(
        f"  Closed trades: {summary.total_trades}   "
        f"Win Rate: {summary.win_rate_pct:.1f}% "
        f"({summary.winning_trades}W / {summary.losing_trades}L)"
    )
    pnl_sign = "+" if summary.total_pnl >= 0 else ""
    lines.append(f"  Total P&L:          {pnl_sign}${summary.total_pnl:,.2f} ({summary.total_pnl_r:+.2f}R)")
    lines.append(f"  Profit Factor:      {summary.profit_factor:.2f}")
    lines.append(f"  Avg Win / Loss:     ${summary.avg_win:,.2f} / ${summary.avg_loss:,.2f}")
    lines.append(f"  Avg Score:          {summary.avg_score:.1f}/10   Avg R:R {summary.avg_rr:.2f}")
    lines.append(
        f"  Streaks:            {summary.max_consecutive_wins}W / {summary.max_consecutive_losses}L"
    )

    if summary.setups:
        lines.append("-" * 60)
        lines.append("  SETUPS")
        for s in summary.setups:
            lines.append(f"  {s.name[:28]:<28s} {s.count:>4d}  {s.win_rate_pct:>3d}%  ${s.pnl:>10,.2f}")

    if summary.motives:
        lines.append("-" * 60)
        lines.append("  MOTIVES")
        for m in summary.motives:
            flag = " !" if m.is_negative else ""
            lines.append(f"  {m.name[:28]:<28s} {m.count:>4d}  ${m.pnl:>10,.2f}{flag}")

    lines.append(sep)
    return "\n".join(lines)


async def run_report(args: argparse.Namespace) -> None:
    await init_models()
    try:
        trades = await SqlTradeRepository().load()
    finally:
        await engine.dispose()

    trades = filter_trades(
        trades,
        status=TradeStatus.CLOSED,
        direction=Direction(args.direction) if args.direction else None,
        market=Market(args.market) if args.market else None,
        asset=args.asset,
        limit=args.limit,
    )
    summary = compute_performance(trades)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print(format_report(summary))


def main() -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )

    parser = argparse.ArgumentParser(description="Trade journal performance report")
    parser.add_argument(
        "--market", choices=[m.value for m in Market],
        help="Only trades in this market",
    )
    parser.add_argument(
        "--direction", choices=[d.value for d in Direction],
        help="Only long or short trades",
    )
    parser.add_argument("--asset", default="", help="Asset substring filter (e.g. BTC)")
    parser.add_argument(
        "--limit", type=int, default=1000,
        help="Most recent closed trades to include (default: 1000)",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Output summary as JSON instead of formatted report",
    )
    args = parser.parse_args()

    asyncio.run(run_report(args))


if __name__ == "__main__":
    main()
