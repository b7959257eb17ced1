"""Analytics API routes: performance summary, equity curve, CSV and JSON export."""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from tradejournal.api.deps import get_journal_service
from tradejournal.config import settings
from tradejournal.services.analytics import (
    compute_performance,
    equity_curve,
    export_csv,
    export_json,
    filter_trades,
)
from tradejournal.services.journal.service import JournalService
from tradejournal.services.journal.types import Direction, Market, TradeStatus

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


async def _filtered(
    status: TradeStatus | None = None,
    direction: Direction | None = None,
    market: Market | None = None,
    asset: str = "",
    setup: str | None = None,
    limit: int = Query(settings.default_trade_limit, ge=1, le=1000),
    journal: JournalService = Depends(get_journal_service),
):
    return filter_trades(
        await journal.list_trades(),
        status=status,
        direction=direction,
        market=market,
        asset=asset,
        setup=setup,
        limit=limit,
    )


@router.get("/summary")
async def summary(trades=Depends(_filtered)):
    """Win rate, P&L, score and per-setup/motive/time breakdowns of closed trades."""
    return compute_performance(trades).to_dict()


@router.get("/equity")
async def equity(mode: Literal["usd", "percent", "r"] = "usd", trades=Depends(_filtered)):
    return {"mode": mode, "points": equity_curve(trades, mode)}


@router.get("/export.csv")
async def export(include_open: bool = False, journal: JournalService = Depends(get_journal_service)):
    """Whole journal as CSV. Closed trades only unless include_open is set."""
    csv_text = export_csv(await journal.list_trades(), include_open=include_open)
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="trades_export.csv"'},
    )


@router.get("/export.json")
async def export_full(include_open: bool = False, journal: JournalService = Depends(get_journal_service)):
    """Whole journal as full trade records. Closed trades only unless include_open is set."""
    return JSONResponse(
        content=export_json(await journal.list_trades(), include_open=include_open),
        headers={"Content-Disposition": 'attachment; filename="trades_export.json"'},
    )
