"""Trade API routes: log trades, partial exits, full closes, history."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from tradejournal.api.deps import get_journal_service
from tradejournal.config import settings
from tradejournal.services.analytics import filter_trades
from tradejournal.services.journal.normalize import trade_to_dict
from tradejournal.services.journal.service import JournalService
from tradejournal.services.journal.types import (
    CryptoDominance,
    Direction,
    MacroTrend,
    Market,
    Sentiment,
    Trade,
    TradeDevice,
    TradeImage,
    TradeLocation,
    TradeStatus,
    utcnow,
)

router = APIRouter(prefix="/api/trades", tags=["trades"])


class TradeCreateRequest(BaseModel):
    """Request body for logging a new trade. Level coherence is checked by the journal."""

    account_id: str = Field("", max_length=64)
    market: Market = Market.FOREX
    asset: str = Field(..., min_length=1, max_length=40)
    direction: Direction
    timeframe: str = Field("1h", max_length=10)
    trade_datetime: datetime | None = None

    setup: str = Field("", max_length=100)
    custom_setup_name: str | None = Field(None, max_length=100)
    market_sentiment: Sentiment = Sentiment.NEUTRAL
    asset_sentiment: Sentiment = Sentiment.NEUTRAL
    crypto_dominance: CryptoDominance | None = None
    macro_trend: MacroTrend = Field(default_factory=MacroTrend)

    notes_user: str = ""
    thesis: str = ""
    images: list[TradeImage] = Field(default_factory=list)

    risk_r: float = Field(
        1.0, ge=0, le=100, allow_inf_nan=False, description="Percent of account capital at risk"
    )
    entry: float = Field(..., gt=0, allow_inf_nan=False)
    stop_loss: float = Field(..., gt=0, allow_inf_nan=False)
    take_profits: list[float] = Field(default_factory=lambda: [0.0])

    mental_state: str = Field("Neutral", max_length=40)
    reason: str = Field("", max_length=200)
    motive: str = Field("", max_length=100)
    trade_location: TradeLocation = TradeLocation.HOME
    trade_device: TradeDevice = TradeDevice.LAPTOP

    def to_draft(self) -> Trade:
        return Trade(
            trade_datetime=self.trade_datetime or utcnow(),
            account_id=self.account_id,
            market=self.market,
            asset=self.asset.strip(),
            direction=self.direction,
            timeframe=self.timeframe,
            setup=self.setup,
            custom_setup_name=self.custom_setup_name,
            market_sentiment=self.market_sentiment,
            asset_sentiment=self.asset_sentiment,
            crypto_dominance=self.crypto_dominance,
            macro_trend=self.macro_trend,
            notes_user=self.notes_user,
            thesis=self.thesis,
            images=list(self.images),
            risk_r=self.risk_r,
            entry=self.entry,
            stop_loss=self.stop_loss,
            take_profits=list(self.take_profits) or [0.0],
            mental_state=self.mental_state,
            reason=self.reason,
            motive=self.motive,
            trade_location=self.trade_location,
            trade_device=self.trade_device,
        )


class PartialCloseRequest(BaseModel):
    """Percentage is of the ORIGINAL position size."""

    percentage: float = Field(..., allow_inf_nan=False)
    price: float = Field(..., gt=0, allow_inf_nan=False)
    date_time: datetime | None = None
    note: str = Field("", max_length=500)


class CloseRequest(BaseModel):
    exit_price: float = Field(..., gt=0, allow_inf_nan=False)
    exit_datetime: datetime | None = None
    closing_note: str = Field("", max_length=2000)


def _present(trade: Trade) -> dict:
    data = trade_to_dict(trade)
    data["remaining_pct"] = round(trade.remaining_pct, 4)
    data["realized_dollars"] = trade.realized_dollars
    data["realized_r"] = trade.realized_r
    return data


@router.post("/", status_code=201)
async def create_trade(req: TradeCreateRequest, journal: JournalService = Depends(get_journal_service)):
    """Size, score and log a new trade."""
    trade = await journal.open_trade(req.to_draft())
    return _present(trade)


@router.get("/")
async def list_trades(
    status: TradeStatus | None = None,
    direction: Direction | None = None,
    market: Market | None = None,
    asset: str = "",
    setup: str | None = None,
    limit: int = Query(settings.default_trade_limit, ge=1, le=1000),
    journal: JournalService = Depends(get_journal_service),
):
    """Trades in trade-time order, most recent `limit`."""
    trades = filter_trades(
        await journal.list_trades(),
        status=status,
        direction=direction,
        market=market,
        asset=asset,
        setup=setup,
        limit=limit,
    )
    return {"trades": [_present(t) for t in trades]}


@router.get("/{trade_id}")
async def get_trade(trade_id: str, journal: JournalService = Depends(get_journal_service)):
    return _present(await journal.get_trade(trade_id))


@router.post("/{trade_id}/partial-close")
async def partial_close(
    trade_id: str, req: PartialCloseRequest, journal: JournalService = Depends(get_journal_service)
):
    """Realize part of the position. Closes the trade if nothing is left."""
    trade = await journal.record_partial_exit(
        trade_id, req.percentage, req.price, req.date_time or utcnow(), req.note
    )
    return _present(trade)


@router.post("/{trade_id}/close")
async def close_trade(trade_id: str, req: CloseRequest, journal: JournalService = Depends(get_journal_service)):
    """Close everything that remains. A closing note is mandatory."""
    trade = await journal.close_trade(
        trade_id, req.exit_price, req.exit_datetime or utcnow(), req.closing_note
    )
    return _present(trade)
