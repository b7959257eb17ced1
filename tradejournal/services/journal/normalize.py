"""Normalize-on-read boundary for persisted journal data.

Stored payloads may come from older versions or be hand-edited. Missing or
malformed fields are replaced with safe defaults instead of rejecting the
record, so everything handed to the core is a fully typed value that
respects the sizing invariants.
"""

import logging
import math
from dataclasses import asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from tradejournal.services.journal.accounting import round_units
from tradejournal.services.journal.types import (
    Account,
    ChatMessage,
    Confirmation,
    CryptoDominance,
    Direction,
    DominanceLevel,
    Grade,
    MacroTrend,
    Market,
    PartialExit,
    Sentiment,
    Trade,
    TradeDevice,
    TradeImage,
    TradeLocation,
    TradePnL,
    TraderStyle,
    TradeStatus,
    Trend,
    UserProfile,
    new_id,
    utcnow,
)

logger = logging.getLogger(__name__)

_CLOSED_ALIASES = {"closed", "c", "done", "final"}


def to_float(value: Any, default: float = 0.0) -> float:
    """Finite float from a number or numeric string, else `default`."""
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
        try:
            value = float(value)
        except ValueError:
            return default
    if isinstance(value, (int, float)) and math.isfinite(value):
        return float(value)
    return default


def to_datetime(value: Any, default: datetime | None = None) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable timestamp %r", value)
    return default


def to_enum(enum_cls: type[Enum], value: Any, default):
    """Enum member by value, case-insensitive; `default` when unknown."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        wanted = value.strip().lower()
        for member in enum_cls:
            if member.value.lower() == wanted or member.name.lower() == wanted:
                return member
    return default


def to_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def normalize_status(value: Any) -> TradeStatus:
    if to_str(value).strip().lower() in _CLOSED_ALIASES:
        return TradeStatus.CLOSED
    return TradeStatus.OPEN


def _normalize_take_profits(value: Any) -> list[float]:
    if isinstance(value, list) and value:
        return [to_float(v) for v in value]
    return [0.0]


def _normalize_images(value: Any) -> list[TradeImage]:
    if not isinstance(value, list):
        return []
    images = []
    for item in value:
        if isinstance(item, str) and item:
            images.append(TradeImage(data=item))
        elif isinstance(item, dict) and item.get("data"):
            images.append(
                TradeImage(
                    data=str(item["data"]),
                    name=to_str(item.get("name")),
                    content_type=to_str(item.get("content_type")),
                )
            )
    return images


def _normalize_pnl(value: Any) -> TradePnL | None:
    if not isinstance(value, dict):
        return None
    return TradePnL(
        dollars=to_float(value.get("dollars")),
        percent=to_float(value.get("percent")),
        r_multiple=to_float(value.get("r_multiple")),
    )


def _normalize_partial_exits(value: Any, original_units: float) -> list[PartialExit]:
    """Drop entries without a positive percentage and price."""
    if not isinstance(value, list):
        return []
    exits = []
    for item in value:
        if not isinstance(item, dict):
            continue
        percentage = to_float(item.get("percentage"))
        price = to_float(item.get("price"))
        if percentage <= 0 or price <= 0:
            continue
        units = to_float(item.get("units"), default=-1.0)
        if units < 0:
            units = percentage / 100 * original_units
        exits.append(
            PartialExit(
                id=to_str(item.get("id")) or new_id(),
                percentage=percentage,
                price=price,
                date_time=to_datetime(item.get("date_time"), utcnow()),
                note=to_str(item.get("note")),
                pnl_dollars=to_float(item.get("pnl_dollars")),
                pnl_r=to_float(item.get("pnl_r")),
                units=units,
            )
        )
    return exits


def _normalize_macro_trend(value: Any) -> MacroTrend:
    if not isinstance(value, dict):
        return MacroTrend()
    return MacroTrend(
        macro=to_enum(Trend, value.get("macro"), Trend.UNSURE),
        micro=to_enum(Trend, value.get("micro"), Trend.UNSURE),
        reversal_evidence=to_enum(Confirmation, value.get("reversal_evidence"), Confirmation.UNSURE),
        htf_levels_checked=to_enum(Confirmation, value.get("htf_levels_checked"), Confirmation.UNSURE),
    )


def _normalize_dominance(value: Any) -> CryptoDominance | None:
    if not isinstance(value, dict):
        return None
    return CryptoDominance(
        usdt_d=to_enum(DominanceLevel, value.get("usdt_d"), DominanceLevel.UNSURE),
        btc_d=to_enum(DominanceLevel, value.get("btc_d"), None),
    )


def normalize_trade(raw: Any) -> Trade:
    """Build a valid Trade from a stored payload, whatever shape it is in."""
    t = raw if isinstance(raw, dict) else {}

    status = normalize_status(t.get("status"))
    original = max(0.0, to_float(t.get("position_size_units")))
    remaining_raw = t.get("remaining_position_size_units")
    remaining = original if remaining_raw is None else to_float(remaining_raw)
    remaining = min(round_units(remaining), original)
    if status == TradeStatus.CLOSED:
        remaining = 0.0

    exit_price = to_float(t.get("exit_price"), default=-1.0)

    return Trade(
        id=to_str(t.get("id")) or new_id(),
        created_at=to_datetime(t.get("created_at"), utcnow()),
        trade_datetime=to_datetime(t.get("trade_datetime"), utcnow()),
        status=status,
        account_id=to_str(t.get("account_id")),
        market=to_enum(Market, t.get("market"), Market.FOREX),
        asset=to_str(t.get("asset")),
        direction=to_enum(Direction, t.get("direction"), Direction.LONG),
        timeframe=to_str(t.get("timeframe"), "1h"),
        setup=to_str(t.get("setup")),
        custom_setup_name=to_str(t.get("custom_setup_name")) or None,
        market_sentiment=to_enum(Sentiment, t.get("market_sentiment"), Sentiment.NEUTRAL),
        asset_sentiment=to_enum(Sentiment, t.get("asset_sentiment"), Sentiment.NEUTRAL),
        crypto_dominance=_normalize_dominance(t.get("crypto_dominance")),
        macro_trend=_normalize_macro_trend(t.get("macro_trend")),
        mental_state=to_str(t.get("mental_state"), "Neutral"),
        reason=to_str(t.get("reason")),
        motive=to_str(t.get("motive")),
        trade_location=to_enum(TradeLocation, t.get("trade_location"), TradeLocation.HOME),
        trade_device=to_enum(TradeDevice, t.get("trade_device"), TradeDevice.LAPTOP),
        notes_user=to_str(t.get("notes_user")),
        thesis=to_str(t.get("thesis")),
        images=_normalize_images(t.get("images")),
        risk_r=to_float(t.get("risk_r"), 1.0),
        entry=to_float(t.get("entry")),
        stop_loss=to_float(t.get("stop_loss")),
        take_profits=_normalize_take_profits(t.get("take_profits")),
        position_size_units=original,
        remaining_position_size_units=remaining,
        rr=to_float(t.get("rr")),
        partial_exits=_normalize_partial_exits(t.get("partial_exits"), original),
        pnl=_normalize_pnl(t.get("pnl")),
        exit_price=exit_price if exit_price > 0 else None,
        exit_datetime=to_datetime(t.get("exit_datetime")),
        closing_note=to_str(t.get("closing_note")) or None,
        quality_score=to_float(t.get("quality_score")),
        execution_quality=to_enum(Grade, t.get("execution_quality"), Grade.C),
        alerts_triggered=_str_list(t.get("alerts_triggered")),
        coach_notes=to_str(t.get("coach_notes")) or None,
    )


def normalize_profile(raw: Any) -> UserProfile:
    p = raw if isinstance(raw, dict) else {}
    accounts = []
    for item in p.get("accounts") or []:
        if not isinstance(item, dict) or not item.get("id"):
            continue
        accounts.append(
            Account(
                id=str(item["id"]),
                name=to_str(item.get("name")),
                currency=to_str(item.get("currency"), "USD") or "USD",
                starting_capital=to_float(item.get("starting_capital")),
                current_capital=to_float(item.get("current_capital")),
                markets=_enum_list(Market, item.get("markets")),
            )
        )
    return UserProfile(
        name=to_str(p.get("name")),
        trader_style=to_enum(TraderStyle, p.get("trader_style"), TraderStyle.DAY_TRADER),
        secondary_styles=_enum_list(TraderStyle, p.get("secondary_styles")),
        primary_markets=_enum_list(Market, p.get("primary_markets")),
        secondary_markets=_enum_list(Market, p.get("secondary_markets")),
        accounts=accounts,
        strengths=_str_list(p.get("strengths")),
        weaknesses=_str_list(p.get("weaknesses")),
        setups_by_account=_str_list_map(p.get("setups_by_account")),
        assets_by_account=_str_list_map(p.get("assets_by_account")),
    )


def normalize_chat(raw: Any) -> list[ChatMessage]:
    if not isinstance(raw, list):
        return []
    messages = []
    for item in raw:
        if not isinstance(item, dict) or item.get("role") not in ("user", "assistant"):
            continue
        messages.append(
            ChatMessage(
                role=item["role"],
                content=to_str(item.get("content")),
                timestamp=to_datetime(item.get("timestamp"), utcnow()),
            )
        )
    return messages


def _enum_list(enum_cls: type[Enum], value: Any) -> list:
    if not isinstance(value, list):
        return []
    members = [to_enum(enum_cls, v, None) for v in value]
    return [m for m in members if m is not None]


def _str_list_map(value: Any) -> dict[str, list[str]]:
    if not isinstance(value, dict):
        return {}
    return {str(k): _str_list(v) for k, v in value.items()}


def to_jsonable(obj: Any) -> Any:
    """Dataclass output of ``asdict`` to plain JSON types."""
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        if obj.tzinfo is None:
            return obj.isoformat()
        return obj.astimezone(timezone.utc).isoformat()
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [to_jsonable(v) for v in obj]
    return obj


def trade_to_dict(trade: Trade) -> dict:
    return to_jsonable(asdict(trade))


def profile_to_dict(profile: UserProfile) -> dict:
    return to_jsonable(asdict(profile))
