"""Reference vocabularies for the trade entry form."""

from fastapi import APIRouter

from tradejournal.services.journal import catalog

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


@router.get("")
async def get_catalog():
    """Setups, motives, mental states, timeframes and common assets per market.

    Negative entries are flagged so the form can warn before the scorer does.
    """
    return {
        "setups": {
            "positive": catalog.SETUPS_POSITIVE,
            "negative": catalog.SETUPS_NEGATIVE,
            "other": catalog.OTHER_SETUP,
            "all": catalog.BASE_SETUPS,
        },
        "motives": {
            "all": catalog.TRADE_MOTIVES,
            "negative": catalog.MOTIVES_NEGATIVE,
            "default": catalog.DEFAULT_MOTIVE,
        },
        "mental_states": {
            "all": catalog.MENTAL_STATES,
            "critical": catalog.MENTAL_STATES_CRITICAL,
            "unstable": catalog.MENTAL_STATES_UNSTABLE,
            "optimal": catalog.MENTAL_STATES_OPTIMAL,
        },
        "timeframes": catalog.TIMEFRAMES,
        "assets": {market.value: assets for market, assets in catalog.ASSETS_BY_MARKET.items()},
    }
