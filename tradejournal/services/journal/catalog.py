"""Reference vocabularies used by trade entry and the quality scorer."""

from tradejournal.services.journal.types import Market

SETUPS_POSITIVE = [
    "Trend continuation",
    "Reversal at major level",
    "Pullback",
    "Breakout with confirmation",
]

SETUPS_NEGATIVE = [
    "Following another trader",
    "Following an influencer",
    "Chasing price",
    "FOMO",
    "Emotional impulse",
    "No clear plan",
]

OTHER_SETUP = "Other setup"

BASE_SETUPS = [*SETUPS_POSITIVE, *SETUPS_NEGATIVE, OTHER_SETUP]

TRADE_MOTIVES = [
    "Following my plan",
    "Plan continuation",
    "Exceptional opportunity",
    "Recover a loss",
    "Following another trader",
    "Boredom",
    "FOMO",
    "Emotional impulse",
    "Other",
]

MOTIVES_NEGATIVE = [
    "Recover a loss",
    "Boredom",
    "FOMO",
    "Emotional impulse",
]

DEFAULT_MOTIVE = "No motive"

MENTAL_STATES = [
    "Calm",
    "Confident",
    "FOMO",
    "Revenge",
    "Anxiety",
    "Uncertainty",
    "Neutral",
    "Euphoria",
    "Fear",
    "Boredom",
]

MENTAL_STATES_CRITICAL = ["FOMO", "Revenge"]
MENTAL_STATES_UNSTABLE = ["Anxiety", "Uncertainty", "Fear"]
MENTAL_STATES_OPTIMAL = ["Calm", "Confident"]

# Mental states that count toward the repeated-pattern rule
MENTAL_STATES_RECURRING = ["FOMO", "Revenge", "Anxiety"]

TIMEFRAMES = ["1m", "5m", "15m", "1h", "4h", "Daily", "Weekly"]

ASSETS_BY_MARKET: dict[Market, list[str]] = {
    Market.CRYPTO: [
        "BTC/USDT", "ETH/USDT", "SOL/USDT", "BNB/USDT", "XRP/USDT",
        "ADA/USDT", "AVAX/USDT", "DOGE/USDT", "DOT/USDT", "LINK/USDT",
    ],
    Market.FOREX: [
        "EURUSD", "GBPUSD", "USDJPY", "AUDUSD", "USDCAD",
        "USDCHF", "NZDUSD", "EURGBP", "EURJPY", "GBPJPY",
    ],
    Market.INDICES: [
        "S&P 500", "NASDAQ 100", "DOW JONES", "DAX 40",
        "FTSE 100", "IBEX 35", "NIKKEI 225", "RUSSELL 2000",
    ],
    Market.STOCKS: ["AAPL", "TSLA", "NVDA", "AMZN", "MSFT", "GOOGL", "META", "NFLX", "AMD", "COIN"],
    Market.OPTIONS: ["SPY", "QQQ", "IWM", "VIX"],
    Market.COMMODITIES: ["GOLD", "SILVER", "CRUDE OIL", "NATURAL GAS", "COPPER", "WHEAT"],
}

_BITCOIN_SYMBOLS = {"BTC", "XBT", "BTCUSD", "BTCUSDT"}


def is_bitcoin(asset: str) -> bool:
    """True for BTC itself in any of the common quote notations."""
    base = asset.strip().upper().split("/")[0].replace("-", "")
    return base in _BITCOIN_SYMBOLS
