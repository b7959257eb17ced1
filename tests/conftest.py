"""Shared test fixtures."""

from datetime import datetime, timezone

import pytest

from tradejournal.services.journal.types import Account, Market, TraderStyle, UserProfile
from tradejournal.services.repository import (
    InMemoryChatRepository,
    InMemoryProfileRepository,
    InMemoryTradeRepository,
)

ACCOUNT_ID = "acc-main"
TRADE_TIME = datetime(2026, 3, 4, 14, 30, tzinfo=timezone.utc)  # Wednesday


@pytest.fixture
def profile() -> UserProfile:
    """Day trader with one $10,000 account."""
    return UserProfile(
        name="Test Trader",
        trader_style=TraderStyle.DAY_TRADER,
        primary_markets=[Market.CRYPTO, Market.FOREX],
        accounts=[
            Account(
                id=ACCOUNT_ID,
                name="Main",
                starting_capital=10_000.0,
                current_capital=10_000.0,
                markets=[Market.CRYPTO, Market.FOREX],
            )
        ],
        strengths=["Patience"],
        weaknesses=["Overtrading"],
    )


@pytest.fixture
def trade_repo() -> InMemoryTradeRepository:
    return InMemoryTradeRepository()


@pytest.fixture
def profile_repo(profile) -> InMemoryProfileRepository:
    repo = InMemoryProfileRepository()
    repo.payload = {
        "name": profile.name,
        "trader_style": profile.trader_style.value,
        "accounts": [{"id": ACCOUNT_ID, "name": "Main", "current_capital": 10_000, "starting_capital": 10_000}],
    }
    return repo


@pytest.fixture
def chat_repo() -> InMemoryChatRepository:
    return InMemoryChatRepository()
