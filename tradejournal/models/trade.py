"""Persisted trade row. The payload column holds the full journal entry."""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tradejournal.database import Base


class TradeRecord(Base):
    """One journal trade. Columns outside `payload` exist for querying only."""

    __tablename__ = "journal_trades"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)  # insertion order in the journal
    asset: Mapped[str] = mapped_column(String(40), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(10), nullable=False, index=True)  # Open, Closed
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
