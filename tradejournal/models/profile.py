"""Trader profile row. Single-user journal, so there is only ever one."""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from tradejournal.database import Base

PROFILE_ROW_ID = 1


class ProfileRecord(Base):
    __tablename__ = "journal_profile"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=PROFILE_ROW_ID)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
