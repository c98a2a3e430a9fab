"""
Event log model.

Records significant business events (account created, entry
submitted, approved, rejected, posted) for later review.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from bookkeeping.models.base import Base


class EventLog(Base):
    """
    Immutable record of a business event.

    Like ledger rows, event records are append-only.
    details holds a JSON document.
    """

    __tablename__ = "event_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    actor: Mapped[str | None] = mapped_column(String(100), nullable=True)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
