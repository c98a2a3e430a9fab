"""
Journal entry and journal line models.

A journal entry is a proposed set of debits and credits that
must balance. It waits in PENDING until someone with posting
authority approves or rejects it. Only approved entries reach
the ledger.

The entry has a state machine governing its lifecycle.
Invalid state transitions are rejected.
"""

import datetime as dt
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, Text, ForeignKey,
    UniqueConstraint, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookkeeping.models.account import enum_values
from bookkeeping.models.base import Base
from bookkeeping.models.enums import EntryStatus


# Valid state transitions, the source of truth for the state machine
VALID_TRANSITIONS: dict[EntryStatus, set[EntryStatus]] = {
    EntryStatus.PENDING: {EntryStatus.APPROVED, EntryStatus.REJECTED},
    EntryStatus.APPROVED: set(),  # Terminal; posted and immutable
    EntryStatus.REJECTED: set(),  # Terminal
}


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[EntryStatus] = mapped_column(
        SAEnum(
            EntryStatus,
            name="entry_status_enum",
            create_constraint=True,
            values_callable=enum_values,
        ),
        nullable=False,
        default=EntryStatus.PENDING,
        index=True,
    )
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    total_debit: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False
    )
    total_credit: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False
    )
    # Free text; holds the rejection reason once rejected
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    reviewed_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    posted_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, default=dt.datetime.utcnow
    )

    lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="entry",
        order_by="JournalLine.line_no",
    )

    def can_transition_to(self, new_status: EntryStatus) -> bool:
        """Check if a state transition is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    @property
    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS.get(self.status)

    def __repr__(self) -> str:
        return f"<JournalEntry #{self.id} {self.date} ({self.status.value})>"


class JournalLine(Base):
    """
    One debit or credit line of a journal entry.

    Exactly one of debit/credit is positive. An account
    appears at most once per entry.
    """

    __tablename__ = "journal_lines"
    __table_args__ = (
        UniqueConstraint("entry_id", "account_id", name="uq_journal_line_account"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=False, index=True
    )
    line_no: Mapped[int] = mapped_column(nullable=False)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    debit: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    credit: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    entry: Mapped["JournalEntry"] = relationship(back_populates="lines")
    account: Mapped["Account"] = relationship()

    def __repr__(self) -> str:
        return (
            f"<JournalLine #{self.entry_id}.{self.line_no} "
            f"D {self.debit} / C {self.credit}>"
        )
