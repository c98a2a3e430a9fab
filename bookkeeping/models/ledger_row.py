"""
Ledger row model.

One row per posted journal line. Rows are immutable: once
posted, they are never modified or deleted. Read in id order,
the rows for an account reconstruct its balance history.
"""

import datetime as dt
from decimal import Decimal

from sqlalchemy import String, Date, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from bookkeeping.models.base import Base


class LedgerRow(Base):
    """
    An immutable ledger line.

    account_number and account_name are copied from the account
    at post time so the audit trail keeps the identity the account
    had when the entry was posted, even if it is renamed later.
    """

    __tablename__ = "ledger"

    id: Mapped[int] = mapped_column(primary_key=True)
    journal_entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=False, index=True
    )
    # Unique: a journal line is posted at most once
    journal_line_id: Mapped[int] = mapped_column(
        ForeignKey("journal_lines.id"), nullable=False, unique=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    account_number: Mapped[str] = mapped_column(String(20), nullable=False)
    account_name: Mapped[str] = mapped_column(String(100), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    debit: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    credit: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    # Account balance after this row was applied
    balance: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, default=dt.datetime.utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerRow {self.account_number} #{self.journal_entry_id} "
            f"D {self.debit} / C {self.credit} = {self.balance}>"
        )
