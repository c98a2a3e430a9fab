"""
Ledger poster: turns an approved journal entry into ledger rows.

For every line, in line order:
1. Work out the signed change on the account's normal side
   (debit - credit for debit-normal, credit - debit otherwise).
2. Apply it through AccountRegistry.apply_balance_delta.
3. Append an immutable ledger row carrying the new balance.

No other code writes ledger rows or moves balances.

Posting is all-or-nothing per entry. The poster never commits:
it runs inside the caller's transaction, and any failure is
raised as PostingError so the caller rolls the whole unit of
work back. Posting an entry that already has ledger rows is a
no-op that returns the existing rows.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookkeeping.exceptions import AccountNotFoundError, PostingError
from bookkeeping.models.account import Account
from bookkeeping.models.enums import EntryStatus, NormalSide
from bookkeeping.models.journal_entry import JournalEntry, JournalLine
from bookkeeping.models.ledger_row import LedgerRow
from bookkeeping.services.account_registry import AccountRegistry, to_money
from bookkeeping.services.event_log import record_event

logger = logging.getLogger(__name__)


def balance_delta(normal_side: NormalSide, debit, credit) -> Decimal:
    """Signed change to a balance kept on the given normal side."""
    debit = to_money(debit)
    credit = to_money(credit)
    if normal_side == NormalSide.DEBIT:
        return debit - credit
    return credit - debit


class LedgerPoster:

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountRegistry(db)

    def get_rows_for_entry(self, entry_id: int) -> list[LedgerRow]:
        rows = self.db.execute(
            select(LedgerRow)
            .where(LedgerRow.journal_entry_id == entry_id)
            .order_by(LedgerRow.id)
        ).scalars().all()
        return list(rows)

    def post_entry(self, entry_id: int, actor: str | None = None) -> list[LedgerRow]:
        """
        Post an approved entry and return its ledger rows.

        Raises PostingError (with the failing line number where
        there is one) if the entry cannot be posted completely.
        """
        entry = self.db.get(JournalEntry, entry_id)
        if entry is None:
            raise PostingError(entry_id, "journal entry not found")

        existing = self.get_rows_for_entry(entry_id)
        if existing or entry.posted_at is not None:
            logger.info("Journal entry %s already posted; skipping", entry_id)
            return existing

        if entry.status != EntryStatus.APPROVED:
            raise PostingError(
                entry_id,
                f"entry is {entry.status.value}; only approved entries are posted",
            )

        lines = self.db.execute(
            select(JournalLine)
            .where(JournalLine.entry_id == entry_id)
            .order_by(JournalLine.line_no)
        ).scalars().all()
        if not lines:
            raise PostingError(entry_id, "entry has no lines")

        rows = []
        for line in lines:
            try:
                rows.append(self._post_line(entry, line))
            except PostingError as exc:
                logger.error("%s", exc)
                raise
            except (AccountNotFoundError, SQLAlchemyError) as exc:
                logger.error(
                    "Posting journal entry %s failed at line %s: %s",
                    entry_id, line.line_no, exc,
                )
                raise PostingError(entry_id, str(exc), line_no=line.line_no) from exc

        try:
            entry.posted_at = datetime.utcnow()
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.error("Marking journal entry %s posted failed: %s", entry_id, exc)
            raise PostingError(entry_id, str(exc)) from exc

        logger.info("Posted journal entry %s (%d ledger rows)", entry_id, len(rows))
        record_event(
            self.db, "journal_posted", actor,
            entry_id=entry_id,
            rows=[
                {
                    "account_number": row.account_number,
                    "debit": str(row.debit),
                    "credit": str(row.credit),
                    "balance": str(row.balance),
                }
                for row in rows
            ],
        )
        return rows

    def _post_line(self, entry: JournalEntry, line: JournalLine) -> LedgerRow:
        account = self.db.get(Account, line.account_id)
        if account is None:
            raise PostingError(
                entry.id, f"account {line.account_id} not found", line_no=line.line_no
            )
        if not account.is_active:
            raise PostingError(
                entry.id,
                f"account {account.account_number} is not active",
                line_no=line.line_no,
            )

        delta = balance_delta(account.normal_side, line.debit, line.credit)
        new_balance = self.accounts.apply_balance_delta(account.id, delta)

        description = (line.description or "").strip() or f"Journal #{entry.id}"
        row = LedgerRow(
            journal_entry_id=entry.id,
            journal_line_id=line.id,
            account_id=account.id,
            account_number=account.account_number,
            account_name=account.name,
            date=entry.date,
            description=description,
            debit=to_money(line.debit),
            credit=to_money(line.credit),
            balance=new_balance,
        )
        self.db.add(row)
        self.db.flush()
        return row
