"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from bookkeeping.models.base import Base
from bookkeeping.models.enums import (
    AccountCategory,
    NormalSide,
    StatementType,
    EntryStatus,
)
from bookkeeping.models.event_log import EventLog
from bookkeeping.models.account import Account
from bookkeeping.models.journal_entry import JournalEntry, JournalLine
from bookkeeping.models.ledger_row import LedgerRow

__all__ = [
    "Base",
    "AccountCategory",
    "NormalSide",
    "StatementType",
    "EntryStatus",
    "EventLog",
    "Account",
    "JournalEntry",
    "JournalLine",
    "LedgerRow",
]
