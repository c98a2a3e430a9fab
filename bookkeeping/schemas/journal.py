"""
Pydantic schemas for journal entry operations.

Line amounts are deliberately left unconstrained here: the
journal validator checks every rule and reports all violations
at once, which a per-field schema error would cut short.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from bookkeeping.models.enums import EntryStatus


# --- Request Schemas ---

class JournalLineCreate(BaseModel):
    """A single proposed debit or credit line."""
    account_id: int | None = None
    debit: Decimal | None = None
    credit: Decimal | None = None
    description: str | None = Field(default=None, max_length=255)


class JournalEntryCreate(BaseModel):
    """A proposed journal entry. date defaults to today."""
    date: dt.date | None = None
    description: str | None = None
    lines: list[JournalLineCreate] = Field(default_factory=list)


class RejectRequest(BaseModel):
    reason: str = ""


# --- Response Schemas ---

class JournalLineResponse(BaseModel):
    id: int
    line_no: int
    account_id: int
    debit: Decimal
    credit: Decimal
    description: str | None

    model_config = {"from_attributes": True}


class JournalEntryResponse(BaseModel):
    id: int
    date: dt.date
    status: EntryStatus
    created_by: str
    total_debit: Decimal
    total_credit: Decimal
    description: str | None
    reviewed_by: str | None
    reviewed_at: dt.datetime | None
    posted_at: dt.datetime | None
    created_at: dt.datetime
    lines: list[JournalLineResponse]

    model_config = {"from_attributes": True}
