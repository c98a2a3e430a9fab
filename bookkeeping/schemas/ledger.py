"""
Pydantic schemas for ledger and report reads.

These define the API contract for read-only consumers.
Presentation (number formatting, layout) is left to clients.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel

from bookkeeping.models.enums import AccountCategory, NormalSide


class LedgerRowResponse(BaseModel):
    id: int
    journal_entry_id: int
    account_id: int
    account_number: str
    account_name: str
    date: dt.date
    description: str
    debit: Decimal
    credit: Decimal
    balance: Decimal
    created_at: dt.datetime

    model_config = {"from_attributes": True}


class TrialBalanceLine(BaseModel):
    account_id: int
    account_number: str
    account_name: str
    normal_side: NormalSide
    debit: Decimal
    credit: Decimal


class TrialBalanceResponse(BaseModel):
    lines: list[TrialBalanceLine]
    total_debit: Decimal
    total_credit: Decimal
    is_balanced: bool
    as_of: dt.date | None


class IncomeStatementLine(BaseModel):
    account_id: int
    account_number: str
    account_name: str
    category: AccountCategory
    amount: Decimal


class IncomeStatementResponse(BaseModel):
    revenues: list[IncomeStatementLine]
    expenses: list[IncomeStatementLine]
    total_revenue: Decimal
    total_expense: Decimal
    net_income: Decimal
    date_from: dt.date | None
    date_to: dt.date | None


class AccountMismatch(BaseModel):
    account_id: int
    account_number: str
    stored_balance: Decimal
    expected_balance: Decimal


class IntegrityResponse(BaseModel):
    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal
    is_balanced: bool
    mismatched_accounts: list[AccountMismatch]


class RetainedEarningsResponse(BaseModel):
    beginning_retained_earnings: Decimal
    net_income: Decimal
    dividends: Decimal
    ending_retained_earnings: Decimal
    # Account numbers counted as dividends declared
    dividend_accounts: list[str]
