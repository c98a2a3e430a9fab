"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class AccountCategory(str, enum.Enum):
    """The five fundamental accounting categories."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class NormalSide(str, enum.Enum):
    """The side on which an account's balance is positive."""
    DEBIT = "debit"
    CREDIT = "credit"


class StatementType(str, enum.Enum):
    BALANCE_SHEET = "balance_sheet"
    INCOME_STATEMENT = "income_statement"


class EntryStatus(str, enum.Enum):
    """Journal entry workflow states."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Debit-normal categories; everything else is credit-normal.
DEBIT_NORMAL_CATEGORIES = {AccountCategory.ASSET, AccountCategory.EXPENSE}

INCOME_STATEMENT_CATEGORIES = {AccountCategory.REVENUE, AccountCategory.EXPENSE}


def default_normal_side(category: AccountCategory) -> NormalSide:
    if category in DEBIT_NORMAL_CATEGORIES:
        return NormalSide.DEBIT
    return NormalSide.CREDIT


def default_statement_type(category: AccountCategory) -> StatementType:
    if category in INCOME_STATEMENT_CATEGORIES:
        return StatementType.INCOME_STATEMENT
    return StatementType.BALANCE_SHEET
