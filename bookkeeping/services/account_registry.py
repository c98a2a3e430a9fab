"""
Account registry: the chart of accounts.

Creates, looks up and deactivates accounts, and owns the one
operation that changes an account balance: apply_balance_delta.
No accounting rules are checked here; callers decide whether
a delta makes sense.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select, update, or_, func
from sqlalchemy.orm import Session

from bookkeeping.exceptions import (
    AccountNotFoundError,
    DuplicateAccountError,
    ValidationError,
)
from bookkeeping.models.account import Account
from bookkeeping.models.enums import default_normal_side, default_statement_type
from bookkeeping.schemas.account import AccountCreate
from bookkeeping.services.event_log import record_event

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Round an amount to currency precision (half-up, 2 places)."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class AccountRegistry:
    """
    All chart-of-accounts access passes through this class.

    The registry takes a database session as a constructor
    argument and never commits; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def create_account(
        self, request: AccountCreate, actor: str | None = None
    ) -> Account:
        """
        Add an account to the chart of accounts.

        Account numbers are digits only. Numbers and names are
        unique. The opening balance becomes the current balance.
        """
        number = request.account_number.strip()
        name = request.name.strip()

        errors = []
        if not number.isdigit():
            errors.append("Account number must be digits only")
        if not name:
            errors.append("Account name is required")
        if errors:
            raise ValidationError(errors)

        existing = self.db.execute(
            select(Account).where(
                or_(Account.account_number == number, Account.name == name)
            ).limit(1)
        ).scalar_one_or_none()

        if existing:
            raise DuplicateAccountError(
                f"Account with number '{number}' or name '{name}' already exists"
            )

        opening = to_money(request.initial_balance)
        account = Account(
            account_number=number,
            name=name,
            category=request.category,
            subcategory=request.subcategory,
            normal_side=request.normal_side or default_normal_side(request.category),
            statement_type=(
                request.statement_type or default_statement_type(request.category)
            ),
            initial_balance=opening,
            balance=opening,
            description=request.description,
        )
        self.db.add(account)
        self.db.flush()

        logger.info("Created account %s %s", account.account_number, account.name)
        record_event(
            self.db, "account_created", actor,
            account_id=account.id,
            account_number=account.account_number,
            account_name=account.name,
            normal_side=account.normal_side.value,
            initial_balance=str(opening),
        )
        return account

    def get_account(self, account_id: int) -> Account:
        account = self.db.get(Account, account_id)
        if not account:
            raise AccountNotFoundError(account_id)
        return account

    def get_account_by_number(self, account_number: str) -> Account:
        account = self.db.execute(
            select(Account).where(Account.account_number == account_number)
        ).scalar_one_or_none()
        if not account:
            raise AccountNotFoundError(account_number)
        return account

    def get_active_accounts(self) -> list[Account]:
        """Return active accounts ordered by account number."""
        accounts = self.db.execute(
            select(Account)
            .where(Account.is_active.is_(True))
            .order_by(Account.account_number)
        ).scalars().all()
        return list(accounts)

    def get_accounts(self, account_ids) -> dict[int, Account]:
        """Load several accounts at once, keyed by id. Missing ids are omitted."""
        ids = {account_id for account_id in account_ids if account_id is not None}
        if not ids:
            return {}
        accounts = self.db.execute(
            select(Account).where(Account.id.in_(ids))
        ).scalars().all()
        return {account.id: account for account in accounts}

    def deactivate_account(
        self, account_id: int, actor: str | None = None
    ) -> Account:
        """
        Soft-delete an account.

        Accounts are never removed because ledger rows and journal
        lines keep referring to them. Deactivating twice is a no-op.
        """
        account = self.get_account(account_id)
        if not account.is_active:
            return account

        account.is_active = False
        self.db.flush()

        logger.info("Deactivated account %s", account.account_number)
        record_event(
            self.db, "account_deactivated", actor,
            account_id=account.id,
            account_number=account.account_number,
        )
        return account

    def apply_balance_delta(self, account_id: int, delta) -> Decimal:
        """
        Add delta to an account balance and return the new balance.

        The read-modify-write happens inside a single UPDATE
        statement, so concurrent postings against the same account
        serialize on the row in the database instead of overwriting
        each other's result.
        """
        delta = to_money(delta)
        result = self.db.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(balance=func.round(Account.balance + delta, 2))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise AccountNotFoundError(account_id)

        # Re-read our own write; this also refreshes any copy of
        # the account already loaded in the session.
        account = self.db.get(Account, account_id)
        self.db.refresh(account, attribute_names=["balance"])
        new_balance = to_money(account.balance)

        logger.debug(
            "Account %s balance delta %s -> %s", account_id, delta, new_balance
        )
        return new_balance
