"""
Report service: read-only views over balances and the ledger.

Nothing here writes. Trial balance and income statement figures
fold the running balances the ledger poster maintains; the
integrity check recomputes those balances from the ledger rows
to catch drift.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from bookkeeping.models.account import Account
from bookkeeping.models.enums import AccountCategory, NormalSide
from bookkeeping.models.ledger_row import LedgerRow
from bookkeeping.schemas.ledger import (
    AccountMismatch,
    IncomeStatementLine,
    IncomeStatementResponse,
    IntegrityResponse,
    RetainedEarningsResponse,
    TrialBalanceLine,
    TrialBalanceResponse,
)
from bookkeeping.services.account_registry import AccountRegistry, to_money
from bookkeeping.services.ledger_poster import balance_delta

ZERO = Decimal("0.00")

# Dividends declared: this account number, or any account named "...dividends..."
DIVIDENDS_ACCOUNT_NUMBER = "3200"


def is_dividends_account(account: Account) -> bool:
    return (
        account.account_number == DIVIDENDS_ACCOUNT_NUMBER
        or "dividends" in account.name.lower()
    )


class ReportService:

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountRegistry(db)

    def account_ledger(self, account_id: int) -> list[LedgerRow]:
        """Ledger rows for an account, oldest first."""
        self.accounts.get_account(account_id)
        rows = self.db.execute(
            select(LedgerRow)
            .where(LedgerRow.account_id == account_id)
            .order_by(LedgerRow.id)
        ).scalars().all()
        return list(rows)

    def trial_balance(self) -> TrialBalanceResponse:
        """
        List every active account's balance in its normal column.

        A negative (abnormal) balance is shown as a positive amount
        in the opposite column.
        """
        lines = []
        total_debit = ZERO
        total_credit = ZERO

        for account in self.accounts.get_active_accounts():
            balance = to_money(account.balance)
            debit = credit = ZERO
            on_debit_side = (account.normal_side == NormalSide.DEBIT) == (balance >= 0)
            if balance != 0:
                if on_debit_side:
                    debit = abs(balance)
                else:
                    credit = abs(balance)

            total_debit += debit
            total_credit += credit
            lines.append(TrialBalanceLine(
                account_id=account.id,
                account_number=account.account_number,
                account_name=account.name,
                normal_side=account.normal_side,
                debit=debit,
                credit=credit,
            ))

        as_of = self.db.execute(select(func.max(LedgerRow.date))).scalar()

        return TrialBalanceResponse(
            lines=lines,
            total_debit=total_debit,
            total_credit=total_credit,
            is_balanced=total_debit == total_credit,
            as_of=as_of,
        )

    def income_statement(
        self, date_from: date | None = None, date_to: date | None = None
    ) -> IncomeStatementResponse:
        """
        Revenue and expense figures and net income.

        Without a date range the current balances are used. With
        one, each account's amount is its net ledger activity
        inside the range.
        """
        ranged = date_from is not None or date_to is not None
        activity = self._activity_by_account(date_from, date_to) if ranged else {}

        revenues = []
        expenses = []
        for account in self.accounts.get_active_accounts():
            if account.category not in (AccountCategory.REVENUE, AccountCategory.EXPENSE):
                continue

            if ranged:
                debits, credits = activity.get(account.id, (ZERO, ZERO))
                amount = balance_delta(account.normal_side, debits, credits)
            else:
                amount = to_money(account.balance)

            line = IncomeStatementLine(
                account_id=account.id,
                account_number=account.account_number,
                account_name=account.name,
                category=account.category,
                amount=amount,
            )
            if account.category == AccountCategory.REVENUE:
                revenues.append(line)
            else:
                expenses.append(line)

        total_revenue = sum((line.amount for line in revenues), ZERO)
        total_expense = sum((line.amount for line in expenses), ZERO)

        return IncomeStatementResponse(
            revenues=revenues,
            expenses=expenses,
            total_revenue=total_revenue,
            total_expense=total_expense,
            net_income=total_revenue - total_expense,
            date_from=date_from,
            date_to=date_to,
        )

    def retained_earnings(
        self, beginning: Decimal | None = None
    ) -> RetainedEarningsResponse:
        """
        Statement of retained earnings.

        ending = beginning + net income - dividends, where net income
        comes from the current revenue and expense balances and
        dividends is the size of each dividends account balance,
        whichever side it sits on. beginning defaults to zero.
        """
        beginning = to_money(beginning)
        net_income = self.income_statement().net_income

        dividends = ZERO
        dividend_accounts = []
        for account in self.accounts.get_active_accounts():
            if is_dividends_account(account):
                dividends += abs(to_money(account.balance))
                dividend_accounts.append(account.account_number)

        return RetainedEarningsResponse(
            beginning_retained_earnings=beginning,
            net_income=net_income,
            dividends=dividends,
            ending_retained_earnings=beginning + net_income - dividends,
            dividend_accounts=dividend_accounts,
        )

    def check_integrity(self) -> IntegrityResponse:
        """
        Verify the ledger against itself and against stored balances.

        Total ledger debits must equal total ledger credits, and
        every account's stored balance must equal its opening
        balance plus the net of its ledger rows.
        """
        total_debits, total_credits = self.db.execute(
            select(
                func.coalesce(func.sum(LedgerRow.debit), 0),
                func.coalesce(func.sum(LedgerRow.credit), 0),
            )
        ).one()
        total_debits = to_money(total_debits)
        total_credits = to_money(total_credits)

        activity = self._activity_by_account()
        mismatches = []
        accounts = self.db.execute(
            select(Account).order_by(Account.account_number)
        ).scalars().all()
        for account in accounts:
            debits, credits = activity.get(account.id, (ZERO, ZERO))
            expected = to_money(account.initial_balance) + balance_delta(
                account.normal_side, debits, credits
            )
            stored = to_money(account.balance)
            if stored != expected:
                mismatches.append(AccountMismatch(
                    account_id=account.id,
                    account_number=account.account_number,
                    stored_balance=stored,
                    expected_balance=expected,
                ))

        return IntegrityResponse(
            total_debits=total_debits,
            total_credits=total_credits,
            difference=total_debits - total_credits,
            is_balanced=total_debits == total_credits,
            mismatched_accounts=mismatches,
        )

    def _activity_by_account(
        self, date_from: date | None = None, date_to: date | None = None
    ) -> dict[int, tuple[Decimal, Decimal]]:
        stmt = select(
            LedgerRow.account_id,
            func.coalesce(func.sum(LedgerRow.debit), 0),
            func.coalesce(func.sum(LedgerRow.credit), 0),
        ).group_by(LedgerRow.account_id)
        if date_from is not None:
            stmt = stmt.where(LedgerRow.date >= date_from)
        if date_to is not None:
            stmt = stmt.where(LedgerRow.date <= date_to)

        return {
            account_id: (to_money(debits), to_money(credits))
            for account_id, debits, credits in self.db.execute(stmt).all()
        }
