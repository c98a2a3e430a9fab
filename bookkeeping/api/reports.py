"""
Report API endpoints.

Read-only JSON figures; layout and number formatting are the
client's business.
"""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookkeeping.models.base import get_db
from bookkeeping.schemas.ledger import (
    IncomeStatementResponse,
    IntegrityResponse,
    RetainedEarningsResponse,
    TrialBalanceResponse,
)
from bookkeeping.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/trial-balance", response_model=TrialBalanceResponse)
def trial_balance(db: Session = Depends(get_db)):
    return ReportService(db).trial_balance()


@router.get("/income-statement", response_model=IncomeStatementResponse)
def income_statement(
    date_from: date | None = None,
    date_to: date | None = None,
    db: Session = Depends(get_db),
):
    return ReportService(db).income_statement(date_from=date_from, date_to=date_to)


@router.get("/retained-earnings", response_model=RetainedEarningsResponse)
def retained_earnings(
    beginning: Decimal = Decimal("0.00"),
    db: Session = Depends(get_db),
):
    """Beginning retained earnings + net income - dividends declared."""
    return ReportService(db).retained_earnings(beginning=beginning)


@router.get("/integrity", response_model=IntegrityResponse)
def integrity(db: Session = Depends(get_db)):
    """
    Check that ledger debits equal credits and that stored
    balances agree with the ledger.
    """
    return ReportService(db).check_integrity()
