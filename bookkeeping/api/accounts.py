"""
Chart of accounts API endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookkeeping.api.deps import get_actor, http_error
from bookkeeping.exceptions import BookkeepingError, StorageError
from bookkeeping.models.base import get_db
from bookkeeping.schemas.account import AccountCreate, AccountResponse
from bookkeeping.schemas.ledger import LedgerRowResponse
from bookkeeping.services.account_registry import AccountRegistry
from bookkeeping.services.report_service import ReportService

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    request: AccountCreate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    """
    Add an account to the chart of accounts.

    Every account must exist before journal lines can use it.
    """
    service = AccountRegistry(db)
    try:
        account = service.create_account(request, actor=actor)
        db.commit()
        return account
    except BookkeepingError as e:
        db.rollback()
        raise http_error(e)
    except SQLAlchemyError as e:
        db.rollback()
        raise http_error(StorageError("create account", str(e)))


@router.get("", response_model=list[AccountResponse])
def list_active_accounts(db: Session = Depends(get_db)):
    """Active accounts ordered by account number."""
    return AccountRegistry(db).get_active_accounts()


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(account_id: int, db: Session = Depends(get_db)):
    try:
        return AccountRegistry(db).get_account(account_id)
    except BookkeepingError as e:
        raise http_error(e)


@router.post("/{account_id}/deactivate", response_model=AccountResponse)
def deactivate_account(
    account_id: int,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    """Deactivate an account. Accounts are never deleted."""
    service = AccountRegistry(db)
    try:
        account = service.deactivate_account(account_id, actor=actor)
        db.commit()
        return account
    except BookkeepingError as e:
        db.rollback()
        raise http_error(e)
    except SQLAlchemyError as e:
        db.rollback()
        raise http_error(StorageError("deactivate account", str(e)))


@router.get("/{account_id}/ledger", response_model=list[LedgerRowResponse])
def get_account_ledger(account_id: int, db: Session = Depends(get_db)):
    """Ledger rows for an account, oldest first."""
    try:
        return ReportService(db).account_ledger(account_id)
    except BookkeepingError as e:
        raise http_error(e)
