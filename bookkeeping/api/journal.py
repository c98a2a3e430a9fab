"""
Journal entry API endpoints.

Routes are thin: they call JournalService, commit on success
and roll back on any error. Rolling back on PostingError is what
keeps a failed approval from leaving the entry approved.
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookkeeping.api.deps import get_actor, get_authorizer, http_error
from bookkeeping.exceptions import BookkeepingError, PostingError, StorageError
from bookkeeping.models.base import get_db
from bookkeeping.models.enums import EntryStatus
from bookkeeping.schemas.journal import (
    JournalEntryCreate,
    JournalEntryResponse,
    RejectRequest,
)
from bookkeeping.services.authorization import Authorizer
from bookkeeping.services.journal_service import JournalService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/journal", tags=["Journal"])


def _fail(db: Session, exc: BookkeepingError):
    db.rollback()
    if isinstance(exc, PostingError):
        logger.error(
            "Posting failed; entry %s left unposted: %s", exc.entry_id, exc.reason
        )
    return http_error(exc)


def _storage_failure(db: Session, action: str, exc: SQLAlchemyError, entry_id=None):
    logger.error("Database failure during %s: %s", action, exc)
    return _fail(db, StorageError(action, str(exc), entry_id))


@router.post("/entries", response_model=JournalEntryResponse, status_code=201)
def create_entry(
    request: JournalEntryCreate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
    authorizer: Authorizer = Depends(get_authorizer),
):
    """
    Submit a journal entry.

    Entries from actors with posting authority are approved and
    posted right away; everyone else's wait for approval.
    """
    service = JournalService(db, authorizer=authorizer)
    try:
        entry = service.create_entry(
            actor,
            request.lines,
            entry_date=request.date,
            description=request.description,
        )
        db.commit()
        db.refresh(entry)
        return entry
    except BookkeepingError as e:
        raise _fail(db, e)
    except SQLAlchemyError as e:
        raise _storage_failure(db, "store journal entry", e)


@router.get("/entries", response_model=list[JournalEntryResponse])
def list_entries(
    status: EntryStatus | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    q: str | None = Query(default=None, max_length=100),
    db: Session = Depends(get_db),
):
    """List entries newest first, optionally filtered."""
    service = JournalService(db)
    return service.list_entries(
        status=status, date_from=date_from, date_to=date_to, text=q
    )


@router.get("/entries/{entry_id}", response_model=JournalEntryResponse)
def get_entry(entry_id: int, db: Session = Depends(get_db)):
    try:
        return JournalService(db).get_entry(entry_id)
    except BookkeepingError as e:
        raise http_error(e)


@router.post("/entries/{entry_id}/approve", response_model=JournalEntryResponse)
def approve_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
    authorizer: Authorizer = Depends(get_authorizer),
):
    """
    Approve a pending entry and post it to the ledger.

    409 means someone else already decided this entry; refresh
    rather than retry.
    """
    service = JournalService(db, authorizer=authorizer)
    try:
        entry = service.approve_entry(actor, entry_id)
        db.commit()
        db.refresh(entry)
        return entry
    except BookkeepingError as e:
        raise _fail(db, e)
    except SQLAlchemyError as e:
        raise _storage_failure(db, "approve journal entry", e, entry_id)


@router.post("/entries/{entry_id}/reject", response_model=JournalEntryResponse)
def reject_entry(
    entry_id: int,
    request: RejectRequest,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
    authorizer: Authorizer = Depends(get_authorizer),
):
    """Reject a pending entry with a reason."""
    service = JournalService(db, authorizer=authorizer)
    try:
        entry = service.reject_entry(actor, entry_id, request.reason)
        db.commit()
        db.refresh(entry)
        return entry
    except BookkeepingError as e:
        raise _fail(db, e)
    except SQLAlchemyError as e:
        raise _storage_failure(db, "reject journal entry", e, entry_id)
