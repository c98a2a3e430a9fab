"""
Event log API endpoint.

Read-only view of committed business events, newest first.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from bookkeeping.models.base import get_db
from bookkeeping.models.event_log import EventLog
from bookkeeping.schemas.event_log import EventLogResponse

router = APIRouter(prefix="/events", tags=["Events"])


@router.get("", response_model=list[EventLogResponse])
def list_events(
    event_type: str | None = None,
    actor: str | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    stmt = select(EventLog)
    if event_type:
        stmt = stmt.where(EventLog.event_type == event_type)
    if actor:
        stmt = stmt.where(EventLog.actor == actor)
    stmt = stmt.order_by(EventLog.id.desc()).limit(limit)
    return db.execute(stmt).scalars().all()
