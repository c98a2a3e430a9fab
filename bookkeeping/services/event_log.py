"""
Business event notifications.

Services call record_event() after a successful state change
(entry submitted, approved, rejected, posted; account added or
deactivated). Events are held on the session and handed to
subscribers only after the surrounding transaction commits;
a rollback discards them, so nothing is announced that did not
happen.

Delivery is best-effort. A failing subscriber is logged and
skipped: event logging never blocks or rolls back the business
transaction it describes.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from sqlalchemy import event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session

from bookkeeping.models.event_log import EventLog

logger = logging.getLogger(__name__)

_PENDING_KEY = "bookkeeping.pending_events"


@dataclass(frozen=True)
class BusinessEvent:
    event_type: str
    actor: str | None
    details: dict = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=datetime.utcnow)


Subscriber = Callable[[Engine | Connection, BusinessEvent], None]

_subscribers: list[Subscriber] = []


def subscribe(subscriber: Subscriber) -> Subscriber:
    """Register a callback invoked once per committed event."""
    if subscriber not in _subscribers:
        _subscribers.append(subscriber)
    return subscriber


def unsubscribe(subscriber: Subscriber) -> None:
    if subscriber in _subscribers:
        _subscribers.remove(subscriber)


def record_event(
    db: Session, event_type: str, actor: str | None = None, **details
) -> BusinessEvent:
    """Queue an event for delivery when db's transaction commits."""
    business_event = BusinessEvent(
        event_type=event_type, actor=actor, details=details
    )
    db.info.setdefault(_PENDING_KEY, []).append(business_event)
    return business_event


def pending_events(db: Session) -> list[BusinessEvent]:
    return list(db.info.get(_PENDING_KEY, []))


@event.listens_for(Session, "after_commit")
def _dispatch_pending_events(session: Session) -> None:
    events = session.info.pop(_PENDING_KEY, [])
    if not events:
        return

    bind = session.get_bind()
    for business_event in events:
        logger.info(
            "event=%s actor=%s details=%s",
            business_event.event_type,
            business_event.actor,
            business_event.details,
        )
        for subscriber in list(_subscribers):
            try:
                subscriber(bind, business_event)
            except Exception:
                logger.exception(
                    "Event subscriber %s failed for %s",
                    getattr(subscriber, "__name__", subscriber),
                    business_event.event_type,
                )


@event.listens_for(Session, "after_rollback")
def _discard_pending_events(session: Session) -> None:
    discarded = session.info.pop(_PENDING_KEY, [])
    if discarded:
        logger.debug("Discarded %d uncommitted event(s)", len(discarded))


def write_event_log(bind: Engine | Connection, business_event: BusinessEvent) -> None:
    """
    Persist an event to the event_log table.

    Runs in its own session because the business transaction
    has already committed by the time events are delivered.
    """
    with Session(bind=bind) as db:
        db.add(EventLog(
            event_type=business_event.event_type,
            actor=business_event.actor,
            details=json.dumps(business_event.details, default=str),
            created_at=business_event.occurred_at,
        ))
        db.commit()


subscribe(write_event_log)
