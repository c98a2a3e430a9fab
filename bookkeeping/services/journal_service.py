"""
Journal service: the journal entry lifecycle.

    pending --approve--> approved (posted to the ledger)
    pending --reject---> rejected

approved and rejected are terminal. Every transition is a
compare-and-swap UPDATE guarded by status = 'pending', so two
reviewers acting on the same entry cannot both succeed: the
loser sees zero rows updated and gets a ConflictError instead
of posting the entry a second time.

Approval and posting share the caller's transaction. If posting
fails the caller rolls back and the entry is still pending;
an entry is never left approved but unposted.
"""

import logging
from datetime import date, datetime

from sqlalchemy import select, update, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from bookkeeping.config import get_settings
from bookkeeping.exceptions import (
    ConflictError,
    EntryNotFoundError,
    StorageError,
    ValidationError,
)
from bookkeeping.models.account import Account
from bookkeeping.models.enums import EntryStatus
from bookkeeping.models.journal_entry import JournalEntry, JournalLine
from bookkeeping.services.account_registry import AccountRegistry, to_money
from bookkeeping.services.authorization import Authorizer, SettingsRoleResolver
from bookkeeping.services.event_log import record_event
from bookkeeping.services.journal_validator import validate_lines, line_value
from bookkeeping.services.ledger_poster import LedgerPoster

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """LIKE pattern matching text anywhere, with % and _ taken literally."""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


class JournalService:

    def __init__(
        self,
        db: Session,
        authorizer: Authorizer | None = None,
        auto_approve: bool | None = None,
    ):
        self.db = db
        self.authorizer = authorizer or Authorizer(SettingsRoleResolver())
        if auto_approve is None:
            auto_approve = get_settings().AUTO_APPROVE_MANAGER_ENTRIES
        self.auto_approve = auto_approve
        self.accounts = AccountRegistry(db)
        self.poster = LedgerPoster(db)

    def initial_status(self, actor: str) -> EntryStatus:
        """
        Decide where a new entry starts.

        Actors with posting authority skip review when auto-approve
        is on; everyone else submits for approval.
        """
        if self.auto_approve and self.authorizer.has_posting_authority(actor):
            return EntryStatus.APPROVED
        return EntryStatus.PENDING

    def create_entry(
        self,
        actor: str,
        lines,
        entry_date: date | None = None,
        description: str | None = None,
    ) -> JournalEntry:
        """
        Validate and store a new journal entry.

        Raises ValidationError listing every broken rule; nothing
        is written in that case. If the actor's entries start out
        approved, the entry is posted before this returns.
        """
        self.authorizer.require_known_actor(actor, "create journal entries")

        lines = list(lines or [])
        result = validate_lines(lines)
        errors = list(result.errors) + self._check_accounts(lines)
        if errors:
            logger.info(
                "Rejected journal entry from %s: %d validation error(s)",
                actor, len(errors),
            )
            raise ValidationError(errors)

        try:
            entry = self._store_entry(actor, lines, result, entry_date, description)
        except SQLAlchemyError as exc:
            logger.error("Storing journal entry from %s failed: %s", actor, exc)
            raise StorageError("store journal entry", str(exc)) from exc

        logger.info(
            "Journal entry %s submitted by %s (%s)",
            entry.id, actor, result.total_debit,
        )
        record_event(
            self.db, "journal_submitted", actor,
            entry_id=entry.id,
            total_debit=str(entry.total_debit),
            total_credit=str(entry.total_credit),
            line_count=len(lines),
        )

        if self.initial_status(actor) == EntryStatus.APPROVED:
            self._approve(actor, entry)
        return entry

    def approve_entry(self, actor: str, entry_id: int) -> JournalEntry:
        """Approve a pending entry and post it to the ledger."""
        self.authorizer.require_posting_authority(actor, "approve journal entries")
        entry = self.get_entry(entry_id)
        return self._approve(actor, entry)

    def reject_entry(self, actor: str, entry_id: int, reason: str) -> JournalEntry:
        """Reject a pending entry. A reason is required and is kept on the entry."""
        self.authorizer.require_posting_authority(actor, "reject journal entries")
        entry = self.get_entry(entry_id)
        if not entry.can_transition_to(EntryStatus.REJECTED):
            raise ConflictError(entry.id, entry.status.value, "reject")

        reason = (reason or "").strip()
        if not reason:
            raise ValidationError(["A rejection reason is required"])

        self._transition(
            entry, EntryStatus.REJECTED, actor, "reject",
            description=f"Rejected by {actor}: {reason}",
        )

        logger.info("Journal entry %s rejected by %s", entry.id, actor)
        record_event(
            self.db, "journal_rejected", actor,
            entry_id=entry.id, reason=reason,
        )
        return entry

    def get_entry(self, entry_id: int) -> JournalEntry:
        entry = self.db.get(JournalEntry, entry_id)
        if not entry:
            raise EntryNotFoundError(entry_id)
        return entry

    def list_entries(
        self,
        status: EntryStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        text: str | None = None,
    ) -> list[JournalEntry]:
        """
        Return entries with their lines, newest first.

        text matches the entry description and creator, line
        descriptions, and the name or number of any line's account.
        """
        stmt = select(JournalEntry).options(selectinload(JournalEntry.lines))

        if status is not None:
            stmt = stmt.where(JournalEntry.status == status)
        if date_from is not None:
            stmt = stmt.where(JournalEntry.date >= date_from)
        if date_to is not None:
            stmt = stmt.where(JournalEntry.date <= date_to)
        if text and text.strip():
            pattern = contains_pattern(text.strip())
            line_matches = (
                select(JournalLine.id)
                .join(Account, Account.id == JournalLine.account_id)
                .where(
                    JournalLine.entry_id == JournalEntry.id,
                    or_(
                        JournalLine.description.ilike(pattern, escape=LIKE_ESCAPE),
                        Account.name.ilike(pattern, escape=LIKE_ESCAPE),
                        Account.account_number.ilike(pattern, escape=LIKE_ESCAPE),
                    ),
                )
                .exists()
            )
            stmt = stmt.where(or_(
                JournalEntry.description.ilike(pattern, escape=LIKE_ESCAPE),
                JournalEntry.created_by.ilike(pattern, escape=LIKE_ESCAPE),
                line_matches,
            ))

        stmt = stmt.order_by(JournalEntry.date.desc(), JournalEntry.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    # --- internals ---

    def _store_entry(self, actor, lines, result, entry_date, description):
        entry = JournalEntry(
            date=entry_date or date.today(),
            status=EntryStatus.PENDING,
            created_by=actor,
            total_debit=result.total_debit,
            total_credit=result.total_credit,
            description=description,
        )
        self.db.add(entry)
        self.db.flush()

        for line_no, line in enumerate(lines, start=1):
            self.db.add(JournalLine(
                entry_id=entry.id,
                line_no=line_no,
                account_id=line_value(line, "account_id"),
                debit=to_money(line_value(line, "debit")),
                credit=to_money(line_value(line, "credit")),
                description=line_value(line, "description") or None,
            ))
        self.db.flush()
        self.db.refresh(entry)
        return entry

    def _approve(self, actor: str, entry: JournalEntry) -> JournalEntry:
        if not entry.can_transition_to(EntryStatus.APPROVED):
            raise ConflictError(entry.id, entry.status.value, "approve")

        self._transition(entry, EntryStatus.APPROVED, actor, "approve")
        self.poster.post_entry(entry.id, actor=actor)

        logger.info("Journal entry %s approved by %s", entry.id, actor)
        record_event(self.db, "journal_approved", actor, entry_id=entry.id)
        return entry

    def _transition(
        self,
        entry: JournalEntry,
        new_status: EntryStatus,
        actor: str,
        action: str,
        **values,
    ) -> None:
        """Move a pending entry to new_status, or raise ConflictError."""
        try:
            result = self.db.execute(
                update(JournalEntry)
                .where(
                    JournalEntry.id == entry.id,
                    JournalEntry.status == EntryStatus.PENDING,
                )
                .values(
                    status=new_status,
                    reviewed_by=actor,
                    reviewed_at=datetime.utcnow(),
                    **values,
                )
                .execution_options(synchronize_session=False)
            )
            # Whatever happened, the in-memory copy must match the row
            self.db.refresh(entry)
        except SQLAlchemyError as exc:
            logger.error(
                "Journal entry %s: %s by %s failed in the database: %s",
                entry.id, action, actor, exc,
            )
            raise StorageError(f"{action} journal entry", str(exc), entry.id) from exc

        if result.rowcount != 1:
            logger.warning(
                "Journal entry %s: %s by %s lost the race (status %s)",
                entry.id, action, actor, entry.status.value,
            )
            raise ConflictError(entry.id, entry.status.value, action)

    def _check_accounts(self, lines) -> list[str]:
        """Checks needing the database: referenced accounts exist and are active."""
        accounts = self.accounts.get_accounts(
            line_value(line, "account_id") for line in lines
        )
        errors = []
        for line_no, line in enumerate(lines, start=1):
            account_id = line_value(line, "account_id")
            if account_id in (None, ""):
                continue
            account = accounts.get(account_id)
            if account is None:
                errors.append(f"Line {line_no}: account {account_id} not found")
            elif not account.is_active:
                errors.append(
                    f"Line {line_no}: account {account.account_number} "
                    f"{account.name} is inactive"
                )
        return errors
