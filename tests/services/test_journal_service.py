"""
Tests for the JournalService.

Tests cover:
- Submitting entries (pending vs. auto-approved)
- Validation, including database-backed account checks
- Approval and rejection authority
- Terminal states and the approval race
- All-or-nothing approval when posting fails
- Listing and filtering entries
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError
from sqlalchemy.sql.dml import Update

from bookkeeping.exceptions import (
    AuthError,
    ConflictError,
    EntryNotFoundError,
    PostingError,
    StorageError,
    ValidationError,
)
from bookkeeping.models.account import Account
from bookkeeping.models.enums import AccountCategory, EntryStatus
from bookkeeping.models.journal_entry import JournalEntry
from bookkeeping.models.ledger_row import LedgerRow
from bookkeeping.schemas.account import AccountCreate
from bookkeeping.services.account_registry import AccountRegistry
from bookkeeping.services.journal_service import JournalService


# --- Helpers to reduce repetition ---

@pytest.fixture
def accounts(db_session):
    registry = AccountRegistry(db_session)
    created = {}
    for number, name, category in [
        ("1000", "Cash", AccountCategory.ASSET),
        ("4000", "Sales Revenue", AccountCategory.REVENUE),
        ("5000", "Rent Expense", AccountCategory.EXPENSE),
    ]:
        created[name] = registry.create_account(AccountCreate(
            account_number=number, name=name, category=category,
        ))
    db_session.commit()
    return created


@pytest.fixture
def service(db_session, authorizer):
    return JournalService(db_session, authorizer=authorizer, auto_approve=True)


def sale(accounts, amount="250.00", description=None):
    return [
        {"account_id": accounts["Cash"].id, "debit": amount, "description": description},
        {"account_id": accounts["Sales Revenue"].id, "credit": amount},
    ]


def ledger_row_count(db, entry_id):
    return db.execute(
        select(func.count(LedgerRow.id)).where(LedgerRow.journal_entry_id == entry_id)
    ).scalar()


class TestCreateEntry:

    def test_accountant_entry_waits_for_approval(self, service, accounts, db_session):
        entry = service.create_entry("bob", sale(accounts), entry_date=date(2026, 1, 31))
        db_session.commit()

        assert entry.status == EntryStatus.PENDING
        assert entry.created_by == "bob"
        assert entry.reviewed_by is None
        assert entry.posted_at is None
        assert ledger_row_count(db_session, entry.id) == 0
        assert accounts["Cash"].balance == Decimal("0.00")

    def test_totals_and_lines_match_input(self, service, accounts, db_session):
        entry = service.create_entry("bob", [
            {"account_id": accounts["Cash"].id, "debit": "100.10"},
            {"account_id": accounts["Rent Expense"].id, "debit": "0.20"},
            {"account_id": accounts["Sales Revenue"].id, "credit": "100.30"},
        ])
        db_session.commit()

        assert entry.total_debit == Decimal("100.30")
        assert entry.total_credit == Decimal("100.30")
        assert [line.line_no for line in entry.lines] == [1, 2, 3]
        assert entry.lines[1].debit == Decimal("0.20")
        assert entry.lines[1].credit == Decimal("0.00")

    def test_manager_entry_is_approved_and_posted(self, service, accounts, db_session):
        entry = service.create_entry("alice", sale(accounts))
        db_session.commit()

        assert entry.status == EntryStatus.APPROVED
        assert entry.reviewed_by == "alice"
        assert entry.posted_at is not None
        assert ledger_row_count(db_session, entry.id) == 2
        assert accounts["Cash"].balance == Decimal("250.00")
        assert accounts["Sales Revenue"].balance == Decimal("250.00")

    def test_manager_entry_stays_pending_without_auto_approve(
        self, db_session, authorizer, accounts
    ):
        service = JournalService(db_session, authorizer=authorizer, auto_approve=False)
        entry = service.create_entry("alice", sale(accounts))
        db_session.commit()
        assert entry.status == EntryStatus.PENDING

    def test_defaults_to_today(self, service, accounts):
        entry = service.create_entry("bob", sale(accounts))
        assert entry.date == date.today()

    def test_unknown_actor_cannot_submit(self, service, accounts, db_session):
        with pytest.raises(AuthError):
            service.create_entry("mallory", sale(accounts))
        assert db_session.execute(select(func.count(JournalEntry.id))).scalar() == 0


class TestCreateEntryValidation:

    def test_unbalanced_entry_is_rejected(self, service, accounts, db_session):
        lines = sale(accounts)
        lines[1]["credit"] = "200.00"

        with pytest.raises(ValidationError) as exc_info:
            service.create_entry("bob", lines)

        assert exc_info.value.errors == [
            "Total debits (250.00) must equal total credits (200.00)"
        ]
        assert db_session.execute(select(func.count(JournalEntry.id))).scalar() == 0

    def test_all_errors_are_reported_together(self, service, accounts):
        lines = [
            {"account_id": accounts["Cash"].id, "debit": "10.00", "credit": "10.00"},
            {"account_id": 999, "credit": "5.00"},
            {"account_id": None, "debit": "1.00"},
        ]

        with pytest.raises(ValidationError) as exc_info:
            service.create_entry("bob", lines)

        errors = exc_info.value.errors
        assert "Line 1: enter either a debit or a credit, not both" in errors
        assert "Line 3: an account must be selected" in errors
        assert "Line 2: account 999 not found" in errors
        assert any(error.startswith("Total debits") for error in errors)

    def test_inactive_account_is_rejected(self, service, accounts, db_session):
        AccountRegistry(db_session).deactivate_account(accounts["Sales Revenue"].id)
        db_session.commit()

        with pytest.raises(ValidationError) as exc_info:
            service.create_entry("bob", sale(accounts))

        assert exc_info.value.errors == [
            "Line 2: account 4000 Sales Revenue is inactive"
        ]

    def test_huge_amount_is_a_validation_error(self, service, accounts, db_session):
        with pytest.raises(ValidationError) as exc_info:
            service.create_entry("bob", sale(accounts, "1e30"))

        assert exc_info.value.errors == [
            "Line 1: amounts must be less than 1000000000000.00",
            "Line 2: amounts must be less than 1000000000000.00",
        ]
        assert db_session.execute(select(func.count(JournalEntry.id))).scalar() == 0

    def test_empty_entry_is_rejected(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.create_entry("bob", [])
        assert exc_info.value.errors == ["At least one journal line is required"]


class TestApproveEntry:

    def test_manager_approves_and_posts(self, service, accounts, db_session):
        entry = service.create_entry("bob", sale(accounts))
        db_session.commit()

        approved = service.approve_entry("alice", entry.id)
        db_session.commit()

        assert approved.status == EntryStatus.APPROVED
        assert approved.reviewed_by == "alice"
        assert approved.reviewed_at is not None
        assert ledger_row_count(db_session, entry.id) == 2
        assert accounts["Cash"].balance == Decimal("250.00")

    def test_accountant_cannot_approve(self, service, accounts, db_session):
        entry = service.create_entry("bob", sale(accounts))
        db_session.commit()

        with pytest.raises(AuthError):
            service.approve_entry("bob", entry.id)

        db_session.rollback()
        assert service.get_entry(entry.id).status == EntryStatus.PENDING

    def test_missing_entry(self, service):
        with pytest.raises(EntryNotFoundError):
            service.approve_entry("alice", 999)

    def test_approving_twice_conflicts(self, service, accounts, db_session):
        entry = service.create_entry("bob", sale(accounts))
        service.approve_entry("alice", entry.id)
        db_session.commit()

        with pytest.raises(ConflictError) as exc_info:
            service.approve_entry("alice", entry.id)

        assert exc_info.value.current_status == "approved"
        assert ledger_row_count(db_session, entry.id) == 2
        assert accounts["Cash"].balance == Decimal("250.00")

    def test_rejected_entry_cannot_be_approved(self, service, accounts, db_session):
        entry = service.create_entry("bob", sale(accounts))
        service.reject_entry("alice", entry.id, "Wrong account")
        db_session.commit()

        with pytest.raises(ConflictError):
            service.approve_entry("alice", entry.id)

        assert entry.status == EntryStatus.REJECTED
        assert ledger_row_count(db_session, entry.id) == 0

    def test_concurrent_approval_posts_once(
        self, service, accounts, db_session, other_session, authorizer
    ):
        """Two reviewers load the same pending entry; only one wins."""
        entry = service.create_entry("bob", sale(accounts))
        db_session.commit()

        # The second reviewer read the entry while it was still pending
        stale = other_session.get(JournalEntry, entry.id)
        assert stale.status == EntryStatus.PENDING

        service.approve_entry("alice", entry.id)
        db_session.commit()

        late = JournalService(other_session, authorizer=authorizer, auto_approve=True)
        with pytest.raises(ConflictError) as exc_info:
            late.approve_entry("alice", entry.id)
        other_session.rollback()

        assert exc_info.value.current_status == "approved"
        assert ledger_row_count(other_session, entry.id) == 2
        cash = other_session.get(Account, accounts["Cash"].id)
        assert cash.balance == Decimal("250.00")

    def test_posting_failure_leaves_entry_pending(self, service, accounts, db_session):
        entry = service.create_entry("bob", sale(accounts))
        db_session.commit()
        AccountRegistry(db_session).deactivate_account(accounts["Sales Revenue"].id)
        db_session.commit()

        with pytest.raises(PostingError) as exc_info:
            service.approve_entry("alice", entry.id)
        db_session.rollback()

        assert exc_info.value.line_no == 2
        refreshed = service.get_entry(entry.id)
        assert refreshed.status == EntryStatus.PENDING
        assert refreshed.reviewed_by is None
        assert ledger_row_count(db_session, entry.id) == 0
        assert db_session.get(Account, accounts["Cash"].id).balance == Decimal("0.00")


class TestRejectEntry:

    def test_manager_rejects_with_reason(self, service, accounts, db_session):
        entry = service.create_entry("bob", sale(accounts))
        db_session.commit()

        rejected = service.reject_entry("alice", entry.id, "  Duplicate of #12  ")
        db_session.commit()

        assert rejected.status == EntryStatus.REJECTED
        assert rejected.reviewed_by == "alice"
        assert rejected.description == "Rejected by alice: Duplicate of #12"
        assert ledger_row_count(db_session, entry.id) == 0
        assert accounts["Cash"].balance == Decimal("0.00")

    def test_reason_is_required(self, service, accounts, db_session):
        entry = service.create_entry("bob", sale(accounts))
        db_session.commit()

        with pytest.raises(ValidationError):
            service.reject_entry("alice", entry.id, "   ")

        assert service.get_entry(entry.id).status == EntryStatus.PENDING

    def test_accountant_cannot_reject(self, service, accounts, db_session):
        entry = service.create_entry("bob", sale(accounts))
        db_session.commit()

        with pytest.raises(AuthError):
            service.reject_entry("bob", entry.id, "Changed my mind")

    def test_approved_entry_cannot_be_rejected(self, service, accounts, db_session):
        entry = service.create_entry("alice", sale(accounts))
        db_session.commit()

        with pytest.raises(ConflictError):
            service.reject_entry("alice", entry.id, "Too late")

        assert entry.status == EntryStatus.APPROVED
        assert ledger_row_count(db_session, entry.id) == 2


class TestListEntries:

    @pytest.fixture
    def entries(self, service, accounts, db_session):
        first = service.create_entry(
            "bob", sale(accounts, "10.00", "Coffee sales"),
            entry_date=date(2026, 1, 5),
        )
        second = service.create_entry(
            "alice", sale(accounts, "20.00"),
            entry_date=date(2026, 2, 10), description="February takings",
        )
        third = service.create_entry(
            "bob",
            [
                {"account_id": accounts["Rent Expense"].id, "debit": "500.00"},
                {"account_id": accounts["Cash"].id, "credit": "500.00"},
            ],
            entry_date=date(2026, 3, 1),
        )
        db_session.commit()
        return first, second, third

    def test_newest_first(self, service, entries):
        first, second, third = entries
        assert [e.id for e in service.list_entries()] == [third.id, second.id, first.id]

    def test_filter_by_status(self, service, entries):
        first, second, third = entries
        pending = service.list_entries(status=EntryStatus.PENDING)
        assert {e.id for e in pending} == {first.id, third.id}

    def test_filter_by_date_range(self, service, entries):
        first, second, third = entries
        result = service.list_entries(
            date_from=date(2026, 2, 1), date_to=date(2026, 2, 28)
        )
        assert [e.id for e in result] == [second.id]

    def test_text_matches_entry_description(self, service, entries):
        result = service.list_entries(text="february")
        assert [e.id for e in result] == [entries[1].id]

    def test_text_matches_line_description(self, service, entries):
        result = service.list_entries(text="coffee")
        assert [e.id for e in result] == [entries[0].id]

    def test_text_matches_account_name_and_number(self, service, entries):
        assert [e.id for e in service.list_entries(text="Rent")] == [entries[2].id]
        assert [e.id for e in service.list_entries(text="5000")] == [entries[2].id]

    def test_lines_are_loaded(self, service, entries):
        listed = service.list_entries(status=EntryStatus.APPROVED)
        assert len(listed[0].lines) == 2

    def test_percent_and_underscore_match_literally(self, service, accounts, db_session):
        deposit = service.create_entry(
            "bob", sale(accounts, "5.00"), description="50% deposit",
        )
        service.create_entry(
            "bob", sale(accounts, "6.00"), description="500 deposit",
        )
        snake = service.create_entry(
            "bob", sale(accounts, "7.00"), description="ref_2026",
        )
        service.create_entry(
            "bob", sale(accounts, "8.00"), description="ref-2026",
        )
        db_session.commit()

        assert [e.id for e in service.list_entries(text="50%")] == [deposit.id]
        assert [e.id for e in service.list_entries(text="ref_")] == [snake.id]


def database_locked(statement="UPDATE"):
    return OperationalError(statement, {}, Exception("database is locked"))


class TestStorageFailures:

    def test_failed_status_update_is_a_storage_error(
        self, service, accounts, db_session, monkeypatch
    ):
        entry = service.create_entry("bob", sale(accounts))
        db_session.commit()

        execute = db_session.execute

        def locked_for_updates(statement, *args, **kwargs):
            if isinstance(statement, Update):
                raise database_locked()
            return execute(statement, *args, **kwargs)

        monkeypatch.setattr(db_session, "execute", locked_for_updates)

        with pytest.raises(StorageError) as exc_info:
            service.approve_entry("alice", entry.id)

        monkeypatch.undo()
        db_session.rollback()
        assert exc_info.value.entry_id == entry.id
        assert exc_info.value.to_dict()["code"] == "STORAGE_FAILED"
        assert service.get_entry(entry.id).status == EntryStatus.PENDING
        assert ledger_row_count(db_session, entry.id) == 0

    def test_failed_insert_is_a_storage_error(
        self, service, accounts, db_session, monkeypatch
    ):
        def locked(*args, **kwargs):
            raise database_locked("INSERT")

        monkeypatch.setattr(db_session, "flush", locked)

        with pytest.raises(StorageError, match="store journal entry"):
            service.create_entry("bob", sale(accounts))
