"""Business logic services."""

from bookkeeping.services.account_registry import AccountRegistry
from bookkeeping.services.authorization import (
    Authorizer,
    SettingsRoleResolver,
    StaticRoleResolver,
)
from bookkeeping.services.journal_service import JournalService
from bookkeeping.services.journal_validator import ValidationResult, validate_lines
from bookkeeping.services.ledger_poster import LedgerPoster
from bookkeeping.services.report_service import ReportService

__all__ = [
    "AccountRegistry",
    "Authorizer",
    "SettingsRoleResolver",
    "StaticRoleResolver",
    "JournalService",
    "ValidationResult",
    "validate_lines",
    "LedgerPoster",
    "ReportService",
]
