"""
Typed exceptions for the bookkeeping engine.

Every error carries a machine-readable code so the API layer
can map it to an HTTP status without parsing messages.

    BookkeepingError
    +-- ValidationError        VALIDATION_FAILED
    +-- AuthError              NOT_AUTHORIZED
    +-- ConflictError          CONFLICT
    +-- PostingError           POSTING_FAILED
    +-- StorageError           STORAGE_FAILED
    +-- DuplicateAccountError  DUPLICATE_ACCOUNT
    +-- NotFoundError          NOT_FOUND
        +-- AccountNotFoundError
        +-- EntryNotFoundError

PostingError is the serious one: it means an approved entry
could not be written to the ledger. It is never retried
automatically and must not be presented as bad input.
"""


class BookkeepingError(Exception):
    """Base class for all bookkeeping errors."""

    code: str = "BOOKKEEPING_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(BookkeepingError):
    """A proposed entry or request broke one or more rules."""

    code = "VALIDATION_FAILED"

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Validation failed")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "errors": self.errors}


class AuthError(BookkeepingError):
    """The actor's role does not permit the requested action."""

    code = "NOT_AUTHORIZED"

    def __init__(self, actor: str | None, action: str):
        self.actor = actor
        self.action = action
        super().__init__(f"Actor '{actor}' is not allowed to {action}")


class ConflictError(BookkeepingError):
    """The entry is no longer in the state the transition expects."""

    code = "CONFLICT"

    def __init__(self, entry_id: int, current_status: str | None, action: str):
        self.entry_id = entry_id
        self.current_status = current_status
        self.action = action
        super().__init__(
            f"Cannot {action} journal entry {entry_id}: "
            f"status is {current_status}"
        )

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "entry_id": self.entry_id,
            "current_status": self.current_status,
        }


class PostingError(BookkeepingError):
    """An approved entry could not be fully posted to the ledger."""

    code = "POSTING_FAILED"

    def __init__(self, entry_id: int, reason: str, line_no: int | None = None):
        self.entry_id = entry_id
        self.line_no = line_no
        self.reason = reason
        where = f" at line {line_no}" if line_no is not None else ""
        super().__init__(
            f"Posting journal entry {entry_id} failed{where}: {reason}"
        )

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "entry_id": self.entry_id,
            "line_no": self.line_no,
        }


class StorageError(BookkeepingError):
    """
    The database failed while saving a workflow change.

    Nothing was saved; the caller rolls back and the entry keeps
    the state it had before.
    """

    code = "STORAGE_FAILED"

    def __init__(self, action: str, reason: str, entry_id: int | None = None):
        self.action = action
        self.reason = reason
        self.entry_id = entry_id
        target = f" (journal entry {entry_id})" if entry_id is not None else ""
        super().__init__(f"Could not {action}{target}: {reason}")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "entry_id": self.entry_id}


class DuplicateAccountError(BookkeepingError):
    code = "DUPLICATE_ACCOUNT"


class NotFoundError(BookkeepingError):
    code = "NOT_FOUND"


class AccountNotFoundError(NotFoundError):

    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class EntryNotFoundError(NotFoundError):

    def __init__(self, entry_id):
        self.entry_id = entry_id
        super().__init__(f"Journal entry {entry_id} not found")
