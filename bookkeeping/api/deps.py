"""
Shared API dependencies and error mapping.

The actor is taken from the X-Actor header. Proving who the
actor is belongs to whatever sits in front of this service;
here it is only used to look up a role.
"""

from fastapi import Header, HTTPException

from bookkeeping.exceptions import (
    AuthError,
    BookkeepingError,
    ConflictError,
    DuplicateAccountError,
    NotFoundError,
    PostingError,
    StorageError,
    ValidationError,
)
from bookkeeping.services.authorization import Authorizer, SettingsRoleResolver

# Most specific first
STATUS_CODES: list[tuple[type[BookkeepingError], int]] = [
    (ValidationError, 422),
    (AuthError, 403),
    (ConflictError, 409),
    (PostingError, 500),
    (StorageError, 500),
    (NotFoundError, 404),
    (DuplicateAccountError, 400),
]


def get_actor(x_actor: str | None = Header(default=None)) -> str | None:
    return x_actor.strip() if x_actor else None


def get_authorizer() -> Authorizer:
    return Authorizer(SettingsRoleResolver())


def http_error(exc: BookkeepingError) -> HTTPException:
    """Translate a bookkeeping error into an HTTP error response."""
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=exc.to_dict())
    return HTTPException(status_code=400, detail=exc.to_dict())
