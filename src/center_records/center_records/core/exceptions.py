from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class PreconditionError(DomainError):
    """Raised before any row is read when an upload cannot start."""


class StorageError(DomainError):
    """Raised when the database rejects or fails an operation."""


class SpreadsheetError(DomainError):
    """Structural problem with an uploaded file."""


class NoSheetError(SpreadsheetError):
    pass


class EmptySheetError(SpreadsheetError):
    pass


class HeaderMismatchError(SpreadsheetError):
    def __init__(
        self,
        message: str,
        *,
        expected: Sequence[Sequence[str]],
        found: Sequence[str],
        missing: Sequence[str] = (),
    ):
        super().__init__(message)
        self.expected = [list(s) for s in expected]
        self.found = list(found)
        self.missing = list(missing)
