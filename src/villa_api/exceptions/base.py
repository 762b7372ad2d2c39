"""
Application-level exceptions for repository and request-handling errors.

Every exception carries a canonical `error_code`, which decides the HTTP status
through `RepositoryError.ERROR_CODE_TO_STATUS`. Callers never inspect SQLAlchemy
or driver exceptions directly: the repository layer translates them into one of
the classes below (see `exceptions.mapper.db_error_handler`).
"""

from typing import Iterable

# canonical repository-level exception

class RepositoryError(Exception):
    """
    Base exception for repository/service errors.

    - message: human-friendly message (safe to show to clients)
    - fields: optional list of field names related to the error (e.g., ['name'])
    - constraint: optional DB constraint name or identifier (for logs only)
    - error_code: canonical short code (e.g., 'duplicate', 'not_found') used by clients
    """

    # Map canonical error_code -> HTTP status.
    # Duplicates are reported as 400 (not 409) to keep the public contract of the API.
    ERROR_CODE_TO_STATUS = {
        "invalid_input": 400,
        "invalid_field": 400,
        "duplicate": 400,
        "not_found": 404,
        "store_unavailable": 500,
        "unexpected": 500,
        # fallback: default to 400 for general repository errors
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message  # user-friendly message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base

    def http_status(self) -> int:
        """
        Return the HTTP status code that should accompany this error.
        Unknown or missing error codes fall back to 400 (Bad Request).
        """
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 400)
        return 400


class InvalidInputError(RepositoryError):
    """Malformed, missing or mismatched request data."""

    def __init__(self, message: str = "Invalid input", *, fields: Iterable[str] | None = None,
                 constraint: str | None = None):
        super().__init__(message, fields=fields, constraint=constraint, error_code="invalid_input")


class InvalidFieldError(RepositoryError):
    """Raised when the caller filters or writes on a field the model does not have."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="invalid_field")


class NotFoundError(RepositoryError):
    def __init__(self, message: str = "Not found", *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="not_found")


class DuplicateError(RepositoryError):
    def __init__(self, message: str, *, fields: Iterable[str] | None = None, constraint: str | None = None):
        super().__init__(message, fields=fields, constraint=constraint, error_code="duplicate")


class StoreUnavailableError(RepositoryError):
    """
    The store could not be reached or the connection broke mid-operation.
    `message` is the raw driver diagnostic, kept verbatim for the caller.
    """

    def __init__(self, message: str):
        super().__init__(message, error_code="store_unavailable")

    def __str__(self) -> str:
        return self.message


class UnexpectedFailureError(RepositoryError):
    """Any fault that is not one of the expected conditions above."""

    def __init__(self, message: str):
        super().__init__(message, error_code="unexpected")

    def __str__(self) -> str:
        return self.message


__all__ = [
    "RepositoryError",
    "InvalidInputError",
    "InvalidFieldError",
    "NotFoundError",
    "DuplicateError",
    "StoreUnavailableError",
    "UnexpectedFailureError",
]
