
# villa_api/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py                    # App-level errors (RepositoryError, DuplicateError, ...)
# │   ├── integrity_classifier.py    # SQL-level / DB-specific constraint errors
# │   └── mapper.py                  # Map SQL-level / driver errors to app-level errors

from .base import (
    RepositoryError,
    InvalidInputError,
    InvalidFieldError,
    NotFoundError,
    DuplicateError,
    StoreUnavailableError,
    UnexpectedFailureError,
)

__all__ = [
    "RepositoryError",
    "InvalidInputError",
    "InvalidFieldError",
    "NotFoundError",
    "DuplicateError",
    "StoreUnavailableError",
    "UnexpectedFailureError",
]
