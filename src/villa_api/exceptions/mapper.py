"""
Translate SQLAlchemy / driver exceptions into app-level exceptions.

| Raised inside a repository block            | Surfaces as                               |
| ------------------------------------------- | ----------------------------------------- |
| `IntegrityError` (unique)                   | `DuplicateError`                          |
| `IntegrityError` (not null)                 | `InvalidInputError`                       |
| `IntegrityError` (other)                    | `RepositoryError`                         |
| `OperationalError`, `InterfaceError`,       | `StoreUnavailableError` (raw message)     |
| `DisconnectionError`, pool `TimeoutError`   |                                           |
| `RepositoryError` (already app-level)       | itself                                    |
| anything else                               | `UnexpectedFailureError` (raw message)    |

The session is rolled back for every failure so it stays usable.
"""
import re
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import (
    IntegrityError,
    OperationalError,
    InterfaceError,
    DisconnectionError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from .integrity_classifier import IntegrityKind, classify_integrity_error
from .base import (
    DuplicateError,
    InvalidInputError,
    RepositoryError,
    StoreUnavailableError,
    UnexpectedFailureError,
)

logger = logging.getLogger(__name__)

# Exceptions meaning "the store is unreachable", as opposed to "the statement was rejected"
CONNECTIVITY_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)

# -----------------------
# Column extraction helpers
# -----------------------

def _extract_columns_postgres(msg: str) -> list[str] | None:
    """
    Try to extract involved column names from common Postgres messages:
      - 'null value in column "name" violates not-null constraint'
      - 'DETAIL:  Key (name)=(Royal Villa) already exists.'
    """
    if not msg:
        return None

    m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]

    m = re.search(r'key \((?P<cols>[^)]+)\)=', msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    return None


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # SQLite: 'UNIQUE constraint failed: villas.name' / 'NOT NULL constraint failed: villas.rate'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>.+)$', msg, flags=re.IGNORECASE)
    if m:
        return [c.split('.')[-1].strip() for c in re.split(r',\s*', m.group("cols"))]
    return None


def extract_columns_from_integrity(exc: IntegrityError) -> list[str] | None:
    """
    Best-effort extraction of column names from the DB message (Postgres, SQLite).
    """
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)

    return _extract_columns_postgres(msg) or _extract_columns_sqlite(msg)


def raw_diagnostic(exc: BaseException) -> str:
    """The driver's own message when SQLAlchemy wrapped one, else the exception text."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


# -----------------------
# Mapper
# -----------------------

def raise_mapped_integrity_error(exc: IntegrityError, model_name: str | None = None) -> None:
    """
    Map a SQLAlchemy IntegrityError to an app-level exception and raise it.
    Populates `.fields` and `.constraint` where possible.
    """
    kind, constraint_name = classify_integrity_error(exc)
    columns = extract_columns_from_integrity(exc)

    model_part = f"{model_name}" if model_name else "Record"

    if kind is IntegrityKind.UNIQUE:
        # Expected client-level scenario -> INFO, no stack trace
        logger.info(
            "mapper.duplicate_detected",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        raise DuplicateError(f"{model_part} already exists!", fields=columns, constraint=constraint_name) from exc

    if kind is IntegrityKind.NOT_NULL:
        logger.info(
            "mapper.not_null_violation",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise InvalidInputError(
                f"Missing required field(s): {', '.join(columns)} for {model_part}",
                fields=columns, constraint=constraint_name,
            ) from exc
        raise InvalidInputError(f"Missing required field for {model_part}", constraint=constraint_name) from exc

    raw = raw_diagnostic(exc)
    logger.warning(
        "mapper.unknown_integrity_error",
        extra={"model": model_part, "constraint": constraint_name},
    )
    logger.debug("mapper.unknown_integrity_raw", extra={"model": model_part, "raw": raw})
    raise RepositoryError(f"{model_part} database integrity error.", constraint=constraint_name) from exc


async def _safe_rollback(db: AsyncSession, model_name: str | None, reason: str) -> None:
    try:
        await db.rollback()
    except Exception:
        logger.exception("Failed to rollback session after %s", reason, extra={"model": model_name})


# -----------------------
# Async context manager to DRY error handling in repositories
# -----------------------
@asynccontextmanager
async def db_error_handler(db: AsyncSession, model_name: str | None = None):
    """
    Usage:
        async with db_error_handler(self.db, self.model.__name__):
            ... DB ops ...
    Rolls back on error and raises a mapped app-level exception.
    """
    try:
        yield
    except RepositoryError:
        # already app-level (raised by our own checks inside the block)
        await _safe_rollback(db, model_name, "repository error")
        raise
    except IntegrityError as exc:
        await _safe_rollback(db, model_name, "IntegrityError")
        raise_mapped_integrity_error(exc, model_name)
    except CONNECTIVITY_ERRORS as exc:
        await _safe_rollback(db, model_name, "connectivity error")
        message = raw_diagnostic(exc)
        logger.error(
            "mapper.store_unavailable",
            extra={"model": model_name, "error_type": type(exc).__name__, "diagnostic": message},
        )
        raise StoreUnavailableError(message) from exc
    except Exception as exc:
        await _safe_rollback(db, model_name, "unexpected error")
        # Unexpected exceptions are logged with stack trace for diagnostics.
        logger.exception("Unexpected DB error for %s", model_name, extra={"model": model_name})
        raise UnexpectedFailureError(raw_diagnostic(exc)) from exc
