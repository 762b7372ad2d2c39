"""
Work out which kind of constraint an `IntegrityError` violated.

Postgres drivers report a SQLSTATE (psycopg 3 as `sqlstate`, psycopg2 as `pgcode`),
which is authoritative. SQLite and other backends only give a message, so those
are matched on well-known phrases. The result is a plain label; turning it into
an app-level exception is `mapper.raise_mapped_integrity_error`'s job.
"""
import logging
from enum import Enum

from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class IntegrityKind(str, Enum):
    UNIQUE = "unique"
    NOT_NULL = "not_null"
    UNKNOWN = "unknown"


# https://www.postgresql.org/docs/current/errcodes-appendix.html
SQLSTATE_KINDS = {
    "23505": IntegrityKind.UNIQUE,
    "23502": IntegrityKind.NOT_NULL,
}

MESSAGE_KINDS = (
    (IntegrityKind.UNIQUE, ("unique constraint", "unique failed", "unique violation", "duplicate")),
    (IntegrityKind.NOT_NULL, ("not null constraint", "not null", "null value in column")),
)


def _sqlstate_and_constraint(orig) -> tuple[str | None, str | None]:
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    diag = getattr(orig, "diag", None)
    source = diag if diag is not None else orig
    return sqlstate, getattr(source, "constraint_name", None)


def _kind_from_message(msg: str) -> IntegrityKind:
    normalized = (msg or "").lower()
    for kind, phrases in MESSAGE_KINDS:
        if any(phrase in normalized for phrase in phrases):
            return kind

    logger.warning("integrity.unknown_message", extra={"message_snippet": (msg or "")[:200]})
    return IntegrityKind.UNKNOWN


def classify_integrity_error(exc: IntegrityError) -> tuple[IntegrityKind, str | None]:
    """
    Returns:
        (kind, constraint name when the driver exposes one)
    """
    orig = exc.orig
    sqlstate, constraint_name = _sqlstate_and_constraint(orig)

    if sqlstate:
        kind = SQLSTATE_KINDS.get(sqlstate, IntegrityKind.UNKNOWN)
        level = logging.DEBUG if kind is not IntegrityKind.UNKNOWN else logging.WARNING
        logger.log(level, "integrity.sqlstate", extra={"sqlstate": sqlstate, "constraint_name": constraint_name})
        return kind, constraint_name

    return _kind_from_message(str(orig) if orig is not None else str(exc)), constraint_name
