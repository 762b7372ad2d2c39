"""
Logging filters.

RequestIdFilter stamps every record with the id of the HTTP request being served.
The id lives in a ContextVar, set by `RequestIDMiddleware`, so it follows the
request across awaits and stays separate between concurrent requests. Records
logged outside a request get "-".

RedactFilter masks well-known secret attribute names passed through `extra=`.
"""

import logging
from logging import LogRecord
import contextvars

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None) -> contextvars.Token:
    """Set the request id for the current context; keep the token for `reset_request_id`."""
    return _request_id_ctx.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Guarantee `record.request_id` exists.

    Precedence: an explicit `extra={"request_id": ...}`, then the context value, then "-".
    Never drops a record.
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "authorization", "api_key"}
    MASK = "***REDACTED***"

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.MASK
        return True
