"""
Log formatters.

- JsonFormatter: one JSON object per line for log collectors. Carries service, env,
  version and request_id next to the standard fields, plus everything passed via
  `extra=`.
- ColorFormatter: compact ANSI-colored lines for a developer terminal.

`builder.make_dict_config` picks between them from `LOG_FORMAT`.
"""

import json
import logging
from typing import Any
from logging import LogRecord
from villa_api.utils.logging import get_project_version

PROJECT_VERSION = get_project_version()

# Attributes every LogRecord has; anything else on the record came from `extra=`
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "request_id", "taskName"}


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Non-serializable extras are stringified, so `format()` never raises on a
    log call that passes odd objects in `extra`.

        formatter = JsonFormatter(env="production", service="villa-api")
    """

    def __init__(self, *, env: str | None = None, service: str | None = None, datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service or "villa-api"

    def format(self, record: LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "request_id": getattr(record, "request_id", "-"),
            "service": self.service,
            "env": self.env,
            "version": PROJECT_VERSION,
        }

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key in log_record or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                log_record[key] = value
            except (TypeError, ValueError):
                log_record[key] = str(value)

        return json.dumps(log_record, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    TIMESTAMP | LEVEL | LOGGER | REQUEST_ID | MESSAGE, with the level colored.

    The traceback, when present, follows on the next lines.
    """

    COLOR_CODES = {
        "DEBUG": "\033[36m",      # cyan
        "INFO": "\033[32m",       # green
        "WARNING": "\033[33m",    # yellow
        "ERROR": "\033[31m",      # red
        "CRITICAL": "\033[1;41m", # bold, red background
        "RESET": "\033[0m",
    }

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)

    def format(self, record: LogRecord) -> str:
        color = self.COLOR_CODES.get(record.levelname, "")
        reset = self.COLOR_CODES["RESET"]
        timestamp = self.formatTime(record, self.datefmt)

        line = (
            f"{timestamp} | {color}{record.levelname:<8}{reset} | "
            f"{record.name:<32} | "
            f"{getattr(record, 'request_id', '-'):<36} | "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            line = line + "\n" + self.formatException(record.exc_info)

        return line
