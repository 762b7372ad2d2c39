"""
Handler factories for `logging.config.dictConfig`.

Each function returns a plain handler config dict; `builder.make_dict_config`
decides which ones are wired in.

| Name            | Destination        | Level       | Used when                          |
| --------------- | ------------------ | ----------- | ---------------------------------- |
| `console`       | stdout             | LOG_LEVEL   | always                             |
| `file`          | LOG_DIR/app.log    | LOG_LEVEL   | LOG_TO_STDOUT=False and LOG_DIR    |
| `error_file`    | LOG_DIR/errors.log | ERROR       | LOG_TO_STDOUT=False and LOG_DIR    |
| `error_console` | stderr (JSON)      | ERROR       | otherwise                          |
"""

from pathlib import Path

from villa_api.config.settings import Settings

_FILTERS = ["request_id", "redact"]


def _formatter_name(settings: Settings) -> str:
    return "json" if settings.LOG_FORMAT == "json" else "standard"


def get_console_handler(settings: Settings) -> dict:
    return {
        "class": "logging.StreamHandler",
        "stream": "ext://sys.stdout",
        "formatter": _formatter_name(settings),
        "level": settings.LOG_LEVEL,
        "filters": list(_FILTERS),
    }


def get_file_handler(settings: Settings) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": _formatter_name(settings),
        "level": settings.LOG_LEVEL,
        "filename": str(Path(settings.LOG_DIR) / "app.log"),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
        "filters": list(_FILTERS),
    }


def get_error_file_handler(settings: Settings) -> dict:
    # errors stay structured regardless of LOG_FORMAT
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "json",
        "level": "ERROR",
        "filename": str(Path(settings.LOG_DIR) / "errors.log"),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
        "filters": list(_FILTERS),
    }


def get_error_console_handler(settings: Settings) -> dict:
    return {
        "class": "logging.StreamHandler",
        "stream": "ext://sys.stderr",
        "formatter": "json",
        "level": "ERROR",
        "filters": list(_FILTERS),
    }
