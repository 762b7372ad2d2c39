"""
Logging builder: turn `Settings` into a dictConfig mapping and apply it.

With `LOG_USE_QUEUE=True` the real handlers move behind a `QueueListener` thread:
request code only enqueues records, and file/stream IO happens in the background.

| Setting                           | Effect                                                      |
| --------------------------------- | ----------------------------------------------------------- |
| LOG_QUEUE_MAX_SIZE                | > 0 bounds the queue; 0 means unbounded                     |
| LOG_QUEUE_BLOCKING                | bounded queue only: block producers instead of dropping     |
| LOG_QUEUE_DROP_WARNING_THRESHOLD  | emit a warning every N dropped records                      |

The request-id and redaction filters run on the queue handler, in the producer's
context, because the ContextVar holding the request id is not visible from the
listener thread.

Call `stop_queue_logging()` on shutdown to flush the queue.
"""

from pathlib import Path
import logging
import logging.config
import queue as _queue
import threading
from logging.handlers import QueueHandler, QueueListener

from villa_api.config.settings import Settings
from villa_api.utils.logging import get_project_name

from .formatters import JsonFormatter, ColorFormatter
from .filters import RequestIdFilter, RedactFilter
from .handlers import (
    get_console_handler,
    get_file_handler,
    get_error_file_handler,
    get_error_console_handler,
)

_QUEUE_LISTENER: QueueListener | None = None
_QUEUE: _queue.Queue | None = None

_DROPPED_LOGS_COUNT = 0
_DROPPED_LOGS_LOCK = threading.Lock()


class NonBlockingQueueHandler(QueueHandler):
    """
    QueueHandler that drops the record (and counts the drop) when a bounded queue is full,
    instead of blocking the caller.
    """

    def __init__(self, q: _queue.Queue, drop_warning_threshold: int = 0):
        super().__init__(q)
        self.drop_warning_threshold = drop_warning_threshold

    def emit(self, record: logging.LogRecord) -> None:
        global _DROPPED_LOGS_COUNT
        try:
            self.queue.put_nowait(self.prepare(record))
        except _queue.Full:
            with _DROPPED_LOGS_LOCK:
                _DROPPED_LOGS_COUNT += 1
                dropped = _DROPPED_LOGS_COUNT
            if self.drop_warning_threshold and dropped % self.drop_warning_threshold == 0:
                self._warn_dropped(dropped)

    def _warn_dropped(self, dropped: int) -> None:
        # best effort: the queue is full, so push past it straight to the listener's handlers
        listener = _QUEUE_LISTENER
        if listener is None:
            return
        warning = logging.LogRecord(
            __name__, logging.WARNING, __file__, 0,
            "Dropped %d log records because the log queue was full", (dropped,), None,
        )
        warning.request_id = "-"
        for handler in listener.handlers:
            if warning.levelno >= handler.level:
                handler.handle(warning)


def get_queue_stats() -> dict:
    with _DROPPED_LOGS_LOCK:
        return {"dropped_logs": _DROPPED_LOGS_COUNT, "queue_present": _QUEUE is not None}


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping.

    Formatters "standard" (colored when LOG_FORMAT=text) and "json"; filters
    "request_id" and "redact"; handlers per the table in `handlers.py`; loggers for
    root, uvicorn and sqlalchemy.engine (DEBUG only with ENABLE_SQL_LOGGING).
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(default="villa-api"),
        },
    }

    filters = {
        "request_id": {"()": RequestIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}

    if (not settings.LOG_TO_STDOUT) and settings.LOG_DIR:
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers.keys()),
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            "uvicorn.error": {
                "level": settings.LOG_LEVEL,
                "handlers": list(handlers.keys()),
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Apply the logging configuration; with LOG_USE_QUEUE, re-route the root handlers
    through a queue served by a background QueueListener.
    """
    global _QUEUE_LISTENER, _QUEUE

    # a previous setup (tests, app factory called twice) must not leave a listener running
    stop_queue_logging()

    if (not settings.LOG_TO_STDOUT) and settings.LOG_DIR:
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    # records logged straight on the root logger also get a request_id
    logging.getLogger().addFilter(RequestIdFilter())

    if not settings.LOG_USE_QUEUE:
        return

    max_size = settings.LOG_QUEUE_MAX_SIZE or 0
    blocking = settings.LOG_QUEUE_BLOCKING

    root_logger = logging.getLogger()
    real_handlers = list(root_logger.handlers)
    if not real_handlers:
        return

    # detach the real handlers everywhere so they only run inside the listener thread
    moved = set(real_handlers)
    for logger_obj in list(logging.Logger.manager.loggerDict.values()):
        if isinstance(logger_obj, logging.Logger):
            for h in list(logger_obj.handlers):
                if h in moved:
                    logger_obj.removeHandler(h)
    for h in real_handlers:
        root_logger.removeHandler(h)

    log_queue: _queue.Queue = _queue.Queue(max_size) if max_size > 0 else _queue.Queue()

    if max_size > 0 and not blocking:
        qh: QueueHandler = NonBlockingQueueHandler(
            log_queue, drop_warning_threshold=settings.LOG_QUEUE_DROP_WARNING_THRESHOLD
        )
    else:
        qh = QueueHandler(log_queue)

    qh.addFilter(RequestIdFilter())
    qh.addFilter(RedactFilter())

    listener = QueueListener(log_queue, *real_handlers, respect_handler_level=True)
    listener.start()
    root_logger.addHandler(qh)

    _QUEUE_LISTENER = listener
    _QUEUE = log_queue


def stop_queue_logging() -> None:
    """Flush and stop the QueueListener, if one is running."""
    global _QUEUE_LISTENER, _QUEUE
    listener = _QUEUE_LISTENER
    if listener is None:
        return

    try:
        listener.stop()
    except RuntimeError:
        logging.getLogger(__name__).exception("Failed to stop QueueListener cleanly")
    finally:
        _QUEUE_LISTENER = None
        _QUEUE = None
