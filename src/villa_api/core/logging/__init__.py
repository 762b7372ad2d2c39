# villa_api/core/logging/
# ├─ __init__.py      # public API
# ├─ builder.py       # make_dict_config(settings), setup_logging(settings), stop_queue_logging()
# ├─ formatters.py    # JsonFormatter, ColorFormatter
# ├─ filters.py       # RequestIdFilter, RedactFilter (+ contextvar helpers)
# ├─ handlers.py      # handler config factories (console / file / error)
# └─ middleware.py    # RequestIDMiddleware

from .builder import setup_logging, make_dict_config, stop_queue_logging
from .filters import set_request_id, get_request_id, RequestIdFilter
from .middleware import RequestIDMiddleware

__all__ = [
    "setup_logging",
    "make_dict_config",
    "stop_queue_logging",
    "set_request_id",
    "get_request_id",
    "RequestIdFilter",
    "RequestIDMiddleware",
]
