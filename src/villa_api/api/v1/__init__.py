from .villas import router as villa_router
from .error_handlers import register_exception_handlers

__all__ = ["villa_router", "register_exception_handlers"]
