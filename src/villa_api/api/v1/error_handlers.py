"""
FastAPI exception handlers that render errors escaping a route as Failure envelopes.

The villa service already turns its own errors into envelopes, so these handlers
only see what happens outside it: request-body validation, errors raised by
dependencies, and anything truly unexpected. Clients get the same
`{"statusCode", "isSuccess", "errorMessages", "result"}` shape in every case.

Register them from the app factory:

    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from villa_api.exceptions.base import RepositoryError
from villa_api.schemas.api_response import APIResponse

logger = logging.getLogger(__name__)


def _failure(status_code: int, *messages: str) -> JSONResponse:
    envelope = APIResponse.failure(status_code, *messages)
    return JSONResponse(status_code=status_code, content=envelope.to_content())


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    """
    App-level errors keep the status of their error code (400 by default).
    """
    logger.warning(
        "http.repository_error",
        extra={"method": request.method, "path": request.url.path, "error_code": exc.error_code},
    )
    return _failure(exc.http_status(), exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Malformed JSON or wrongly typed fields -> 400, one message per problem.
    """
    messages = [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ] or ["Invalid request"]
    logger.info(
        "http.validation_error",
        extra={"method": request.method, "path": request.url.path, "errors": len(messages)},
    )
    return _failure(status.HTTP_400_BAD_REQUEST, *messages)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last resort -> 500 with the exception text as the only message.
    """
    logger.exception(
        "http.unhandled_error",
        extra={"method": request.method, "path": request.url.path},
    )
    return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or type(exc).__name__)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RepositoryError, repository_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
