"""
Request id middleware.

Reuses a sane incoming `X-Request-ID` (so an upstream proxy's id carries through)
or generates a UUID4, stores it for `RequestIdFilter`, and echoes it on the response.
"""

import re
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from .filters import set_request_id, reset_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# printable token, no whitespace; keeps newlines and huge values out of the logs
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(REQUEST_ID_HEADER)
        rid = incoming if incoming and _VALID_REQUEST_ID.match(incoming) else str(uuid.uuid4())

        token = set_request_id(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)
