# escolas/core/logging/middleware.py
"""
Request ID middleware.

Every request gets an id: the incoming `X-Request-ID` header when it looks
sane, a fresh UUID4 otherwise. The id is stored in the request-id contextvar
for the duration of the request (so RequestIdFilter stamps it on every log
record) and echoed back in the `X-Request-ID` response header.

Register it before the routers:

    app.add_middleware(RequestIDMiddleware)
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .filters import set_request_id, reset_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Opaque ids only: no whitespace or control characters (log injection), bounded length.
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def _resolve_request_id(incoming: str | None) -> str:
    if incoming and _VALID_REQUEST_ID.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = _resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = set_request_id(rid)
        start = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid

            logger.info(
                "http.request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                },
            )
            return response
        finally:
            reset_request_id(token)
