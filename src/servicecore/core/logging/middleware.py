"""
Request id + access log middleware for FastAPI / Starlette.

For every request:
  1. take `X-Request-ID` from the client when it is safe, else generate a UUID4;
  2. store it in the request-id contextvar so RequestIdFilter stamps every log line;
  3. echo it back in the `X-Request-ID` response header;
  4. log one access line: method, path, status, duration_ms.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .filters import is_safe_request_id, reset_request_id, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"

logger = logging.getLogger("servicecore.access")


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(REQUEST_ID_HEADER)
        rid = incoming if is_safe_request_id(incoming) else str(uuid.uuid4())

        token = set_request_id(rid)
        start = time.perf_counter()
        status = 500
        try:
            # exceptions propagate to the framework's error handlers
            response = await call_next(request)
            status = response.status_code
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.info(
                "http.request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": status,
                    "duration_ms": duration_ms,
                },
            )
            reset_request_id(token)
