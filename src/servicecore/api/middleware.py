"""Request body size limit and the in-scope catch-all for unhandled errors."""

import logging

from starlette.requests import Request
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.responses import JSONResponse

from ..exceptions import ErrorDispatcher, PayloadTooLargeError

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject requests whose declared Content-Length exceeds `max_bytes` with a 413
    envelope rendered by the error dispatcher.

    Chunked bodies without Content-Length are not measured here.
    """

    def __init__(self, app, *, max_bytes: int, dispatcher: ErrorDispatcher):
        super().__init__(app)
        self.max_bytes = max_bytes
        self.dispatcher = dispatcher

    async def dispatch(self, request: Request, call_next):
        declared = request.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_bytes:
            response = self.dispatcher.dispatch(
                PayloadTooLargeError(self.max_bytes),
                method=request.method,
                path=request.url.path,
            )
            return JSONResponse(status_code=response.status_code, content=response.body)
        return await call_next(request)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Turn exceptions no exception handler claimed into a 500 envelope.

    Must sit inside RequestIDMiddleware: the failure is then logged with the
    request id and the response still carries the X-Request-ID header. The
    app-level `Exception` handler only runs in the outermost server-error
    layer, after the request id has been reset.
    """

    def __init__(self, app, *, dispatcher: ErrorDispatcher):
        super().__init__(app)
        self.dispatcher = dispatcher

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            response = self.dispatcher.dispatch(exc, method=request.method, path=request.url.path)
            return JSONResponse(status_code=response.status_code, content=response.body)
