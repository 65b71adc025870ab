"""
Central exception -> error envelope translation.

`ErrorDispatcher.dispatch()` is the only place where exceptions become HTTP
responses. Order of specificity:

    1. transport failures (malformed body, oversized body, unknown route,
       request validation, framework HTTP errors)
    2. storage constraint violations (SQLAlchemy IntegrityError)
    3. AppError with a message code
    4. AppError with a raw message
    5. anything else -> INTERNAL_ERROR

Every branch logs method, path and status: ERROR (with traceback) for 5xx,
WARNING for 4xx.
"""

import logging
import traceback
from typing import Any, Mapping, NamedTuple

from sqlalchemy.exc import IntegrityError

from .. import responses
from ..messages import MessageCode
from .base import AppError
from .external import (
    HttpStatusError,
    MalformedBody,
    PayloadTooLarge,
    RequestValidation,
    RouteNotFound,
    TransportError,
    classify_transport_error,
)
from .integrity_classifier import integrity_error_to_app_error

logger = logging.getLogger(__name__)


class ErrorResponse(NamedTuple):
    status_code: int
    body: dict[str, Any]


class ErrorDispatcher:
    """
    Turn any exception into an `ErrorResponse`.

    include_stack: attach formatted tracebacks to envelopes and show the real
    message of non-operational errors. Enable in development only.
    table_resources: table name -> resource name used in constraint-violation
    messages ("countries" -> "Country"). Unknown tables read as "Record".
    """

    def __init__(self, include_stack: bool = False, table_resources: Mapping[str, str] | None = None):
        self.include_stack = include_stack
        self.table_resources = dict(table_resources or {})

    def _stack(self, exc: BaseException) -> str | None:
        if not self.include_stack:
            return None
        return "".join(traceback.format_exception(exc))

    # ------------------------
    # rendering
    # ------------------------
    def _render_transport(self, shape: TransportError) -> dict[str, Any]:
        if isinstance(shape, MalformedBody):
            return responses.error(MessageCode.BAD_REQUEST, {"reason": shape.reason})

        if isinstance(shape, PayloadTooLarge):
            return responses.error_raw(shape.message, 413)

        if isinstance(shape, RouteNotFound):
            return responses.error(MessageCode.NOT_FOUND, {"resource": "Route"})

        if isinstance(shape, HttpStatusError):
            return responses.error_raw(shape.detail, shape.status_code)

        if isinstance(shape, RequestValidation):
            if shape.all_missing:
                return responses.error(
                    MessageCode.FIELD_REQUIRED,
                    {"field": " and ".join(shape.fields)},
                    details=shape.issues,
                )
            if shape.location != "body":
                return responses.error(MessageCode.INVALID_INPUT, {"reason": shape.reason}, details=shape.issues)
            return responses.error(MessageCode.VALIDATION_FAILED, {"reason": shape.reason}, details=shape.issues)

        raise TypeError(f"Unhandled transport shape: {shape!r}")

    def render(self, exc: BaseException) -> ErrorResponse:
        """Build the envelope for `exc` without logging."""
        shape = classify_transport_error(exc)
        if shape is not None:
            body = self._render_transport(shape)
        elif isinstance(exc, IntegrityError):
            app_error = integrity_error_to_app_error(exc, table_resources=self.table_resources)
            body = app_error.to_envelope(include_stack=False)
            stack = self._stack(exc)
            if stack:
                body["stack"] = stack
        elif isinstance(exc, AppError):
            body = exc.to_envelope(include_stack=self.include_stack)
        else:
            # status-like attributes on unknown errors are ignored
            body = responses.error(MessageCode.INTERNAL_ERROR, stack=self._stack(exc))

        return ErrorResponse(status_code=body["statusCode"], body=body)

    # ------------------------
    # dispatch
    # ------------------------
    def dispatch(
        self,
        exc: BaseException,
        *,
        method: str,
        path: str,
        response_started: bool = False,
    ) -> ErrorResponse | None:
        """
        Render and log `exc`.

        Returns None when the response has already started: headers are on
        the wire, so nothing more can be written.
        """
        response = self.render(exc)
        status = response.status_code
        extra = {
            "method": method,
            "path": path,
            "status": status,
            "message_code": response.body.get("messageCode"),
            "error_type": type(exc).__name__,
        }

        if status >= 500:
            logger.error("request.failed", extra=extra, exc_info=(type(exc), exc, exc.__traceback__))
        else:
            logger.warning("request.rejected", extra=extra)

        if response_started:
            logger.warning("request.error_after_response_started", extra={"method": method, "path": path})
            return None

        return response


__all__ = ["ErrorDispatcher", "ErrorResponse"]
