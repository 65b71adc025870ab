"""
Application-level error type.

There is one exception class, `AppError`, tagged with an `ErrorKind`. An error
either carries a catalog message code (+ params) or a raw message:

    raise AppError.from_code(MessageCode.NOT_FOUND, {"resource": "Country"})
    raise AppError.not_found("Country not found")

Business rules raise `AppError` directly. Storage and framework errors are NOT
wrapped; they propagate to the `ErrorDispatcher`, which is the only place that
turns exceptions into HTTP envelopes.
"""

import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

from ..messages import MessageCode, resolve_message, status_for
from .. import responses


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION_FAILED = "validation_failed"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return _KIND_STATUS[self]

    @classmethod
    def for_status(cls, status_code: int) -> "ErrorKind":
        """Best-matching kind for an HTTP status (anything unrecognized is INTERNAL)."""
        for kind, status in _KIND_STATUS.items():
            if status == status_code:
                return kind
        if 400 <= status_code < 500:
            return cls.BAD_REQUEST
        return cls.INTERNAL


_KIND_STATUS: dict[ErrorKind, int] = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class FieldIssue:
    """One field-level validation problem, rendered in the envelope's `details`."""

    field: str
    message: str


class AppError(Exception):
    """
    Application error with a fixed HTTP status.

    - kind: one of ErrorKind
    - status_code: HTTP status sent to the client
    - message_code / params: catalog code and template params (None for raw errors)
    - raw_message: free text used when there is no message code
    - details: optional field-level issues
    - is_operational: False for programmer errors; those never leak their message
    """

    def __init__(
        self,
        kind: ErrorKind,
        *,
        status_code: int | None = None,
        message_code: MessageCode | str | None = None,
        params: Mapping[str, Any] | None = None,
        raw_message: str | None = None,
        details: Sequence[FieldIssue] | None = None,
        is_operational: bool = True,
    ):
        if message_code is None and raw_message is None:
            raise ValueError("AppError needs either a message_code or a raw_message")

        self.kind = kind
        self.message_code = message_code
        self.params = dict(params) if params else {}
        self.raw_message = raw_message
        self.details = list(details) if details else []
        self.is_operational = is_operational
        self.status_code = status_code if status_code is not None else kind.status_code
        super().__init__(self.message)

    # ------------------------
    # constructors
    # ------------------------
    @classmethod
    def from_code(
        cls,
        code: MessageCode | str,
        params: Mapping[str, Any] | None = None,
        *,
        kind: ErrorKind | None = None,
        details: Sequence[FieldIssue] | None = None,
    ) -> "AppError":
        """Build an error from a catalog code; the status always comes from the catalog."""
        status = status_for(code)
        return cls(
            kind or ErrorKind.for_status(status),
            status_code=status,
            message_code=code,
            params=params,
            details=details,
        )

    @classmethod
    def from_message(
        cls,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.INTERNAL,
        status_code: int | None = None,
        is_operational: bool = True,
    ) -> "AppError":
        return cls(kind, status_code=status_code, raw_message=message, is_operational=is_operational)

    @classmethod
    def bad_request(cls, message: str = "Bad request") -> "AppError":
        return cls.from_message(message, kind=ErrorKind.BAD_REQUEST)

    @classmethod
    def unauthorized(cls, message: str = "Authentication required") -> "AppError":
        return cls.from_message(message, kind=ErrorKind.UNAUTHORIZED)

    @classmethod
    def forbidden(cls, message: str = "Forbidden") -> "AppError":
        return cls.from_message(message, kind=ErrorKind.FORBIDDEN)

    @classmethod
    def not_found(cls, message: str = "Resource not found") -> "AppError":
        return cls.from_message(message, kind=ErrorKind.NOT_FOUND)

    @classmethod
    def conflict(cls, message: str = "Resource already exists") -> "AppError":
        return cls.from_message(message, kind=ErrorKind.CONFLICT)

    @classmethod
    def validation_failed(
        cls, message: str = "Validation failed", details: Sequence[FieldIssue] | None = None
    ) -> "AppError":
        return cls(ErrorKind.VALIDATION_FAILED, raw_message=message, details=details)

    # ------------------------
    # rendering
    # ------------------------
    @property
    def message(self) -> str:
        if self.message_code is not None:
            return resolve_message(self.message_code, self.params).message
        return self.raw_message or ""

    def to_envelope(self, include_stack: bool = False) -> dict[str, Any]:
        """
        Render this error as an error envelope.

        Non-operational errors render as INTERNAL_ERROR unless stacks are
        included (development), so internals never reach production clients.
        """
        stack = "".join(traceback.format_exception(self)) if include_stack else None

        if not self.is_operational and not include_stack:
            return responses.error(MessageCode.INTERNAL_ERROR)

        if self.message_code is not None:
            body = responses.error(self.message_code, self.params, stack=stack, details=self.details)
            # a kind-level status override wins over the catalog
            body["statusCode"] = self.status_code
            return body

        body = responses.error_raw(self.message, self.status_code, stack=stack)
        if self.details:
            body["details"] = [{"field": d.field, "message": d.message} for d in self.details]
        return body

    def __str__(self) -> str:
        base = self.message
        if self.message_code is not None:
            return f"{base} (code: {self.message_code})"
        return base

    def __repr__(self) -> str:
        return (
            f"AppError(kind={self.kind.value!r}, status_code={self.status_code}, "
            f"message_code={str(self.message_code) if self.message_code else None!r})"
        )


__all__ = ["AppError", "ErrorKind", "FieldIssue"]
