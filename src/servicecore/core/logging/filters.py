"""
Logging filters.

- RequestIdFilter: stamps `record.request_id` from a contextvar set by the HTTP
  middleware, so every line of one request can be correlated.
- RedactFilter: masks sensitive keys passed through `extra={...}`, including
  keys nested inside dict/list extras.

The request id lives in a `contextvars.ContextVar`, which follows asyncio tasks
across awaits (threading.local() would not).
"""

import contextvars
import logging
import re
from logging import LogRecord
from typing import Any

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)

# incoming ids are echoed into logs and headers; keep them short and printable
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")

REDACTED = "***REDACTED***"


def set_request_id(request_id: str | None) -> contextvars.Token:
    """Set the request id for the current context; returns a token for reset_request_id()."""
    return _request_id_ctx.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


def is_safe_request_id(value: str | None) -> bool:
    """True when `value` can be trusted as a correlation id (no newlines, bounded length)."""
    return bool(value) and _SAFE_REQUEST_ID.match(value) is not None


class RequestIdFilter(logging.Filter):
    """
    Guarantee every LogRecord has a `request_id` attribute.

    Precedence: an explicit `extra={"request_id": ...}`, then the contextvar,
    then the sentinel "-" so `%(request_id)s` never raises KeyError.
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = getattr(record, "request_id", None) or get_request_id() or "-"
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = frozenset(
        {"password", "secret", "token", "access_token", "refresh_token", "ssn", "authorization", "cookie"}
    )

    def _scrub(self, value: Any, depth: int = 0) -> Any:
        if depth > 5:
            return value
        if isinstance(value, dict):
            return {
                k: REDACTED if isinstance(k, str) and k.lower() in self.SENSITIVE else self._scrub(v, depth + 1)
                for k, v in value.items()
            }
        if isinstance(value, (list, tuple)):
            return type(value)(self._scrub(v, depth + 1) for v in value)
        return value

    def filter(self, record: LogRecord) -> bool:
        for key, value in list(record.__dict__.items()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = REDACTED
            elif isinstance(value, (dict, list)) and key not in ("args",):
                record.__dict__[key] = self._scrub(value)
        return True
