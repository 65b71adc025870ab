"""
JSON response envelopes.

Every response body produced by a service has one of two shapes:

    success: {"success": true, "messageCode"?, "message"?, "data"?, "timestamp"}
    error:   {"success": false, "messageCode"?, "error", "statusCode", "timestamp",
              "stack"?, "details"?}

These functions only build dicts; choosing the HTTP status and writing the
response is the caller's job (see `servicecore.api.responses`).
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from pydantic_core import to_jsonable_python

from .messages import MessageCode, resolve_message


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# distinguishes "no data argument" from an explicit `data=None`
UNSET: Any = _Unset()


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a `Z` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _jsonable(value: Any) -> Any:
    return to_jsonable_python(value, by_alias=True)


def success(
    data: Any = UNSET,
    code: MessageCode | str | None = None,
    params: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}

    if code is not None:
        resolved = resolve_message(code, params)
        body["messageCode"] = resolved.code
        body["message"] = resolved.message

    if data is not UNSET:
        body["data"] = _jsonable(data)

    body["timestamp"] = utc_timestamp()
    return body


def error(
    code: MessageCode | str,
    params: Mapping[str, Any] | None = None,
    stack: str | None = None,
    details: Sequence[Any] | None = None,
) -> dict[str, Any]:
    resolved = resolve_message(code, params)
    body: dict[str, Any] = {
        "success": False,
        "messageCode": resolved.code,
        "error": resolved.message,
        "statusCode": resolved.status,
        "timestamp": utc_timestamp(),
    }
    if stack:
        body["stack"] = stack
    if details:
        body["details"] = _jsonable(list(details))
    return body


def error_raw(message: str, status_code: int = 500, stack: str | None = None) -> dict[str, Any]:
    """Error envelope for a free-text message that has no catalog code."""
    body: dict[str, Any] = {
        "success": False,
        "error": message,
        "statusCode": status_code,
        "timestamp": utc_timestamp(),
    }
    if stack:
        body["stack"] = stack
    return body


def success_paginated(
    items: Sequence[Any],
    meta: Any,
    code: MessageCode | str | None = None,
    params: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    return success({"items": list(items), "meta": meta}, code, params)
