"""
Immutable catalog of message codes -> (HTTP status, message template).

Templates use `{placeholder}` tokens filled in by `resolve_message()`.
The catalog is built once at import time and exposed read-only.
"""

from types import MappingProxyType
from typing import Mapping, NamedTuple

from .codes import MessageCode


class MessageEntry(NamedTuple):
    status: int
    message: str


_ENTRIES: dict[MessageCode, MessageEntry] = {
    # success
    MessageCode.CREATED: MessageEntry(201, "{resource} created successfully"),
    MessageCode.UPDATED: MessageEntry(200, "{resource} updated successfully"),
    MessageCode.DELETED: MessageEntry(200, "{resource} deleted successfully"),
    MessageCode.FETCHED: MessageEntry(200, "{resource} fetched successfully"),
    MessageCode.LIST_FETCHED: MessageEntry(200, "{resource} list fetched successfully"),

    # client errors
    MessageCode.BAD_REQUEST: MessageEntry(400, "Bad request: {reason}"),
    MessageCode.VALIDATION_FAILED: MessageEntry(422, "Validation failed: {reason}"),
    MessageCode.FIELD_REQUIRED: MessageEntry(422, "{field} is required"),
    MessageCode.INVALID_INPUT: MessageEntry(422, "Invalid input: {reason}"),

    # auth
    MessageCode.UNAUTHORIZED: MessageEntry(401, "Authentication required"),
    MessageCode.FORBIDDEN: MessageEntry(403, "You do not have permission to perform this action"),
    MessageCode.INVALID_CREDENTIALS: MessageEntry(401, "Invalid credentials"),
    MessageCode.TOKEN_EXPIRED: MessageEntry(401, "Token has expired"),

    # resource
    MessageCode.NOT_FOUND: MessageEntry(404, "{resource} not found"),
    MessageCode.CONFLICT: MessageEntry(409, "{resource} already exists"),
    MessageCode.DUPLICATE_ENTRY: MessageEntry(409, "{resource} with this {field} already exists"),
    MessageCode.DUPLICATE_EMAIL: MessageEntry(409, "Email {email} is already in use"),

    # server
    MessageCode.INTERNAL_ERROR: MessageEntry(500, "An unexpected error occurred"),
    MessageCode.SERVICE_UNAVAILABLE: MessageEntry(503, "Service is temporarily unavailable"),
}

MESSAGE_CATALOG: Mapping[MessageCode, MessageEntry] = MappingProxyType(_ENTRIES)

# every code must have an entry; fail at import rather than at request time
_missing = set(MessageCode) - set(_ENTRIES)
if _missing:
    raise RuntimeError(f"Message catalog is missing entries for: {sorted(c.value for c in _missing)}")
