from .codes import MessageCode
from .catalog import MESSAGE_CATALOG, MessageEntry
from .resolver import ResolvedMessage, interpolate, resolve_message, status_for

__all__ = [
    "MessageCode",
    "MESSAGE_CATALOG",
    "MessageEntry",
    "ResolvedMessage",
    "interpolate",
    "resolve_message",
    "status_for",
]
