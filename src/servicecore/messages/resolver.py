import logging
import re
from typing import Any, Mapping, NamedTuple

from .catalog import MESSAGE_CATALOG
from .codes import MessageCode

logger = logging.getLogger(__name__)

UNKNOWN_CODE_STATUS = 500

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


class ResolvedMessage(NamedTuple):
    code: str
    status: int
    message: str


def _coerce_code(code: MessageCode | str) -> MessageCode | None:
    if isinstance(code, MessageCode):
        return code
    try:
        return MessageCode(code)
    except ValueError:
        return None


def interpolate(template: str, params: Mapping[str, Any] | None = None) -> str:
    """
    Replace every literal `{key}` in `template` with `str(value)`.

    Placeholders without a matching param stay as-is; this is plain text
    substitution, not `str.format`, so stray braces never raise.
    """
    if not params:
        return template

    def _replace(match: re.Match) -> str:
        key = match.group(1)
        return str(params[key]) if key in params else match.group(0)

    # single pass: substituted values are never re-scanned
    return _PLACEHOLDER.sub(_replace, template)


def resolve_message(code: MessageCode | str, params: Mapping[str, Any] | None = None) -> ResolvedMessage:
    """
    Look up `code` in the catalog and interpolate `params` into its template.

    Never raises: an unknown code resolves to status 500 with
    "Unknown message code: <code>".
    """
    member = _coerce_code(code)
    if member is None:
        logger.warning("messages.resolve.unknown_code", extra={"message_code": str(code)})
        return ResolvedMessage(str(code), UNKNOWN_CODE_STATUS, f"Unknown message code: {code}")

    entry = MESSAGE_CATALOG[member]
    return ResolvedMessage(member.value, entry.status, interpolate(entry.message, params))


def status_for(code: MessageCode | str) -> int:
    member = _coerce_code(code)
    if member is None:
        return UNKNOWN_CODE_STATUS
    return MESSAGE_CATALOG[member].status
