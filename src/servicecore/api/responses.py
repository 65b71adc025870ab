"""
Success responses for route handlers.

The HTTP status is always the one the message catalog assigns to the code,
so a CREATED response is a 201 without the route repeating it.
"""

from typing import Any, Mapping

from fastapi.responses import JSONResponse

from .. import responses
from ..messages import MessageCode, status_for
from ..repositories.pagination import PaginatedResult


def send_success(
    data: Any = responses.UNSET,
    code: MessageCode = MessageCode.FETCHED,
    params: Mapping[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(status_code=status_for(code), content=responses.success(data, code, params))


def send_paginated(
    result: PaginatedResult,
    code: MessageCode = MessageCode.LIST_FETCHED,
    params: Mapping[str, Any] | None = None,
) -> JSONResponse:
    body = responses.success_paginated(result.items, result.meta, code, params)
    return JSONResponse(status_code=status_for(code), content=body)
