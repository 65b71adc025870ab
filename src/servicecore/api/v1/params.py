from typing import Annotated

from fastapi import Query

from ...repositories.pagination import PaginationRequest


def pagination_params(
    page: Annotated[int, Query(description="1-based page number")] = 1,
    limit: Annotated[int | None, Query(description="Page size, capped by the service")] = None,
    sort_by: Annotated[str | None, Query(alias="sortBy")] = None,
    sort_order: Annotated[str, Query(alias="sortOrder", pattern=r"^(?i:asc|desc)$")] = "asc",
) -> PaginationRequest:
    return PaginationRequest(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
