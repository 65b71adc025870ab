import math
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")

SortOrder = Literal["asc", "desc"]


class PaginationRequest(BaseModel):
    """
    Client pagination/sorting request (`?page=2&limit=50&sortBy=name&sortOrder=desc`).

    Values are taken as given; the repository normalizes them against its own
    bounds (page < 1 -> 1, limit clamped to [1, max_limit], unknown sortBy ->
    default sort field).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int = 1
    limit: int | None = None
    sort_by: str | None = None
    sort_order: SortOrder = "asc"

    @field_validator("sort_order", mode="before")
    def normalize_sort_order(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v


class ListOptions(BaseModel):
    pagination: PaginationRequest | None = None
    filters: dict[str, Any] | None = None


class PageMeta(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int
    page: int
    limit: int
    total_pages: int = Field(ge=1)

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PageMeta":
        # at least one page, even when there are no rows
        return cls(total=total, page=page, limit=limit, total_pages=max(1, math.ceil(total / limit)))


class PaginatedResult(BaseModel, Generic[T]):
    items: list[T]
    meta: PageMeta
