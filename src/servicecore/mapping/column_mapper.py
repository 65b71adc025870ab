"""
Bidirectional mapping between entity field names and storage column names.

Entities expose camel-style field names (`createdAt`, `tenantId`); tables use
snake-style columns (`created_at`, `tenant_id`). A `ColumnMap` declares the pairs
explicitly; anything not declared falls back to a naming convention.

Two lookups exist on purpose:
    - `column_for()` / `field_for()` always return a name (map first, convention second).
      Used when translating rows we read and inputs we already filtered.
    - `resolve()` consults the explicit map only and returns None otherwise.
      Used for client-supplied filter/sort keys, so arbitrary keys never reach SQL.
"""

import re
from types import MappingProxyType
from typing import Any, Mapping

# entity field (camelCase) -> storage column (snake_case)
ColumnMap = Mapping[str, str]

# "HTTPServer" -> "HTTP_Server": a run of capitals followed by a capitalized word
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
# "myURL" -> "my_URL", "createdAt" -> "created_At"
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SNAKE_SEGMENT = re.compile(r"_([a-z0-9])")


def to_snake_case(name: str) -> str:
    """
    Convert a camel-style name to snake_case.

    Runs of uppercase letters are treated as one word:
        createdAt  -> created_at
        myURL      -> my_url
        HTTPServer -> http_server
    """
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _WORD_BOUNDARY.sub(r"\1_\2", name)
    return name.lower()


def to_camel_case(name: str) -> str:
    """
    Convert a snake_case name to camelCase (created_at -> createdAt).

    Acronyms cannot be recovered: my_url -> myUrl.
    """
    return _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), name)


class ColumnMapper:
    """
    Translate between entity-shaped dicts and row-shaped dicts.

    The mapper is immutable after construction and safe to share between
    repositories and requests.
    """

    def __init__(self, column_map: ColumnMap | None = None):
        self._columns: Mapping[str, str] = MappingProxyType(dict(column_map or {}))
        self._fields: Mapping[str, str] = MappingProxyType(
            {column: field for field, column in self._columns.items()}
        )

    @property
    def column_map(self) -> Mapping[str, str]:
        return self._columns

    @property
    def fields(self) -> tuple[str, ...]:
        """Entity field names declared in the map, in declaration order."""
        return tuple(self._columns.keys())

    def column_for(self, field: str) -> str:
        return self._columns.get(field) or to_snake_case(field)

    def field_for(self, column: str) -> str:
        return self._fields.get(column) or to_camel_case(column)

    def resolve(self, field: str) -> str | None:
        """Return the mapped column for `field`, or None when the map does not declare it."""
        return self._columns.get(field)

    def to_entity(self, row: Mapping[str, Any]) -> dict[str, Any]:
        return {self.field_for(column): value for column, value in row.items()}

    def to_row(self, entity: Mapping[str, Any]) -> dict[str, Any]:
        return {self.column_for(field): value for field, value in entity.items()}

    def __repr__(self) -> str:
        return f"<ColumnMapper fields={list(self._columns)!r}>"


def to_entity(row: Mapping[str, Any], column_map: ColumnMap | None = None) -> dict[str, Any]:
    """Convert a storage row to an entity-shaped dict (camelCase keys only)."""
    return ColumnMapper(column_map).to_entity(row)


def to_row(entity: Mapping[str, Any], column_map: ColumnMap | None = None) -> dict[str, Any]:
    """Convert an entity-shaped dict to a storage row keyed by column names."""
    return ColumnMapper(column_map).to_row(entity)
