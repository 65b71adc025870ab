from .column_mapper import (
    ColumnMap,
    ColumnMapper,
    to_entity,
    to_row,
    to_snake_case,
    to_camel_case,
)

__all__ = [
    "ColumnMap",
    "ColumnMapper",
    "to_entity",
    "to_row",
    "to_snake_case",
    "to_camel_case",
]
