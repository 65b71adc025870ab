"""
Generic paginated repository over a single table.

`BaseRepository[EntityT, CreateT, UpdateT]` implements find/list/create/update/
delete/count/exists for one ORM model using SQLAlchemy Core statements on the
model's table, so rows come back as plain column->value mappings and are turned
into entities through a `ColumnMapper`.

Rules every operation follows:
    - Every field name used in create/update/sort/filter goes through the column
      map. Keys the map does not declare are dropped (and logged), never sent
      to SQL and never an error.
    - Server-managed fields (id, createdAt, modifiedAt, isActive) are never
      client-settable.
    - Reads see active rows only, unless the criteria ask for `isActive` explicitly.
    - Storage errors (IntegrityError, ...) are not caught here; they propagate to
      the error dispatcher. "No row" resolves to None / False.

Model-specific repositories subclass this and add their own queries.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Generic, Iterable, Mapping, TypeVar

from pydantic import BaseModel
from sqlalchemy import ColumnElement, delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.base import Base
from ..exceptions import AppError
from ..mapping import ColumnMap, ColumnMapper, to_camel_case
from ..messages import MessageCode
from .pagination import ListOptions, PageMeta, PaginatedResult, PaginationRequest

EntityT = TypeVar("EntityT", bound=BaseModel)
CreateT = TypeVar("CreateT")
UpdateT = TypeVar("UpdateT")

Criteria = Mapping[str, Any]

# Setup logging
logger = logging.getLogger(__name__)

SERVER_MANAGED_FIELDS = frozenset({"id", "createdAt", "modifiedAt", "isActive"})

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
# OFFSET is a signed 64-bit integer in Postgres and SQLite
MAX_OFFSET = 2**63 - 1
DEFAULT_SORT_FIELD = "createdAt"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class BaseRepository(Generic[EntityT, CreateT, UpdateT]):
    """
    Generic base repository providing paginated CRUD over one table.

    Type Parameters:
        EntityT: pydantic model returned to callers (camelCase aliases).
        CreateT / UpdateT: input shapes accepted by save()/update(); either
            pydantic models or plain mappings keyed by entity field names.
    """

    def __init__(
        self,
        db: AsyncSession,
        model: type[Base],
        entity_type: type[EntityT],
        column_map: ColumnMap,
        writable_fields: Iterable[str],
        *,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
        default_sort_field: str = DEFAULT_SORT_FIELD,
        soft_delete: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            db: async session; the repository never commits, the caller owns the unit of work
            model: ORM model class whose table is queried
            entity_type: pydantic entity built from each row
            column_map: entity field -> column name; the only names allowed near SQL
            writable_fields: entity fields clients may set on create/update
            clock: returns the current time for created_at/modified_at stamps
        """
        writable = tuple(writable_fields)

        forbidden = sorted(SERVER_MANAGED_FIELDS.intersection(writable))
        if forbidden:
            raise ValueError(f"Server-managed field(s) cannot be writable: {', '.join(forbidden)}")

        unmapped = sorted(f for f in writable if f not in column_map)
        if unmapped:
            raise ValueError(f"Writable field(s) missing from the column map: {', '.join(unmapped)}")

        if not 1 <= default_limit <= max_limit:
            raise ValueError("default_limit must be between 1 and max_limit")

        self.db = db
        self.model = model
        self.table = model.__table__
        self.entity_type = entity_type
        self.mapper = ColumnMapper(column_map)
        self.writable_fields = frozenset(writable)
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.default_sort_field = default_sort_field
        self.clock = clock

        self._id_col = self.table.c[self.mapper.column_for("id")]
        self._active_col = self.table.c.get(self.mapper.column_for("isActive"))
        self._created_at_col = self.table.c.get(self.mapper.column_for("createdAt"))
        self._modified_at_col = self.table.c.get(self.mapper.column_for("modifiedAt"))
        self._created_by_col = self.table.c.get(self.mapper.column_for("createdBy"))
        self._modified_by_col = self.table.c.get(self.mapper.column_for("modifiedBy"))
        # soft delete needs an is_active column; otherwise rows are physically removed
        self.soft_delete = soft_delete and self._active_col is not None

    @property
    def model_name(self) -> str:
        return self.model.__name__

    # ------------------------
    # helpers
    # ------------------------
    def _coerce_id(self, entity_id: Any) -> Any | None:
        """Return `entity_id` as the id column's Python type, or None if it cannot be."""
        try:
            python_type = self._id_col.type.python_type
        except NotImplementedError:
            return entity_id

        if isinstance(entity_id, python_type):
            return entity_id
        try:
            if python_type is uuid.UUID:
                return uuid.UUID(str(entity_id))
            return python_type(entity_id)
        except (TypeError, ValueError, AttributeError):
            return None

    def _to_entity(self, row: Mapping[str, Any]) -> EntityT:
        return self.entity_type.model_validate(self.mapper.to_entity(row))

    def _input_fields(self, data: Any) -> dict[str, Any]:
        """Flatten a create/update input into {entityField: value}."""
        if data is None:
            return {}
        if isinstance(data, BaseModel):
            raw = data.model_dump(by_alias=True, exclude_unset=True)
        else:
            raw = dict(data)
        # accept snake_case python names as well as camelCase aliases
        return {to_camel_case(key): value for key, value in raw.items()}

    def _writable_values(self, data: Any, operation: str) -> dict[str, Any]:
        """
        Keep only writable fields and translate them to column names.
        Everything else (server-managed or unknown fields) is dropped.
        """
        fields = self._input_fields(data)
        values: dict[str, Any] = {}
        dropped: list[str] = []
        for field, value in fields.items():
            if field in self.writable_fields:
                values[self.mapper.column_for(field)] = value
            else:
                dropped.append(field)

        if dropped:
            logger.debug(
                f"repo.{operation}.dropped_fields",
                extra={"model": self.model_name, "operation": operation, "dropped_fields": sorted(dropped)},
            )
        return values

    def _criteria_clauses(self, criteria: Criteria | None, operation: str) -> list[ColumnElement[bool]]:
        """
        Translate entity-field criteria into equality clauses.

        Only fields declared in the column map become SQL; the rest are ignored.
        Reads are scoped to active rows unless the criteria mention `isActive`.
        """
        clauses: list[ColumnElement[bool]] = []
        ignored: list[str] = []
        explicit_active = False

        for field, value in (criteria or {}).items():
            column_name = self.mapper.resolve(field)
            if column_name is None or column_name not in self.table.c:
                ignored.append(field)
                continue

            column = self.table.c[column_name]
            if column is self._active_col:
                explicit_active = True
            if column is self._id_col:
                value = self._coerce_id(value)

            clauses.append(column.is_(None) if value is None else column == value)

        if ignored:
            logger.warning(
                f"repo.{operation}.ignored_criteria",
                extra={"model": self.model_name, "operation": operation, "ignored_fields": sorted(ignored)},
            )

        if self._active_col is not None and not explicit_active:
            clauses.append(self._active_col.is_(True))

        return clauses

    def _page_bounds(self, pagination: PaginationRequest | None) -> tuple[int, int]:
        """
        Return (page, limit) with limit clamped to [1, max_limit] and page clamped
        to [1, last page whose offset the database can still represent].
        """
        page = max(1, pagination.page) if pagination is not None else 1
        limit = pagination.limit if pagination is not None and pagination.limit is not None else self.default_limit
        limit = min(max(1, limit), self.max_limit)
        return min(page, MAX_OFFSET // limit + 1), limit

    def _order_by(self, pagination: PaginationRequest | None) -> list[Any]:
        sort_by = pagination.sort_by if pagination is not None else None
        sort_order = pagination.sort_order if pagination is not None else "asc"

        column_name = self.mapper.resolve(sort_by) if sort_by else None
        if column_name is None or column_name not in self.table.c:
            if sort_by:
                logger.debug(
                    "repo.sort.fallback",
                    extra={"model": self.model_name, "sort_by": sort_by, "fallback": self.default_sort_field},
                )
            column_name = self.mapper.column_for(self.default_sort_field)

        column = self.table.c[column_name]
        primary = column.desc() if sort_order == "desc" else column.asc()
        # id tie-breaker keeps page boundaries stable
        if column is self._id_col:
            return [primary]
        return [primary, self._id_col.asc()]

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        One atomic unit for read-check-write sequences.

        Uses a SAVEPOINT when a transaction is already open on the session
        (the normal case inside a request), a new transaction otherwise.
        """
        if self.db.in_transaction():
            async with self.db.begin_nested():
                yield self.db
        else:
            async with self.db.begin():
                yield self.db

    # ------------------------
    # reads
    # ------------------------
    async def find_by_id(self, entity_id: Any) -> EntityT | None:
        """
        Get an active entity by its id.

        Returns None for unknown ids and for ids that cannot be coerced to the
        id type (e.g. a malformed UUID string).
        """
        coerced = self._coerce_id(entity_id)
        if coerced is None:
            logger.debug("repo.find_by_id.invalid_id", extra={"model": self.model_name, "operation": "find_by_id"})
            return None

        stmt = select(self.table).where(self._id_col == coerced)
        if self._active_col is not None:
            stmt = stmt.where(self._active_col.is_(True))

        row = (await self.db.execute(stmt)).mappings().first()

        logger.debug(
            "repo.find_by_id.done",
            extra={"model": self.model_name, "operation": "find_by_id", "id": str(coerced), "found": row is not None},
        )
        return self._to_entity(row) if row is not None else None

    async def get_by_id_or_raise(self, entity_id: Any) -> EntityT:
        """Get an entity by its id or raise a NOT_FOUND AppError."""
        entity = await self.find_by_id(entity_id)
        if entity is None:
            raise AppError.from_code(MessageCode.NOT_FOUND, {"resource": self.model_name})
        return entity

    async def find_one(self, criteria: Criteria) -> EntityT | None:
        stmt = select(self.table).where(*self._criteria_clauses(criteria, "find_one")).limit(1)
        row = (await self.db.execute(stmt)).mappings().first()
        return self._to_entity(row) if row is not None else None

    async def find_many(self, criteria: Criteria | None, options: ListOptions | None = None) -> PaginatedResult[EntityT]:
        """
        Paginated list of active entities matching `criteria`.

        Filters from `options.filters` are merged under the explicit criteria.
        """
        start = time.perf_counter()
        pagination = options.pagination if options is not None else None
        merged: dict[str, Any] = dict(options.filters or {}) if options is not None else {}
        merged.update(criteria or {})

        clauses = self._criteria_clauses(merged, "find_many")
        page, limit = self._page_bounds(pagination)

        total = (
            await self.db.execute(select(func.count()).select_from(self.table).where(*clauses))
        ).scalar_one()

        stmt = (
            select(self.table)
            .where(*clauses)
            .order_by(*self._order_by(pagination))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).mappings().all()
        items = [self._to_entity(row) for row in rows]

        logger.debug(
            "repo.find_many.success",
            extra={
                "model": self.model_name,
                "operation": "find_many",
                "page": page,
                "limit": limit,
                "total": total,
                "duration_ms": _elapsed_ms(start),
            },
        )
        return PaginatedResult[self.entity_type](items=items, meta=PageMeta.build(total, page, limit))

    async def find_all(self, options: ListOptions | None = None) -> PaginatedResult[EntityT]:
        """Paginated list of all active entities (options.filters still apply)."""
        return await self.find_many(None, options)

    async def count(self, criteria: Criteria | None = None) -> int:
        stmt = select(func.count()).select_from(self.table).where(*self._criteria_clauses(criteria, "count"))
        return int((await self.db.execute(stmt)).scalar_one())

    async def exists(self, criteria: Criteria) -> bool:
        stmt = select(self._id_col).where(*self._criteria_clauses(criteria, "exists")).limit(1)
        return (await self.db.execute(stmt)).first() is not None

    # ------------------------
    # writes
    # ------------------------
    async def save(self, data: CreateT, *, actor: str | None = None) -> EntityT:
        """
        Insert a new entity.

        Logging:
        - DEBUG: start event with model name and provided keys (not values).
        - INFO: success event with created id and duration_ms.
        Storage errors (unique/not-null violations) propagate unchanged.
        """
        logger.debug(
            "repo.save.start",
            extra={
                "model": self.model_name,
                "operation": "save",
                "provided_keys": sorted(self._input_fields(data).keys()),
            },
        )
        start = time.perf_counter()

        values = self._writable_values(data, "save")
        now = self.clock()
        values[self._id_col.name] = uuid.uuid4()
        if self._active_col is not None:
            values[self._active_col.name] = True
        if self._created_at_col is not None:
            values[self._created_at_col.name] = now
        if self._modified_at_col is not None:
            values[self._modified_at_col.name] = now
        if actor is not None:
            if self._created_by_col is not None:
                values[self._created_by_col.name] = actor
            if self._modified_by_col is not None:
                values[self._modified_by_col.name] = actor

        stmt = insert(self.table).values(**values).returning(*self.table.c)
        row = (await self.db.execute(stmt)).mappings().one()
        entity = self._to_entity(row)

        logger.info(
            "repo.save.success",
            extra={
                "model": self.model_name,
                "operation": "save",
                "id": str(values[self._id_col.name]),
                "duration_ms": _elapsed_ms(start),
            },
        )
        return entity

    async def update(self, entity_id: Any, data: UpdateT, *, actor: str | None = None) -> EntityT | None:
        """
        Update the supplied writable fields of an active entity.

        - None values are skipped (PATCH semantics).
        - No writable field supplied -> plain find_by_id(), modifiedAt untouched.
        - Unknown id -> None.
        """
        values = {k: v for k, v in self._writable_values(data, "update").items() if v is not None}
        if not values:
            logger.debug("repo.update.noop", extra={"model": self.model_name, "operation": "update"})
            return await self.find_by_id(entity_id)

        coerced = self._coerce_id(entity_id)
        if coerced is None:
            return None

        start = time.perf_counter()
        if self._modified_at_col is not None:
            values[self._modified_at_col.name] = self.clock()
        if actor is not None and self._modified_by_col is not None:
            values[self._modified_by_col.name] = actor

        stmt = update(self.table).where(self._id_col == coerced)
        if self._active_col is not None:
            stmt = stmt.where(self._active_col.is_(True))
        stmt = stmt.values(**values).returning(*self.table.c)

        row = (await self.db.execute(stmt)).mappings().first()
        if row is None:
            logger.info(
                "repo.update.not_found",
                extra={"model": self.model_name, "operation": "update", "id": str(coerced)},
            )
            return None

        logger.info(
            "repo.update.success",
            extra={
                "model": self.model_name,
                "operation": "update",
                "id": str(coerced),
                "updated_fields": sorted(values.keys()),
                "duration_ms": _elapsed_ms(start),
            },
        )
        return self._to_entity(row)

    async def delete(self, entity_id: Any, *, actor: str | None = None) -> bool:
        """
        Delete an entity by id.

        Soft delete (is_active -> false, modified_at stamped) when the table has
        an is_active column, physical delete otherwise. Returns True iff an
        active row existed; unknown ids return False.
        """
        coerced = self._coerce_id(entity_id)
        if coerced is None:
            return False

        start = time.perf_counter()
        if self.soft_delete:
            values: dict[str, Any] = {self._active_col.name: False}
            if self._modified_at_col is not None:
                values[self._modified_at_col.name] = self.clock()
            if actor is not None and self._modified_by_col is not None:
                values[self._modified_by_col.name] = actor
            stmt = (
                update(self.table)
                .where(self._id_col == coerced, self._active_col.is_(True))
                .values(**values)
            )
        else:
            stmt = delete(self.table).where(self._id_col == coerced)

        result = await self.db.execute(stmt)
        deleted = result.rowcount > 0

        if deleted:
            logger.info(
                "repo.delete.success",
                extra={
                    "model": self.model_name,
                    "operation": "delete",
                    "id": str(coerced),
                    "soft": self.soft_delete,
                    "duration_ms": _elapsed_ms(start),
                },
            )
        else:
            logger.info("repo.delete.not_found", extra={"model": self.model_name, "operation": "delete", "id": str(coerced)})
        return deleted
