"""
Classification of SQLAlchemy `IntegrityError`s.

Storage errors are never wrapped by repositories: they propagate to the error
dispatcher, which calls `integrity_error_to_app_error()` to turn them into a
catalog-coded `AppError`.

Two levels:
    1. `classify_integrity_error()` works out WHAT failed in the database
       (unique / not-null / foreign key / check) and, best effort, which columns and constraint
       were involved and on which table. Postgres SQLSTATE codes are preferred;
       SQLite/MySQL fall back to message heuristics.
    2. `integrity_error_to_app_error()` maps that classification to an app-level
       message code the client can act on:

        | ConstraintKind | MessageCode       | params                    |
        | -------------- | ----------------- | ------------------------- |
        | UNIQUE         | DUPLICATE_ENTRY   | resource, field           |
        | NOT_NULL       | FIELD_REQUIRED    | field                     |
        | FOREIGN_KEY    | INVALID_INPUT     | reason                    |
        | CHECK          | INVALID_INPUT     | reason                    |
        | UNKNOWN        | INTERNAL_ERROR    |                           |

Raw database messages are only ever logged at DEBUG; they never reach clients.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from sqlalchemy.exc import IntegrityError

from ..mapping import to_camel_case
from ..messages import MessageCode
from .base import AppError

logger = logging.getLogger(__name__)


class ConstraintKind(str, Enum):
    UNIQUE = "unique"
    NOT_NULL = "not_null"
    FOREIGN_KEY = "foreign_key"
    CHECK = "check"
    UNKNOWN = "unknown"


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"


PGCODE_KIND_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION.value: ConstraintKind.UNIQUE,
    PostgresErrorCodes.NOT_NULL_VIOLATION.value: ConstraintKind.NOT_NULL,
    PostgresErrorCodes.FOREIGN_KEY_VIOLATION.value: ConstraintKind.FOREIGN_KEY,
    PostgresErrorCodes.CHECK_VIOLATION.value: ConstraintKind.CHECK,
}


@dataclass(frozen=True)
class IntegrityInfo:
    kind: ConstraintKind
    constraint: str | None = None
    columns: list[str] = field(default_factory=list)
    table: str | None = None


# =================================================================================================================
# Classification
# =================================================================================================================

def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def _pg_sqlstate(orig) -> str | None:
    # psycopg exposes `pgcode`; the asyncpg adapter exposes `sqlstate` (and `pgcode`)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _pg_constraint_name(orig) -> str | None:
    diag = getattr(orig, "diag", None)
    if diag is not None and getattr(diag, "constraint_name", None):
        return diag.constraint_name
    # asyncpg: the driver exception is chained as the cause of the adapted one
    cause = getattr(orig, "__cause__", None)
    return getattr(cause, "constraint_name", None)


def _pg_table_name(orig) -> str | None:
    diag = getattr(orig, "diag", None)
    if diag is not None and getattr(diag, "table_name", None):
        return diag.table_name
    cause = getattr(orig, "__cause__", None)
    return getattr(cause, "table_name", None)


def _classify_from_postgres_diag(orig) -> tuple[ConstraintKind | None, str | None]:
    sqlstate = _pg_sqlstate(orig)
    if not sqlstate:
        return None, None

    constraint_name = _pg_constraint_name(orig)
    kind = PGCODE_KIND_MAP.get(sqlstate)

    if kind is not None:
        logger.debug("Postgres integrity diagnostic", extra={"pgcode": sqlstate, "constraint_name": constraint_name})
        return kind, constraint_name

    logger.warning(
        "Unknown Postgres integrity error code encountered",
        extra={"pgcode": sqlstate, "constraint_name": constraint_name},
    )
    return ConstraintKind.UNKNOWN, constraint_name


def _classify_from_generic_message(msg: str) -> ConstraintKind:
    """Fallback for SQLite, MySQL and drivers without SQLSTATE."""
    normalized = msg.lower()

    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate"]):
        return ConstraintKind.UNIQUE

    if _match_any(normalized, ["not null constraint", "not null", "null value in column", "cannot be null"]):
        return ConstraintKind.NOT_NULL

    if _match_any(normalized, ["foreign key constraint", "foreign key", "is not present in table"]):
        return ConstraintKind.FOREIGN_KEY

    if _match_any(normalized, ["check constraint", "check failed"]):
        return ConstraintKind.CHECK

    logger.warning("Unknown integrity error message encountered", extra={"message_snippet": (msg or "")[:200]})
    logger.debug("Unknown integrity raw message", extra={"raw": msg})
    return ConstraintKind.UNKNOWN


# -----------------------
# Column / constraint extraction
# -----------------------

def _extract_columns_postgres(msg: str) -> list[str]:
    """
    - 'null value in column "code" of relation "countries" violates not-null constraint'
    - 'DETAIL:  Key (code)=(US) already exists.'
    - 'DETAIL:  Key (tenant_id, code)=(..., US) already exists.'
    """
    m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]

    m = re.search(r'key \((?P<cols>[^)]+)\)=', msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    return []


def _extract_columns_sqlite(msg: str) -> list[str]:
    # 'UNIQUE constraint failed: countries.code' / 'NOT NULL constraint failed: countries.name'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>[\w.,\s]+)', msg, flags=re.IGNORECASE)
    if m:
        return [c.split(".")[-1].strip() for c in re.split(r",\s*", m.group("cols").strip())]
    return []


def _extract_columns_mysql(msg: str) -> list[str]:
    # "Column 'name' cannot be null"
    m = re.search(r"Column '(?P<col>[^']+)' cannot be null", msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]
    return []


def _extract_constraint_name(msg: str) -> str | None:
    # Postgres: 'violates unique constraint "uq_countries_code"'
    m = re.search(r'constraint "(?P<name>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return m.group("name")
    # MySQL: "Duplicate entry 'US' for key 'countries.uq_countries_code'"
    m = re.search(r"for key '(?P<name>[^']+)'", msg, flags=re.IGNORECASE)
    if m:
        return m.group("name").split(".")[-1]
    return None


def _extract_table_name(msg: str, statement: str | None) -> str | None:
    # SQLite: 'UNIQUE constraint failed: countries.code'
    m = re.search(r"constraint failed: (?P<table>\w+)\.", msg, flags=re.IGNORECASE)
    if m:
        return m.group("table")
    # Postgres: 'null value in column "code" of relation "countries" ...'
    m = re.search(r'relation "(?P<table>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return m.group("table")
    # last resort: the statement that failed
    if statement:
        m = re.match(r'\s*(?:INSERT\s+INTO|UPDATE)\s+"?(?P<table>\w+)"?', statement, flags=re.IGNORECASE)
        if m:
            return m.group("table")
    return None


def extract_columns_from_integrity(exc: IntegrityError) -> list[str]:
    """Best-effort extraction of column names from the DB message (Postgres, SQLite, MySQL)."""
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)

    for extractor in (_extract_columns_postgres, _extract_columns_sqlite, _extract_columns_mysql):
        cols = extractor(msg)
        if cols:
            return cols
    return []


def classify_integrity_error(exc: IntegrityError) -> IntegrityInfo:
    """Classify a SQLAlchemy IntegrityError: constraint kind, constraint name, columns, table."""
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)

    kind, constraint_name = _classify_from_postgres_diag(orig)
    if kind is None:
        kind = _classify_from_generic_message(msg)

    return IntegrityInfo(
        kind=kind,
        constraint=constraint_name or _extract_constraint_name(msg),
        columns=extract_columns_from_integrity(exc),
        table=_pg_table_name(orig) or _extract_table_name(msg, exc.statement),
    )


# =================================================================================================================
# Mapping to app-level errors
# =================================================================================================================

def _field_label(columns: list[str], fallback: str) -> str:
    if not columns:
        return fallback
    return ", ".join(to_camel_case(col) for col in columns)


def integrity_error_to_app_error(
    exc: IntegrityError,
    resource: str | None = None,
    *,
    table_resources: Mapping[str, str] | None = None,
) -> AppError:
    """
    Map a storage constraint violation to a catalog-coded AppError.

    The resource named in messages is `resource` when given, else the entity
    registered for the failing table in `table_resources`, else "Record".
    """
    info = classify_integrity_error(exc)
    if resource is None:
        resource = (table_resources or {}).get(info.table or "", "Record")
    log_extra = {"resource": resource, "table": info.table, "fields": info.columns, "constraint": info.constraint}

    if info.kind is ConstraintKind.UNIQUE:
        # expected client-level scenario (409); INFO is enough
        logger.info("integrity.duplicate_detected", extra=log_extra)
        return AppError.from_code(
            MessageCode.DUPLICATE_ENTRY,
            {"resource": resource, "field": _field_label(info.columns, "field")},
        )

    if info.kind is ConstraintKind.NOT_NULL:
        logger.info("integrity.not_null_violation", extra=log_extra)
        return AppError.from_code(MessageCode.FIELD_REQUIRED, {"field": _field_label(info.columns, "Field")})

    if info.kind is ConstraintKind.FOREIGN_KEY:
        logger.info("integrity.foreign_key_violation", extra=log_extra)
        return AppError.from_code(
            MessageCode.INVALID_INPUT,
            {"reason": f"referenced {_field_label(info.columns, 'entity')} does not exist"},
        )

    if info.kind is ConstraintKind.CHECK:
        logger.info("integrity.check_violation", extra=log_extra)
        return AppError.from_code(MessageCode.INVALID_INPUT, {"reason": f"{resource} business rule violated"})

    logger.warning("integrity.unknown_error", extra=log_extra)
    logger.debug("integrity.unknown_error_raw", extra={"resource": resource, "raw": str(exc.orig)})
    return AppError.from_code(MessageCode.INTERNAL_ERROR)


__all__ = [
    "ConstraintKind",
    "PostgresErrorCodes",
    "IntegrityInfo",
    "classify_integrity_error",
    "extract_columns_from_integrity",
    "integrity_error_to_app_error",
]
