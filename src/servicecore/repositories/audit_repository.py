"""
Audit trail storage.

`AuditRepository` is the interface the audit service writes through:

    - InMemoryAuditRepository: process-local list, for tests and tools.
    - SqlAuditRepository: the `audit_log` table, on the caller's session so an
      entry commits or rolls back together with the change it records.
"""

import logging
import uuid
from typing import Any, Mapping, Protocol

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.audit_log import AuditLog
from ..schemas.audit import AuditEntry

logger = logging.getLogger(__name__)


class AuditRepository(Protocol):

    async def save(self, entry: AuditEntry) -> AuditEntry:
        """Store `entry` and return it with its id assigned."""
        ...

    async def find_by_id(self, entry_id: Any) -> AuditEntry | None:
        ...

    async def find_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEntry]:
        """Entries for one entity, oldest first."""
        ...


def _coerce_uuid(value: Any) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


class InMemoryAuditRepository:

    def __init__(self):
        self._entries: list[AuditEntry] = []

    @property
    def entries(self) -> tuple[AuditEntry, ...]:
        return tuple(self._entries)

    async def save(self, entry: AuditEntry) -> AuditEntry:
        stored = entry.model_copy(update={"id": uuid.uuid4()})
        self._entries.append(stored)
        return stored

    async def find_by_id(self, entry_id: Any) -> AuditEntry | None:
        wanted = _coerce_uuid(entry_id)
        return next((e for e in self._entries if e.id == wanted), None)

    async def find_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEntry]:
        return [e for e in self._entries if e.entity_type == entity_type and e.entity_id == entity_id]


class SqlAuditRepository:
    """
    Audit entries in the `audit_log` table.

    Never commits; the caller owns the unit of work.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.table = AuditLog.__table__

    @staticmethod
    def _to_entry(row: Mapping[str, Any]) -> AuditEntry:
        return AuditEntry(
            id=row["id"],
            action=row["action"],
            entity_type=row["entity_type"],
            entity_id=row["entity_id"],
            user_id=row["user_id"],
            metadata=row["meta"],
            timestamp=row["timestamp"],
            service_name=row["service_name"],
            ip=row["ip"],
            user_agent=row["user_agent"],
        )

    async def save(self, entry: AuditEntry) -> AuditEntry:
        stmt = (
            insert(self.table)
            .values(
                id=uuid.uuid4(),
                action=entry.action,
                entity_type=entry.entity_type,
                entity_id=entry.entity_id,
                user_id=entry.user_id,
                meta=entry.metadata,
                timestamp=entry.timestamp,
                service_name=entry.service_name,
                ip=entry.ip,
                user_agent=entry.user_agent,
            )
            .returning(*self.table.c)
        )
        row = (await self.db.execute(stmt)).mappings().one()
        logger.debug("repo.audit.save.success", extra={"model": "AuditLog", "id": str(row["id"])})
        return self._to_entry(row)

    async def find_by_id(self, entry_id: Any) -> AuditEntry | None:
        coerced = _coerce_uuid(entry_id)
        if coerced is None:
            return None
        stmt = select(self.table).where(self.table.c.id == coerced)
        row = (await self.db.execute(stmt)).mappings().one_or_none()
        return self._to_entry(row) if row is not None else None

    async def find_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEntry]:
        stmt = (
            select(self.table)
            .where(self.table.c.entity_type == entity_type, self.table.c.entity_id == entity_id)
            .order_by(self.table.c.timestamp.asc())
        )
        rows = (await self.db.execute(stmt)).mappings().all()
        return [self._to_entry(row) for row in rows]
