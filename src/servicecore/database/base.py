"""
Declarative base and the audit columns shared by every service table.

Persisted layout per table:
    id, <entity columns>, is_active, created_at, modified_at,
    created_by, modified_by, tenant_id
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# Naming convention for constraints and indexes.
# Constraint names show up in storage error messages, so keep them predictable.
Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class AuditMixin:
    """
    Id + audit columns. Timestamps are written by the repository (from its
    clock), not by the database, so they are nullable=False without server defaults.
    """

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # soft-deletion toggle
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    modified_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    modified_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tenant_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)


def table_resources() -> dict[str, str]:
    """Table name -> model class name for every mapped model, e.g. {"countries": "Country"}."""
    return {mapper.local_table.name: mapper.class_.__name__ for mapper in Base.registry.mappers}
