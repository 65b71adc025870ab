import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from .common import CamelModel


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class AuditContext(CamelModel):
    """Request metadata stamped on every audit entry recorded while serving it."""

    ip: str | None = None
    user_agent: str | None = None


class AuditEntry(CamelModel):
    """
    One recorded change: who did what to which entity, when and from where.

    `id` is assigned by the audit repository on save. `action` is usually an
    AuditAction value; services may record their own action names.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: uuid.UUID | None = None
    action: str
    entity_type: str
    entity_id: str | None = None
    user_id: str | None = None
    metadata: dict[str, Any] | None = None
    timestamp: datetime
    service_name: str
    ip: str | None = None
    user_agent: str | None = None
