import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every schema exchanged with clients: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BaseEntity(CamelModel):
    """
    Identity + audit metadata carried by every entity.

    Entities are read models built by repositories; they are never used as input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: uuid.UUID
    is_active: bool
    created_at: datetime
    modified_at: datetime
    created_by: str | None = None
    modified_by: str | None = None
    tenant_id: str | None = None


# Column map entries shared by every table built on AuditMixin
AUDIT_COLUMN_MAP: dict[str, str] = {
    "id": "id",
    "isActive": "is_active",
    "createdAt": "created_at",
    "modifiedAt": "modified_at",
    "createdBy": "created_by",
    "modifiedBy": "modified_by",
    "tenantId": "tenant_id",
}
