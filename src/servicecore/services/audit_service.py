import logging
from datetime import datetime
from typing import Any, Callable

from ..repositories.audit_repository import AuditRepository
from ..repositories.base_repository import utc_now
from ..schemas.audit import AuditAction, AuditContext, AuditEntry

logger = logging.getLogger(__name__)


class AuditService:
    """
    Records who changed what. Timestamps and the service name are stamped
    here; callers only describe the change.
    """

    def __init__(
        self,
        repository: AuditRepository,
        service_name: str,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.service_name = service_name
        self.clock = clock

    async def record(
        self,
        action: AuditAction | str,
        entity_type: str,
        *,
        entity_id: Any = None,
        user_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        context: AuditContext | None = None,
    ) -> AuditEntry:
        entry = AuditEntry(
            action=action.value if isinstance(action, AuditAction) else action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            user_id=user_id,
            metadata=metadata,
            timestamp=self.clock(),
            service_name=self.service_name,
            ip=context.ip if context is not None else None,
            user_agent=context.user_agent if context is not None else None,
        )
        saved = await self.repository.save(entry)
        logger.info(
            "audit.recorded",
            extra={"action": saved.action, "entity_type": entity_type, "entity_id": saved.entity_id},
        )
        return saved
