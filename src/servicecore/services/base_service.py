"""Shared service base: one repository bound to the request's session."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from ..exceptions import AppError
from ..messages import MessageCode
from ..repositories.base_repository import BaseRepository
from ..repositories.pagination import ListOptions, PaginatedResult
from ..schemas.audit import AuditAction, AuditContext
from .audit_service import AuditService

RepoT = TypeVar("RepoT", bound=BaseRepository)


def changed_fields(data: BaseModel) -> dict[str, Any]:
    """Audit metadata for an update: the names (not values) of the fields it sets."""
    return {"fields": sorted(data.model_dump(by_alias=True, exclude_unset=True, exclude_none=True))}


class BaseService(Generic[RepoT]):
    """
    Use-case layer over a repository.

    Business-rule violations are raised as AppError here; storage errors are
    left to propagate. When an AuditService is given, every create, update and
    delete is recorded inside the same transaction as the change.
    """

    resource: str = "Resource"

    def __init__(
        self,
        repository: RepoT,
        *,
        audit: AuditService | None = None,
        audit_context: AuditContext | None = None,
    ):
        self.repo = repository
        self.audit = audit
        self.audit_context = audit_context

    async def _record(
        self,
        action: AuditAction,
        entity_id: Any,
        *,
        actor: str | None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        if self.audit is None:
            return
        await self.audit.record(
            action,
            self.resource,
            entity_id=entity_id,
            user_id=actor,
            metadata=metadata,
            context=self.audit_context,
        )

    async def get(self, entity_id: Any):
        entity = await self.repo.find_by_id(entity_id)
        if entity is None:
            raise AppError.from_code(MessageCode.NOT_FOUND, {"resource": self.resource})
        return entity

    async def list_all(self, options: ListOptions | None = None) -> PaginatedResult:
        return await self.repo.find_all(options)

    async def remove(self, entity_id: Any, *, actor: str | None = None) -> None:
        async with self.repo.transaction():
            deleted = await self.repo.delete(entity_id, actor=actor)
            if deleted:
                await self._record(AuditAction.DELETE, entity_id, actor=actor)

        if not deleted:
            raise AppError.from_code(MessageCode.NOT_FOUND, {"resource": self.resource})
