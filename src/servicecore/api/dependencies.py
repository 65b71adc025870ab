"""
FastAPI dependencies: request-scoped session, repositories, services and auditing.

The session factory is created by `create_app()` and stored on `app.state`,
so tests can point an app at their own engine.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings
from ..database.session import session_scope
from ..repositories.audit_repository import SqlAuditRepository
from ..repositories.country_repository import CountryRepository
from ..repositories.user_repository import UserRepository
from ..schemas.audit import AuditContext
from ..services.audit_service import AuditService
from ..services.country_service import CountryService
from ..services.user_service import UserService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """One session (and unit of work) per request: commit on success, rollback on error."""
    async with session_scope(request.app.state.session_factory) as session:
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db_session)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]


def _pagination_bounds(settings: Settings) -> dict[str, int]:
    return {
        "default_limit": settings.PAGINATION_DEFAULT_LIMIT,
        "max_limit": settings.PAGINATION_MAX_LIMIT,
    }


def get_audit_service(db: DbSession, settings: AppSettings) -> AuditService:
    """Audit entries go through the request's session and commit with the change."""
    return AuditService(SqlAuditRepository(db), settings.SERVICE_NAME)


def get_audit_context(request: Request) -> AuditContext:
    return AuditContext(
        ip=request.client.host if request.client is not None else None,
        user_agent=request.headers.get("user-agent"),
    )


Audit = Annotated[AuditService, Depends(get_audit_service)]
AuditRequestContext = Annotated[AuditContext, Depends(get_audit_context)]


def get_country_service(
    db: DbSession, settings: AppSettings, audit: Audit, context: AuditRequestContext
) -> CountryService:
    return CountryService(
        CountryRepository(db, **_pagination_bounds(settings)),
        audit=audit,
        audit_context=context,
    )


def get_user_service(db: DbSession, settings: AppSettings, audit: Audit, context: AuditRequestContext) -> UserService:
    return UserService(
        UserRepository(db, **_pagination_bounds(settings)),
        audit=audit,
        audit_context=context,
    )


def get_actor(request: Request) -> str | None:
    """
    Identity recorded in created_by / modified_by.

    Authentication is handled upstream (gateway); it forwards the caller in `X-User-Id`.
    """
    return request.headers.get("X-User-Id") or None


Actor = Annotated[str | None, Depends(get_actor)]
