from .base import AuditMixin, Base, table_resources
from .session import create_engine, create_session_factory, session_scope

__all__ = ["AuditMixin", "Base", "table_resources", "create_engine", "create_session_factory", "session_scope"]
