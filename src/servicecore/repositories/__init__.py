from .audit_repository import AuditRepository, InMemoryAuditRepository, SqlAuditRepository
from .base_repository import BaseRepository, SERVER_MANAGED_FIELDS, utc_now
from .country_repository import CountryRepository
from .pagination import ListOptions, PageMeta, PaginatedResult, PaginationRequest
from .user_repository import UserRepository

__all__ = [
    "AuditRepository",
    "InMemoryAuditRepository",
    "SqlAuditRepository",
    "BaseRepository",
    "SERVER_MANAGED_FIELDS",
    "utc_now",
    "CountryRepository",
    "UserRepository",
    "ListOptions",
    "PageMeta",
    "PaginatedResult",
    "PaginationRequest",
]
