from .audit_service import AuditService
from .base_service import BaseService
from .country_service import CountryService
from .user_service import UserService

__all__ = ["AuditService", "BaseService", "CountryService", "UserService"]
