from .audit import AuditAction, AuditContext, AuditEntry
from .common import AUDIT_COLUMN_MAP, BaseEntity, CamelModel
from .country import COUNTRY_COLUMN_MAP, COUNTRY_WRITABLE_FIELDS, CountryCreate, CountryEntity, CountryUpdate
from .user import USER_COLUMN_MAP, USER_WRITABLE_FIELDS, UserCreate, UserEntity, UserUpdate

__all__ = [
    "AuditAction",
    "AuditContext",
    "AuditEntry",
    "AUDIT_COLUMN_MAP",
    "BaseEntity",
    "CamelModel",
    "COUNTRY_COLUMN_MAP",
    "COUNTRY_WRITABLE_FIELDS",
    "CountryCreate",
    "CountryEntity",
    "CountryUpdate",
    "USER_COLUMN_MAP",
    "USER_WRITABLE_FIELDS",
    "UserCreate",
    "UserEntity",
    "UserUpdate",
]
