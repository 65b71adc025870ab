"""
Centralized access to all ORM models.

Importing this package registers every table on `Base.metadata`.
"""

from .audit_log import AuditLog
from .country import Country
from .user import User

__all__ = [
    "AuditLog",
    "Country",
    "User",
]
