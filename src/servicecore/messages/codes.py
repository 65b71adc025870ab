from enum import Enum


class MessageCode(str, Enum):
    """
    Semantic message codes shared by every service.

    The value is what clients see in `messageCode`; the HTTP status and the
    human-readable template live in `MESSAGE_CATALOG`.
    """

    # success
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    FETCHED = "FETCHED"
    LIST_FETCHED = "LIST_FETCHED"

    # client errors
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    FIELD_REQUIRED = "FIELD_REQUIRED"
    INVALID_INPUT = "INVALID_INPUT"

    # auth
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # resource
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"

    # server
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    def __str__(self) -> str:
        return self.value
