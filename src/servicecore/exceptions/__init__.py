from .base import AppError, ErrorKind, FieldIssue
from .dispatcher import ErrorDispatcher, ErrorResponse
from .external import PayloadTooLargeError, classify_transport_error
from .integrity_classifier import ConstraintKind, classify_integrity_error, integrity_error_to_app_error

__all__ = [
    "AppError",
    "ErrorKind",
    "FieldIssue",
    "ErrorDispatcher",
    "ErrorResponse",
    "PayloadTooLargeError",
    "classify_transport_error",
    "ConstraintKind",
    "classify_integrity_error",
    "integrity_error_to_app_error",
]
