"""
Transport-level failures raised by the HTTP framework (FastAPI / Starlette).

The framework reports malformed bodies, unknown routes and request validation
failures with its own exception types. `classify_transport_error()` reduces them
to a closed set of shapes so the dispatcher can match on a shape instead of
probing arbitrary attributes.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Literal, Union

from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .base import FieldIssue

# Starlette's default detail for unmatched routes
_DEFAULT_NOT_FOUND_DETAIL = "Not Found"

IssueLocation = Literal["body", "path", "query", "header", "cookie"]


class PayloadTooLargeError(Exception):
    """Raised when a request body exceeds the configured size limit."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Request body exceeds {limit} bytes")


@dataclass(frozen=True)
class MalformedBody:
    reason: str = "Malformed JSON body"


@dataclass(frozen=True)
class PayloadTooLarge:
    message: str = "Request body too large"


@dataclass(frozen=True)
class RouteNotFound:
    pass


@dataclass(frozen=True)
class HttpStatusError:
    status_code: int
    detail: str


@dataclass(frozen=True)
class RequestValidation:
    location: IssueLocation
    issues: tuple[FieldIssue, ...]
    all_missing: bool

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]

    @property
    def reason(self) -> str:
        return "; ".join(f"{issue.field}: {issue.message}" for issue in self.issues)


TransportError = Union[MalformedBody, PayloadTooLarge, RouteNotFound, HttpStatusError, RequestValidation]


_REQUEST_LOCATIONS = ("path", "query", "header", "cookie", "body")


def _split_loc(loc: Iterable[Any], default_location: str) -> tuple[str, str]:
    """
    Split a pydantic `loc` tuple into (location, dotted field name).

        ("body", "code")       -> ("body", "code")
        ("query", "limit")     -> ("query", "limit")
        ("address", 0, "zip")  -> (default_location, "address.0.zip")
    """
    parts = [str(part) for part in loc]
    location = default_location
    if parts and parts[0] in _REQUEST_LOCATIONS:
        location = parts.pop(0)
    return location, ".".join(parts) or location


def _from_validation_errors(errors: list[dict[str, Any]], default_location: IssueLocation) -> TransportError:
    if any(err.get("type") == "json_invalid" for err in errors):
        return MalformedBody()

    locations = []
    issues = []
    for err in errors:
        location, field = _split_loc(err.get("loc", ()), default_location)
        locations.append(location)
        issues.append(FieldIssue(field=field, message=str(err.get("msg", "Invalid value"))))

    # any path/query/header problem makes the whole request an input error
    location = next((loc for loc in _REQUEST_LOCATIONS if loc in locations), default_location)
    all_missing = bool(errors) and all(err.get("type") == "missing" for err in errors)
    return RequestValidation(location=location, issues=tuple(issues), all_missing=all_missing)


def classify_transport_error(exc: BaseException) -> TransportError | None:
    """
    Reduce a framework exception to a transport shape, or None when `exc` is not
    a transport failure (business errors, storage errors, bugs).

    Only request validation raised by the framework counts; a pydantic
    ValidationError from server code is a bug and stays unclassified.
    """
    if isinstance(exc, PayloadTooLargeError):
        return PayloadTooLarge(str(exc))

    if isinstance(exc, RequestValidationError):
        return _from_validation_errors(list(exc.errors()), "body")

    if isinstance(exc, StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == _DEFAULT_NOT_FOUND_DETAIL:
            return RouteNotFound()
        if exc.status_code == 413:
            return PayloadTooLarge(str(exc.detail))
        return HttpStatusError(status_code=exc.status_code, detail=str(exc.detail))

    return None


__all__ = [
    "PayloadTooLargeError",
    "MalformedBody",
    "PayloadTooLarge",
    "RouteNotFound",
    "HttpStatusError",
    "RequestValidation",
    "TransportError",
    "classify_transport_error",
]
