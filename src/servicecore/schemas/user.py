from typing import Annotated

from pydantic import BeforeValidator, Field

from .common import AUDIT_COLUMN_MAP, BaseEntity, CamelModel


def _normalize_email(value: object) -> object:
    return value.strip().lower() if isinstance(value, str) else value


# one "@" with something on both sides and a dot in the domain
UserEmail = Annotated[
    str,
    BeforeValidator(_normalize_email),
    Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"),
]
UserName = Annotated[str, BeforeValidator(lambda v: v.strip() if isinstance(v, str) else v), Field(min_length=1, max_length=100)]


class UserCreate(CamelModel):
    name: UserName
    email: UserEmail


class UserUpdate(CamelModel):
    name: UserName | None = None
    email: UserEmail | None = None


class UserEntity(BaseEntity):
    name: str
    email: str


USER_COLUMN_MAP: dict[str, str] = {
    **AUDIT_COLUMN_MAP,
    "name": "name",
    "email": "email",
}

USER_WRITABLE_FIELDS = ("name", "email")
