from typing import Annotated

from pydantic import BeforeValidator, Field

from .common import AUDIT_COLUMN_MAP, BaseEntity, CamelModel


def _normalize_code(value: object) -> object:
    return value.strip().upper() if isinstance(value, str) else value


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


# "us " -> "US"; must then be 2-3 upper-case letters
CountryCode = Annotated[str, BeforeValidator(_normalize_code), Field(pattern=r"^[A-Z]{2,3}$")]
CountryName = Annotated[str, BeforeValidator(_strip), Field(min_length=1, max_length=100)]


class CountryCreate(CamelModel):
    code: CountryCode
    name: CountryName


class CountryUpdate(CamelModel):
    code: CountryCode | None = None
    name: CountryName | None = None


class CountryEntity(BaseEntity):
    code: str
    name: str


COUNTRY_COLUMN_MAP: dict[str, str] = {
    **AUDIT_COLUMN_MAP,
    "code": "code",
    "name": "name",
}

COUNTRY_WRITABLE_FIELDS = ("code", "name")
