import pytest

from servicecore.mapping import ColumnMapper, to_camel_case, to_entity, to_row, to_snake_case
from servicecore.schemas.country import COUNTRY_COLUMN_MAP


@pytest.mark.parametrize(
    "name, expected",
    [
        ("createdAt", "created_at"),
        ("id", "id"),
        ("tenantId", "tenant_id"),
        ("myURL", "my_url"),
        ("HTTPServer", "http_server"),
        ("userID2Fa", "user_id2_fa"),
    ],
)
def test_to_snake_case(name, expected):
    assert to_snake_case(name) == expected


def test_to_camel_case():
    assert to_camel_case("created_at") == "createdAt"
    assert to_camel_case("my_url") == "myUrl"
    assert to_camel_case("name") == "name"


def test_explicit_map_wins_over_convention():
    mapper = ColumnMapper({"isoCode": "code_iso"})

    assert mapper.column_for("isoCode") == "code_iso"
    assert mapper.field_for("code_iso") == "isoCode"
    # undeclared names fall back to the naming convention
    assert mapper.column_for("createdAt") == "created_at"
    assert mapper.field_for("modified_by") == "modifiedBy"


def test_resolve_only_uses_explicit_map():
    mapper = ColumnMapper(COUNTRY_COLUMN_MAP)

    assert mapper.resolve("createdAt") == "created_at"
    assert mapper.resolve("code") == "code"
    assert mapper.resolve("population") is None
    assert mapper.resolve("code; DROP TABLE countries") is None


def test_row_to_entity_and_back():
    row = {"id": 1, "is_active": True, "created_at": "t", "code": "US"}

    entity = to_entity(row, COUNTRY_COLUMN_MAP)

    assert entity == {"id": 1, "isActive": True, "createdAt": "t", "code": "US"}
    assert to_row(entity, COUNTRY_COLUMN_MAP) == row


def test_to_entity_without_map_uses_convention():
    assert to_entity({"tenant_id": "t1", "modified_at": None}) == {"tenantId": "t1", "modifiedAt": None}


def test_mapper_is_read_only():
    source = {"code": "code"}
    mapper = ColumnMapper(source)
    source["name"] = "name"

    assert mapper.fields == ("code",)
    with pytest.raises(TypeError):
        mapper.column_map["name"] = "name"
