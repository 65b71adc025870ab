import logging

import pytest

from servicecore.messages import MESSAGE_CATALOG, MessageCode, interpolate, resolve_message, status_for


def test_every_code_has_a_catalog_entry():
    assert set(MESSAGE_CATALOG) == set(MessageCode)


@pytest.mark.parametrize(
    "code, status",
    [
        (MessageCode.CREATED, 201),
        (MessageCode.FETCHED, 200),
        (MessageCode.BAD_REQUEST, 400),
        (MessageCode.UNAUTHORIZED, 401),
        (MessageCode.FORBIDDEN, 403),
        (MessageCode.NOT_FOUND, 404),
        (MessageCode.DUPLICATE_EMAIL, 409),
        (MessageCode.FIELD_REQUIRED, 422),
        (MessageCode.INTERNAL_ERROR, 500),
        (MessageCode.SERVICE_UNAVAILABLE, 503),
    ],
)
def test_status_for(code, status):
    assert status_for(code) == status
    assert status_for(code.value) == status


def test_resolve_created():
    resolved = resolve_message(MessageCode.CREATED, {"resource": "User"})

    assert resolved.code == "CREATED"
    assert resolved.status == 201
    assert resolved.message == "User created successfully"


def test_resolve_duplicate_email():
    resolved = resolve_message("DUPLICATE_EMAIL", {"email": "a@b.com"})

    assert resolved.status == 409
    assert resolved.message == "Email a@b.com is already in use"


def test_resolve_duplicate_entry_uses_every_param():
    resolved = resolve_message(MessageCode.DUPLICATE_ENTRY, {"resource": "Country", "field": "code"})
    assert resolved.message == "Country with this code already exists"


def test_missing_params_leave_placeholders():
    assert resolve_message(MessageCode.NOT_FOUND).message == "{resource} not found"
    assert resolve_message(MessageCode.DUPLICATE_ENTRY, {"resource": "Country"}).message == (
        "Country with this {field} already exists"
    )


def test_unknown_code_resolves_to_500(caplog):
    with caplog.at_level(logging.WARNING):
        resolved = resolve_message("NOPE")

    assert resolved.status == 500
    assert resolved.message == "Unknown message code: NOPE"
    assert status_for("NOPE") == 500
    assert any(r.getMessage() == "messages.resolve.unknown_code" for r in caplog.records)


def test_interpolate_is_literal_replacement():
    # values are inserted as text; braces in them are not re-expanded
    assert interpolate("{a} and {b}", {"a": "{b}", "b": 2}) == "{b} and 2"
    assert interpolate("no placeholders", {"x": 1}) == "no placeholders"
    assert interpolate("{x}{x}", {"x": 0}) == "00"


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        MESSAGE_CATALOG[MessageCode.CREATED] = None
