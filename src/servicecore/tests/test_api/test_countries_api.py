import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from servicecore.api.app import create_app
from servicecore.core.logging.middleware import REQUEST_ID_HEADER
from servicecore.models import AuditLog
from servicecore.repositories.audit_repository import SqlAuditRepository

COUNTRIES = "/api/v1/countries"


async def post_country(client, code="US", name="United States", **kwargs):
    return await client.post(COUNTRIES, json={"code": code, "name": name}, **kwargs)


@pytest.mark.asyncio
class TestCreateCountry:

    async def test_create_returns_201_envelope(self, client):
        """
        Behavior:
                - POST a valid country.
                - 201 with a CREATED success envelope and the entity in camelCase.
        """
        resp = await post_country(client, code="us", headers={"X-User-Id": "admin-1"})

        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["messageCode"] == "CREATED"
        assert body["message"] == "Country created successfully"
        assert body["data"]["code"] == "US"
        assert body["data"]["isActive"] is True
        assert body["data"]["createdBy"] == "admin-1"
        uuid.UUID(body["data"]["id"])
        assert body["timestamp"].endswith("Z")
        assert REQUEST_ID_HEADER in resp.headers

    async def test_duplicate_code_returns_409(self, client):
        await post_country(client)

        resp = await post_country(client, name="Another")

        assert resp.status_code == 409
        body = resp.json()
        assert body["success"] is False
        assert body["messageCode"] == "DUPLICATE_ENTRY"
        assert body["error"] == "Country with this code already exists"
        assert body["statusCode"] == 409

    async def test_missing_field_returns_field_required(self, client):
        resp = await client.post(COUNTRIES, json={"name": "Nameless"})

        assert resp.status_code == 422
        body = resp.json()
        assert body["messageCode"] == "FIELD_REQUIRED"
        assert body["error"] == "code is required"
        assert body["details"][0]["field"] == "code"

    async def test_invalid_field_returns_validation_failed(self, client):
        resp = await post_country(client, code="TOOLONG")

        assert resp.status_code == 422
        assert resp.json()["messageCode"] == "VALIDATION_FAILED"

    async def test_malformed_json_returns_400(self, client):
        resp = await client.post(COUNTRIES, content=b'{"code": "US",', headers={"Content-Type": "application/json"})

        assert resp.status_code == 400
        body = resp.json()
        assert body["messageCode"] == "BAD_REQUEST"
        assert body["error"] == "Bad request: Malformed JSON body"

    async def test_oversized_body_returns_413(self, async_engine, test_settings):
        app = create_app(test_settings.model_copy(update={"MAX_BODY_BYTES": 32}), engine=async_engine, configure_logging=False)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as small_client:
            resp = await small_client.post(COUNTRIES, json={"code": "US", "name": "x" * 100})

        assert resp.status_code == 413
        body = resp.json()
        assert body["success"] is False
        assert body["statusCode"] == 413
        assert body["error"] == "Request body exceeds 32 bytes"


@pytest.mark.asyncio
class TestReadCountries:

    async def test_get_by_id(self, client):
        created = (await post_country(client)).json()["data"]

        resp = await client.get(f"{COUNTRIES}/{created['id']}")

        assert resp.status_code == 200
        body = resp.json()
        assert body["messageCode"] == "FETCHED"
        assert body["data"] == created

    async def test_unknown_id_returns_404(self, client):
        resp = await client.get(f"{COUNTRIES}/{uuid.uuid4()}")

        assert resp.status_code == 404
        assert resp.json()["messageCode"] == "NOT_FOUND"
        assert resp.json()["error"] == "Country not found"

    async def test_malformed_id_returns_invalid_input(self, client):
        resp = await client.get(f"{COUNTRIES}/not-a-uuid")

        assert resp.status_code == 422
        body = resp.json()
        assert body["messageCode"] == "INVALID_INPUT"
        assert body["details"][0]["field"] == "country_id"

    async def test_list_paginated_and_sorted(self, client):
        """
        Behavior:
                - Three countries, limit=2, sorted by code descending.
                - First page has JP and DE; meta reports 3 rows over 2 pages.
        """
        for code, name in (("DE", "Germany"), ("AR", "Argentina"), ("JP", "Japan")):
            await post_country(client, code=code, name=name)

        resp = await client.get(COUNTRIES, params={"limit": 2, "sortBy": "code", "sortOrder": "DESC"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["messageCode"] == "LIST_FETCHED"
        assert body["message"] == "Country list fetched successfully"
        assert [c["code"] for c in body["data"]["items"]] == ["JP", "DE"]
        assert body["data"]["meta"] == {"total": 3, "page": 1, "limit": 2, "totalPages": 2}

    async def test_list_limit_is_capped(self, client):
        resp = await client.get(COUNTRIES, params={"limit": 100000})

        assert resp.status_code == 200
        assert resp.json()["data"]["meta"]["limit"] == 100

    async def test_page_far_past_the_end_is_empty(self, client):
        """
        Behavior:
                - A page number whose offset would not fit in a 64-bit integer.
                - 200 with no items instead of a storage error.
        """
        await post_country(client)

        resp = await client.get(COUNTRIES, params={"page": 10**20})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["items"] == []
        assert data["meta"]["total"] == 1

    async def test_list_empty(self, client):
        body = (await client.get(COUNTRIES)).json()

        assert body["data"]["items"] == []
        assert body["data"]["meta"]["totalPages"] == 1

    async def test_list_filter_by_code(self, client):
        await post_country(client, code="DE", name="Germany")
        await post_country(client, code="FR", name="France")

        body = (await client.get(COUNTRIES, params={"code": "fr"})).json()

        assert [c["name"] for c in body["data"]["items"]] == ["France"]

    async def test_invalid_sort_order_returns_invalid_input(self, client):
        resp = await client.get(COUNTRIES, params={"sortOrder": "sideways"})

        assert resp.status_code == 422
        assert resp.json()["messageCode"] == "INVALID_INPUT"


@pytest.mark.asyncio
class TestUpdateAndDeleteCountry:

    async def test_patch(self, client):
        created = (await post_country(client)).json()["data"]

        resp = await client.patch(f"{COUNTRIES}/{created['id']}", json={"name": "USA"}, headers={"X-User-Id": "editor"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["messageCode"] == "UPDATED"
        assert body["data"]["name"] == "USA"
        assert body["data"]["code"] == "US"
        assert body["data"]["modifiedBy"] == "editor"

    async def test_patch_to_taken_code(self, client):
        await post_country(client, code="DE", name="Germany")
        france = (await post_country(client, code="FR", name="France")).json()["data"]

        resp = await client.patch(f"{COUNTRIES}/{france['id']}", json={"code": "DE"})

        assert resp.status_code == 409
        assert resp.json()["messageCode"] == "DUPLICATE_ENTRY"

    async def test_delete(self, client):
        created = (await post_country(client)).json()["data"]

        resp = await client.delete(f"{COUNTRIES}/{created['id']}")

        assert resp.status_code == 200
        body = resp.json()
        assert body["messageCode"] == "DELETED"
        assert body["message"] == "Country deleted successfully"
        assert "data" not in body

        assert (await client.get(f"{COUNTRIES}/{created['id']}")).status_code == 404
        assert (await client.delete(f"{COUNTRIES}/{created['id']}")).status_code == 404
        assert (await client.get(COUNTRIES)).json()["data"]["meta"]["total"] == 0

    async def test_deleted_code_can_be_created_again(self, client):
        """
        Behavior:
                - POST US, DELETE it, POST US again.
                - The second create succeeds with a new id; the code is free once deleted.
        """
        first = (await post_country(client)).json()["data"]
        assert (await client.delete(f"{COUNTRIES}/{first['id']}")).status_code == 200

        resp = await post_country(client, name="United States of America")

        assert resp.status_code == 201
        assert resp.json()["data"]["id"] != first["id"]
        listed = (await client.get(COUNTRIES)).json()["data"]
        assert [c["name"] for c in listed["items"]] == ["United States of America"]


@pytest.mark.asyncio
class TestCountryAuditTrail:

    async def test_changes_are_written_to_the_audit_log(self, app, client):
        """
        Behavior:
                - Create and delete a country over HTTP with an actor and a user agent.
                - Both changes land in the audit log, committed with the request.
        """
        headers = {"X-User-Id": "admin-1", "User-Agent": "audit-check/1.0"}
        created = (await post_country(client, headers=headers)).json()["data"]
        await client.delete(f"{COUNTRIES}/{created['id']}", headers=headers)

        async with app.state.session_factory() as session:
            entries = await SqlAuditRepository(session).find_by_entity("Country", created["id"])

        assert [e.action for e in entries] == ["create", "delete"]
        assert {e.user_id for e in entries} == {"admin-1"}
        assert {e.user_agent for e in entries} == {"audit-check/1.0"}
        assert {e.service_name for e in entries} == {"servicecore-tests"}

    async def test_rejected_create_leaves_no_audit_entry(self, app, client):
        await post_country(client)
        await post_country(client, name="Duplicate")

        async with app.state.session_factory() as session:
            rows = (await session.execute(select(AuditLog.__table__))).all()

        assert len(rows) == 1
