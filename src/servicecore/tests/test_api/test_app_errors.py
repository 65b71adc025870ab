"""Application-wide behavior: health, unmatched routes, unhandled errors."""

import logging

import pytest

from servicecore.core.logging import RequestIdFilter
from servicecore.core.logging.middleware import REQUEST_ID_HEADER
from servicecore.exceptions import AppError


@pytest.mark.asyncio
class TestHealth:

    async def test_health_ok(self, client):
        resp = await client.get("/health")

        assert resp.status_code == 200
        body = resp.json()
        assert body["messageCode"] == "FETCHED"
        assert body["data"]["database"] == "ok"
        assert body["data"]["service"] == "servicecore-tests"


@pytest.mark.asyncio
class TestUnhandledRoutesAndErrors:

    async def test_unknown_route(self, client):
        resp = await client.get("/api/v1/planets")

        assert resp.status_code == 404
        body = resp.json()
        assert body["messageCode"] == "NOT_FOUND"
        assert body["error"] == "Route not found"

    async def test_method_not_allowed(self, client):
        resp = await client.put("/api/v1/countries")

        assert resp.status_code == 405
        assert resp.json()["success"] is False

    async def test_unexpected_exception_becomes_internal_error(self, app, client):
        """
        Behavior:
                - A route raises a plain RuntimeError carrying a status attribute.
                - The client gets a generic 500 INTERNAL_ERROR; the exception text
                  and the attribute are not used.
        """

        async def explode():
            exc = RuntimeError("password=hunter2")
            exc.status_code = 418
            raise exc

        app.add_api_route("/explode", explode)

        resp = await client.get("/explode")

        assert resp.status_code == 500
        body = resp.json()
        assert body["messageCode"] == "INTERNAL_ERROR"
        assert body["error"] == "An unexpected error occurred"
        assert "hunter2" not in resp.text
        assert "stack" not in body

    async def test_internal_error_keeps_the_request_id(self, app, client, caplog):
        """
        Behavior:
                - A route raises a plain exception on a request sent with X-Request-ID.
                - The 500 response echoes the header and the failure log line carries the same id.

        Importance:
                - 500s are the responses operators most need to correlate with logs.
        """

        async def explode():
            raise RuntimeError("boom")

        app.add_api_route("/explode", explode)
        caplog.handler.addFilter(RequestIdFilter())

        with caplog.at_level(logging.ERROR, logger="servicecore.exceptions.dispatcher"):
            resp = await client.get("/explode", headers={REQUEST_ID_HEADER: "abc123"})

        assert resp.status_code == 500
        assert resp.headers[REQUEST_ID_HEADER] == "abc123"
        assert resp.json()["messageCode"] == "INTERNAL_ERROR"
        record = next(r for r in caplog.records if r.getMessage() == "request.failed")
        assert record.request_id == "abc123"
        assert record.path == "/explode"

    async def test_raw_app_error_from_route(self, app, client):
        async def forbidden():
            raise AppError.forbidden("Tenant is read-only")

        app.add_api_route("/forbidden", forbidden)

        resp = await client.get("/forbidden")

        assert resp.status_code == 403
        body = resp.json()
        assert body["error"] == "Tenant is read-only"
        assert "messageCode" not in body
