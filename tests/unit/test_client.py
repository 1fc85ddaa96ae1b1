"""Tests for gallerycms.editor.client — HTTP error mapping.

Uses ``httpx.MockTransport`` so every status code and transport failure can
be produced without a server.
"""

from __future__ import annotations

import httpx
import pytest

from gallerycms.editor.client import CmsClient, error_from_response
from gallerycms.editor.errors import (
    ConflictError,
    ServerRejection,
    TransientNetworkError,
    ValidationError,
)


def _client(handler) -> CmsClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://cms")
    return CmsClient(http=http)


class TestErrorFromResponse:
    def test_conflict(self):
        response = httpx.Response(409, json={"detail": "Category 'blog' already exists"})
        error = error_from_response(response)
        assert isinstance(error, ConflictError)
        assert "already exists" in str(error)

    def test_batch_validation_errors_are_kept(self):
        body = {"detail": {"message": "1 setting(s) could not be updated",
                           "errors": [{"id": 9, "message": "Setting not found"}]}}
        error = error_from_response(httpx.Response(422, json=body))
        assert isinstance(error, ValidationError)
        assert error.errors == [{"id": 9, "message": "Setting not found"}]

    def test_request_validation_list(self):
        body = {"detail": [{"loc": ["body", "name"], "msg": "Field required"}]}
        error = error_from_response(httpx.Response(422, json=body))
        assert isinstance(error, ValidationError)
        assert "Field required" in str(error)

    @pytest.mark.parametrize("status", [400, 403, 404, 500, 503])
    def test_other_statuses_are_rejections(self, status):
        error = error_from_response(httpx.Response(status, json={"detail": "nope"}))
        assert isinstance(error, ServerRejection)
        assert error.status_code == status
        assert error.message == "nope"

    def test_non_json_body(self):
        error = error_from_response(httpx.Response(502, text="Bad Gateway"))
        assert isinstance(error, ServerRejection)
        assert error.message == "Bad Gateway"


class TestRequests:
    async def test_transport_error_is_transient(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransientNetworkError):
                await client.list_categories()

    async def test_timeout_is_transient(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransientNetworkError):
                await client.list_settings("home")

    async def test_batch_update_payload(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = request.content
            return httpx.Response(200, json={"success": True, "settings": []})

        async with _client(handler) as client:
            assert await client.batch_update([(1, "a"), (2, "1")]) == []

        assert seen["method"] == "PATCH"
        assert seen["path"] == "/api/settings"
        assert b'"id":1' in seen["body"].replace(b" ", b"")

    async def test_section_query_parameter(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"settings": []})

        async with _client(handler) as client:
            await client.list_settings("contact", section="faq")

        assert seen["params"] == {"section": "faq"}

    async def test_reorder_rejection(self):
        def handler(request):
            return httpx.Response(422, json={"detail": "Order must list every image exactly once"})

        async with _client(handler) as client:
            with pytest.raises(ValidationError):
                await client.reorder("sunrise", [1, 2])
