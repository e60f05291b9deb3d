"""Tests for the httpx-backed transport."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from docsync.errors import (
    CONNECTION_FAILED,
    MalformedResponseError,
    ServerError,
    TransportError,
)
from docsync.sync.transport import HttpTransport


def make_transport(handler) -> HttpTransport:
    client = httpx.Client(
        transport=httpx.MockTransport(handler),
        base_url="https://api.test/1",
    )
    return HttpTransport(
        "https://api.test/1",
        application_id="app-id",
        rest_api_key="rest-key",
        client=client,
    )


class TestPerform:
    def test_post_sends_json_and_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"objectId": "X", "createdAt": "t"})

        transport = make_transport(handler)
        response = transport.perform("POST", "classes/GameScore", {"score": 1})

        assert response.succeeded
        assert response.body == {"objectId": "X", "createdAt": "t"}
        assert response.error is None
        assert seen["method"] == "POST"
        assert seen["url"] == "https://api.test/1/classes/GameScore"
        assert seen["headers"]["X-Parse-Application-Id"] == "app-id"
        assert seen["headers"]["X-Parse-REST-API-Key"] == "rest-key"
        assert seen["headers"]["Content-Type"] == "application/json"
        assert seen["body"] == {"score": 1}

    def test_dates_are_tagged_on_the_wire(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"updatedAt": "t"})

        transport = make_transport(handler)
        when = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        transport.perform("PUT", "classes/Event/e1", {"when": when})

        assert seen["body"] == {
            "when": {"__type": "Date", "iso": "2024-01-02T03:04:05.000Z"}
        }

    def test_delete_sends_no_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["content"] = request.content
            return httpx.Response(200, json={})

        response = make_transport(handler).perform("DELETE", "classes/GameScore/abc")

        assert response.succeeded
        assert seen["method"] == "DELETE"
        assert seen["content"] == b""

    def test_server_error_uses_backend_code(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"code": 101, "error": "Object not found."})

        response = make_transport(handler).perform("PUT", "classes/GameScore/nope", {})

        assert not response.succeeded
        assert isinstance(response.error, ServerError)
        assert response.error.code == 101
        assert response.error.message == "Object not found."
        assert response.error.status_code == 404

    def test_server_error_without_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        response = make_transport(handler).perform("POST", "classes/GameScore", {})

        assert isinstance(response.error, ServerError)
        assert response.error.status_code == 502
        assert "Bad Gateway" in response.error.message

    def test_connection_error_becomes_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        response = make_transport(handler).perform("POST", "classes/GameScore", {})

        assert not response.succeeded
        assert isinstance(response.error, TransportError)
        assert response.error.code == CONNECTION_FAILED

    def test_timeout_becomes_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        response = make_transport(handler).perform("POST", "classes/GameScore", {})

        assert isinstance(response.error, TransportError)

    @pytest.mark.parametrize("content", [b"not json", b"[1, 2]"])
    def test_success_with_unusable_body_is_malformed(self, content):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=content)

        response = make_transport(handler).perform("POST", "classes/GameScore", {})

        assert response.succeeded
        assert response.body is None
        assert isinstance(response.error, MalformedResponseError)


class TestHealth:
    def test_check_connection(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/1/health"
            return httpx.Response(200, json={"status": "ok"})

        assert make_transport(handler).check_connection() is True

    def test_check_connection_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        assert make_transport(handler).check_connection() is False

    def test_context_manager_closes_client(self):
        transport = make_transport(lambda request: httpx.Response(200, json={}))
        with transport:
            pass
        assert transport._client.is_closed
