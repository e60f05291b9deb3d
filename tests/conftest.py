"""Shared fixtures for docsync tests."""

import threading
from typing import Any

import pytest

from docsync.errors import ServerError, TransportError
from docsync.sync import Response, SyncEngine

CREATED_AT = "2024-05-01T10:00:00.000Z"
UPDATED_AT = "2024-05-02T11:30:00.250Z"


class FakeTransport:
    """Transport double that records calls and replays canned responses.

    Responses are taken from ``responses`` in order; once it runs out a
    generic success for the verb is returned.
    """

    def __init__(self, responses: list[Response] | None = None, delay: float = 0.0):
        self.responses = list(responses or [])
        self.calls: list[tuple[str, str, Any]] = []
        self.delay = delay
        self._lock = threading.Lock()
        self._ids = 0

    def perform(self, method: str, path: str, body: dict[str, Any] | None = None) -> Response:
        with self._lock:
            self.calls.append((method, path, body))
            self._ids += 1
            object_id = f"obj{self._ids}"
            response = self.responses.pop(0) if self.responses else None

        if self.delay:
            threading.Event().wait(self.delay)

        if response is not None:
            return response
        if method == "POST":
            return Response(True, body={"objectId": object_id, "createdAt": CREATED_AT})
        if method == "PUT":
            return Response(True, body={"updatedAt": UPDATED_AT})
        return Response(True, body={})


def transport_failure() -> Response:
    return Response(False, error=TransportError("Connection failed: refused"))


def server_failure() -> Response:
    return Response(False, error=ServerError(101, "object not found", status_code=404))


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def engine(transport):
    return SyncEngine(transport)
