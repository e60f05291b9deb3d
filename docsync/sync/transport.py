"""HTTP transport used by the sync engine.

Issues exactly one request per call; retrying is left to the caller.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from ..codec import dumps
from ..errors import (
    OTHER_CAUSE,
    DocSyncError,
    MalformedResponseError,
    ServerError,
    TransportError,
)

logger = logging.getLogger(__name__)


@dataclass
class Response:
    """Outcome of one transport call."""

    succeeded: bool
    body: dict[str, Any] | None = None
    error: DocSyncError | None = None


class Transport(Protocol):
    """Anything that can perform a request against the backend."""

    def perform(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> Response: ...


class HttpTransport:
    """Transport talking to a Parse-style REST API over httpx."""

    def __init__(
        self,
        base_url: str,
        application_id: str = "",
        rest_api_key: str = "",
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        """Initialize the transport.

        Args:
            base_url: Root URL of the REST API (e.g., "https://api.example.com/1").
            application_id: Value of the application id header.
            rest_api_key: Value of the REST API key header.
            timeout: Request timeout in seconds.
            client: Pre-built httpx client, mainly for tests.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        headers = {
            "X-Parse-Application-Id": application_id,
            "X-Parse-REST-API-Key": rest_api_key,
            "Content-Type": "application/json",
        }
        if client is None:
            client = httpx.Client(base_url=self.base_url, timeout=timeout)
        client.headers.update(headers)
        self._client = client

    def perform(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> Response:
        """Send one request and fold the outcome into a Response.

        Args:
            method: HTTP method (POST, PUT, DELETE).
            path: Path relative to ``base_url``.
            body: Optional JSON object to send.

        Returns:
            Response; transport and server problems are reported in
            ``error`` rather than raised.
        """
        content = dumps(body) if body is not None else None
        logger.debug(f"{method} {path} body={content}")

        try:
            response = self._client.request(method, f"/{path.lstrip('/')}", content=content)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out: {e}")
            return Response(False, error=TransportError(f"Request timed out: {e}"))
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            return Response(False, error=TransportError(f"Connection failed: {e}"))

        if response.status_code >= 400:
            return Response(False, error=_server_error(response))

        try:
            data = response.json()
        except ValueError:
            return Response(
                True,
                error=MalformedResponseError(
                    f"Response to {method} {path} is not valid JSON."
                ),
            )

        if not isinstance(data, dict):
            return Response(
                True,
                error=MalformedResponseError(
                    f"Response to {method} {path} is not a JSON object."
                ),
            )

        return Response(True, body=data)

    def check_connection(self) -> bool:
        """Check whether the backend answers its health endpoint."""
        try:
            response = self._client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.debug(f"Health check failed: {e}")
            return False

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def _server_error(response: httpx.Response) -> ServerError:
    """Build a ServerError from the backend's ``{code, error}`` body if present."""
    code = OTHER_CAUSE
    message = f"HTTP {response.status_code}: {response.text}"
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        if isinstance(data.get("code"), int):
            code = data["code"]
        if data.get("error"):
            message = str(data["error"])

    return ServerError(code, message, status_code=response.status_code)
