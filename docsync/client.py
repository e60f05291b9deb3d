"""Client tying configuration, transport and sync machinery together."""

import logging
from typing import Any

from .config import Config
from .records import Record
from .sync import AsyncRunner, HttpTransport, SyncEngine, Transport
from .validation import ValuePolicy

logger = logging.getLogger(__name__)


class DocSyncClient:
    """Entry point for working with records of one backend application.

    Records created through the client are bound to it, so ``record.save()``
    and ``record.save_in_background()`` go through its engine and runner.
    """

    def __init__(self, config: Config | None = None, transport: Transport | None = None):
        """Initialize the client.

        Args:
            config: Loaded configuration. Defaults to ``Config()``.
            transport: Transport to use instead of an ``HttpTransport``
                built from ``config.server``.
        """
        self.config = config or Config()
        server = self.config.server
        self._owns_transport = transport is None
        if transport is None:
            transport = HttpTransport(
                base_url=server.base_url,
                application_id=server.application_id,
                rest_api_key=server.rest_api_key,
                timeout=server.timeout_seconds,
            )
        self.transport = transport
        self.policy = ValuePolicy(reserved_keys=frozenset(self.config.records.reserved_keys))
        self.engine = SyncEngine(transport)
        self.runner = AsyncRunner(self.engine, max_workers=self.config.executor.max_workers)

    def _endpoint(self, collection_name: str) -> str:
        return f"{self.config.records.endpoint_prefix}{collection_name}"

    def create(self, collection_name: str) -> Record:
        """New, unsaved record of ``collection_name`` bound to this client."""
        return Record(
            collection_name,
            policy=self.policy,
            endpoint=self._endpoint(collection_name),
            client=self,
        )

    def without_data(self, collection_name: str, object_id: str) -> Record:
        """Bound reference to an existing record, for updating or deleting it."""
        return Record.without_data(
            collection_name,
            object_id,
            policy=self.policy,
            endpoint=self._endpoint(collection_name),
            client=self,
        )

    def from_server_data(self, collection_name: str, body: dict[str, Any]) -> Record:
        return Record.from_server_data(
            collection_name,
            body,
            policy=self.policy,
            endpoint=self._endpoint(collection_name),
            client=self,
        )

    def close(self) -> None:
        """Wait for background work, then release the HTTP connection pool."""
        self.runner.shutdown(wait=True)
        if self._owns_transport:
            self.transport.close()
        logger.debug("DocSyncClient closed")

    def __enter__(self) -> "DocSyncClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
