"""Client-side representation of one server-side document."""

import threading
from concurrent.futures import Future
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping

from ..codec import decode_value, parse_date
from ..errors import (
    INCORRECT_TYPE,
    INVALID_KEY_NAME,
    NOT_INITIALIZED,
    DocSyncError,
    InvalidArgumentError,
)
from ..files import FileRef
from ..validation import DEFAULT_POLICY, ValuePolicy
from .operations import (
    ABSENT,
    DeleteOperation,
    FieldOperation,
    IncrementOperation,
    SetOperation,
    is_number,
)
from .oplog import OperationLog, RecordState

if TYPE_CHECKING:
    from ..client import DocSyncClient

DoneCallback = Callable[[DocSyncError | None], None]


class Record:
    """A document of one collection, with local edits tracked per key.

    Every mutation is applied to ``data`` right away and remembered as the
    key's single pending operation until the next successful save. All
    mutations and sync transitions of one record run under ``lock``.
    """

    def __init__(
        self,
        collection_name: str,
        *,
        policy: ValuePolicy = DEFAULT_POLICY,
        endpoint: str | None = None,
        client: "DocSyncClient | None" = None,
    ):
        """Create an empty, unsaved record.

        Args:
            collection_name: Name of the remote collection (class).
            policy: Key/value rules enforced by ``put`` and ``increment``.
            endpoint: REST path of the collection. Defaults to
                ``classes/<collection_name>``.
            client: Client used by ``save``/``delete`` and their background
                variants. Records without one can still be synced through a
                ``SyncEngine`` directly.
        """
        if not collection_name:
            raise InvalidArgumentError("collection name may not be empty.")

        self._state = RecordState(collection_name=collection_name)
        self._log = OperationLog()
        self._policy = policy
        self._endpoint = endpoint or f"classes/{collection_name}"
        self._client = client
        self._lock = threading.RLock()

    @classmethod
    def without_data(cls, collection_name: str, object_id: str, **kwargs: Any) -> "Record":
        """Reference an existing server record without fetching it."""
        record = cls(collection_name, **kwargs)
        record._state.object_id = object_id
        return record

    @classmethod
    def from_server_data(
        cls, collection_name: str, body: Mapping[str, Any], **kwargs: Any
    ) -> "Record":
        """Build a clean record from a server (or wire) object."""
        record = cls(collection_name, **kwargs)
        fields = dict(body)

        record._state.object_id = fields.pop("objectId", None)
        created_at = fields.pop("createdAt", None)
        updated_at = fields.pop("updatedAt", None)
        record._state.created_at = _read_date(created_at)
        record._state.updated_at = _read_date(updated_at) or record._state.created_at
        record._state.data = {key: decode_value(value) for key, value in fields.items()}
        return record

    # -- identity ---------------------------------------------------------

    @property
    def collection_name(self) -> str:
        return self._state.collection_name

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def object_id(self) -> str | None:
        return self._state.object_id

    @property
    def created_at(self) -> datetime | None:
        return self._state.created_at

    @property
    def updated_at(self) -> datetime | None:
        return self._state.updated_at

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def client(self) -> "DocSyncClient | None":
        return self._client

    def bind(self, client: "DocSyncClient") -> None:
        self._client = client

    def has_same_id(self, other: "Record") -> bool:
        return (
            self.object_id is not None
            and self.collection_name == other.collection_name
            and self.object_id == other.object_id
        )

    # -- pending changes --------------------------------------------------

    @property
    def is_dirty(self) -> bool:
        return bool(self._log)

    @property
    def pending_operations(self) -> Mapping[str, FieldOperation]:
        with self._lock:
            return MappingProxyType(self._log.snapshot())

    @property
    def dirty_keys(self) -> list[str]:
        return self._log.dirty_keys

    def pending_payload(self) -> dict[str, Any]:
        """Wire object holding only what changed since the last save.

        Keys with a pending operation map to its encoding. A nested record
        stored under a key with no pending operation of its own contributes
        its pending changes if it has any.
        """
        with self._lock:
            payload = {key: operation.encode() for key, operation in self._log.items()}
            for key, value in self._state.data.items():
                if key not in payload and isinstance(value, Record) and value.is_dirty:
                    payload[key] = value.pending_payload()
            return payload

    # -- mutations --------------------------------------------------------

    def put(self, key: str, value: Any) -> None:
        """Set ``key`` to ``value``, replacing any pending change for it.

        Raises:
            InvalidArgumentError: For a None key or value, an unsaved file,
                a reserved key or a value of an unsupported type.
        """
        if key is None:
            raise InvalidArgumentError("key may not be null.")
        if value is None:
            raise InvalidArgumentError("value may not be null.")
        if isinstance(value, FileRef) and not value.is_uploaded:
            raise InvalidArgumentError(
                "FileRef must be saved before being set on a Record."
            )
        if self._policy.is_invalid_key(key):
            raise InvalidArgumentError(f"reserved value for key: {key}", INVALID_KEY_NAME)
        if not self._policy.is_valid_type(value):
            raise InvalidArgumentError(
                f"invalid type for value: {type(value).__name__}", INCORRECT_TYPE
            )

        operation = SetOperation(value)
        with self._lock:
            self._state.data.pop(key, None)
            self._apply(key, operation, ABSENT)

    set = put

    def remove(self, key: str) -> None:
        """Remove ``key`` locally and, for saved records, on the next save."""
        with self._lock:
            if key not in self._state.data:
                return
            if self._state.is_persisted:
                self._log.record(key, DeleteOperation())
            else:
                self._log.discard(key)
            del self._state.data[key]

    def increment(self, key: str, amount: int | float = 1) -> None:
        """Add ``amount`` to ``key``, replacing any pending change for it.

        The local value accumulates, but only the latest increment is pending.
        """
        if key is None:
            raise InvalidArgumentError("key may not be null.")
        if self._policy.is_invalid_key(key):
            raise InvalidArgumentError(f"reserved value for key: {key}", INVALID_KEY_NAME)
        if not is_number(amount):
            raise InvalidArgumentError(
                f"amount must be a number, got {type(amount).__name__}", INCORRECT_TYPE
            )

        with self._lock:
            self._apply(key, IncrementOperation(amount), self._state.data.get(key, ABSENT))

    def decrement(self, key: str, amount: int | float = 1) -> None:
        self.increment(key, -amount)

    def clear_data(self) -> None:
        """Reset to a fresh, unsaved and empty record."""
        with self._lock:
            self._state.data.clear()
            self._log.clear()
            self._state.forget_identity()

    def _apply(self, key: str, operation: FieldOperation, previous: Any) -> None:
        value = operation.apply(previous, self, key)
        if value is ABSENT:
            self._state.data.pop(key, None)
        else:
            self._state.data[key] = value
        self._log.record(key, operation)

    # -- sync transitions, driven by SyncEngine under ``lock`` -------------

    def _commit_save(
        self,
        object_id: str,
        created_at: datetime | None,
        updated_at: datetime,
    ) -> None:
        self._state.mark_saved(object_id, created_at, updated_at)
        self._log.clear()

    def _commit_delete(self) -> None:
        self._state.forget_identity()
        self._log.clear()

    def save(self) -> None:
        """Save pending changes through the bound client. See ``SyncEngine.save``."""
        self._require_client().engine.save(self)

    def delete(self) -> None:
        """Delete the server copy through the bound client."""
        self._require_client().engine.delete(self)

    def save_in_background(self, callback: DoneCallback | None = None) -> Future:
        return self._require_client().runner.save_async(self, callback)

    def delete_in_background(self, callback: DoneCallback | None = None) -> Future:
        return self._require_client().runner.delete_async(self, callback)

    def _require_client(self) -> "DocSyncClient":
        if self._client is None:
            raise DocSyncError(
                NOT_INITIALIZED,
                f"{self.collection_name} record is not bound to a client.",
            )
        return self._client

    # -- reading ----------------------------------------------------------

    @property
    def data(self) -> Mapping[str, Any]:
        return MappingProxyType(self._state.data)

    def keys(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._state.data)

    def has(self, key: str) -> bool:
        return key in self._state.data

    __contains__ = has

    def get(self, key: str, default: Any = None) -> Any:
        return self._state.data.get(key, default)

    def _typed(self, key: str, types: type | tuple[type, ...], default: Any) -> Any:
        value = self._state.data.get(key)
        return value if isinstance(value, types) else default

    def get_string(self, key: str) -> str | None:
        return self._typed(key, str, None)

    def get_bool(self, key: str) -> bool:
        return self._typed(key, bool, False)

    def get_number(self, key: str) -> int | float | None:
        value = self._state.data.get(key)
        return value if is_number(value) else None

    def get_int(self, key: str) -> int:
        number = self.get_number(key)
        return 0 if number is None else int(number)

    def get_float(self, key: str) -> float:
        number = self.get_number(key)
        return 0.0 if number is None else float(number)

    def get_date(self, key: str) -> datetime | None:
        return self._typed(key, datetime, None)

    def get_list(self, key: str) -> list | None:
        value = self._typed(key, (list, tuple), None)
        return list(value) if value is not None else None

    def get_dict(self, key: str) -> dict | None:
        return self._typed(key, dict, None)

    def get_record(self, key: str) -> "Record | None":
        return self._typed(key, Record, None)

    def get_file(self, key: str) -> FileRef | None:
        return self._typed(key, FileRef, None)

    def __repr__(self) -> str:
        return (
            f"Record(collection={self.collection_name!r}, "
            f"object_id={self.object_id!r}, dirty={self.is_dirty})"
        )


def _read_date(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        return parse_date(value)
    decoded = decode_value(value)
    return decoded if isinstance(decoded, datetime) else None
