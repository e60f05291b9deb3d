"""Client-side records for a remote document store, with change tracking."""

from .client import DocSyncClient
from .config import Config, load_config
from .errors import (
    DocSyncError,
    InvalidArgumentError,
    MalformedResponseError,
    ServerError,
    TransportError,
)
from .files import FileRef
from .records import Record
from .sync import AsyncRunner, HttpTransport, Response, SyncEngine
from .validation import DEFAULT_POLICY, ValuePolicy

__version__ = "0.1.0"

__all__ = [
    "AsyncRunner",
    "Config",
    "DEFAULT_POLICY",
    "DocSyncClient",
    "DocSyncError",
    "FileRef",
    "HttpTransport",
    "InvalidArgumentError",
    "MalformedResponseError",
    "Record",
    "Response",
    "ServerError",
    "SyncEngine",
    "TransportError",
    "ValuePolicy",
    "load_config",
]
