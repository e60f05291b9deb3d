"""Synchronization of records with the backend.

The engine performs one blocking round trip per call; the runner moves
those calls onto a thread pool.
"""

from .engine import SyncEngine
from .runner import AsyncRunner
from .transport import HttpTransport, Response, Transport

__all__ = ["AsyncRunner", "HttpTransport", "Response", "SyncEngine", "Transport"]
