"""Background execution of record saves and deletes."""

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

from ..errors import OTHER_CAUSE, DocSyncError
from ..records import Record
from ..records.record import DoneCallback
from .engine import SyncEngine

logger = logging.getLogger(__name__)


class AsyncRunner:
    """Runs SyncEngine transitions on a thread pool.

    Submitting never blocks. Work on the same record still serializes on the
    record's lock; work on different records runs in parallel.
    """

    def __init__(self, engine: SyncEngine, max_workers: int = 4):
        self.engine = engine
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="docsync"
        )

    def save_async(self, record: Record, on_done: DoneCallback | None = None) -> Future:
        """Save ``record`` in the background.

        Args:
            record: Record to save.
            on_done: Called exactly once with None on success or the error.

        Returns:
            Future resolving to None, or holding the error. Errors stay on
            the future whether or not ``on_done`` is given.
        """
        return self._submit(self.engine.save, record, on_done)

    def delete_async(self, record: Record, on_done: DoneCallback | None = None) -> Future:
        """Delete ``record`` in the background. See ``save_async``."""
        return self._submit(self.engine.delete, record, on_done)

    async def save(self, record: Record) -> None:
        """Await a background save from asyncio code."""
        await asyncio.wrap_future(self.save_async(record))

    async def delete(self, record: Record) -> None:
        """Await a background delete from asyncio code."""
        await asyncio.wrap_future(self.delete_async(record))

    def _submit(
        self,
        action: Callable[[Record], None],
        record: Record,
        on_done: DoneCallback | None,
    ) -> Future:
        return self._executor.submit(self._run, action, record, on_done)

    def _run(
        self,
        action: Callable[[Record], None],
        record: Record,
        on_done: DoneCallback | None,
    ) -> None:
        error: DocSyncError | None = None
        try:
            action(record)
        except DocSyncError as e:
            error = e
        except Exception as e:
            logger.exception(f"Unexpected error syncing {record!r}")
            error = DocSyncError(OTHER_CAUSE, str(e))
            error.__cause__ = e

        if on_done is not None:
            try:
                on_done(error)
            except Exception:
                logger.exception(f"Completion callback for {record!r} raised")

        if error is not None:
            raise error

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "AsyncRunner":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()
