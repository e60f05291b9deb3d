"""Record state and the per-key log of pending operations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator

from .operations import FieldOperation


@dataclass
class RecordState:
    """Identity, timestamps and materialized fields of one record."""

    collection_name: str
    object_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_persisted(self) -> bool:
        return self.object_id is not None

    def mark_saved(
        self,
        object_id: str,
        created_at: datetime | None,
        updated_at: datetime,
    ) -> None:
        self.object_id = object_id
        if created_at is not None:
            self.created_at = created_at
        self.updated_at = updated_at

    def forget_identity(self) -> None:
        """Drop everything that only the server could have told us."""
        self.object_id = None
        self.created_at = None
        self.updated_at = None


class OperationLog:
    """Current pending operation per key, plus an audit trail of touched keys.

    ``dirty_keys`` keeps every touch in order, duplicates included; only the
    operations mapping matters for what gets sent.
    """

    def __init__(self):
        self._operations: dict[str, FieldOperation] = {}
        self._dirty_keys: list[str] = []

    def record(self, key: str, operation: FieldOperation) -> None:
        """Install ``operation`` as the only pending change for ``key``."""
        self._operations[key] = operation
        self._dirty_keys.append(key)

    def discard(self, key: str) -> None:
        """Forget any pending change for ``key`` but remember it was touched."""
        self._operations.pop(key, None)
        self._dirty_keys.append(key)

    def get(self, key: str) -> FieldOperation | None:
        return self._operations.get(key)

    def items(self) -> list[tuple[str, FieldOperation]]:
        return list(self._operations.items())

    def snapshot(self) -> dict[str, FieldOperation]:
        return dict(self._operations)

    @property
    def dirty_keys(self) -> list[str]:
        return list(self._dirty_keys)

    def clear(self) -> None:
        self._operations.clear()
        self._dirty_keys.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._operations

    def __len__(self) -> int:
        return len(self._operations)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._operations))

    def __bool__(self) -> bool:
        return bool(self._operations)
