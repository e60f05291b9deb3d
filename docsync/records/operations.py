"""Pending field operations.

A record keeps at most one operation per key. Each operation knows how to
compute the key's new local value from the previous one (``apply``) and how
to describe itself to the server (``encode``). Operations never touch the
record they belong to; the record writes the applied value itself.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from ..files import FileRef

if TYPE_CHECKING:
    from .record import Record


class _Absent:
    """Marker for a key that has no value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


def is_number(value: Any) -> bool:
    """True for ints and floats; bools are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def encode_value(value: Any) -> Any:
    """Encode a field value for the wire.

    Nested records contribute their own pending changes, not a snapshot.
    """
    from .record import Record

    if isinstance(value, Record):
        return value.pending_payload()
    if isinstance(value, FileRef):
        return value.to_wire()
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    if isinstance(value, dict):
        return {k: encode_value(v) for k, v in value.items()}
    return value


@dataclass(frozen=True)
class SetOperation:
    """Replace the key's value unconditionally."""

    value: Any

    def apply(self, previous: Any, owner: "Record | None", key: str) -> Any:
        return self.value

    def encode(self) -> Any:
        return encode_value(self.value)


@dataclass(frozen=True)
class IncrementOperation:
    """Add ``amount`` to the key's numeric value (absent counts as 0)."""

    amount: int | float

    def apply(self, previous: Any, owner: "Record | None", key: str) -> Any:
        base = previous if is_number(previous) else 0
        return base + self.amount

    def encode(self) -> dict[str, Any]:
        return {"__op": "Increment", "amount": self.amount}


@dataclass(frozen=True)
class DeleteOperation:
    """Remove the key from the server copy on the next save."""

    def apply(self, previous: Any, owner: "Record | None", key: str) -> Any:
        return ABSENT

    def encode(self) -> dict[str, Any]:
        return {"__op": "Delete"}


FieldOperation = Union[SetOperation, IncrementOperation, DeleteOperation]
