"""Key and value rules applied to record mutations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .files import FileRef

DEFAULT_RESERVED_KEYS = frozenset({"objectId", "createdAt", "updatedAt", "ACL"})

_SCALAR_TYPES = (str, bool, int, float, datetime, bytes, list, tuple, dict, FileRef)


@dataclass(frozen=True)
class ValuePolicy:
    """Predicates deciding which keys and values a record accepts."""

    reserved_keys: frozenset[str] = field(default=DEFAULT_RESERVED_KEYS)

    def is_invalid_key(self, key: str) -> bool:
        return key in self.reserved_keys

    def is_valid_type(self, value: Any) -> bool:
        from .records.record import Record

        return isinstance(value, (Record, *_SCALAR_TYPES))


DEFAULT_POLICY = ValuePolicy()
