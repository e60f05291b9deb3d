"""Records and the pending operations they track."""

from .operations import (
    ABSENT,
    DeleteOperation,
    FieldOperation,
    IncrementOperation,
    SetOperation,
)
from .oplog import OperationLog, RecordState
from .record import Record

__all__ = [
    "ABSENT",
    "DeleteOperation",
    "FieldOperation",
    "IncrementOperation",
    "OperationLog",
    "Record",
    "RecordState",
    "SetOperation",
]
