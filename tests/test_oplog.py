"""Tests for the operation log and record state."""

from datetime import datetime, timezone

from docsync.records import DeleteOperation, IncrementOperation, OperationLog, RecordState, SetOperation


class TestOperationLog:
    def test_one_operation_per_key(self):
        log = OperationLog()
        log.record("a", SetOperation(1))
        log.record("a", IncrementOperation(2))

        assert len(log) == 1
        assert log.get("a") == IncrementOperation(2)
        assert log.dirty_keys == ["a", "a"]

    def test_discard_keeps_audit_trail(self):
        log = OperationLog()
        log.record("a", SetOperation(1))
        log.discard("a")

        assert "a" not in log
        assert not log
        assert log.dirty_keys == ["a", "a"]

    def test_iteration_order_and_snapshot(self):
        log = OperationLog()
        log.record("b", SetOperation(1))
        log.record("a", DeleteOperation())

        assert list(log) == ["b", "a"]
        snapshot = log.snapshot()
        log.clear()
        assert snapshot == {"b": SetOperation(1), "a": DeleteOperation()}
        assert len(log) == 0
        assert log.dirty_keys == []

    def test_dirty_keys_is_a_copy(self):
        log = OperationLog()
        log.record("a", SetOperation(1))
        log.dirty_keys.append("x")
        assert log.dirty_keys == ["a"]


class TestRecordState:
    def test_mark_saved_on_create_and_update(self):
        state = RecordState("GameScore")
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        updated = datetime(2024, 1, 2, tzinfo=timezone.utc)

        state.mark_saved("id1", created, created)
        assert state.is_persisted
        assert state.created_at == state.updated_at == created

        state.mark_saved("id1", None, updated)
        assert state.created_at == created
        assert state.updated_at == updated

    def test_forget_identity_keeps_data(self):
        state = RecordState("GameScore", object_id="x", data={"a": 1})
        state.forget_identity()

        assert state.object_id is None
        assert not state.is_persisted
        assert state.data == {"a": 1}
