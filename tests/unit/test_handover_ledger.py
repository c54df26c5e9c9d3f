"""Unit tests for handover_ledger module."""

import pytest

from src.domain.handover import HandoverRecord, HandoverStatus
from src.domain.task import Task
from src.services import handover_ledger


def _record(from_user: str, to_user: str, timestamp: int, **kwargs) -> HandoverRecord:
    return HandoverRecord(from_user=from_user, to_user=to_user, remark=f"r{timestamp}", timestamp=timestamp, **kwargs)


@pytest.fixture
def task() -> Task:
    return Task(
        id="t1",
        handovers=[
            _record("alice", "bob", 1, status=HandoverStatus.ACCEPTED, response="ok", response_timestamp=2),
            _record("bob", "carol", 3),
            _record("alice", "bob", 4),
            _record("alice", "dave", 5),
        ],
    )


@pytest.mark.unit
class TestFindLast:
    """Tests for the reverse scans."""

    def test_last_inbound_picks_latest(self, task):
        assert handover_ledger.find_last_inbound(task, "bob") == 2

    def test_last_outbound_picks_latest(self, task):
        assert handover_ledger.find_last_outbound(task, "alice") == 3
        assert handover_ledger.find_last_outbound(task, "bob") == 1

    def test_missing_user_returns_none(self, task):
        assert handover_ledger.find_last_inbound(task, "zed") is None
        assert handover_ledger.last_outbound(task, "zed") is None

    def test_empty_ledger(self):
        assert handover_ledger.find_last_inbound(Task(id="t2"), "bob") is None

    def test_unresolved_counterpart_skips_answered_records(self, task):
        assert handover_ledger.find_unresolved_counterpart(task, from_user="alice", to_user="bob") == 2

    def test_unresolved_counterpart_none_when_all_answered(self):
        task = Task(
            id="t1",
            handovers=[_record("alice", "bob", 1, status=HandoverStatus.REJECTED, response_timestamp=2)],
        )

        assert handover_ledger.find_unresolved_counterpart(task, from_user="alice", to_user="bob") is None

    def test_unresolved_counterpart_requires_pending_status(self):
        task = Task(
            id="t1",
            handovers=[
                _record("alice", "bob", 1),
                _record("alice", "bob", 2, status=HandoverStatus.ACCEPTED),
            ],
        )

        assert handover_ledger.find_unresolved_counterpart(task, from_user="alice", to_user="bob") == 0

    def test_find_matching_record_uses_identity_fields(self, task):
        probe = _record("alice", "bob", 4, status=HandoverStatus.QUESTIONING, response_timestamp=9)

        assert handover_ledger.find_matching_record(task, probe) == 2

    def test_find_matching_record_requires_same_remark(self, task):
        probe = HandoverRecord(from_user="alice", to_user="bob", remark="different", timestamp=4)

        assert handover_ledger.find_matching_record(task, probe) is None


@pytest.mark.unit
class TestLedgerUpdates:
    """Tests for copy-on-write ledger updates."""

    def test_append_keeps_original(self, task):
        appended = handover_ledger.append_record(task, _record("alice", "erin", 6))

        assert len(appended.handovers) == 5
        assert len(task.handovers) == 4
        assert appended.handovers[-1].to_user == "erin"

    def test_replace_record(self, task):
        replacement = _record("bob", "carol", 3, status=HandoverStatus.ACCEPTED, response_timestamp=7)

        updated = handover_ledger.replace_record(task, 1, replacement)

        assert updated.handovers[1].status == HandoverStatus.ACCEPTED
        assert task.handovers[1].status == HandoverStatus.PENDING

    def test_involves_user(self, task):
        assert handover_ledger.involves_user(task, "carol")
        assert handover_ledger.involves_user(task, "alice")
        assert not handover_ledger.involves_user(task, "zed")

    def test_find_task(self, task):
        tasks = [Task(id="x"), task]

        assert handover_ledger.find_task(tasks, "t1") == 1
        assert handover_ledger.find_task(tasks, "missing") is None
