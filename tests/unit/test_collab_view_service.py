"""Unit tests for collab_view_service module."""

import pytest

from src.domain.handover import HandoverRecord, HandoverStatus
from src.domain.task import Task, TaskStatus
from src.services import collab_view_service


def _record(from_user="alice", to_user="bob", timestamp=1000, status=HandoverStatus.PENDING, **kwargs):
    if status != HandoverStatus.PENDING:
        kwargs.setdefault("response_timestamp", timestamp + 100)
    return HandoverRecord(from_user=from_user, to_user=to_user, timestamp=timestamp, status=status, **kwargs)


def _task(task_id, *records, created_at=None, status=TaskStatus.IN_PROGRESS):
    return Task(id=task_id, status=status, created_at=created_at, handovers=list(records))


def _ids(tasks):
    return [task.id for task in tasks]


@pytest.mark.unit
class TestInboxViews:
    """Tests for inbox_pending and inbox_history."""

    def test_partitions_by_latest_inbound_record(self):
        tasks = [
            _task("pending", _record()),
            _task("answered", _record(status=HandoverStatus.ACCEPTED)),
            _task("archived", _record(status=HandoverStatus.REJECTED, receiver_archived=True)),
            _task("unrelated", _record(from_user="carol", to_user="dave")),
            _task("plain"),
        ]

        assert _ids(collab_view_service.inbox_pending(tasks, "bob")) == ["pending"]
        assert _ids(collab_view_service.inbox_history(tasks, "bob")) == ["answered"]

    def test_only_latest_inbound_record_counts(self):
        task = _task("t1", _record(timestamp=1, status=HandoverStatus.REJECTED), _record(timestamp=5))

        assert _ids(collab_view_service.inbox_pending([task], "bob")) == ["t1"]
        assert collab_view_service.inbox_history([task], "bob") == []

    def test_pending_sorted_by_created_at_descending(self):
        tasks = [
            _task("old", _record(), created_at=100),
            _task("new", _record(), created_at=300),
            _task("mid", _record(), created_at=200),
        ]

        assert _ids(collab_view_service.inbox_pending(tasks, "bob")) == ["new", "mid", "old"]

    def test_missing_created_at_falls_back_to_record_timestamp(self):
        tasks = [
            _task("dated", _record(timestamp=10), created_at=200),
            _task("undated", _record(timestamp=500)),
        ]

        assert _ids(collab_view_service.inbox_pending(tasks, "bob")) == ["undated", "dated"]

    def test_history_sorted_by_response_time_descending(self):
        tasks = [
            _task("first", _record(status=HandoverStatus.ACCEPTED, response_timestamp=100), created_at=900),
            _task("last", _record(status=HandoverStatus.QUESTIONING, response_timestamp=300), created_at=100),
            _task("middle", _record(status=HandoverStatus.REJECTED, response_timestamp=200), created_at=500),
        ]

        assert _ids(collab_view_service.inbox_history(tasks, "bob")) == ["last", "middle", "first"]


@pytest.mark.unit
class TestOutboxViews:
    """Tests for outbox_active and outbox_history."""

    def test_partitions_by_latest_outbound_record(self):
        tasks = [
            _task("waiting", _record()),
            _task("answered", _record(status=HandoverStatus.QUESTIONING)),
            _task("acknowledged", _record(status=HandoverStatus.ACCEPTED, sender_archived=True)),
        ]

        assert _ids(collab_view_service.outbox_active(tasks, "alice")) == ["waiting", "answered"]
        assert _ids(collab_view_service.outbox_history(tasks, "alice")) == ["acknowledged"]

    def test_receiver_archive_does_not_hide_from_sender(self):
        tasks = [_task("t1", _record(status=HandoverStatus.ACCEPTED, receiver_archived=True))]

        assert _ids(collab_view_service.outbox_active(tasks, "alice")) == ["t1"]
        assert collab_view_service.inbox_history(tasks, "bob") == []

    def test_every_involved_task_lands_in_exactly_one_view(self):
        tasks = [
            _task("a", _record()),
            _task("b", _record(status=HandoverStatus.ACCEPTED)),
            _task("c", _record(status=HandoverStatus.REJECTED, sender_archived=True, receiver_archived=True)),
            _task("d", _record(status=HandoverStatus.QUESTIONING, receiver_archived=True)),
        ]

        for user, views in (
            ("alice", (collab_view_service.outbox_active, collab_view_service.outbox_history)),
            ("bob", (collab_view_service.inbox_pending, collab_view_service.inbox_history)),
        ):
            seen = [task_id for view in views for task_id in _ids(view(tasks, user))]
            assert len(seen) == len(set(seen))

        outbox = _ids(collab_view_service.outbox_active(tasks, "alice")) + _ids(
            collab_view_service.outbox_history(tasks, "alice")
        )
        assert sorted(outbox) == ["a", "b", "c", "d"]


@pytest.mark.unit
class TestCollabViews:
    """Tests for build_collab_views and its helpers."""

    def test_unread_count_uses_last_seen(self):
        tasks = [
            _task("seen", _record(timestamp=100)),
            _task("new", _record(timestamp=500)),
            _task("answered", _record(timestamp=600, status=HandoverStatus.ACCEPTED)),
        ]

        assert collab_view_service.count_unread_inbox(tasks, "bob", last_seen=200) == 1
        assert collab_view_service.count_unread_inbox(tasks, "bob", last_seen=0) == 2

    def test_collab_tasks_excludes_divested_and_uninvolved(self):
        tasks = [
            _task("mine", _record()),
            _task("gone", _record(), status=TaskStatus.DIVESTED),
            _task("solo"),
        ]

        assert _ids(collab_view_service.collab_tasks(tasks, "bob")) == ["mine"]

    def test_build_collab_views(self):
        tasks = [
            _task("in", _record(timestamp=50)),
            _task("out", _record(from_user="bob", to_user="carol", status=HandoverStatus.ACCEPTED)),
            _task("gone", _record(timestamp=60), status=TaskStatus.DIVESTED),
        ]

        views = collab_view_service.build_collab_views(tasks, "bob", last_seen=10)

        assert _ids(views.inbox_pending) == ["in"]
        assert views.inbox_history == []
        assert _ids(views.outbox_active) == ["out"]
        assert views.outbox_history == []
        assert views.unread_count == 1
