"""
Tests for event dispatch and notification delivery.
"""

from datetime import timedelta

from prometheus_client import REGISTRY

from assignment_engine.domain.assignments.events import (
    AssignmentAssigned,
    AssignmentStatusChanged,
    DomainEventDispatcher,
    DomainEventHandler,
)
from assignment_engine.domain.assignments.services import NotificationHandler
from assignment_engine.domain.assignments.value_objects import (
    AssignmentStatus,
    NotificationKind,
)
from assignment_engine.tests.conftest import (
    BASE_TIME,
    FailingNotificationSink,
    RecordingNotificationSink,
)


def failures(kind: NotificationKind) -> float:
    value = REGISTRY.get_sample_value(
        "assignment_engine_notification_failures_total", {"kind": kind.value}
    )
    return value or 0.0


def status_changed(new_status, assignee_id="emp_001"):
    return AssignmentStatusChanged(
        aggregate_id="a1",
        assignment_id="a1",
        title="Menu card",
        assignee_id=assignee_id,
        old_status=AssignmentStatus.UNASSIGNED,
        new_status=new_status,
        performed_by="system",
    )


class TestNotificationHandler:
    """Test the event to notification mapping."""

    def test_assigned_maps_to_created(self):
        sink = RecordingNotificationSink()
        handler = NotificationHandler(sink)

        handler.handle(
            AssignmentAssigned(
                aggregate_id="a1",
                assignment_id="a1",
                title="Menu card",
                assignee_id="emp_001",
                previous_assignee_id=None,
                performed_by="system",
            )
        )

        assert sink.kinds() == [NotificationKind.CREATED]

    def test_status_change_into_assigned_is_not_duplicated(self):
        sink = RecordingNotificationSink()
        handler = NotificationHandler(sink)

        handler.handle(status_changed(AssignmentStatus.ASSIGNED))
        handler.handle(status_changed(AssignmentStatus.CANCELLED, assignee_id=None))

        assert sink.sent == []

    def test_sink_failure_is_contained(self):
        sink = FailingNotificationSink()
        handler = NotificationHandler(sink)
        before = failures(NotificationKind.UPDATED)

        delivered = handler.notify("emp_001", "Menu card", "a1", NotificationKind.UPDATED)

        assert delivered is False
        assert sink.attempts == 1
        assert failures(NotificationKind.UPDATED) == before + 1


class TestDispatcher:
    """Test handler registration and isolation."""

    def test_failing_handler_does_not_stop_others(self):
        class Exploding(DomainEventHandler):
            def can_handle(self, event):
                return True

            def handle(self, event):
                raise RuntimeError("boom")

        sink = RecordingNotificationSink()
        dispatcher = DomainEventDispatcher()
        dispatcher.register_handler(Exploding())
        dispatcher.register_handler(NotificationHandler(sink))

        dispatcher.dispatch(status_changed(AssignmentStatus.IN_PROGRESS))

        assert sink.kinds() == [NotificationKind.UPDATED]

    def test_unregister(self):
        sink = RecordingNotificationSink()
        handler = NotificationHandler(sink)
        dispatcher = DomainEventDispatcher()
        dispatcher.register_handler(handler)
        dispatcher.unregister_handler(handler)

        dispatcher.dispatch(status_changed(AssignmentStatus.IN_PROGRESS))

        assert sink.sent == []


class TestEngineWithFailingSink:
    """A broken notification channel never breaks an operation."""

    def test_operations_commit(self, make_engine):
        sink = FailingNotificationSink()
        engine = make_engine(notification_sink=sink)
        before = failures(NotificationKind.CREATED)

        created = engine.create(
            {
                "title": "Menu card",
                "deadline": BASE_TIME + timedelta(days=1),
                "assigned_to": "emp_001",
            }
        )
        started = engine.update_status(created.id, AssignmentStatus.IN_PROGRESS)

        assert started.status == AssignmentStatus.IN_PROGRESS
        assert engine.get(created.id).status == AssignmentStatus.IN_PROGRESS
        assert sink.attempts == 2
        assert failures(NotificationKind.CREATED) == before + 1

    def test_failed_deadline_alert_reported(self, make_engine):
        engine = make_engine(notification_sink=FailingNotificationSink())
        engine.create(
            {
                "title": "Menu card",
                "deadline": BASE_TIME - timedelta(hours=1),
                "assigned_to": "emp_001",
            }
        )

        (alert,) = engine.check_deadlines()

        assert alert.kind == NotificationKind.OVERDUE
        assert alert.delivered is False
