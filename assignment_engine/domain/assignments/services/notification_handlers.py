"""
Event handlers attached to the engine's dispatcher.

``NotificationHandler`` turns assignment events into notification-sink calls;
``HistoryRecorder`` keeps the per-assignment action log.
"""

from collections import defaultdict

from ....core.observability import NOTIFICATION_FAILURES, get_logger
from ...shared.base import DomainEvent
from ..events import (
    AssignmentAssigned,
    AssignmentCreated,
    AssignmentStatusChanged,
    AssignmentUpdated,
    DomainEventHandler,
)
from ..value_objects.enums import AssignmentStatus, HistoryAction, NotificationKind
from ..value_objects.history import AssignmentHistoryEntry
from .ports import NotificationSink

logger = get_logger(__name__)


class NotificationHandler(DomainEventHandler):
    """
    Forwards assignment events to a NotificationSink.

    Creation with an assignee and every (re)assignment notify ``created``;
    status changes and field updates notify ``updated``. A status change
    into ``assigned`` is already covered by its assignment event. Sink
    failures are logged and counted, never raised.
    """

    def __init__(self, sink: NotificationSink, record_metrics: bool = True) -> None:
        self._sink = sink
        self._record_metrics = record_metrics

    def can_handle(self, event: DomainEvent) -> bool:
        return isinstance(
            event,
            AssignmentCreated
            | AssignmentAssigned
            | AssignmentStatusChanged
            | AssignmentUpdated,
        )

    def handle(self, event: DomainEvent) -> None:
        if isinstance(event, AssignmentCreated):
            if event.assignee_id:
                self.notify(
                    event.assignee_id,
                    event.title,
                    event.assignment_id,
                    NotificationKind.CREATED,
                )
        elif isinstance(event, AssignmentAssigned):
            self.notify(
                event.assignee_id,
                event.title,
                event.assignment_id,
                NotificationKind.CREATED,
            )
        elif isinstance(event, AssignmentStatusChanged):
            if event.assignee_id and event.new_status != AssignmentStatus.ASSIGNED:
                self.notify(
                    event.assignee_id,
                    event.title,
                    event.assignment_id,
                    NotificationKind.UPDATED,
                )
        elif isinstance(event, AssignmentUpdated):
            if event.assignee_id:
                self.notify(
                    event.assignee_id,
                    event.title,
                    event.assignment_id,
                    NotificationKind.UPDATED,
                )

    def notify(
        self,
        assignee_id: str,
        title: str,
        assignment_id: str,
        kind: NotificationKind,
    ) -> bool:
        """Send one notification. Returns False if the sink raised."""
        try:
            self._sink.send_assignment_event(assignee_id, title, assignment_id, kind)
        except Exception:
            if self._record_metrics:
                NOTIFICATION_FAILURES.labels(kind=kind.value).inc()
            logger.warning(
                "Assignment notification failed",
                assignee_id=assignee_id,
                assignment_id=assignment_id,
                kind=kind.value,
                exc_info=True,
            )
            return False
        return True


class HistoryRecorder(DomainEventHandler):
    """Builds the action history of each assignment from its events."""

    def __init__(self) -> None:
        self._entries: dict[str, list[AssignmentHistoryEntry]] = defaultdict(list)

    def can_handle(self, event: DomainEvent) -> bool:
        return isinstance(
            event,
            AssignmentCreated
            | AssignmentAssigned
            | AssignmentStatusChanged
            | AssignmentUpdated,
        )

    def handle(self, event: DomainEvent) -> None:
        entry = self._to_entry(event)
        if entry is not None:
            self._entries[entry.assignment_id].append(entry)

    def history_for(self, assignment_id: str) -> list[AssignmentHistoryEntry]:
        return list(self._entries.get(assignment_id, ()))

    def forget(self, assignment_id: str) -> None:
        self._entries.pop(assignment_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def _to_entry(self, event: DomainEvent) -> AssignmentHistoryEntry | None:
        if isinstance(event, AssignmentCreated):
            details = f'Created "{event.title}"'
            if event.assignee_id:
                details += f" and assigned to {event.assignee_id}"
            return AssignmentHistoryEntry(
                assignment_id=event.assignment_id,
                action=HistoryAction.CREATED,
                performed_by=event.performed_by,
                performed_at=event.occurred_at,
                details=details,
                new_status=(
                    AssignmentStatus.ASSIGNED
                    if event.assignee_id
                    else AssignmentStatus.UNASSIGNED
                ),
            )

        if isinstance(event, AssignmentAssigned):
            if event.previous_assignee_id == event.assignee_id:
                return None
            if event.previous_assignee_id is None:
                action = HistoryAction.ASSIGNED
                details = f"Assigned to {event.assignee_id}"
            else:
                action = HistoryAction.REASSIGNED
                details = (
                    f"Reassigned from {event.previous_assignee_id} "
                    f"to {event.assignee_id}"
                )
            return AssignmentHistoryEntry(
                assignment_id=event.assignment_id,
                action=action,
                performed_by=event.performed_by,
                performed_at=event.occurred_at,
                details=details,
            )

        if isinstance(event, AssignmentStatusChanged):
            if event.new_status == AssignmentStatus.ASSIGNED:
                return None
            action = _STATUS_ACTIONS.get(event.new_status, HistoryAction.UPDATED)
            if (
                event.new_status == AssignmentStatus.IN_PROGRESS
                and event.old_status != AssignmentStatus.ASSIGNED
            ):
                action = HistoryAction.UPDATED
            return AssignmentHistoryEntry(
                assignment_id=event.assignment_id,
                action=action,
                performed_by=event.performed_by,
                performed_at=event.occurred_at,
                details=(
                    f"Status changed from {event.old_status.value} "
                    f"to {event.new_status.value}"
                ),
                previous_status=event.old_status,
                new_status=event.new_status,
            )

        if isinstance(event, AssignmentUpdated):
            return AssignmentHistoryEntry(
                assignment_id=event.assignment_id,
                action=HistoryAction.UPDATED,
                performed_by=event.performed_by,
                performed_at=event.occurred_at,
                details="Updated " + ", ".join(event.changed_fields),
            )

        return None


_STATUS_ACTIONS = {
    AssignmentStatus.IN_PROGRESS: HistoryAction.STARTED,
    AssignmentStatus.COMPLETED: HistoryAction.COMPLETED,
    AssignmentStatus.CANCELLED: HistoryAction.CANCELLED,
}
