"""
Domain Events

Events raised by the Assignment aggregate and the dispatcher that routes
them to handlers.
"""

from ....core.observability import get_logger
from ...shared.base import DomainEvent
from ..value_objects.enums import AssignmentStatus

logger = get_logger(__name__)


class AssignmentCreated(DomainEvent):
    """Raised when a new assignment is created."""

    assignment_id: str
    title: str
    assignee_id: str | None
    performed_by: str


class AssignmentAssigned(DomainEvent):
    """Raised whenever an assignee is (re)bound to an assignment."""

    assignment_id: str
    title: str
    assignee_id: str
    previous_assignee_id: str | None
    performed_by: str


class AssignmentStatusChanged(DomainEvent):
    """Raised when an assignment moves through the status machine."""

    assignment_id: str
    title: str
    assignee_id: str | None
    old_status: AssignmentStatus
    new_status: AssignmentStatus
    performed_by: str


class AssignmentUpdated(DomainEvent):
    """Raised when assignment fields change without a status transition."""

    assignment_id: str
    title: str
    assignee_id: str | None
    changed_fields: tuple[str, ...]
    performed_by: str


# Event Handler Interface
class DomainEventHandler:
    """Base interface for domain event handlers."""

    def can_handle(self, event: DomainEvent) -> bool:
        """Check if this handler can handle the given event."""
        raise NotImplementedError

    def handle(self, event: DomainEvent) -> None:
        """Handle the domain event."""
        raise NotImplementedError


# Event Publisher/Dispatcher
class DomainEventDispatcher:
    """Dispatches domain events to registered handlers."""

    def __init__(self) -> None:
        self._handlers: list[DomainEventHandler] = []

    def register_handler(self, handler: DomainEventHandler) -> None:
        """Register an event handler."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unregister_handler(self, handler: DomainEventHandler) -> None:
        """Unregister an event handler."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def dispatch(self, event: DomainEvent) -> None:
        """Dispatch an event to all capable handlers."""
        for handler in self._handlers:
            if handler.can_handle(event):
                try:
                    handler.handle(event)
                except Exception:
                    # Continue with other handlers even if one fails
                    logger.error(
                        "Error handling domain event",
                        event_type=type(event).__name__,
                        event_id=str(event.event_id),
                        handler=type(handler).__name__,
                        exc_info=True,
                    )

    def dispatch_all(self, events: list[DomainEvent]) -> None:
        """Dispatch multiple events."""
        for event in events:
            self.dispatch(event)
