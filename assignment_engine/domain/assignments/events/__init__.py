"""
Domain Events Module

Exports assignment domain events and event handling infrastructure.
"""

from .domain_events import (
    AssignmentAssigned,
    AssignmentCreated,
    AssignmentStatusChanged,
    AssignmentUpdated,
    DomainEventDispatcher,
    DomainEventHandler,
)

__all__ = [
    "AssignmentAssigned",
    "AssignmentCreated",
    "AssignmentStatusChanged",
    "AssignmentUpdated",
    "DomainEventDispatcher",
    "DomainEventHandler",
]
