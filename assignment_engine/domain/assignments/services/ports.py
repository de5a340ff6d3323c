"""
Collaborators consumed by the assignment engine.

The engine never reads the system clock, generates identifiers, or talks to
a notification channel directly; it goes through these interfaces so hosts
and tests can substitute their own.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol, runtime_checkable
from uuid import uuid4

from ...shared.base import utcnow
from ..value_objects.enums import NotificationKind


@runtime_checkable
class NotificationSink(Protocol):
    """Best-effort channel for assignment notifications."""

    def send_assignment_event(
        self,
        assignee_id: str,
        assignment_title: str,
        assignment_id: str,
        kind: NotificationKind,
    ) -> None: ...


@runtime_checkable
class Clock(Protocol):
    def now(self) -> datetime: ...


@runtime_checkable
class IdentityGenerator(Protocol):
    def new_id(self) -> str: ...


@runtime_checkable
class AssigneeDirectory(Protocol):
    """Answers whether an assignee identifier refers to a real person."""

    def exists(self, assignee_id: str) -> bool: ...


class SystemClock:
    """Clock backed by the system time, in UTC."""

    def now(self) -> datetime:
        return utcnow()


class UUIDIdentityGenerator:
    """Generates ``assignment_<hex>`` identifiers."""

    def __init__(self, prefix: str = "assignment_") -> None:
        self._prefix = prefix

    def new_id(self) -> str:
        return f"{self._prefix}{uuid4().hex}"


class NullNotificationSink:
    """Sink that drops every notification."""

    def send_assignment_event(
        self,
        assignee_id: str,
        assignment_title: str,
        assignment_id: str,
        kind: NotificationKind,
    ) -> None:
        return None


class StaticAssigneeDirectory:
    """Directory over a fixed set of assignee identifiers."""

    def __init__(self, assignee_ids: Iterable[str]) -> None:
        self._assignee_ids = frozenset(assignee_ids)

    def exists(self, assignee_id: str) -> bool:
        return assignee_id in self._assignee_ids
