"""
Shared pytest fixtures for the assignment engine.

Provides a controllable clock, deterministic identifiers and recording
notification sinks so engine behaviour can be asserted without real time or
a real notification channel.
"""

import itertools
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest

from assignment_engine.core.config import Settings
from assignment_engine.domain.assignments.services import AssignmentEngine
from assignment_engine.domain.assignments.value_objects import NotificationKind

BASE_TIME = datetime(2024, 6, 15, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value


class SequentialIdGenerator:
    """Generates assignment_001, assignment_002, ..."""

    def __init__(self, prefix: str = "assignment_") -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)

    def new_id(self) -> str:
        return f"{self._prefix}{next(self._counter):03d}"


@dataclass(frozen=True)
class SentNotification:
    assignee_id: str
    assignment_title: str
    assignment_id: str
    kind: NotificationKind


class RecordingNotificationSink:
    """Sink that records every notification it receives."""

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []

    def send_assignment_event(
        self,
        assignee_id: str,
        assignment_title: str,
        assignment_id: str,
        kind: NotificationKind,
    ) -> None:
        self.sent.append(
            SentNotification(assignee_id, assignment_title, assignment_id, kind)
        )

    def kinds(self) -> list[NotificationKind]:
        return [n.kind for n in self.sent]

    def for_assignee(self, assignee_id: str) -> list[SentNotification]:
        return [n for n in self.sent if n.assignee_id == assignee_id]

    def clear(self) -> None:
        self.sent.clear()


class FailingNotificationSink:
    """Sink whose channel is always down."""

    def __init__(self) -> None:
        self.attempts = 0

    def send_assignment_event(self, *args, **kwargs) -> None:
        self.attempts += 1
        raise ConnectionError("notification channel unavailable")


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, ENVIRONMENT="testing", LOG_FORMAT="console")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def id_generator() -> SequentialIdGenerator:
    return SequentialIdGenerator()


@pytest.fixture
def sink() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def engine(clock, id_generator, sink, test_settings) -> AssignmentEngine:
    """Engine over an empty in-memory store."""
    engine = AssignmentEngine(
        notification_sink=sink,
        clock=clock,
        id_generator=id_generator,
        config=test_settings,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def make_engine(clock, id_generator, test_settings):
    """Factory for engines with custom collaborators."""
    created: list[AssignmentEngine] = []

    def factory(**overrides) -> AssignmentEngine:
        kwargs = {
            "clock": clock,
            "id_generator": id_generator,
            "config": test_settings,
        }
        kwargs.update(overrides)
        engine = AssignmentEngine(**kwargs)
        created.append(engine)
        return engine

    yield factory
    for engine in created:
        engine.dispose()
