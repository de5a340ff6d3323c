"""
Property-Based Testing for Assignment Invariants

Uses Hypothesis to drive random operation sequences through the engine and
checks that the lifecycle, workload and ranking guarantees hold after every
step.
"""

import math
from datetime import timedelta

from hypothesis import given, settings, strategies as st

from assignment_engine.core.config import Settings
from assignment_engine.domain.assignments.services import AssignmentEngine
from assignment_engine.domain.assignments.value_objects import (
    AssignmentStatus,
    Candidate,
    SortOrder,
)
from assignment_engine.domain.shared.exceptions import DomainError
from assignment_engine.tests.conftest import (
    BASE_TIME,
    FakeClock,
    RecordingNotificationSink,
    SequentialIdGenerator,
)

from .fixtures import AssignmentFactory

ASSIGNEES = ["emp_001", "emp_002", "emp_003"]


def build_engine() -> tuple[AssignmentEngine, FakeClock]:
    clock = FakeClock()
    engine = AssignmentEngine(
        notification_sink=RecordingNotificationSink(),
        clock=clock,
        id_generator=SequentialIdGenerator(),
        config=Settings(_env_file=None, ENVIRONMENT="testing"),
    )
    return engine, clock


# Custom Hypothesis strategies for engine operations
@st.composite
def engine_operations(draw):
    """Generate one operation against a single assignment."""
    kind = draw(st.sampled_from(["status", "assign", "progress", "patch"]))
    if kind == "status":
        return (
            "status",
            draw(st.sampled_from(list(AssignmentStatus))),
            draw(st.none() | st.integers(min_value=-10, max_value=110)),
            draw(st.none() | st.sampled_from(ASSIGNEES)),
        )
    if kind == "assign":
        return ("assign", draw(st.sampled_from(ASSIGNEES + [""])))
    if kind == "progress":
        return ("progress", draw(st.integers(min_value=-10, max_value=110)))
    return ("patch", draw(st.sampled_from(["low", "medium", "high", "urgent"])))


@st.composite
def new_assignments(draw):
    """Generate creation input, sometimes with an assignee."""
    return {
        "title": draw(st.sampled_from(["Leaflet", "Banner", "Die line", "Proof"])),
        "deadline": BASE_TIME
        + timedelta(hours=draw(st.integers(min_value=-72, max_value=240))),
        "estimated_hours": draw(st.integers(min_value=0, max_value=80)),
        "assigned_to": draw(st.none() | st.sampled_from(ASSIGNEES)),
    }


@st.composite
def stored_assignments(draw):
    """Generate a batch of stored assignments in any status with any deadline."""
    statuses = draw(st.lists(st.sampled_from(list(AssignmentStatus)), max_size=25))
    return [
        AssignmentFactory.create_assignment(
            assignment_id=f"stored_{index:03d}",
            status=status,
            assignee_id=draw(st.sampled_from(ASSIGNEES)),
            at=BASE_TIME - timedelta(days=10),
            deadline=BASE_TIME
            + timedelta(hours=draw(st.integers(min_value=-96, max_value=96))),
        )
        for index, status in enumerate(statuses)
    ]


def apply(engine, assignment_id, operation):
    kind = operation[0]
    if kind == "status":
        _, status, progress, assignee = operation
        engine.update_status(
            assignment_id, status, progress_percentage=progress, assignee_id=assignee
        )
    elif kind == "assign":
        engine.assign_to(assignment_id, operation[1])
    elif kind == "progress":
        engine.update_progress(assignment_id, operation[1])
    else:
        engine.bulk_update([assignment_id], {"priority": operation[1]})


class TestLifecycleProperties:
    """Invariants that hold after any sequence of operations."""

    @given(
        data=new_assignments(),
        operations=st.lists(engine_operations(), max_size=25),
    )
    @settings(max_examples=150, deadline=None)
    def test_invariants_hold_after_every_operation(self, data, operations):
        """Property: every committed state satisfies the aggregate invariants."""
        engine, clock = build_engine()
        current = engine.create(data)

        for operation in operations:
            previous = current
            clock.advance(minutes=30)
            try:
                apply(engine, current.id, operation)
            except DomainError:
                # A rejected operation leaves the stored assignment untouched
                assert engine.get(current.id).model_dump() == previous.model_dump()
                continue

            current = engine.get(current.id)

            assert (current.status == AssignmentStatus.UNASSIGNED) == (
                current.assigned_to is None
            )
            assert (current.completed_at is not None) == (
                current.status == AssignmentStatus.COMPLETED
            )
            if current.status == AssignmentStatus.COMPLETED:
                assert current.progress_percentage == 100
            if previous.started_at is not None:
                assert current.started_at == previous.started_at
            if previous.status.is_terminal:
                assert current.status == previous.status
            if current.status != AssignmentStatus.REVISION:
                assert current.progress_percentage >= previous.progress_percentage
            assert 0 <= current.progress_percentage <= 100
            assert current.revision_count >= previous.revision_count

    @given(operations=st.lists(engine_operations(), max_size=15))
    @settings(max_examples=50, deadline=None)
    def test_terminal_states_reject_everything(self, operations):
        """Property: once cancelled, no operation can change the assignment."""
        engine, _ = build_engine()
        created = engine.create(
            {"title": "Proof", "deadline": BASE_TIME + timedelta(days=1)}
        )
        cancelled = engine.update_status(created.id, AssignmentStatus.CANCELLED)

        for operation in operations:
            try:
                apply(engine, created.id, operation)
            except DomainError:
                pass

        assert engine.get(created.id).model_dump() == cancelled.model_dump()


class TestQueryProperties:
    """Invariants of listings, workload and suggestions."""

    @given(
        batch=st.lists(new_assignments(), min_size=0, max_size=30),
        page_size=st.integers(min_value=1, max_value=12),
        descending=st.booleans(),
    )
    @settings(max_examples=60, deadline=None)
    def test_pages_partition_sorted_listing(self, batch, page_size, descending):
        """Property: concatenated pages equal the full sorted listing."""
        engine, clock = build_engine()
        for index, data in enumerate(batch):
            engine.create(data)
            # creation times repeat in pairs so sort ties are exercised
            clock.advance(minutes=15 * (index % 2))

        order = SortOrder.DESC if descending else SortOrder.ASC
        full = engine.list_filtered(page_size=100, sort_order=order)
        pages = [
            engine.list_filtered(page=n, page_size=page_size, sort_order=order)
            for n in range(1, math.ceil(len(batch) / page_size) + 2)
        ]

        assert [a.id for p in pages for a in p.items] == [a.id for a in full.items]
        assert all(p.total == len(batch) for p in pages)
        created = [a.created_at for a in full.items]
        assert created == sorted(created, reverse=descending)

    @given(batch=st.lists(new_assignments(), max_size=20))
    @settings(max_examples=60, deadline=None)
    def test_workload_is_pure_and_capped(self, batch):
        """Property: workload is deterministic and never exceeds the cap."""
        engine, _ = build_engine()
        for data in batch:
            engine.create(data)

        for assignee_id in ASSIGNEES:
            first = engine.compute_workload(assignee_id)
            second = engine.compute_workload(assignee_id)

            assert first == second
            assert 0 <= first.total_workload_percent <= engine.config.MAX_WORKLOAD_PERCENT
            expected = min(
                first.active_assignments * engine.config.WORKLOAD_PERCENT_PER_TASK,
                engine.config.MAX_WORKLOAD_PERCENT,
            )
            assert first.total_workload_percent == expected

    @given(
        batch=st.lists(new_assignments(), max_size=15),
        pool=st.lists(
            st.builds(
                Candidate,
                assignee_id=st.sampled_from(ASSIGNEES + ["emp_004"]),
                skill_match=st.none() | st.floats(min_value=0.0, max_value=1.0),
            ),
            max_size=8,
        ),
    )
    @settings(max_examples=80, deadline=None)
    def test_suggestions_sorted(self, batch, pool):
        """Property: suggestions are ordered by confidence then availability."""
        engine, _ = build_engine()
        for data in batch:
            engine.create(data)
        task = engine.create({"title": "Target", "deadline": BASE_TIME + timedelta(days=2)})

        suggestions = engine.suggest_candidates(task.id, pool)

        assert len(suggestions) == len(pool)
        keys = [(s.confidence, s.availability_score) for s in suggestions]
        assert keys == sorted(keys, reverse=True)
        for s in suggestions:
            assert 0.0 <= s.confidence <= 1.0
            assert 0.0 <= s.workload_impact <= 1.0

    @given(
        batch=stored_assignments(),
        now_offset_hours=st.integers(min_value=-120, max_value=120),
    )
    @settings(max_examples=80, deadline=None)
    def test_overdue_filter_matches_definition(self, batch, now_offset_hours):
        """Property: the overdue filter returns exactly the open, past-deadline set."""
        engine, clock = build_engine()
        engine.init(batch)
        clock.set(BASE_TIME + timedelta(hours=now_offset_hours))
        now = clock.now()

        page = engine.list_filtered({"overdue": True}, page_size=100)

        expected = {
            a.id
            for a in batch
            if a.deadline < now
            and a.status not in (AssignmentStatus.COMPLETED, AssignmentStatus.CANCELLED)
        }
        assert {a.id for a in page.items} == expected
        assert page.total == len(expected)
