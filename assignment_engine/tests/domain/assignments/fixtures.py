"""
Test data for the assignments domain.

``AssignmentFactory`` builds individual inputs and entities in a chosen
status; ``AssignmentFixtureGenerator`` produces seeded, reproducible mixes of
assignments for listing, workload and metrics tests.
"""

import random
from datetime import datetime, timedelta

from assignment_engine.domain.assignments.entities import Assignment
from assignment_engine.domain.assignments.value_objects import (
    AssignmentStatus,
    AssignmentType,
    NewAssignment,
    Priority,
)
from assignment_engine.tests.conftest import BASE_TIME

# Transitions that reach each status from a freshly created assignment
STATUS_PATHS: dict[AssignmentStatus, list[AssignmentStatus]] = {
    AssignmentStatus.UNASSIGNED: [],
    AssignmentStatus.ASSIGNED: [AssignmentStatus.ASSIGNED],
    AssignmentStatus.IN_PROGRESS: [
        AssignmentStatus.ASSIGNED,
        AssignmentStatus.IN_PROGRESS,
    ],
    AssignmentStatus.REVIEW: [
        AssignmentStatus.ASSIGNED,
        AssignmentStatus.IN_PROGRESS,
        AssignmentStatus.REVIEW,
    ],
    AssignmentStatus.REVISION: [
        AssignmentStatus.ASSIGNED,
        AssignmentStatus.IN_PROGRESS,
        AssignmentStatus.REVIEW,
        AssignmentStatus.REVISION,
    ],
    AssignmentStatus.COMPLETED: [
        AssignmentStatus.ASSIGNED,
        AssignmentStatus.IN_PROGRESS,
        AssignmentStatus.COMPLETED,
    ],
    AssignmentStatus.CANCELLED: [AssignmentStatus.CANCELLED],
}


class AssignmentFactory:
    """Factory for assignment inputs and entities."""

    @staticmethod
    def new_assignment(**overrides) -> NewAssignment:
        data = {
            "title": "Business card layout",
            "description": "Two-sided card for the sales team",
            "type": AssignmentType.DESIGN,
            "priority": Priority.MEDIUM,
            "estimated_hours": 8.0,
            "deadline": BASE_TIME + timedelta(days=3),
        }
        data.update(overrides)
        return NewAssignment(**data)

    @staticmethod
    def create_assignment(
        assignment_id: str = "assignment_test",
        status: AssignmentStatus = AssignmentStatus.UNASSIGNED,
        assignee_id: str = "emp_001",
        at: datetime = BASE_TIME,
        step: timedelta = timedelta(hours=1),
        **overrides,
    ) -> Assignment:
        """
        Create an assignment and walk it to ``status``.

        Each transition happens ``step`` after the previous one. Pending
        domain events are cleared before returning.
        """
        assignment = Assignment.create(
            assignment_id,
            AssignmentFactory.new_assignment(**overrides),
            at=at,
            actor="manager_001",
        )
        current = at
        for target in STATUS_PATHS[status]:
            current += step
            assignment.transition_to(
                target,
                current,
                "manager_001",
                assignee_id=assignee_id if target == AssignmentStatus.ASSIGNED else None,
            )
        assignment.clear_domain_events()
        return assignment


class AssignmentFixtureGenerator:
    """Generate reproducible assignment sets from a seed."""

    ASSIGNEES = ["emp_001", "emp_002", "emp_003", "emp_004"]
    TITLES = [
        "Brochure redesign",
        "Label proof check",
        "Poster print run",
        "Packaging die review",
        "Press maintenance",
        "Catalogue layout",
    ]

    def __init__(self, seed: int = 42) -> None:
        self._random = random.Random(seed)

    def generate(
        self, count: int, base_time: datetime = BASE_TIME
    ) -> list[Assignment]:
        assignments = []
        for index in range(count):
            status = self._random.choice(list(AssignmentStatus))
            created = base_time - timedelta(
                days=self._random.randint(0, 40), hours=self._random.randint(0, 23)
            )
            assignments.append(
                AssignmentFactory.create_assignment(
                    assignment_id=f"seed_{index:03d}",
                    status=status,
                    assignee_id=self._random.choice(self.ASSIGNEES),
                    at=created,
                    step=timedelta(hours=self._random.randint(1, 72)),
                    title=self._random.choice(self.TITLES),
                    type=self._random.choice(list(AssignmentType)),
                    priority=self._random.choice(list(Priority)),
                    estimated_hours=float(self._random.randint(1, 40)),
                    deadline=created + timedelta(days=self._random.randint(1, 30)),
                    department=self._random.choice(["design", "production"]),
                )
            )
        return assignments
