"""
Assignment repository interface and in-memory store.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from ..entities.assignment import Assignment


class AssignmentRepository(ABC):
    """Repository interface for the Assignment aggregate."""

    @abstractmethod
    def save(self, assignment: Assignment) -> None:
        """Insert or replace an assignment."""
        ...

    @abstractmethod
    def find_by_id(self, assignment_id: str) -> Assignment | None:
        """Find assignment by ID."""
        ...

    @abstractmethod
    def find_all(self) -> list[Assignment]:
        """All assignments in insertion order."""
        ...

    @abstractmethod
    def find_by_assignee(self, assignee_id: str) -> list[Assignment]:
        """Assignments currently bound to an assignee."""
        ...

    @abstractmethod
    def delete(self, assignment_id: str) -> bool:
        """Delete an assignment. Returns whether something was removed."""
        ...

    @abstractmethod
    def init(self, seed_data: Iterable[Assignment] | None = None) -> None:
        """Replace the store contents."""
        ...

    @abstractmethod
    def dispose(self) -> None:
        """Drop all stored assignments."""
        ...


class InMemoryAssignmentRepository(AssignmentRepository):
    """
    In-memory implementation of AssignmentRepository.

    Stores and returns deep copies so callers never hold a reference into
    the store; a change becomes visible only when saved.
    """

    def __init__(self, seed_data: Iterable[Assignment] | None = None) -> None:
        self._assignments: dict[str, Assignment] = {}
        self.init(seed_data)

    def save(self, assignment: Assignment) -> None:
        self._assignments[assignment.id] = assignment.model_copy(deep=True)

    def find_by_id(self, assignment_id: str) -> Assignment | None:
        assignment = self._assignments.get(assignment_id)
        return assignment.model_copy(deep=True) if assignment else None

    def find_all(self) -> list[Assignment]:
        return [a.model_copy(deep=True) for a in self._assignments.values()]

    def find_by_assignee(self, assignee_id: str) -> list[Assignment]:
        return [
            a.model_copy(deep=True)
            for a in self._assignments.values()
            if a.assigned_to == assignee_id
        ]

    def delete(self, assignment_id: str) -> bool:
        return self._assignments.pop(assignment_id, None) is not None

    def init(self, seed_data: Iterable[Assignment] | None = None) -> None:
        self._assignments = {}
        for assignment in seed_data or ():
            assignment.validate()
            self.save(assignment)

    def dispose(self) -> None:
        self._assignments.clear()

    def __len__(self) -> int:
        return len(self._assignments)

    def __contains__(self, assignment_id: object) -> bool:
        return assignment_id in self._assignments
