"""Assignment aggregate: a unit of work tracked through a status lifecycle."""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from ...shared.base import AggregateRoot, ensure_aware
from ...shared.exceptions import (
    ClosedAssignmentError,
    InvalidAssigneeError,
    InvalidTransitionError,
    ValidationError,
)
from ..events import (
    AssignmentAssigned,
    AssignmentCreated,
    AssignmentStatusChanged,
    AssignmentUpdated,
)
from ..value_objects.commands import NewAssignment
from ..value_objects.enums import AssignmentStatus, AssignmentType, Priority

_PROGRESS_RESET_STATUSES = frozenset(
    {AssignmentStatus.REVISION, AssignmentStatus.COMPLETED}
)

PATCHABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "type",
        "priority",
        "deadline",
        "estimated_hours",
        "department",
        "tags",
    }
)


class Assignment(AggregateRoot):
    """
    Assignment aggregate.

    Owns the status machine and keeps these invariants after every mutation:
    ``unassigned`` iff no assignee, ``completed_at`` set iff completed,
    progress is 100 when completed, and ``started_at`` is never cleared.
    """

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    type: AssignmentType = AssignmentType.DESIGN
    priority: Priority = Priority.MEDIUM
    status: AssignmentStatus = AssignmentStatus.UNASSIGNED

    assigned_to: str | None = None
    assigned_by: str
    deadline: datetime

    estimated_hours: float = Field(default=0.0, ge=0)
    actual_hours: float | None = Field(default=None, ge=0)
    progress_percentage: int = Field(default=0, ge=0, le=100)
    revision_count: int = Field(default=0, ge=0)
    last_revision_date: datetime | None = None

    required_skills: frozenset[str] = Field(default_factory=frozenset)
    department: str = Field(default="general", min_length=1, max_length=50)
    tags: tuple[str, ...] = ()
    notes: str | None = Field(default=None, max_length=1000)

    assigned_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @field_validator(
        "deadline",
        "created_at",
        "updated_at",
        "assigned_at",
        "started_at",
        "completed_at",
        "last_revision_date",
    )
    @classmethod
    def make_aware(cls, v: datetime | None) -> datetime | None:
        return None if v is None else ensure_aware(v)

    def is_valid(self) -> bool:
        """Validate business rules."""
        return (
            (self.status == AssignmentStatus.UNASSIGNED) == (self.assigned_to is None)
            and (self.completed_at is not None)
            == (self.status == AssignmentStatus.COMPLETED)
            and (
                self.status != AssignmentStatus.COMPLETED
                or self.progress_percentage == 100
            )
            and (self.actual_hours is None or self.completed_at is not None)
        )

    def validate(self) -> None:
        """Raise if an invariant does not hold."""
        if not self.is_valid():
            raise ValueError(
                f"Assignment {self.id} violates its invariants "
                f"(status={self.status.value}, assigned_to={self.assigned_to})"
            )

    @property
    def is_closed(self) -> bool:
        return self.status.is_terminal

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    def is_overdue(self, now: datetime) -> bool:
        """Deadline has passed while the assignment is still open."""
        return self.deadline < now and not self.status.is_terminal

    def matches_search(self, needle: str) -> bool:
        """Case-insensitive substring match over title and description."""
        return needle in self.title.lower() or needle in self.description.lower()

    @staticmethod
    def create(
        assignment_id: str, data: NewAssignment, at: datetime, actor: str
    ) -> "Assignment":
        """
        Factory method to create a new Assignment.

        Args:
            assignment_id: Identifier generated by the engine
            data: Validated creation input
            at: Creation time
            actor: Who created the assignment (used when ``data`` names nobody)

        Returns:
            New Assignment carrying an ``AssignmentCreated`` event
        """
        assignee = data.assigned_to or None
        assignment = Assignment(
            id=assignment_id,
            title=data.title,
            description=data.description,
            type=data.type,
            priority=data.priority,
            status=(
                AssignmentStatus.ASSIGNED if assignee else AssignmentStatus.UNASSIGNED
            ),
            assigned_to=assignee,
            assigned_by=data.assigned_by or actor,
            deadline=data.deadline,
            estimated_hours=data.estimated_hours,
            required_skills=data.required_skills,
            department=data.department,
            tags=data.tags,
            notes=data.notes,
            assigned_at=at if assignee else None,
            created_at=at,
            updated_at=at,
        )
        assignment.validate()
        assignment.add_domain_event(
            AssignmentCreated(
                aggregate_id=assignment.id,
                occurred_at=at,
                assignment_id=assignment.id,
                title=assignment.title,
                assignee_id=assignee,
                performed_by=assignment.assigned_by,
            )
        )
        return assignment

    def ensure_open(self) -> None:
        """
        Raises:
            ClosedAssignmentError: If the assignment is completed or cancelled
        """
        if self.status.is_terminal:
            raise ClosedAssignmentError(self.id, self.status.value)

    def assign(self, assignee_id: str, at: datetime, actor: str) -> None:
        """
        Bind an assignee.

        From ``unassigned`` this moves the assignment to ``assigned``. In any
        other open status only the assignee changes; binding the current
        assignee again changes nothing but still raises an event so the
        assignee is re-notified.

        Raises:
            ClosedAssignmentError: If the assignment is terminal
            InvalidAssigneeError: If ``assignee_id`` is empty
        """
        self.ensure_open()
        if not assignee_id or not assignee_id.strip():
            raise InvalidAssigneeError(assignee_id, self.id)

        previous = self.assigned_to
        if previous != assignee_id:
            self.assigned_to = assignee_id
            self.assigned_by = actor
            self.assigned_at = at
            if self.status == AssignmentStatus.UNASSIGNED:
                self._change_status(AssignmentStatus.ASSIGNED, at, actor)
            self.mark_updated(at)
            self.validate()

        self.add_domain_event(
            AssignmentAssigned(
                aggregate_id=self.id,
                occurred_at=at,
                assignment_id=self.id,
                title=self.title,
                assignee_id=assignee_id,
                previous_assignee_id=previous,
                performed_by=actor,
            )
        )

    def transition_to(
        self,
        new_status: AssignmentStatus,
        at: datetime,
        actor: str,
        progress_percentage: int | None = None,
        assignee_id: str | None = None,
        actual_hours: float | None = None,
    ) -> None:
        """
        Apply a status transition.

        Args:
            new_status: Requested status
            at: Time of the transition
            actor: Who requested it
            progress_percentage: Optional new progress within [0, 100]
            assignee_id: Required for ``unassigned -> assigned``
            actual_hours: Only accepted when completing

        Raises:
            ClosedAssignmentError: If the assignment is terminal
            InvalidTransitionError: If the pair is not allowed
            InvalidAssigneeError: If assigning without an assignee
            ValidationError: If progress or hours are out of range
        """
        self.ensure_open()
        if not self.status.can_transition_to(new_status):
            raise InvalidTransitionError(self.id, self.status.value, new_status.value)

        if progress_percentage is not None:
            # completion overrides progress with 100, so only the range is checked
            self._check_progress(
                progress_percentage,
                allow_decrease=new_status in _PROGRESS_RESET_STATUSES,
            )
        if actual_hours is not None:
            if new_status != AssignmentStatus.COMPLETED:
                raise ValidationError(
                    "actual_hours",
                    actual_hours,
                    "actual hours can only be recorded on completion",
                )
            if actual_hours < 0:
                raise ValidationError(
                    "actual_hours", actual_hours, "must not be negative"
                )

        if new_status == AssignmentStatus.ASSIGNED:
            if not assignee_id or not assignee_id.strip():
                raise InvalidAssigneeError(assignee_id, self.id)
            self.assign(assignee_id, at, actor)
            if progress_percentage is not None:
                self.progress_percentage = progress_percentage
            return

        if new_status == AssignmentStatus.CANCELLED:
            self._change_status(new_status, at, actor)
            self.mark_updated(at)
            return

        if progress_percentage is not None:
            self.progress_percentage = progress_percentage

        if new_status == AssignmentStatus.IN_PROGRESS and self.started_at is None:
            self.started_at = at
        elif new_status == AssignmentStatus.REVISION:
            self.revision_count += 1
            self.last_revision_date = at
        elif new_status == AssignmentStatus.COMPLETED:
            if self.completed_at is None:
                self.completed_at = at
            self.progress_percentage = 100
            if actual_hours is not None:
                self.actual_hours = actual_hours

        self._change_status(new_status, at, actor)
        self.mark_updated(at)
        self.validate()

    def update_progress(self, progress_percentage: int, at: datetime, actor: str) -> None:
        """
        Record progress without changing status.

        Raises:
            ClosedAssignmentError: If the assignment is terminal
            ValidationError: If progress is out of range, decreasing, or the
                assignment has no assignee yet
        """
        self.ensure_open()
        if self.status == AssignmentStatus.UNASSIGNED:
            raise ValidationError(
                "progress_percentage",
                progress_percentage,
                "progress cannot be recorded before the assignment has an assignee",
            )
        self._check_progress(progress_percentage, allow_decrease=False)
        if progress_percentage == self.progress_percentage:
            return

        self.progress_percentage = progress_percentage
        self.mark_updated(at)
        self._record_update(("progress_percentage",), at, actor)

    def apply_changes(self, changes: dict[str, Any], at: datetime, actor: str) -> None:
        """
        Apply plain field changes (no status or assignee changes).

        Raises:
            ClosedAssignmentError: If the assignment is terminal
            ValidationError: If a field is not patchable or a value is invalid
        """
        self.ensure_open()
        changed: list[str] = []
        for name, value in changes.items():
            if name not in PATCHABLE_FIELDS:
                raise ValidationError(name, None, "field cannot be patched")
            if getattr(self, name) != value:
                setattr(self, name, value)
                changed.append(name)

        if changed:
            self.mark_updated(at)
            self._record_update(tuple(sorted(changed)), at, actor)

    def _check_progress(self, value: int, allow_decrease: bool) -> None:
        if not 0 <= value <= 100:
            raise ValidationError(
                "progress_percentage", value, "must be between 0 and 100"
            )
        if not allow_decrease and value < self.progress_percentage:
            raise ValidationError(
                "progress_percentage",
                value,
                f"cannot decrease from {self.progress_percentage}",
            )

    def _record_update(
        self, changed_fields: tuple[str, ...], at: datetime, actor: str
    ) -> None:
        self.add_domain_event(
            AssignmentUpdated(
                aggregate_id=self.id,
                occurred_at=at,
                assignment_id=self.id,
                title=self.title,
                assignee_id=self.assigned_to,
                changed_fields=changed_fields,
                performed_by=actor,
            )
        )

    def _change_status(
        self, new_status: AssignmentStatus, at: datetime, actor: str
    ) -> None:
        """Internal method to change status and raise events."""
        old_status = self.status
        self.status = new_status

        self.add_domain_event(
            AssignmentStatusChanged(
                aggregate_id=self.id,
                occurred_at=at,
                assignment_id=self.id,
                title=self.title,
                assignee_id=self.assigned_to,
                old_status=old_status,
                new_status=new_status,
                performed_by=actor,
            )
        )
