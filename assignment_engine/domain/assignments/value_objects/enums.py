"""Domain enums for assignments."""

from enum import Enum


class AssignmentType(str, Enum):
    """Kind of work an assignment represents."""

    DESIGN = "design"
    REVIEW = "review"
    PRODUCTION = "production"
    QUALITY_CHECK = "quality_check"
    MAINTENANCE = "maintenance"


class Priority(str, Enum):
    """Assignment priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        """Numeric rank, higher is more urgent."""
        return _PRIORITY_RANKS[self]


_PRIORITY_RANKS = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.URGENT: 4,
}


class AssignmentStatus(str, Enum):
    """Assignment status enumeration."""

    UNASSIGNED = "unassigned"  # Waiting for an assignee
    ASSIGNED = "assigned"  # Assignee chosen, work not started
    IN_PROGRESS = "in_progress"  # Being worked on
    REVIEW = "review"  # Submitted for review
    REVISION = "revision"  # Sent back for rework
    COMPLETED = "completed"  # Finished
    CANCELLED = "cancelled"  # Abandoned

    @property
    def is_active(self) -> bool:
        """Check if status counts toward an assignee's workload."""
        return self in {
            AssignmentStatus.ASSIGNED,
            AssignmentStatus.IN_PROGRESS,
            AssignmentStatus.REVIEW,
            AssignmentStatus.REVISION,
        }

    @property
    def is_terminal(self) -> bool:
        """Check if status is terminal (cannot transition further)."""
        return self in {AssignmentStatus.COMPLETED, AssignmentStatus.CANCELLED}

    def can_transition_to(self, target_status: "AssignmentStatus") -> bool:
        """Check if an assignment can move from this status to target status."""
        return target_status in VALID_TRANSITIONS.get(self, frozenset())


VALID_TRANSITIONS: dict[AssignmentStatus, frozenset[AssignmentStatus]] = {
    AssignmentStatus.UNASSIGNED: frozenset(
        {AssignmentStatus.ASSIGNED, AssignmentStatus.CANCELLED}
    ),
    AssignmentStatus.ASSIGNED: frozenset(
        {AssignmentStatus.IN_PROGRESS, AssignmentStatus.CANCELLED}
    ),
    AssignmentStatus.IN_PROGRESS: frozenset(
        {
            AssignmentStatus.REVIEW,
            AssignmentStatus.COMPLETED,
            AssignmentStatus.CANCELLED,
        }
    ),
    AssignmentStatus.REVIEW: frozenset(
        {
            AssignmentStatus.REVISION,
            AssignmentStatus.COMPLETED,
            AssignmentStatus.CANCELLED,
        }
    ),
    AssignmentStatus.REVISION: frozenset(
        {
            AssignmentStatus.IN_PROGRESS,
            AssignmentStatus.REVIEW,
            AssignmentStatus.COMPLETED,
            AssignmentStatus.CANCELLED,
        }
    ),
    AssignmentStatus.COMPLETED: frozenset(),  # Terminal state
    AssignmentStatus.CANCELLED: frozenset(),  # Terminal state
}


class NotificationKind(str, Enum):
    """Kinds of assignment notifications sent to assignees."""

    CREATED = "created"
    UPDATED = "updated"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"


class HistoryAction(str, Enum):
    """Actions recorded in an assignment's history."""

    CREATED = "created"
    ASSIGNED = "assigned"
    REASSIGNED = "reassigned"
    STARTED = "started"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    UPDATED = "updated"


class SortField(str, Enum):
    """Fields a listing can be ordered by."""

    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    DEADLINE = "deadline"
    PRIORITY = "priority"
    TITLE = "title"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class RecommendationType(str, Enum):
    """Kind of action suggested by a team workload review."""

    REDISTRIBUTE = "redistribute"
    HIRE = "hire"
    DEADLINE_ADJUSTMENT = "deadline_adjustment"
