"""In-process assignment lifecycle, workload and suggestion engine."""

from .domain.assignments.entities import Assignment
from .domain.assignments.read_models import (
    AssigneeAvailability,
    AssignmentMetrics,
    TeamWorkload,
    WorkloadRecommendation,
    WorkloadSnapshot,
)
from .domain.assignments.services import (
    AssigneeDirectory,
    AssignmentEngine,
    AssignmentPage,
    BulkUpdateResult,
    Clock,
    DeadlineAlert,
    IdentityGenerator,
    NotificationSink,
    StaticAssigneeDirectory,
    Suggestion,
)
from .domain.assignments.value_objects import (
    AssignmentComment,
    AssignmentFilter,
    AssignmentHistoryEntry,
    AssignmentPatch,
    AssignmentStatus,
    AssignmentType,
    Candidate,
    NewAssignment,
    NotificationKind,
    Priority,
    RecommendationType,
    SortField,
    SortOrder,
)
from .domain.shared.exceptions import (
    ClosedAssignmentError,
    DomainError,
    ErrorType,
    InvalidAssigneeError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "AssigneeAvailability",
    "AssigneeDirectory",
    "Assignment",
    "AssignmentComment",
    "AssignmentEngine",
    "AssignmentFilter",
    "AssignmentHistoryEntry",
    "AssignmentMetrics",
    "AssignmentPage",
    "AssignmentPatch",
    "AssignmentStatus",
    "AssignmentType",
    "BulkUpdateResult",
    "Candidate",
    "Clock",
    "ClosedAssignmentError",
    "DeadlineAlert",
    "DomainError",
    "ErrorType",
    "IdentityGenerator",
    "InvalidAssigneeError",
    "InvalidTransitionError",
    "NewAssignment",
    "NotFoundError",
    "NotificationKind",
    "NotificationSink",
    "Priority",
    "RecommendationType",
    "SortField",
    "SortOrder",
    "StaticAssigneeDirectory",
    "Suggestion",
    "TeamWorkload",
    "ValidationError",
    "WorkloadRecommendation",
    "WorkloadSnapshot",
]
