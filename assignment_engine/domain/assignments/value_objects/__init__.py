"""
Value Objects Module

Exports enums and immutable input/query objects for the assignments domain.
"""

from .candidate import Candidate
from .commands import AssignmentPatch, NewAssignment
from .enums import (
    AssignmentStatus,
    AssignmentType,
    HistoryAction,
    NotificationKind,
    Priority,
    RecommendationType,
    SortField,
    SortOrder,
)
from .filters import AssignmentFilter
from .history import AssignmentComment, AssignmentHistoryEntry

__all__ = [
    "AssignmentComment",
    "AssignmentFilter",
    "AssignmentHistoryEntry",
    "AssignmentPatch",
    "AssignmentStatus",
    "AssignmentType",
    "Candidate",
    "HistoryAction",
    "NewAssignment",
    "NotificationKind",
    "Priority",
    "RecommendationType",
    "SortField",
    "SortOrder",
]
