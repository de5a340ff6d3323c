"""
Domain Services Module

Exports the assignment engine, candidate ranking and collaborator ports.
"""

from .assignment_engine import AssignmentEngine
from .candidate_ranker import CandidateRanker, Suggestion
from .notification_handlers import HistoryRecorder, NotificationHandler
from .ports import (
    AssigneeDirectory,
    Clock,
    IdentityGenerator,
    NotificationSink,
    NullNotificationSink,
    StaticAssigneeDirectory,
    SystemClock,
    UUIDIdentityGenerator,
)
from .results import AssignmentPage, BulkUpdateResult, DeadlineAlert

__all__ = [
    "AssigneeDirectory",
    "AssignmentEngine",
    "AssignmentPage",
    "BulkUpdateResult",
    "CandidateRanker",
    "Clock",
    "DeadlineAlert",
    "HistoryRecorder",
    "IdentityGenerator",
    "NotificationHandler",
    "NotificationSink",
    "NullNotificationSink",
    "StaticAssigneeDirectory",
    "Suggestion",
    "SystemClock",
    "UUIDIdentityGenerator",
]
