from .workload import (
    AssigneeAvailability,
    AssignmentMetrics,
    TeamWorkload,
    WorkloadCalculator,
    WorkloadRecommendation,
    WorkloadSnapshot,
)

__all__ = [
    "AssigneeAvailability",
    "AssignmentMetrics",
    "TeamWorkload",
    "WorkloadCalculator",
    "WorkloadRecommendation",
    "WorkloadSnapshot",
]
