"""
Workload and assignment metrics read models.

Derived, read-only views computed from a set of assignments and a reference
time. Nothing here touches the store; the engine passes the assignments in.
"""

import math
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from pydantic import BaseModel, Field, computed_field

from ....core.config import Settings
from ...shared.base import ensure_aware
from ..entities.assignment import Assignment
from ..value_objects.enums import AssignmentStatus, Priority, RecommendationType

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600


class WorkloadSnapshot(BaseModel):
    """Point-in-time workload of one assignee."""

    assignee_id: str
    active_assignments: int = Field(ge=0, default=0)
    total_workload_percent: float = Field(ge=0.0, default=0.0)
    overdue_assignments: int = Field(ge=0, default=0)
    completed_this_month: int = Field(ge=0, default=0)
    average_completion_days: float = Field(ge=0.0, default=0.0)
    max_workload_percent: float = Field(gt=0.0, default=100.0)

    @property
    def load_fraction(self) -> float:
        """Current load as a fraction of full capacity (0.0 to 1.0)."""
        return min(1.0, self.total_workload_percent / self.max_workload_percent)

    @property
    def availability(self) -> float:
        return 1.0 - self.load_fraction

    @property
    def is_overloaded(self) -> bool:
        """Check if the assignee is at full capacity."""
        return self.total_workload_percent >= self.max_workload_percent


class WorkloadRecommendation(BaseModel):
    """A suggested rebalancing action for a team."""

    type: RecommendationType
    priority: Priority
    description: str
    affected_assignees: list[str] = Field(default_factory=list)


class TeamWorkload(BaseModel):
    """Workload of every assignee working in a department, or in all of them."""

    department: str | None = None
    assignees: list[WorkloadSnapshot] = Field(default_factory=list)
    total_capacity_percent: float = Field(ge=0.0, default=0.0)
    total_load_percent: float = Field(ge=0.0, default=0.0)
    recommendations: list[WorkloadRecommendation] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def utilization_rate(self) -> float:
        if not self.total_capacity_percent:
            return 0.0
        return self.total_load_percent / self.total_capacity_percent


class AssigneeAvailability(BaseModel):
    """
    Hours of open work an assignee has due this week and next week.

    Remaining hours are the unfinished share of each estimate. Work already
    overdue counts toward the current week.
    """

    assignee_id: str
    weekly_capacity_hours: float = Field(gt=0.0)
    current_week_load_hours: float = Field(ge=0.0, default=0.0)
    next_week_load_hours: float = Field(ge=0.0, default=0.0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def available_hours(self) -> float:
        return max(0.0, self.weekly_capacity_hours - self.current_week_load_hours)

    @property
    def is_overbooked(self) -> bool:
        return self.current_week_load_hours > self.weekly_capacity_hours


class AssignmentMetrics(BaseModel):
    """Aggregate statistics over a set of assignments."""

    total: int = Field(ge=0, default=0)
    by_status: dict[str, int] = Field(default_factory=dict)
    by_priority: dict[str, int] = Field(default_factory=dict)
    by_type: dict[str, int] = Field(default_factory=dict)
    overdue: int = Field(ge=0, default=0)
    unassigned: int = Field(ge=0, default=0)
    average_completion_hours: float = Field(ge=0.0, default=0.0)
    completion_rate: float = Field(ge=0.0, le=1.0, default=0.0)
    on_time_rate: float = Field(ge=0.0, le=1.0, default=0.0)


def week_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Monday 00:00 of the week containing ``now`` and of the following week."""
    start = (now - timedelta(days=now.weekday())).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return start, start + timedelta(days=7)


def month_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Start of the calendar month containing ``now`` and start of the next one."""
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


class WorkloadCalculator:
    """
    Computes workload snapshots and metrics under the capped linear load model.

    Each active assignment contributes ``WORKLOAD_PERCENT_PER_TASK`` percent of
    capacity, capped at ``MAX_WORKLOAD_PERCENT``.
    """

    def __init__(self, config: Settings) -> None:
        self._config = config

    @property
    def percent_per_task(self) -> float:
        return self._config.WORKLOAD_PERCENT_PER_TASK

    @property
    def max_percent(self) -> float:
        return self._config.MAX_WORKLOAD_PERCENT

    def workload_percent(self, active_count: int) -> float:
        return min(active_count * self.percent_per_task, self.max_percent)

    def workload_impact(self, snapshot: WorkloadSnapshot) -> float:
        """Load fraction one more task would add, given the cap."""
        headroom = max(0.0, self.max_percent - snapshot.total_workload_percent)
        return min(self.percent_per_task, headroom) / self.max_percent

    def snapshot(
        self, assignee_id: str, assignments: Iterable[Assignment], now: datetime
    ) -> WorkloadSnapshot:
        """
        Build the workload snapshot of one assignee.

        Args:
            assignee_id: Assignee to compute for
            assignments: Assignments bound to that assignee
            now: Reference time for overdue and calendar month checks

        Returns:
            WorkloadSnapshot for the assignee
        """
        now = ensure_aware(now)
        month_start, next_month_start = month_bounds(now)

        active = 0
        overdue = 0
        completed_this_month = 0
        completion_days: list[int] = []

        for assignment in assignments:
            if assignment.assigned_to != assignee_id:
                continue
            if assignment.status.is_active:
                active += 1
                if assignment.deadline < now:
                    overdue += 1
            elif assignment.status == AssignmentStatus.COMPLETED:
                completed_at = assignment.completed_at
                if completed_at and month_start <= completed_at < next_month_start:
                    completed_this_month += 1
                if completed_at and assignment.started_at:
                    elapsed = (completed_at - assignment.started_at).total_seconds()
                    completion_days.append(
                        max(0, math.ceil(elapsed / SECONDS_PER_DAY))
                    )

        average_days = (
            sum(completion_days) / len(completion_days) if completion_days else 0.0
        )

        return WorkloadSnapshot(
            assignee_id=assignee_id,
            active_assignments=active,
            total_workload_percent=self.workload_percent(active),
            overdue_assignments=overdue,
            completed_this_month=completed_this_month,
            average_completion_days=average_days,
            max_workload_percent=self.max_percent,
        )

    def metrics(
        self, assignments: Iterable[Assignment], now: datetime
    ) -> AssignmentMetrics:
        """Aggregate counts and completion statistics."""
        now = ensure_aware(now)
        assignments = list(assignments)

        by_status = Counter(a.status.value for a in assignments)
        by_priority = Counter(a.priority.value for a in assignments)
        by_type = Counter(a.type.value for a in assignments)

        completed = [
            a
            for a in assignments
            if a.status == AssignmentStatus.COMPLETED and a.completed_at is not None
        ]
        durations = [
            (a.completed_at - (a.started_at or a.assigned_at or a.created_at))
            for a in completed
        ]
        average_hours = (
            sum(d.total_seconds() for d in durations)
            / len(durations)
            / SECONDS_PER_HOUR
            if durations
            else 0.0
        )
        on_time = sum(1 for a in completed if a.completed_at <= a.deadline)

        return AssignmentMetrics(
            total=len(assignments),
            by_status=dict(by_status),
            by_priority=dict(by_priority),
            by_type=dict(by_type),
            overdue=sum(1 for a in assignments if a.is_overdue(now)),
            unassigned=by_status.get(AssignmentStatus.UNASSIGNED.value, 0),
            average_completion_hours=max(0.0, average_hours),
            completion_rate=len(completed) / len(assignments) if assignments else 0.0,
            on_time_rate=on_time / len(completed) if completed else 0.0,
        )

    def availability(
        self, assignee_id: str, assignments: Iterable[Assignment], now: datetime
    ) -> AssigneeAvailability:
        """Remaining estimated hours due this week and next week."""
        now = ensure_aware(now)
        _, next_week_start = week_bounds(now)
        week_after_start = next_week_start + timedelta(days=7)

        current_week = 0.0
        next_week = 0.0
        for assignment in assignments:
            if assignment.assigned_to != assignee_id or not assignment.is_active:
                continue
            remaining = assignment.estimated_hours * (
                100 - assignment.progress_percentage
            ) / 100
            if assignment.deadline < next_week_start:
                current_week += remaining
            elif assignment.deadline < week_after_start:
                next_week += remaining

        return AssigneeAvailability(
            assignee_id=assignee_id,
            weekly_capacity_hours=self._config.WEEKLY_CAPACITY_HOURS,
            current_week_load_hours=current_week,
            next_week_load_hours=next_week,
        )

    def team_workload(
        self, snapshots: Sequence[WorkloadSnapshot], department: str | None = None
    ) -> TeamWorkload:
        """Combine assignee snapshots into a team view with recommendations."""
        return TeamWorkload(
            department=department,
            assignees=list(snapshots),
            total_capacity_percent=len(snapshots) * self.max_percent,
            total_load_percent=sum(s.total_workload_percent for s in snapshots),
            recommendations=self.recommendations(snapshots),
        )

    def recommendations(
        self, snapshots: Sequence[WorkloadSnapshot]
    ) -> list[WorkloadRecommendation]:
        """
        Suggest rebalancing actions for a team.

        Assignees at or above ``HIGH_LOAD_THRESHOLD`` are loaded, those at or
        below ``LOW_LOAD_THRESHOLD`` have spare capacity. Loaded assignees
        produce a ``redistribute`` when someone has spare capacity and a
        ``hire`` otherwise. Overdue work produces a ``deadline_adjustment``.
        """
        high = self._config.HIGH_LOAD_THRESHOLD
        low = self._config.LOW_LOAD_THRESHOLD
        loaded = [s for s in snapshots if s.load_fraction >= high]
        spare = [s for s in snapshots if s.load_fraction <= low]
        behind = [s for s in snapshots if s.overdue_assignments]

        recommendations: list[WorkloadRecommendation] = []
        loaded_ids = [s.assignee_id for s in loaded]
        if loaded and spare:
            spare_ids = [s.assignee_id for s in spare]
            recommendations.append(
                WorkloadRecommendation(
                    type=RecommendationType.REDISTRIBUTE,
                    priority=(
                        Priority.HIGH
                        if any(s.is_overloaded for s in loaded)
                        else Priority.MEDIUM
                    ),
                    description=(
                        f"Move work from {', '.join(loaded_ids)} "
                        f"to {', '.join(spare_ids)}"
                    ),
                    affected_assignees=loaded_ids + spare_ids,
                )
            )
        elif loaded:
            recommendations.append(
                WorkloadRecommendation(
                    type=RecommendationType.HIRE,
                    priority=Priority.MEDIUM,
                    description=(
                        "No spare capacity to take work from "
                        f"{', '.join(loaded_ids)}"
                    ),
                    affected_assignees=loaded_ids,
                )
            )

        if behind:
            overdue = sum(s.overdue_assignments for s in behind)
            behind_ids = [s.assignee_id for s in behind]
            recommendations.append(
                WorkloadRecommendation(
                    type=RecommendationType.DEADLINE_ADJUSTMENT,
                    priority=(
                        Priority.HIGH
                        if any(s.assignee_id in loaded_ids for s in behind)
                        else Priority.LOW
                    ),
                    description=(
                        f"Review deadlines of {overdue} overdue assignment(s) "
                        f"held by {', '.join(behind_ids)}"
                    ),
                    affected_assignees=behind_ids,
                )
            )
        return recommendations
