"""
Assignment Engine

Public entry point of the library. Owns an assignment store and applies the
lifecycle rules, workload model and candidate ranking on top of it.

Every mutating operation loads a private copy of the assignment, mutates it
under the engine lock and saves it. History is recorded from the collected
domain events before the lock is released; notifications are sent after.
"""

import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ....core.config import Settings, settings
from ....core.observability import get_logger, metrics_enabled, monitor_operation
from ...shared.base import DomainEvent, ensure_aware
from ...shared.exceptions import (
    DomainError,
    InvalidAssigneeError,
    NotFoundError,
    ValidationError,
)
from ..entities.assignment import Assignment
from ..events import DomainEventDispatcher
from ..read_models.workload import (
    AssigneeAvailability,
    AssignmentMetrics,
    TeamWorkload,
    WorkloadCalculator,
    WorkloadSnapshot,
)
from ..repositories import AssignmentRepository, InMemoryAssignmentRepository
from ..value_objects.candidate import Candidate
from ..value_objects.commands import AssignmentPatch, NewAssignment
from ..value_objects.enums import (
    AssignmentStatus,
    NotificationKind,
    SortField,
    SortOrder,
)
from ..value_objects.filters import AssignmentFilter
from ..value_objects.history import AssignmentComment, AssignmentHistoryEntry
from .candidate_ranker import CandidateRanker, Suggestion
from .notification_handlers import HistoryRecorder, NotificationHandler
from .ports import (
    AssigneeDirectory,
    Clock,
    IdentityGenerator,
    NotificationSink,
    NullNotificationSink,
    SystemClock,
    UUIDIdentityGenerator,
)
from .results import AssignmentPage, BulkUpdateResult, DeadlineAlert

logger = get_logger(__name__)


@contextmanager
def domain_validation():
    """Re-raise pydantic validation failures as the domain ValidationError."""
    try:
        yield
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


def _coerce(model: type[BaseModel], value: Any) -> Any:
    if isinstance(value, model):
        return value
    with domain_validation():
        return model.model_validate(value)


def _coerce_enum(enum_type: type, value: Any, field_name: str) -> Any:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError as e:
        raise ValidationError(
            field_name, str(value), f"must be one of {[m.value for m in enum_type]}"
        ) from e


_SORT_KEYS: dict[SortField, Callable[[Assignment], Any]] = {
    SortField.CREATED_AT: lambda a: a.created_at,
    SortField.UPDATED_AT: lambda a: a.updated_at,
    SortField.DEADLINE: lambda a: a.deadline,
    SortField.PRIORITY: lambda a: a.priority.rank,
    SortField.TITLE: lambda a: a.title.lower(),
}


class AssignmentEngine:
    """
    In-process assignment lifecycle, workload and suggestion engine.

    Collaborators default to an in-memory store, the system clock, UUID ids,
    a no-op notification sink and no assignee directory (any non-empty
    assignee id is accepted).
    """

    def __init__(
        self,
        repository: AssignmentRepository | None = None,
        notification_sink: NotificationSink | None = None,
        clock: Clock | None = None,
        id_generator: IdentityGenerator | None = None,
        assignee_directory: AssigneeDirectory | None = None,
        config: Settings | None = None,
    ) -> None:
        self._config = config or settings
        self._repository = repository or InMemoryAssignmentRepository()
        self._clock = clock or SystemClock()
        self._ids = id_generator or UUIDIdentityGenerator()
        self._directory = assignee_directory
        self._lock = threading.RLock()

        self._calculator = WorkloadCalculator(self._config)
        self._ranker = CandidateRanker(self._config, self._calculator)

        self._history = HistoryRecorder()
        self._comments: dict[str, list[AssignmentComment]] = {}
        self._notifications = NotificationHandler(
            notification_sink or NullNotificationSink(),
            record_metrics=metrics_enabled(self._config),
        )
        # history is written under the lock, notifications outside it
        self._recorders = DomainEventDispatcher()
        self._recorders.register_handler(self._history)
        self._dispatcher = DomainEventDispatcher()
        self._dispatcher.register_handler(self._notifications)

    @property
    def config(self) -> Settings:
        return self._config

    # Lifecycle

    def init(self, seed_data: Iterable[Assignment] | None = None) -> None:
        """Replace the store contents with ``seed_data`` and clear history."""
        with self._lock:
            self._repository.init(seed_data)
            self._history.clear()
            self._comments.clear()
        logger.info("Assignment engine initialized")

    def dispose(self) -> None:
        with self._lock:
            self._repository.dispose()
            self._history.clear()
            self._comments.clear()
        logger.info("Assignment engine disposed")

    # Commands

    @monitor_operation("create")
    def create(self, data: NewAssignment | Mapping[str, Any]) -> Assignment:
        """
        Create an assignment.

        The assignment starts ``assigned`` when ``assigned_to`` is given and
        ``unassigned`` otherwise.

        Raises:
            ValidationError: If the input is invalid
            InvalidAssigneeError: If the named assignee is empty or unknown
        """
        data = _coerce(NewAssignment, data)
        if data.assigned_to is not None:
            self._check_assignee(data.assigned_to)

        with self._lock:
            now = self._now()
            with domain_validation():
                assignment = Assignment.create(
                    self._ids.new_id(),
                    data,
                    at=now,
                    actor=data.assigned_by or self._config.DEFAULT_ACTOR,
                )
            events = assignment.pull_domain_events()
            self._repository.save(assignment)
            self._recorders.dispatch_all(events)

        logger.info(
            "Assignment created",
            assignment_id=assignment.id,
            status=assignment.status.value,
            assigned_to=assignment.assigned_to,
        )
        self._dispatcher.dispatch_all(events)
        return assignment

    @monitor_operation("assign_to")
    def assign_to(self, assignment_id: str, assignee_id: str) -> Assignment:
        """
        Bind an assignee, moving ``unassigned`` to ``assigned``.

        Raises:
            NotFoundError: If the assignment does not exist
            ClosedAssignmentError: If the assignment is completed or cancelled
            InvalidAssigneeError: If the assignee is empty or unknown
        """

        def mutation(assignment: Assignment, now: datetime) -> None:
            assignment.ensure_open()
            self._check_assignee(assignee_id, assignment.id)
            assignment.assign(assignee_id.strip(), now, self._config.DEFAULT_ACTOR)

        return self._mutate(assignment_id, mutation)

    @monitor_operation("update_status")
    def update_status(
        self,
        assignment_id: str,
        new_status: AssignmentStatus | str,
        progress_percentage: int | None = None,
        assignee_id: str | None = None,
        actual_hours: float | None = None,
    ) -> Assignment:
        """
        Move an assignment through its status machine.

        Args:
            assignment_id: Assignment to change
            new_status: Requested status
            progress_percentage: Optional progress within [0, 100]; may only
                decrease when entering ``revision``
            assignee_id: Required when moving ``unassigned -> assigned``
            actual_hours: Recorded on completion only

        Raises:
            NotFoundError: If the assignment does not exist
            ClosedAssignmentError: If the assignment is completed or cancelled
            InvalidTransitionError: If the status machine forbids the move
            InvalidAssigneeError: If assigning without a valid assignee
            ValidationError: If progress or hours are invalid
        """
        new_status = _coerce_enum(AssignmentStatus, new_status, "status")

        def mutation(assignment: Assignment, now: datetime) -> None:
            assignment.ensure_open()
            if new_status == AssignmentStatus.ASSIGNED and assignee_id:
                self._check_assignee(assignee_id, assignment.id)
            assignment.transition_to(
                new_status,
                now,
                self._config.DEFAULT_ACTOR,
                progress_percentage=progress_percentage,
                assignee_id=assignee_id.strip() if assignee_id else assignee_id,
                actual_hours=actual_hours,
            )

        assignment = self._mutate(assignment_id, mutation)
        logger.info(
            "Assignment status changed",
            assignment_id=assignment.id,
            status=assignment.status.value,
        )
        return assignment

    @monitor_operation("update_progress")
    def update_progress(
        self, assignment_id: str, progress_percentage: int
    ) -> Assignment:
        """Record progress without changing status."""
        return self._mutate(
            assignment_id,
            lambda assignment, now: assignment.update_progress(
                progress_percentage, now, self._config.DEFAULT_ACTOR
            ),
        )

    @monitor_operation("bulk_update")
    def bulk_update(
        self, assignment_ids: Sequence[str], patch: AssignmentPatch | Mapping[str, Any]
    ) -> BulkUpdateResult:
        """
        Apply one patch to many assignments, best effort.

        Missing and closed assignments, and assignments the patch cannot be
        applied to, are skipped and reported in ``skipped_ids``. The patch
        itself is validated once before anything is touched.

        Raises:
            ValidationError: If the patch is invalid
            InvalidAssigneeError: If the patch names an unknown assignee
        """
        patch = _coerce(AssignmentPatch, patch)
        changes = patch.field_changes()
        if patch.changes_assignee:
            self._check_assignee(patch.assigned_to)

        result = BulkUpdateResult()
        events: list[DomainEvent] = []

        with self._lock:
            now = self._now()
            for assignment_id in assignment_ids:
                assignment = self._repository.find_by_id(assignment_id)
                if assignment is None or assignment.is_closed:
                    result.skipped_ids.append(assignment_id)
                    continue

                try:
                    with domain_validation():
                        if (
                            patch.changes_assignee
                            and patch.assigned_to != assignment.assigned_to
                        ):
                            assignment.assign(
                                patch.assigned_to, now, self._config.DEFAULT_ACTOR
                            )
                        assignment.apply_changes(
                            changes, now, self._config.DEFAULT_ACTOR
                        )
                except DomainError as e:
                    logger.warning(
                        "Skipping assignment in bulk update",
                        assignment_id=assignment_id,
                        error_kind=e.error_kind,
                        error=e.message,
                    )
                    result.skipped_ids.append(assignment_id)
                    continue

                events.extend(assignment.pull_domain_events())
                self._repository.save(assignment)
                result.updated.append(assignment)

            self._recorders.dispatch_all(events)

        logger.info(
            "Bulk update applied",
            updated=len(result.updated),
            skipped=len(result.skipped_ids),
        )
        self._dispatcher.dispatch_all(events)
        return result

    @monitor_operation("delete")
    def delete(self, assignment_id: str) -> None:
        """Remove an assignment, its history and comments. Idempotent."""
        with self._lock:
            removed = self._repository.delete(assignment_id)
            self._history.forget(assignment_id)
            self._comments.pop(assignment_id, None)
        if removed:
            logger.info("Assignment deleted", assignment_id=assignment_id)

    @monitor_operation("add_comment")
    def add_comment(
        self,
        assignment_id: str,
        content: str,
        author_id: str | None = None,
        is_internal: bool = False,
    ) -> AssignmentComment:
        """
        Attach a comment to an assignment. Closed assignments accept comments.

        Raises:
            NotFoundError: If the assignment does not exist
            ValidationError: If the content is empty or too long
        """
        with self._lock:
            self._load(assignment_id)
            comments = self._comments.setdefault(assignment_id, [])
            with domain_validation():
                comment = AssignmentComment(
                    id=f"{assignment_id}_comment_{len(comments) + 1:03d}",
                    assignment_id=assignment_id,
                    author_id=author_id or self._config.DEFAULT_ACTOR,
                    content=content,
                    created_at=self._now(),
                    is_internal=is_internal,
                )
            comments.append(comment)

        logger.info(
            "Assignment comment added",
            assignment_id=assignment_id,
            comment_id=comment.id,
            is_internal=is_internal,
        )
        return comment

    # Queries

    @monitor_operation("get")
    def get(self, assignment_id: str) -> Assignment:
        with self._lock:
            return self._load(assignment_id)

    @monitor_operation("get_history")
    def get_history(self, assignment_id: str) -> list[AssignmentHistoryEntry]:
        """Recorded actions of an assignment, oldest first."""
        with self._lock:
            self._load(assignment_id)
            return self._history.history_for(assignment_id)

    @monitor_operation("get_comments")
    def get_comments(
        self, assignment_id: str, include_internal: bool = True
    ) -> list[AssignmentComment]:
        """Comments of an assignment, oldest first."""
        with self._lock:
            self._load(assignment_id)
            comments = list(self._comments.get(assignment_id, ()))
        if include_internal:
            return comments
        return [c for c in comments if not c.is_internal]

    @monitor_operation("list_filtered")
    def list_filtered(
        self,
        filters: AssignmentFilter | Mapping[str, Any] | None = None,
        page: int = 1,
        page_size: int | None = None,
        sort_by: SortField | str = SortField.CREATED_AT,
        sort_order: SortOrder | str = SortOrder.DESC,
    ) -> AssignmentPage:
        """
        Filter, sort and paginate assignments.

        Filter clauses are AND-combined. Ties in the sort key keep the most
        recently inserted assignment first when descending and the oldest
        first when ascending. Pages are 1-indexed; a page outside
        ``1..pages`` is empty.

        Raises:
            ValidationError: If the filter, page size or sort is invalid
        """
        criteria = _coerce(AssignmentFilter, filters or {})
        sort_by = _coerce_enum(SortField, sort_by, "sort_by")
        sort_order = _coerce_enum(SortOrder, sort_order, "sort_order")
        if page_size is None:
            page_size = self._config.DEFAULT_PAGE_SIZE
        if not 1 <= page_size <= self._config.MAX_PAGE_SIZE:
            raise ValidationError(
                "page_size",
                page_size,
                f"must be between 1 and {self._config.MAX_PAGE_SIZE}",
            )

        with self._lock:
            now = self._now()
            assignments = self._repository.find_all()

        descending = sort_order == SortOrder.DESC
        if descending:
            assignments.reverse()
        matches = [a for a in assignments if self._matches(a, criteria, now)]
        matches.sort(key=_SORT_KEYS[sort_by], reverse=descending)

        if page >= 1:
            start = (page - 1) * page_size
            items = matches[start : start + page_size]
        else:
            items = []

        return AssignmentPage(
            items=items, total=len(matches), page=page, page_size=page_size
        )

    @monitor_operation("compute_workload")
    def compute_workload(
        self, assignee_id: str, now: datetime | None = None
    ) -> WorkloadSnapshot:
        """Workload snapshot of one assignee at ``now`` (defaults to the clock)."""
        now = ensure_aware(now) if now is not None else self._now()
        with self._lock:
            assignments = self._repository.find_by_assignee(assignee_id)
        return self._calculator.snapshot(assignee_id, assignments, now)

    @monitor_operation("suggest_candidates")
    def suggest_candidates(
        self,
        assignment_id: str,
        candidate_pool: Sequence[Candidate | Mapping[str, Any]],
        now: datetime | None = None,
    ) -> list[Suggestion]:
        """
        Rank candidates for an assignment.

        Raises:
            NotFoundError: If the assignment does not exist
            ValidationError: If a candidate is malformed
        """
        now = ensure_aware(now) if now is not None else self._now()
        candidates = [_coerce(Candidate, c) for c in candidate_pool]

        with self._lock:
            assignment = self._load(assignment_id)
            if not candidates:
                return []
            workloads = {
                c.assignee_id: self._calculator.snapshot(
                    c.assignee_id,
                    self._repository.find_by_assignee(c.assignee_id),
                    now,
                )
                for c in candidates
            }

        return self._ranker.rank(assignment, candidates, workloads, now)

    @monitor_operation("compute_metrics")
    def compute_metrics(
        self, now: datetime | None = None, department: str | None = None
    ) -> AssignmentMetrics:
        """Aggregate statistics, optionally for one department."""
        now = ensure_aware(now) if now is not None else self._now()
        with self._lock:
            assignments = self._repository.find_all()
        if department is not None:
            assignments = [a for a in assignments if a.department == department]
        return self._calculator.metrics(assignments, now)

    @monitor_operation("compute_team_workload")
    def compute_team_workload(
        self, department: str | None = None, now: datetime | None = None
    ) -> TeamWorkload:
        """
        Workload of everyone holding an assignment in ``department``.

        Each assignee's snapshot covers all of their assignments, including
        those in other departments. Without a department every assignee is
        included.
        """
        now = ensure_aware(now) if now is not None else self._now()
        with self._lock:
            assignments = self._repository.find_all()

        scope = (
            assignments
            if department is None
            else [a for a in assignments if a.department == department]
        )
        assignee_ids = sorted({a.assigned_to for a in scope if a.assigned_to})
        snapshots = [
            self._calculator.snapshot(assignee_id, assignments, now)
            for assignee_id in assignee_ids
        ]
        return self._calculator.team_workload(snapshots, department)

    @monitor_operation("compute_availability")
    def compute_availability(
        self, assignee_id: str, now: datetime | None = None
    ) -> AssigneeAvailability:
        """Hours of open work the assignee has due this week and next week."""
        now = ensure_aware(now) if now is not None else self._now()
        with self._lock:
            assignments = self._repository.find_by_assignee(assignee_id)
        return self._calculator.availability(assignee_id, assignments, now)

    @monitor_operation("check_deadlines")
    def check_deadlines(self, now: datetime | None = None) -> list[DeadlineAlert]:
        """
        Notify assignees of open assignments that are overdue or due soon.

        Does not change any assignment.
        """
        now = ensure_aware(now) if now is not None else self._now()
        horizon = now + timedelta(hours=self._config.DUE_SOON_HOURS)

        with self._lock:
            assignments = self._repository.find_all()

        alerts: list[DeadlineAlert] = []
        for assignment in assignments:
            if assignment.assigned_to is None or assignment.is_closed:
                continue
            if assignment.deadline < now:
                kind = NotificationKind.OVERDUE
            elif assignment.deadline <= horizon:
                kind = NotificationKind.DUE_SOON
            else:
                continue

            delivered = self._notifications.notify(
                assignment.assigned_to, assignment.title, assignment.id, kind
            )
            alerts.append(
                DeadlineAlert(
                    assignment_id=assignment.id,
                    assignee_id=assignment.assigned_to,
                    title=assignment.title,
                    kind=kind,
                    deadline=assignment.deadline,
                    delivered=delivered,
                )
            )
        return alerts

    # Internals

    def _now(self) -> datetime:
        return ensure_aware(self._clock.now())

    def _load(self, assignment_id: str) -> Assignment:
        assignment = self._repository.find_by_id(assignment_id)
        if assignment is None:
            raise NotFoundError(assignment_id)
        return assignment

    def _check_assignee(
        self, assignee_id: str | None, assignment_id: str | None = None
    ) -> None:
        if not assignee_id or not assignee_id.strip():
            raise InvalidAssigneeError(assignee_id, assignment_id)
        if self._directory is not None and not self._directory.exists(
            assignee_id.strip()
        ):
            raise InvalidAssigneeError(assignee_id, assignment_id)

    def _mutate(
        self,
        assignment_id: str,
        mutation: Callable[[Assignment, datetime], None],
    ) -> Assignment:
        with self._lock:
            assignment = self._load(assignment_id)
            with domain_validation():
                mutation(assignment, self._now())
            events = assignment.pull_domain_events()
            self._repository.save(assignment)
            self._recorders.dispatch_all(events)

        self._dispatcher.dispatch_all(events)
        return assignment

    @staticmethod
    def _matches(
        assignment: Assignment, criteria: AssignmentFilter, now: datetime
    ) -> bool:
        if criteria.status and assignment.status not in criteria.status:
            return False
        if criteria.type and assignment.type not in criteria.type:
            return False
        if criteria.priority and assignment.priority not in criteria.priority:
            return False
        if criteria.assigned_to and assignment.assigned_to not in criteria.assigned_to:
            return False
        if criteria.department and assignment.department not in criteria.department:
            return False
        if criteria.unassigned and assignment.assigned_to is not None:
            return False
        if criteria.overdue and not assignment.is_overdue(now):
            return False
        if criteria.search and not assignment.matches_search(criteria.search):
            return False
        if criteria.assigned_after or criteria.assigned_before:
            if assignment.assigned_at is None:
                return False
            if (
                criteria.assigned_after
                and assignment.assigned_at < criteria.assigned_after
            ):
                return False
            if (
                criteria.assigned_before
                and assignment.assigned_at > criteria.assigned_before
            ):
                return False
        return True
