"""Result objects returned by engine operations."""

import math
from datetime import datetime

from pydantic import BaseModel, Field, computed_field

from ..entities.assignment import Assignment
from ..value_objects.enums import NotificationKind


class AssignmentPage(BaseModel):
    """One page of a filtered, sorted listing."""

    items: list[Assignment] = Field(default_factory=list)
    total: int = Field(ge=0, default=0)
    page: int = 1
    page_size: int = Field(ge=1)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.page_size)

    @property
    def has_next(self) -> bool:
        return 1 <= self.page < self.pages


class BulkUpdateResult(BaseModel):
    """Outcome of a best-effort batch update."""

    updated: list[Assignment] = Field(default_factory=list)
    skipped_ids: list[str] = Field(default_factory=list)


class DeadlineAlert(BaseModel):
    """A ``due_soon`` or ``overdue`` notification produced by a deadline check."""

    assignment_id: str
    assignee_id: str
    title: str
    kind: NotificationKind
    deadline: datetime
    delivered: bool = True
