"""Assignment history entries and comments."""

from datetime import datetime

from pydantic import Field, field_validator

from ...shared.base import ValueObject
from .enums import AssignmentStatus, HistoryAction


class AssignmentHistoryEntry(ValueObject):
    """One recorded action on an assignment."""

    assignment_id: str
    action: HistoryAction
    performed_by: str
    performed_at: datetime
    details: str = ""
    previous_status: AssignmentStatus | None = None
    new_status: AssignmentStatus | None = None


class AssignmentComment(ValueObject):
    """A note left on an assignment. Internal comments are hidden from assignees."""

    id: str
    assignment_id: str
    author_id: str = Field(min_length=1)
    content: str = Field(max_length=2000)
    created_at: datetime
    is_internal: bool = False

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("comment must not be empty")
        return v
