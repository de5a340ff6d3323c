"""Listing filter for assignments."""

from datetime import datetime

from pydantic import Field, field_validator

from ...shared.base import ValueObject, ensure_aware
from .enums import AssignmentStatus, AssignmentType, Priority


class AssignmentFilter(ValueObject):
    """
    AND-combined predicate over assignments.

    Absent (``None``/empty) fields impose no constraint. ``unassigned`` and
    ``overdue`` only constrain when true.
    """

    status: frozenset[AssignmentStatus] | None = None
    type: frozenset[AssignmentType] | None = None
    priority: frozenset[Priority] | None = None
    assigned_to: frozenset[str] | None = None
    department: frozenset[str] | None = None
    unassigned: bool = False
    overdue: bool = False
    search: str | None = Field(default=None, max_length=200)
    assigned_after: datetime | None = None
    assigned_before: datetime | None = None

    @field_validator("search")
    @classmethod
    def normalize_search(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().lower()
        return v or None

    @field_validator("assigned_after", "assigned_before")
    @classmethod
    def make_aware(cls, v: datetime | None) -> datetime | None:
        return None if v is None else ensure_aware(v)
