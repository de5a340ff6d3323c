"""Input value objects for assignment commands."""

from datetime import datetime

from pydantic import Field, field_validator, model_validator

from ...shared.base import ValueObject, ensure_aware
from .enums import AssignmentType, Priority


def _clean_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("title must not be empty")
    return value


def _clean_optional_id(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip()


class NewAssignment(ValueObject):
    """Data required to create an assignment."""

    title: str = Field(max_length=200)
    description: str = Field(default="", max_length=2000)
    type: AssignmentType = AssignmentType.DESIGN
    priority: Priority = Priority.MEDIUM
    estimated_hours: float = Field(default=0.0, ge=0)
    deadline: datetime
    assigned_to: str | None = None
    assigned_by: str | None = None
    required_skills: frozenset[str] = Field(default_factory=frozenset)
    department: str = Field(default="general", min_length=1, max_length=50)
    tags: tuple[str, ...] = ()
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("deadline")
    @classmethod
    def validate_deadline(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @field_validator("assigned_to")
    @classmethod
    def strip_assignee(cls, v: str | None) -> str | None:
        return _clean_optional_id(v)


class AssignmentPatch(ValueObject):
    """
    Field changes applied by a bulk update.

    Only fields explicitly set are applied. ``assigned_to`` is routed through
    the same rules as a single assignment.
    """

    title: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    type: AssignmentType | None = None
    priority: Priority | None = None
    deadline: datetime | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    department: str | None = Field(default=None, min_length=1, max_length=50)
    tags: tuple[str, ...] | None = None
    assigned_to: str | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        return None if v is None else _clean_title(v)

    @field_validator("deadline")
    @classmethod
    def validate_deadline(cls, v: datetime | None) -> datetime | None:
        return None if v is None else ensure_aware(v)

    @field_validator("assigned_to")
    @classmethod
    def strip_assignee(cls, v: str | None) -> str | None:
        return _clean_optional_id(v)

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "AssignmentPatch":
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def field_changes(self) -> dict:
        """Plain field changes, excluding the assignee."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "assigned_to"
        }

    @property
    def changes_assignee(self) -> bool:
        return "assigned_to" in self.model_fields_set
