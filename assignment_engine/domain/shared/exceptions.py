"""
Domain Exceptions

Typed errors raised by the assignment engine. Every error carries a
discriminating ``error_type`` plus structured ``details`` naming the
offending field or identifier, so a caller can render a specific message.
"""

from enum import Enum

from pydantic import ValidationError as PydanticValidationError

DetailValue = str | int | float | bool | None


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation_error"
    NOT_FOUND = "not_found_error"
    INVALID_ASSIGNEE = "invalid_assignee_error"
    CLOSED_ASSIGNMENT = "closed_assignment_error"
    INVALID_TRANSITION = "invalid_transition_error"


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, DetailValue] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    @property
    def error_kind(self) -> str:
        return self.error_type.value

    def to_dict(self) -> dict[str, str | dict[str, DetailValue]]:
        """Convert error to dictionary for API responses."""
        return {
            "error_kind": self.error_kind,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when input violates a field rule."""

    def __init__(
        self,
        field_name: str,
        value: DetailValue,
        message: str,
        details: dict[str, DetailValue] | None = None,
    ) -> None:
        self.field_name = field_name
        self.value = value

        details = dict(details or {})
        details.update(
            {
                "field": field_name,
                "value": str(value) if value is not None else None,
            }
        )
        super().__init__(
            f"Validation failed for field '{field_name}': {message}",
            ErrorType.VALIDATION,
            details,
        )

    @classmethod
    def from_pydantic(cls, error: PydanticValidationError) -> "ValidationError":
        """Build a domain error from the first failure of a pydantic error."""
        first = error.errors()[0]
        field_name = ".".join(str(part) for part in first.get("loc", ())) or "input"
        value = first.get("input")
        if value is not None and not isinstance(value, str | int | float | bool):
            value = str(value)
        return cls(
            field_name,
            value,
            first.get("msg", "invalid value"),
            {"error_count": error.error_count()},
        )


class NotFoundError(DomainError):
    """Raised when an assignment id is unknown."""

    def __init__(self, assignment_id: str) -> None:
        super().__init__(
            f"Assignment not found: {assignment_id}",
            ErrorType.NOT_FOUND,
            {"assignment_id": assignment_id, "entity_type": "assignment"},
        )
        self.assignment_id = assignment_id


class InvalidAssigneeError(DomainError):
    """Raised when an assignee is missing, empty or unknown."""

    def __init__(
        self, assignee_id: str | None, assignment_id: str | None = None
    ) -> None:
        if assignee_id:
            message = f"Unknown assignee: {assignee_id}"
        else:
            message = "An assignee is required"
        super().__init__(
            message,
            ErrorType.INVALID_ASSIGNEE,
            {"assignee_id": assignee_id or None, "assignment_id": assignment_id},
        )
        self.assignee_id = assignee_id
        self.assignment_id = assignment_id


class ClosedAssignmentError(DomainError):
    """Raised when mutating a completed or cancelled assignment."""

    def __init__(self, assignment_id: str, status: str) -> None:
        super().__init__(
            f"Assignment {assignment_id} is {status} and can no longer be changed",
            ErrorType.CLOSED_ASSIGNMENT,
            {"assignment_id": assignment_id, "status": status},
        )
        self.assignment_id = assignment_id
        self.status = status


class InvalidTransitionError(DomainError):
    """Raised when the status machine does not allow a transition."""

    def __init__(
        self, assignment_id: str, current_status: str, requested_status: str
    ) -> None:
        super().__init__(
            f"Cannot change assignment {assignment_id} from {current_status} "
            f"to {requested_status}",
            ErrorType.INVALID_TRANSITION,
            {
                "assignment_id": assignment_id,
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )
        self.assignment_id = assignment_id
        self.current_status = current_status
        self.requested_status = requested_status
