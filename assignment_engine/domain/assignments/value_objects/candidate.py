"""Candidate assignee supplied to the suggestion ranking."""

from pydantic import Field

from ...shared.base import ValueObject


class Candidate(ValueObject):
    """A person who could take an assignment."""

    assignee_id: str = Field(min_length=1)
    name: str = ""
    skills: frozenset[str] = Field(default_factory=frozenset)
    # Externally computed match overrides the skill coverage calculation
    skill_match: float | None = Field(default=None, ge=0.0, le=1.0)

    @property
    def display_name(self) -> str:
        return self.name or self.assignee_id
