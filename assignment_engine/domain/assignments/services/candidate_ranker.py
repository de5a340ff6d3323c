"""
CandidateRanker Domain Service

Ranks candidate assignees for an assignment by skill match and availability.
"""

from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from ....core.config import Settings
from ...shared.base import DomainService
from ..entities.assignment import Assignment
from ..read_models.workload import WorkloadCalculator, WorkloadSnapshot
from ..value_objects.candidate import Candidate


class Suggestion(BaseModel):
    """A ranked candidate for an assignment."""

    assignment_id: str
    assignee_id: str
    assignee_name: str
    confidence: float = Field(ge=0.0, le=1.0)
    reasons: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    estimated_completion: datetime
    workload_impact: float = Field(ge=0.0, le=1.0)
    skill_match: float = Field(ge=0.0, le=1.0)
    availability_score: float = Field(ge=0.0, le=1.0)


def _percent(value: float) -> int:
    return round(value * 100)


class CandidateRanker(DomainService):
    """
    Domain service scoring candidates against an assignment.

    confidence = (SKILL_MATCH_WEIGHT * skill_match
                  + AVAILABILITY_WEIGHT * availability) / (sum of weights)
    """

    def __init__(self, config: Settings, calculator: WorkloadCalculator) -> None:
        self._config = config
        self._calculator = calculator

    def rank(
        self,
        assignment: Assignment,
        candidates: Sequence[Candidate],
        workloads: Mapping[str, WorkloadSnapshot],
        now: datetime,
    ) -> list[Suggestion]:
        """
        Score and order candidates.

        Args:
            assignment: Assignment to staff
            candidates: Candidate pool, in caller order
            workloads: Workload snapshot per candidate assignee id
            now: Reference time for completion estimates

        Returns:
            Suggestions sorted by confidence, then availability (both
            descending); equal candidates keep pool order
        """
        suggestions = [
            self.score(
                assignment,
                candidate,
                workloads.get(candidate.assignee_id)
                or self._calculator.snapshot(candidate.assignee_id, (), now),
                now,
            )
            for candidate in candidates
        ]
        suggestions.sort(key=lambda s: (-s.confidence, -s.availability_score))
        return suggestions

    def score(
        self,
        assignment: Assignment,
        candidate: Candidate,
        workload: WorkloadSnapshot,
        now: datetime,
    ) -> Suggestion:
        skill_match = self.skill_match(assignment, candidate)
        availability = workload.availability
        estimated_completion = self.estimate_completion(
            now, assignment.estimated_hours, availability
        )
        reasons, concerns = self._explain(
            assignment, candidate, workload, skill_match, estimated_completion
        )

        return Suggestion(
            assignment_id=assignment.id,
            assignee_id=candidate.assignee_id,
            assignee_name=candidate.display_name,
            confidence=self.confidence(skill_match, availability),
            reasons=reasons,
            concerns=concerns,
            estimated_completion=estimated_completion,
            workload_impact=self._calculator.workload_impact(workload),
            skill_match=skill_match,
            availability_score=availability,
        )

    def skill_match(self, assignment: Assignment, candidate: Candidate) -> float:
        """
        Skill match score (0.0 to 1.0).

        An explicit score on the candidate wins; otherwise the share of the
        assignment's required skills the candidate has. Without required
        skills the configured default applies.
        """
        if candidate.skill_match is not None:
            return candidate.skill_match
        if not assignment.required_skills:
            return self._config.DEFAULT_SKILL_MATCH

        covered = assignment.required_skills & candidate.skills
        return len(covered) / len(assignment.required_skills)

    def confidence(self, skill_match: float, availability: float) -> float:
        skill_weight = self._config.SKILL_MATCH_WEIGHT
        availability_weight = self._config.AVAILABILITY_WEIGHT
        weighted = skill_weight * skill_match + availability_weight * availability
        return min(1.0, max(0.0, weighted / (skill_weight + availability_weight)))

    def estimate_completion(
        self, now: datetime, estimated_hours: float, availability: float
    ) -> datetime:
        effective = max(availability, self._config.MIN_AVAILABILITY_FOR_ESTIMATE)
        days = estimated_hours / (self._config.WORKING_HOURS_PER_DAY * effective)
        return now + timedelta(days=days)

    def _explain(
        self,
        assignment: Assignment,
        candidate: Candidate,
        workload: WorkloadSnapshot,
        skill_match: float,
        estimated_completion: datetime,
    ) -> tuple[list[str], list[str]]:
        config = self._config
        reasons: list[str] = []
        concerns: list[str] = []

        if skill_match >= config.STRONG_SKILL_MATCH_THRESHOLD:
            reasons.append(f"Strong skill match ({_percent(skill_match)}%)")
        elif skill_match < config.LOW_SKILL_MATCH_THRESHOLD:
            concerns.append(f"Low skill match ({_percent(skill_match)}%)")

        if candidate.skill_match is None and assignment.required_skills:
            missing = sorted(assignment.required_skills - candidate.skills)
            if missing:
                concerns.append("Missing skills: " + ", ".join(missing))
            else:
                reasons.append("Has all required skills")

        load = workload.load_fraction
        if workload.active_assignments == 0:
            reasons.append("No active assignments")
        elif load >= config.HIGH_LOAD_THRESHOLD:
            concerns.append(f"High current workload ({_percent(load)}%)")
        else:
            reasons.append(f"Current workload at {_percent(load)}%")

        if workload.overdue_assignments:
            concerns.append(
                f"Has {workload.overdue_assignments} overdue assignment(s)"
            )
        if workload.completed_this_month:
            reasons.append(
                f"Completed {workload.completed_this_month} assignment(s) this month"
            )

        if estimated_completion > assignment.deadline:
            concerns.append("Estimated completion is after the deadline")

        return reasons, concerns
