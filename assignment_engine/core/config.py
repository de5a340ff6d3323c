from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ASSIGNMENT_ENGINE_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    ENVIRONMENT: Literal["local", "testing", "staging", "production"] = "local"

    # Observability Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"
    ENABLE_METRICS: bool = True

    # Workload model: each active assignment adds a fixed share of capacity
    WORKLOAD_PERCENT_PER_TASK: float = 25.0
    MAX_WORKLOAD_PERCENT: float = 100.0

    # Candidate ranking
    SKILL_MATCH_WEIGHT: float = 0.6
    AVAILABILITY_WEIGHT: float = 0.4
    DEFAULT_SKILL_MATCH: float = 1.0
    STRONG_SKILL_MATCH_THRESHOLD: float = 0.8
    LOW_SKILL_MATCH_THRESHOLD: float = 0.5
    HIGH_LOAD_THRESHOLD: float = 0.75
    LOW_LOAD_THRESHOLD: float = 0.25
    WORKING_HOURS_PER_DAY: float = 8.0
    MIN_AVAILABILITY_FOR_ESTIMATE: float = 0.1

    # Availability
    WEEKLY_CAPACITY_HOURS: float = 40.0

    # Deadline alerts
    DUE_SOON_HOURS: int = 48

    # Listing
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    DEFAULT_ACTOR: str = "system"

    @model_validator(mode="after")
    def _check_policy_values(self) -> Self:
        if self.WORKLOAD_PERCENT_PER_TASK < 0:
            raise ValueError("WORKLOAD_PERCENT_PER_TASK must not be negative")
        if self.MAX_WORKLOAD_PERCENT <= 0:
            raise ValueError("MAX_WORKLOAD_PERCENT must be positive")
        if self.SKILL_MATCH_WEIGHT < 0 or self.AVAILABILITY_WEIGHT < 0:
            raise ValueError("Ranking weights must not be negative")
        if self.SKILL_MATCH_WEIGHT + self.AVAILABILITY_WEIGHT <= 0:
            raise ValueError("At least one ranking weight must be positive")
        if not 0.0 <= self.DEFAULT_SKILL_MATCH <= 1.0:
            raise ValueError("DEFAULT_SKILL_MATCH must be within [0, 1]")
        if self.WORKING_HOURS_PER_DAY <= 0:
            raise ValueError("WORKING_HOURS_PER_DAY must be positive")
        if not 0.0 <= self.LOW_LOAD_THRESHOLD < self.HIGH_LOAD_THRESHOLD <= 1.0:
            raise ValueError(
                "Load thresholds must satisfy 0 <= LOW < HIGH <= 1"
            )
        if self.WEEKLY_CAPACITY_HOURS <= 0:
            raise ValueError("WEEKLY_CAPACITY_HOURS must be positive")
        if not 0.0 < self.MIN_AVAILABILITY_FOR_ESTIMATE <= 1.0:
            raise ValueError("MIN_AVAILABILITY_FOR_ESTIMATE must be within (0, 1]")
        if self.DEFAULT_PAGE_SIZE < 1 or self.MAX_PAGE_SIZE < self.DEFAULT_PAGE_SIZE:
            raise ValueError(
                "DEFAULT_PAGE_SIZE must be at least 1 and not exceed MAX_PAGE_SIZE"
            )
        return self


settings = Settings()  # type: ignore
