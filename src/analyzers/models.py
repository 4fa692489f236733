"""
Analysis Data Models.

Defines the scoring and batch result models shared by the analyzers.
Uses Pydantic for validation and serialization.
"""

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from insights.models import InsightPayload


class Metric(str, Enum):
    """
    The twelve scored dimensions of a repository.

    Values are the public metric names used in score breakdowns.
    """

    CODE_QUALITY = "codeQuality"
    READABILITY = "readability"
    COLLABORATION = "collaboration"
    INNOVATION = "innovation"
    MAINTAINABILITY = "maintainability"
    INCLUSIVITY = "inclusivity"
    SECURITY = "security"
    PERFORMANCE = "performance"
    TESTING_QUALITY = "testingQuality"
    COMMUNITY_HEALTH = "communityHealth"
    CODE_HEALTH = "codeHealth"
    RELEASE_MANAGEMENT = "releaseManagement"


# Contract table, must sum to 100.
METRIC_WEIGHTS: Dict[str, int] = {
    Metric.CODE_QUALITY.value: 16,
    Metric.READABILITY.value: 12,
    Metric.COLLABORATION.value: 15,
    Metric.INNOVATION.value: 8,
    Metric.MAINTAINABILITY.value: 8,
    Metric.INCLUSIVITY.value: 5,
    Metric.SECURITY.value: 12,
    Metric.PERFORMANCE.value: 8,
    Metric.TESTING_QUALITY.value: 6,
    Metric.COMMUNITY_HEALTH.value: 4,
    Metric.CODE_HEALTH.value: 4,
    Metric.RELEASE_MANAGEMENT.value: 2,
}


class VibeScore(BaseModel):
    """Weighted composite score with its per-metric breakdown."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(ge=0, le=100)
    breakdown: Dict[str, int]
    weights: Dict[str, int]


class RepositoryRequest(BaseModel):
    """A repository to process in a batch."""

    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


class BatchItemResult(BaseModel):
    """Outcome of one batch member."""

    owner: str
    repo: str
    success: bool
    data: Optional[InsightPayload] = None
    score: Optional[VibeScore] = None
    error: Optional[str] = None


class BatchResult(BaseModel):
    """Results of a batch run, one entry per request in request order."""

    results: List[BatchItemResult]
    total: int
    successful: int
    failed: int
    mode: Literal["parallel", "sequential"]

    @model_validator(mode="after")
    def check_counts(self) -> "BatchResult":
        if self.successful + self.failed != self.total or self.total != len(self.results):
            raise ValueError("batch counters do not match the result list")
        return self
