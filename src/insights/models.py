"""
Insight Data Models.

Defines the canonical insight payload returned to callers and the strict
schema a text generation response must satisfy before it is trusted.
"""

from datetime import date
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Activity = Literal["active", "moderate", "low"]
Impact = Literal["High", "Medium", "Low"]


class Priority(str, Enum):
    """
    Recommendation priority.

    Attributes:
        CRITICAL: Should be addressed first
        MODERATE: Worth planning for
        INFO: Nice to have
    """

    CRITICAL = "critical"
    MODERATE = "moderate"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Sort rank, lower comes first."""
        return PRIORITY_RANK[self]


PRIORITY_RANK = {Priority.CRITICAL: 0, Priority.MODERATE: 1, Priority.INFO: 2}


class Recommendation(BaseModel):
    """A prioritized, categorized suggestion."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    priority: Priority
    category: str


class ContributorInsight(BaseModel):
    """
    A contributor with their share of the work and an inferred role.

    Attributes:
        login (str): Contributor login, or commit author name
        contributions (int): Contributions or commits counted for the contributor
        percentage (int): Share of the counted contributions, 0..100
        role (str): Lead Developer, Core Contributor, Active Contributor,
            Occasional Contributor or Project Owner
        expertise (str): Area the contributor is credited with
        impact (Impact): High, Medium or Low
    """

    model_config = ConfigDict(frozen=True)

    login: str
    contributions: int
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None
    role: str
    expertise: str
    impact: Impact
    percentage: int = Field(ge=0, le=100)


class WeeklyCommitCount(BaseModel):
    """Number of recent commits in the week starting on ``week`` (a Sunday)."""

    model_config = ConfigDict(frozen=True)

    week: date
    count: int


class InsightPayload(BaseModel):
    """
    Canonical insight report.

    ``fallback`` records whether the payload came from the heuristic builder.
    It is excluded from serialization and only meant for logging and tests.
    """

    model_config = ConfigDict(frozen=True)

    summary: str
    strengths: List[str]
    improvements: List[str]
    recommendation: str
    collaboration: str
    activity: Activity
    quality: int = Field(ge=0, le=100)
    key_insights: List[str]
    recommendations: List[Recommendation]
    contributor_insights: List[ContributorInsight] = Field(default_factory=list)
    commit_frequency: List[WeeklyCommitCount] = Field(default_factory=list)
    fallback: bool = Field(default=False, exclude=True)


class LLMInsightResponse(BaseModel):
    """Expected JSON document in a text generation response."""

    model_config = ConfigDict(extra="forbid", strict=True)

    summary: str = Field(min_length=1)
    strengths: List[str]
    improvements: List[str]
    recommendation: str = Field(min_length=1)
    collaboration: str
    activity: Activity
    quality: int = Field(ge=1, le=100)
