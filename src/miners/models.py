"""
Repository Snapshot Data Models.

Defines the immutable snapshot handed from repository miners to the scoring
and insight layers. Uses Pydantic for validation and serialization.

Every collection defaults to empty so that consumers never have to guard
against missing data.
"""

from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContentEntry(BaseModel):
    """A file or directory in the repository listing."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    type: Literal["file", "dir"] = "file"
    size: int = 0


class CommitEntry(BaseModel):
    """A single commit from the recent history."""

    model_config = ConfigDict(frozen=True)

    author: str = "Unknown"
    message: str = ""
    date: Optional[datetime] = None


class ContributorEntry(BaseModel):
    """A repository contributor."""

    model_config = ConfigDict(frozen=True)

    login: str
    contributions: int = 0
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None


class RepositorySnapshot(BaseModel):
    """
    Container for all mined repository metadata.

    ``full_name`` and ``updated_at`` together identify the snapshot for
    caching. ``captured_at`` is the reference instant for every
    "days since" computation, which keeps scoring reproducible.
    """

    model_config = ConfigDict(frozen=True)

    full_name: str
    name: str = ""
    owner: str = ""
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = 0
    forks: int = 0
    open_issues: int = 0
    has_license: bool = False
    topics: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    captured_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    comment_density: float = 0.0

    contents: List[ContentEntry] = Field(default_factory=list)
    commits: List[CommitEntry] = Field(default_factory=list)
    contributors: List[ContributorEntry] = Field(default_factory=list)
    languages: Dict[str, int] = Field(default_factory=dict)
    security_files: List[str] = Field(default_factory=list)
    performance_files: List[str] = Field(default_factory=list)
    community_files: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)

    @field_validator(
        "topics",
        "contents",
        "commits",
        "contributors",
        "security_files",
        "performance_files",
        "community_files",
        "dependencies",
        mode="before",
    )
    @classmethod
    def default_empty_list(cls, v):
        """Absent collections become empty lists."""
        return [] if v is None else v

    @field_validator("languages", mode="before")
    @classmethod
    def default_empty_mapping(cls, v):
        """Absent language breakdowns become empty mappings."""
        return {} if v is None else v

    @field_validator("dependencies")
    @classmethod
    def deduplicate_dependencies(cls, v: List[str]) -> List[str]:
        """Drop repeated dependency names while keeping first-seen order."""
        return list(dict.fromkeys(v))

    @field_validator("created_at", "updated_at", "captured_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
