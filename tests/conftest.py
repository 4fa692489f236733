from datetime import datetime, timedelta, timezone

import pytest

from miners.models import (
    CommitEntry,
    ContentEntry,
    ContributorEntry,
    RepositorySnapshot,
)

CAPTURED_AT = datetime(2024, 6, 1, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


def build_snapshot(
    full_name: str = "test/repo",
    days_since_update: int = 3,
    days_since_creation: int = 400,
    contributor_count: int = 12,
    commit_count: int = 30,
    **overrides,
) -> RepositorySnapshot:
    owner, name = full_name.split("/")
    values = dict(
        full_name=full_name,
        name=name,
        owner=owner,
        description="A test repository",
        language="Python",
        stars=150,
        forks=30,
        open_issues=5,
        has_license=True,
        created_at=CAPTURED_AT - timedelta(days=days_since_creation),
        updated_at=CAPTURED_AT - timedelta(days=days_since_update),
        captured_at=CAPTURED_AT,
        commits=[
            CommitEntry(
                author="dev",
                message=f"Commit {i}",
                date=CAPTURED_AT - timedelta(days=i),
            )
            for i in range(commit_count)
        ],
        contributors=[
            ContributorEntry(login=f"user{i}", contributions=10 - i % 10)
            for i in range(contributor_count)
        ],
    )
    values.update(overrides)
    return RepositorySnapshot(**values)


@pytest.fixture
def snapshot():
    """Snapshot with stars=150, forks=30, 12 contributors, 5 open issues, updated 3 days ago."""
    return build_snapshot()


@pytest.fixture
def rich_snapshot():
    """Snapshot with a populated content listing, dependencies and tagged files."""
    contents = [
        ContentEntry(name="src", path="src", type="dir"),
        ContentEntry(name="tests", path="tests", type="dir"),
        ContentEntry(name="docs", path="docs", type="dir"),
        ContentEntry(name=".github", path=".github", type="dir"),
        ContentEntry(name="workflows", path=".github/workflows", type="dir"),
        ContentEntry(name="ci.yml", path=".github/workflows/ci.yml", size=200),
        ContentEntry(name="README.md", path="README.md", size=400),
        ContentEntry(name="README.es.md", path="README.es.md", size=400),
        ContentEntry(name="CONTRIBUTING.md", path="CONTRIBUTING.md", size=300),
        ContentEntry(name="LICENSE", path="LICENSE", size=100),
        ContentEntry(name=".gitignore", path=".gitignore", size=50),
        ContentEntry(name="setup.cfg", path="setup.cfg", size=150),
        ContentEntry(name="requirements.txt", path="requirements.txt", size=100),
        ContentEntry(name="poetry.lock", path="poetry.lock", size=100),
        ContentEntry(name="test_app.py", path="test_app.py", size=250),
    ]
    return build_snapshot(
        contents=contents,
        dependencies=["flask", "pytest", "black", "sentry-sdk", "bandit"],
        languages={"Python": 10000, "Shell": 500},
        comment_density=0.12,
        security_files=["LICENSE", "SECURITY.md"],
        performance_files=["cache_utils.py"],
        community_files=[
            "CONTRIBUTING.md",
            ".github/ISSUE_TEMPLATE/bug.md",
            ".github/pull_request_template.md",
        ],
    )
