"""
Contributor Analysis.

Derives per-contributor roles and weekly commit counts from a snapshot.
Shares are computed from the contributor list when the miner collected one,
otherwise from recent commit authors. A repository with neither is credited
to its owner.
"""

from collections import Counter
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from analyzers.vibe_score import round_half_up
from insights.models import ContributorInsight, WeeklyCommitCount
from miners.models import RepositorySnapshot

TOP_CONTRIBUTORS = 10
COMMIT_SAMPLE = 30
FREQUENCY_WEEKS = 8


def classify_contributor(rank: int, percentage: int) -> Tuple[str, str, str]:
    """
    Infer role, expertise and impact from a contributor's rank and share.

    Args:
        rank (int): Zero based position in the contribution ordering
        percentage (int): Share of the counted contributions

    Returns:
        Tuple[str, str, str]: Role, expertise and impact
    """
    if rank == 0:
        return "Lead Developer", "Project Lead", "High"
    if percentage > 20:
        return "Core Contributor", "Core Development", "High"
    if percentage > 10:
        return "Active Contributor", "Core Development", "Medium"
    return "Occasional Contributor", "Contributing", "Low"


def _share(count: int, total: int) -> int:
    return round_half_up(count * 100 / total) if total > 0 else 0


def _insight(
    rank: int,
    login: str,
    contributions: int,
    total: int,
    avatar_url: Optional[str] = None,
    html_url: Optional[str] = None,
) -> ContributorInsight:
    percentage = _share(contributions, total)
    role, expertise, impact = classify_contributor(rank, percentage)
    return ContributorInsight(
        login=login,
        contributions=contributions,
        avatar_url=avatar_url,
        html_url=html_url,
        role=role,
        expertise=expertise,
        impact=impact,
        percentage=percentage,
    )


def _from_contributors(snapshot: RepositorySnapshot) -> List[ContributorInsight]:
    # shares are relative to every listed contributor, not only the top ten
    total = sum(contributor.contributions for contributor in snapshot.contributors)
    return [
        _insight(
            rank,
            contributor.login,
            contributor.contributions,
            total,
            contributor.avatar_url,
            contributor.html_url,
        )
        for rank, contributor in enumerate(snapshot.contributors[:TOP_CONTRIBUTORS])
    ]


def _from_commit_authors(snapshot: RepositorySnapshot) -> List[ContributorInsight]:
    authors = Counter(
        commit.author
        for commit in snapshot.commits
        if commit.author and commit.author != "Unknown"
    )
    # most_common keeps first-seen order between equal counts
    top = authors.most_common(TOP_CONTRIBUTORS)
    total = sum(count for _, count in top)
    return [_insight(rank, author, count, total) for rank, (author, count) in enumerate(top)]


def _owner(snapshot: RepositorySnapshot) -> ContributorInsight:
    return ContributorInsight(
        login=snapshot.owner or "Repository Owner",
        contributions=len(snapshot.commits) or 1,
        role="Project Owner",
        expertise="Full Stack Development",
        impact="High",
        percentage=100,
    )


def analyze_contributors(snapshot: RepositorySnapshot) -> List[ContributorInsight]:
    """
    Build insights for up to ten contributors.

    Args:
        snapshot (RepositorySnapshot): Repository snapshot

    Returns:
        List[ContributorInsight]: Contributors in contribution order, never empty
    """
    if snapshot.contributors:
        insights = _from_contributors(snapshot)
    else:
        insights = _from_commit_authors(snapshot)
    return insights or [_owner(snapshot)]


def week_start(day: date) -> date:
    """Sunday starting the week that contains ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def commit_frequency(snapshot: RepositorySnapshot) -> List[WeeklyCommitCount]:
    """Commit counts of the latest eight weeks with commits, oldest first."""
    weeks: Dict[date, int] = {}
    for commit in snapshot.commits[:COMMIT_SAMPLE]:
        if commit.date is None:
            continue
        week = week_start(commit.date.date())
        weeks[week] = weeks.get(week, 0) + 1

    latest = sorted(weeks, reverse=True)[:FREQUENCY_WEEKS]
    return [WeeklyCommitCount(week=week, count=weeks[week]) for week in reversed(latest)]
