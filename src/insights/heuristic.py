"""
Heuristic Insight Builder.

Derives an insight report from raw snapshot counters without any external
service. Used whenever the text generation service is unavailable, slow or
returns something that cannot be trusted. Output depends only on the
snapshot, so the same snapshot always yields the same payload.
"""

from dataclasses import dataclass
from typing import List

from insights.contributors import analyze_contributors, commit_frequency
from insights.models import InsightPayload, Priority, Recommendation
from miners.models import RepositorySnapshot

RECOMMENDATION_COUNT = 4

# Generic entries used to pad the recommendation list. Categories may repeat
# categories of applicable recommendations.
FILLER_RECOMMENDATIONS = (
    Recommendation(
        title="Keep Dependencies Up To Date",
        description="Review and update dependencies regularly to pick up security fixes and improvements",
        priority=Priority.INFO,
        category="security",
    ),
    Recommendation(
        title="Document Architecture Decisions",
        description="Record the reasoning behind significant design choices so new contributors can get up to speed",
        priority=Priority.INFO,
        category="documentation",
    ),
    Recommendation(
        title="Track Project Health Metrics",
        description="Monitor build times, test results and issue turnaround to spot regressions early",
        priority=Priority.INFO,
        category="code-quality",
    ),
    Recommendation(
        title="Label Good First Issues",
        description="Curate beginner friendly issues to lower the barrier for new contributors",
        priority=Priority.INFO,
        category="community",
    ),
)


@dataclass(frozen=True)
class RepositoryCounters:
    """Counters the heuristics are computed from."""

    name: str
    language: str
    stars: int
    forks: int
    open_issues: int
    contributors: int
    has_license: bool
    has_description: bool
    days_since_update: int

    @classmethod
    def from_snapshot(cls, snapshot: RepositorySnapshot) -> "RepositoryCounters":
        elapsed = snapshot.captured_at - snapshot.updated_at
        return cls(
            name=snapshot.name or snapshot.full_name.split("/")[-1] or "Repository",
            language=snapshot.language or "software",
            stars=snapshot.stars,
            forks=snapshot.forks,
            open_issues=snapshot.open_issues,
            contributors=len(snapshot.contributors),
            has_license=snapshot.has_license,
            has_description=bool(snapshot.description),
            days_since_update=max(0, int(elapsed.total_seconds() // 86400)),
        )


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def activity_bucket(days_since_update: int) -> str:
    """Classify activity from the days elapsed since the last update."""
    if days_since_update < 7:
        return "active"
    if days_since_update < 30:
        return "moderate"
    return "low"


def sort_by_priority(recommendations: List[Recommendation]) -> List[Recommendation]:
    """Stable sort, critical first and info last."""
    return sorted(recommendations, key=lambda recommendation: recommendation.priority.rank)


def finalize_recommendations(recommendations: List[Recommendation]) -> List[Recommendation]:
    """
    Sort recommendations by priority and make the list exactly four long.

    Applicable recommendations are kept by priority, then generic filler
    entries are appended until the list is full.

    Args:
        recommendations (List[Recommendation]): Applicable recommendations

    Returns:
        List[Recommendation]: Exactly four recommendations sorted by priority
    """
    result = sort_by_priority(recommendations)[:RECOMMENDATION_COUNT]
    for filler in FILLER_RECOMMENDATIONS:
        if len(result) >= RECOMMENDATION_COUNT:
            break
        result.append(filler)
    return sort_by_priority(result)


class HeuristicInsightBuilder:
    """Builds deterministic insight payloads from snapshot counters."""

    def quality_score(self, counters: RepositoryCounters) -> int:
        """
        Estimate project quality.

        Starts at 50 and adds bucketed bonuses for stars, forks, contributors,
        a low open issue count, a license and a description.
        """
        quality = 50

        if counters.stars > 100:
            quality += 15
        elif counters.stars > 10:
            quality += 10
        elif counters.stars > 0:
            quality += 5

        if counters.forks > 50:
            quality += 10
        elif counters.forks > 10:
            quality += 5

        if counters.contributors > 10:
            quality += 10
        elif counters.contributors > 5:
            quality += 5

        if counters.open_issues < 10:
            quality += 5
        if counters.has_license:
            quality += 5
        if counters.has_description:
            quality += 5

        return min(100, quality)

    def summary(self, counters: RepositoryCounters) -> str:
        if counters.stars > 50:
            standing = "a popular"
        elif counters.stars > 10:
            standing = "a growing"
        else:
            standing = "an emerging"
        maintenance = (
            "is actively maintained"
            if counters.days_since_update < 30
            else "shows moderate activity"
        )
        return (
            f"{counters.name} is {standing} {counters.language} project with "
            f"{_plural(counters.contributors, 'contributor')} and "
            f"{_plural(counters.stars, 'star')}. The repository {maintenance}."
        )

    def strengths(self, counters: RepositoryCounters) -> List[str]:
        strengths = []
        if counters.stars > 50:
            strengths.append("Popular project with strong community interest")
        if counters.contributors > 10:
            strengths.append("Good contributor engagement")
        if counters.days_since_update < 30:
            strengths.append("Actively maintained")
        if counters.has_license:
            strengths.append("Properly licensed")
        if counters.forks > 20:
            strengths.append("High fork count indicates reusability")
        return strengths or ["Project is established"]

    def improvements(self, counters: RepositoryCounters) -> List[str]:
        improvements = []
        if counters.stars < 10:
            improvements.append("Increase visibility through better documentation")
        if counters.contributors < 3:
            improvements.append("Encourage more contributors")
        if counters.days_since_update > 90:
            improvements.append("More frequent updates needed")
        if not counters.has_license:
            improvements.append("Add a license file")
        if counters.open_issues > 50:
            improvements.append("Address open issues")
        return improvements or ["Continue current practices"]

    def top_recommendation(self, quality: int) -> str:
        if quality < 60:
            return "Focus on documentation and attracting contributors to improve project health."
        if quality < 80:
            return "Consider adding more features and improving test coverage."
        return "Maintain current momentum and consider expanding the project scope."

    def collaboration_note(self, counters: RepositoryCounters) -> str:
        if counters.contributors >= 10:
            return "Strong team collaboration: large, active team with distributed contributions"
        if counters.contributors >= 5:
            return "Growing contributor base: small but growing team with regular contributions"
        if counters.contributors >= 2:
            return "Small focused team: small team working closely together"
        return "Solo developer: single developer maintaining the project"

    def key_insights(self, counters: RepositoryCounters) -> List[str]:
        """Six observations, one each about stars, recency, team, issues, forks and metadata."""
        stars, forks = counters.stars, counters.forks
        issues, contributors = counters.open_issues, counters.contributors
        days = counters.days_since_update

        if stars > 100:
            popularity = f"High community interest with {stars} stars indicates strong project adoption"
        elif stars > 20:
            popularity = f"Growing community engagement with {stars} stars shows promising traction"
        else:
            popularity = f"Early-stage project with {stars} stars has room for growth"

        if days < 7:
            recency = "Very active development with recent updates in the past week"
        elif days < 30:
            recency = "Regular maintenance with updates in the past month"
        else:
            recency = f"Repository hasn't been updated in {days} days - may need attention"

        if contributors > 10:
            team = f"Strong collaborative environment with {contributors} active contributors"
        elif contributors > 1:
            team = f"Small but collaborative team with {contributors} contributors"
        else:
            team = "Solo developer project - could benefit from more contributors"

        if issues > 50:
            issue_activity = f"High activity with {issues} open issues - active community engagement"
        elif issues > 10:
            issue_activity = f"Moderate issue activity with {issues} open issues"
        else:
            issue_activity = f"Low issue count ({issues}) suggests good maintenance or low activity"

        if forks > 50:
            reuse = f"High reusability with {forks} forks - widely adopted codebase"
        elif forks > 10:
            reuse = f"Good code reuse with {forks} forks"
        else:
            reuse = "Limited forking activity - potential for wider adoption"

        if counters.has_license and counters.has_description:
            metadata = "Well-documented with proper licensing for open source use"
        elif not counters.has_license:
            metadata = "Missing license may limit adoption and contribution"
        else:
            metadata = "Repository lacks description - first impressions matter"

        return [popularity, recency, team, issue_activity, reuse, metadata]

    def applicable_recommendations(self, counters: RepositoryCounters) -> List[Recommendation]:
        """Catalogue entries whose conditions hold for the repository, in catalogue order."""
        stars, forks = counters.stars, counters.forks
        contributors, issues = counters.contributors, counters.open_issues
        recommendations = []

        if contributors > 5 or stars > 50:
            recommendations.append(
                Recommendation(
                    title="Add Comprehensive Test Coverage",
                    description=(
                        f"With {stars} stars and {contributors} contributors, implementing robust "
                        "testing will ensure code reliability and build contributor confidence"
                    ),
                    priority=Priority.CRITICAL if stars > 100 else Priority.MODERATE,
                    category="testing",
                )
            )

        if not counters.has_description:
            recommendations.append(
                Recommendation(
                    title="Add Repository Description",
                    description=(
                        "A clear description helps potential users and contributors "
                        "understand your project at first glance"
                    ),
                    priority=Priority.CRITICAL,
                    category="documentation",
                )
            )
        elif stars < 50:
            recommendations.append(
                Recommendation(
                    title="Enhance README Documentation",
                    description=(
                        "Improve documentation with usage examples, installation instructions, "
                        "and contribution guidelines to attract more users"
                    ),
                    priority=Priority.MODERATE,
                    category="documentation",
                )
            )

        if issues > 30:
            recommendations.append(
                Recommendation(
                    title="Improve Issue Management",
                    description=(
                        f"With {issues} open issues, consider triaging, labeling, and closing "
                        "stale issues to maintain project health"
                    ),
                    priority=Priority.CRITICAL if issues > 100 else Priority.MODERATE,
                    category="community",
                )
            )

        if contributors < 5 and stars > 20:
            recommendations.append(
                Recommendation(
                    title="Foster Community Engagement",
                    description=(
                        f"Your project has {stars} stars but only {contributors} contributors. "
                        "Add CONTRIBUTING.md and good first issues to encourage participation"
                    ),
                    priority=Priority.MODERATE,
                    category="community",
                )
            )

        if counters.days_since_update > 180:
            recommendations.append(
                Recommendation(
                    title="Revitalize Project Maintenance",
                    description=(
                        f"Repository hasn't been updated in {counters.days_since_update} days. "
                        "Regular updates keep the project relevant and dependencies secure"
                    ),
                    priority=Priority.CRITICAL,
                    category="code-quality",
                )
            )
        elif contributors > 3:
            recommendations.append(
                Recommendation(
                    title="Implement CI/CD Pipeline",
                    description=(
                        f"With {contributors} contributors, automated testing and deployment "
                        "will improve code quality and reduce manual effort"
                    ),
                    priority=Priority.MODERATE,
                    category="code-quality",
                )
            )

        if not counters.has_license:
            recommendations.append(
                Recommendation(
                    title="Add Open Source License",
                    description=(
                        "A license clarifies how others can use, modify, and contribute to "
                        "your project, encouraging wider adoption"
                    ),
                    priority=Priority.CRITICAL if stars > 10 else Priority.MODERATE,
                    category="security",
                )
            )

        if stars > 200 or forks > 100:
            recommendations.append(
                Recommendation(
                    title="Optimize for Scale",
                    description=(
                        f"With {stars} stars and {forks} forks, consider performance "
                        "optimizations and scalability improvements"
                    ),
                    priority=Priority.MODERATE,
                    category="performance",
                )
            )

        return recommendations

    def build(self, snapshot: RepositorySnapshot) -> InsightPayload:
        """
        Build the heuristic insight payload for a snapshot.

        Args:
            snapshot (RepositorySnapshot): Repository snapshot

        Returns:
            InsightPayload: Payload flagged as a fallback result
        """
        counters = RepositoryCounters.from_snapshot(snapshot)
        quality = self.quality_score(counters)

        return InsightPayload(
            summary=self.summary(counters),
            strengths=self.strengths(counters),
            improvements=self.improvements(counters),
            recommendation=self.top_recommendation(quality),
            collaboration=self.collaboration_note(counters),
            activity=activity_bucket(counters.days_since_update),
            quality=quality,
            key_insights=self.key_insights(counters),
            recommendations=finalize_recommendations(
                self.applicable_recommendations(counters)
            ),
            contributor_insights=analyze_contributors(snapshot),
            commit_frequency=commit_frequency(snapshot),
            fallback=True,
        )
