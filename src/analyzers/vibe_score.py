"""
Vibe Score Calculation Module.

Computes the twelve-dimension repository health score. Every sub-score is a
sum of fixed point contributions from presence and threshold checks, capped
at 100. The total is the weight-averaged sum of the sub-scores.

The calculator performs no I/O and keeps no state between calls: the same
snapshot always produces the same VibeScore. Elapsed-time checks are made
against ``snapshot.captured_at`` instead of the wall clock.
"""

import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from analyzers.language import StructureAnalysis, analyze_structure
from analyzers.models import METRIC_WEIGHTS, Metric, VibeScore
from exceptions import WeightConfigurationError
from miners.models import RepositorySnapshot

MODERN_FRAMEWORKS = (
    # JavaScript/TypeScript
    "react", "vue", "angular", "next", "nuxt", "svelte", "solid",
    "express", "fastify", "koa", "nest", "prisma", "graphql",
    # Python
    "django", "flask", "fastapi", "pydantic", "sqlalchemy", "celery",
    # Java
    "spring", "quarkus", "micronaut", "junit", "mockito",
    # Go
    "gin", "echo", "fiber", "gorm", "testify",
    # Other
    "docker", "kubernetes", "terraform", "ansible",
)

SECURITY_CONFIG_FILES = (
    ".security", "security.md", "security.yml", "security.yaml", "security.txt",
)
SECURITY_PRACTICE_KEYWORDS = (
    "input validation", "sanitize", "escape", "csrf", "xss", "sql injection",
)
LICENSE_KEYWORDS = ("license", "licence", "copying", "copyright")
SECURITY_TOOLS = (
    "snyk", "dependabot", "npm audit", "yarn audit", "safety", "bandit", "semgrep",
)

CACHING_KEYWORDS = ("cache", "redis", "memcached", "lru", "ttl")
DATABASE_KEYWORDS = ("index", "query optimization", "connection pooling", "migration")
SCALING_KEYWORDS = (
    "load balancer", "horizontal scaling", "vertical scaling", "auto-scaling",
)
MONITORING_TOOLS = ("prometheus", "grafana", "newrelic", "datadog", "sentry")

COVERAGE_TOOLS = ("jest", "mocha", "pytest", "coverage", "istanbul", "nyc")
CI_PATHS = (".github/workflows", ".gitlab-ci.yml", ".travis.yml", ".circleci", "jenkins")
INTEGRATION_TEST_KEYWORDS = ("integration", "e2e", "end-to-end")
QUALITY_TOOLS = ("eslint", "prettier", "black", "flake8", "sonarqube", "codeclimate")

GUIDELINE_FILES = ("contributing.md", "code-of-conduct", "community.md", "guidelines.md")
ISSUE_TEMPLATES = (".github/issue_template",)
PR_TEMPLATES = (".github/pull_request_template",)

REFACTORING_KEYWORDS = ("refactor", "cleanup", "optimize", "simplify")
VERSIONING_KEYWORDS = ("version", "release", "changelog", "semver")
RELEASE_DOC_KEYWORDS = ("changelog", "release-notes", "version-history")

MULTILINGUAL_MARKERS = ("es", "fr", "de", "ja", "zh", "ko")
ACCESSIBLE_DOC_KEYWORDS = ("accessibility", "a11y", "contributing", "code-of-conduct")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def _clamp(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def _contains_any(values: Iterable[str], keywords: Iterable[str]) -> bool:
    """Case-insensitive check whether any value contains any keyword."""
    lowered = [value.lower() for value in values if value]
    return any(keyword.lower() in value for keyword in keywords for value in lowered)


def _days_since(moment: datetime, reference: datetime) -> int:
    return math.ceil(abs((reference - moment).total_seconds()) / 86400)


class VibeScoreCalculator:
    """
    Weighted multi-dimensional repository scorer.

    Attributes:
        weights (Dict[str, int]): Metric name to weight, summing to 100
    """

    def __init__(self, weights: Optional[Dict[str, int]] = None):
        """
        Initialize the calculator and validate the weight table.

        Args:
            weights (Optional[Dict[str, int]]): Metric weights, defaults to the contract table

        Raises:
            WeightConfigurationError: If the table does not name the twelve
                metrics or does not sum to 100
        """
        weights = dict(METRIC_WEIGHTS if weights is None else weights)
        expected = {metric.value for metric in Metric}
        if set(weights) != expected:
            raise WeightConfigurationError(
                f"Weights must name exactly the metrics {sorted(expected)}, got {sorted(weights)}"
            )
        total_weight = sum(weights.values())
        if total_weight != 100:
            raise WeightConfigurationError(f"Weights must sum to 100, got {total_weight}")
        self.weights = weights

    def score(self, snapshot: RepositorySnapshot) -> VibeScore:
        """
        Calculate the vibe score of a repository snapshot.

        Args:
            snapshot (RepositorySnapshot): Repository snapshot

        Returns:
            VibeScore: Total score, per-metric breakdown and the weights used
        """
        structure = analyze_structure(snapshot)

        breakdown = {
            Metric.CODE_QUALITY.value: self.code_quality_score(snapshot, structure),
            Metric.READABILITY.value: self.readability_score(snapshot, structure),
            Metric.COLLABORATION.value: self.collaboration_score(snapshot),
            Metric.INNOVATION.value: self.innovation_score(snapshot),
            Metric.MAINTAINABILITY.value: self.maintainability_score(snapshot, structure),
            Metric.INCLUSIVITY.value: self.inclusivity_score(structure),
            Metric.SECURITY.value: self.security_score(snapshot),
            Metric.PERFORMANCE.value: self.performance_score(snapshot),
            Metric.TESTING_QUALITY.value: self.testing_quality_score(snapshot, structure),
            Metric.COMMUNITY_HEALTH.value: self.community_health_score(snapshot),
            Metric.CODE_HEALTH.value: self.code_health_score(snapshot, structure),
            Metric.RELEASE_MANAGEMENT.value: self.release_management_score(snapshot),
        }

        weighted = sum(breakdown[metric] * weight for metric, weight in self.weights.items())
        return VibeScore(
            total=_clamp(weighted / 100),
            breakdown=breakdown,
            weights=dict(self.weights),
        )

    def code_quality_score(
        self, snapshot: RepositorySnapshot, structure: StructureAnalysis
    ) -> int:
        """Tests, file size and best-practice files."""
        score = 0.0
        contents = snapshot.contents

        if structure.test_files:
            score += 40
            ratio = len(structure.test_files) / max(1, len(contents))
            score += min(20, ratio * 100)

        average = structure.average_file_size
        if average < 500:
            score += 30
        elif average < 1000:
            score += 20
        elif average < 2000:
            score += 10

        names = [item.name for item in contents]
        if any(name == ".gitignore" for name in names):
            score += 10
        if _contains_any(names, ("license",)):
            score += 10
        if _contains_any(names, ("config", "setup")):
            score += 10

        return _clamp(min(100, score))

    def readability_score(
        self, snapshot: RepositorySnapshot, structure: StructureAnalysis
    ) -> int:
        """README, extra docs, description and comment density."""
        score = 0
        docs = structure.documentation_files

        if _contains_any(docs, ("readme",)):
            score += 30
            if len(docs) > 1:
                score += 20

        if snapshot.description and len(snapshot.description) > 10:
            score += 20

        density = snapshot.comment_density
        if density > 0.1:
            score += 30
        elif density > 0.05:
            score += 20
        elif density > 0.02:
            score += 10

        return min(100, score)

    def collaboration_score(self, snapshot: RepositorySnapshot) -> int:
        """Commit rate, recency, contributor count and stars."""
        score = 0
        reference = snapshot.captured_at

        days_since_creation = _days_since(snapshot.created_at, reference)
        commits_per_day = len(snapshot.commits) / max(1, days_since_creation)
        if commits_per_day > 1:
            score += 40
        elif commits_per_day > 0.5:
            score += 30
        elif commits_per_day > 0.1:
            score += 20
        elif commits_per_day > 0.01:
            score += 10

        days_since_update = _days_since(snapshot.updated_at, reference)
        if days_since_update < 7:
            score += 35
        elif days_since_update < 30:
            score += 25
        elif days_since_update < 90:
            score += 15
        elif days_since_update < 365:
            score += 10

        contributor_count = len(snapshot.contributors)
        if contributor_count > 20:
            score += 25
        elif contributor_count > 10:
            score += 20
        elif contributor_count > 3:
            score += 15
        elif contributor_count > 0:
            score += 10

        stars = snapshot.stars
        if stars > 1000:
            score += 25
        elif stars > 100:
            score += 20
        elif stars > 10:
            score += 15
        elif stars > 0:
            score += 10

        return min(100, score)

    def innovation_score(self, snapshot: RepositorySnapshot) -> int:
        """Modern frameworks and language diversity."""
        score = 0
        score += min(60, len(self.modern_frameworks(snapshot.dependencies)) * 15)

        language_count = len(snapshot.languages)
        if language_count > 3:
            score += 40
        elif language_count > 1:
            score += 25
        elif language_count == 1:
            score += 15

        return min(100, score)

    @staticmethod
    def modern_frameworks(dependencies: List[str]) -> List[str]:
        """Return the dependencies that match a known modern framework."""
        return [
            dependency
            for dependency in dependencies
            if any(framework in dependency.lower() for framework in MODERN_FRAMEWORKS)
        ]

    def maintainability_score(
        self, snapshot: RepositorySnapshot, structure: StructureAnalysis
    ) -> int:
        """Folder layout, dependency management and repository size."""
        score = 0
        folders = structure.folders

        if _contains_any(folders, ("src",)):
            score += 20
        if _contains_any(folders, ("test",)):
            score += 20
        if _contains_any(folders, ("doc",)):
            score += 10

        if structure.has_package_manager:
            score += 20
        if structure.has_lock_file:
            score += 10

        entry_count = len(snapshot.contents)
        if entry_count < 50:
            score += 20
        elif entry_count < 100:
            score += 15
        elif entry_count < 200:
            score += 10

        return min(100, score)

    def inclusivity_score(self, structure: StructureAnalysis) -> int:
        """Translated READMEs and accessibility or contribution docs."""
        score = 0
        names = [path.rsplit("/", 1)[-1].lower() for path in structure.documentation_files]

        multilingual = [
            name
            for name in names
            if "readme" in name
            and any(marker in name.replace("readme", "") for marker in MULTILINGUAL_MARKERS)
        ]
        score += min(40, len(multilingual) * 20)

        if _contains_any(structure.documentation_files, ACCESSIBLE_DOC_KEYWORDS):
            score += 60

        return min(100, score)

    def security_score(self, snapshot: RepositorySnapshot) -> int:
        """Security policy, practices, licensing and scanning tools."""
        score = 0
        files = snapshot.security_files

        if _contains_any(files, SECURITY_CONFIG_FILES):
            score += 30
        if _contains_any(files, SECURITY_PRACTICE_KEYWORDS):
            score += 25
        if _contains_any(files, LICENSE_KEYWORDS):
            score += 20
        if _contains_any(snapshot.dependencies, SECURITY_TOOLS):
            score += 25

        return min(100, score)

    def performance_score(self, snapshot: RepositorySnapshot) -> int:
        """Caching, database tuning, scaling and monitoring."""
        score = 0
        files = snapshot.performance_files

        if _contains_any(files, CACHING_KEYWORDS):
            score += 25
        if _contains_any(files, DATABASE_KEYWORDS):
            score += 25
        if _contains_any(files, SCALING_KEYWORDS):
            score += 20
        if _contains_any(snapshot.dependencies, MONITORING_TOOLS):
            score += 30

        return min(100, score)

    def testing_quality_score(
        self, snapshot: RepositorySnapshot, structure: StructureAnalysis
    ) -> int:
        """Coverage tools, CI, integration tests and linters."""
        score = 0
        dependencies = snapshot.dependencies

        if _contains_any(dependencies, COVERAGE_TOOLS):
            score += 30
        paths = [item.path for item in snapshot.contents]
        if _contains_any(paths, CI_PATHS):
            score += 30
        if _contains_any(structure.test_files, INTEGRATION_TEST_KEYWORDS):
            score += 20
        if _contains_any(dependencies, QUALITY_TOOLS):
            score += 20

        return min(100, score)

    def community_health_score(self, snapshot: RepositorySnapshot) -> int:
        """Guidelines and issue / pull request templates."""
        score = 0
        files = snapshot.community_files

        if _contains_any(files, GUIDELINE_FILES):
            score += 40
        if _contains_any(files, ISSUE_TEMPLATES):
            score += 30
        if _contains_any(files, PR_TEMPLATES):
            score += 30

        return min(100, score)

    def code_health_score(
        self, snapshot: RepositorySnapshot, structure: StructureAnalysis
    ) -> int:
        """File size, refactoring activity and documentation ratio."""
        score = 0

        average = structure.average_file_size
        if average < 300:
            score += 40
        elif average < 600:
            score += 30
        elif average < 1000:
            score += 20

        if _contains_any([item.name for item in snapshot.contents], REFACTORING_KEYWORDS):
            score += 30

        doc_ratio = len(structure.documentation_files) / max(1, structure.file_count)
        if doc_ratio > 0.1:
            score += 30
        elif doc_ratio > 0.05:
            score += 20

        return min(100, score)

    def release_management_score(self, snapshot: RepositorySnapshot) -> int:
        """Commit cadence, versioning and release documentation."""
        score = 0
        messages = [commit.message for commit in snapshot.commits]

        days_since_creation = _days_since(snapshot.created_at, snapshot.captured_at)
        commits_per_month = len(snapshot.commits) / max(1, days_since_creation / 30)
        if commits_per_month > 10:
            score += 40
        elif commits_per_month > 5:
            score += 30
        elif commits_per_month > 2:
            score += 20

        if _contains_any(messages, VERSIONING_KEYWORDS):
            score += 30

        release_sources = messages + [snapshot.description or ""]
        if _contains_any(release_sources, RELEASE_DOC_KEYWORDS):
            score += 30

        return min(100, score)


def score_insights(vibe_score: VibeScore) -> List[str]:
    """
    Summarize a score breakdown as short remarks.

    Args:
        vibe_score (VibeScore): Calculated score

    Returns:
        List[str]: Remarks about weak and strong metrics, ending with an overall verdict
    """
    breakdown = vibe_score.breakdown
    insights = []

    if breakdown[Metric.CODE_QUALITY.value] < 50:
        insights.append("Consider adding more test files to improve code quality")
    elif breakdown[Metric.CODE_QUALITY.value] > 80:
        insights.append("Excellent test coverage! Your code quality is outstanding")

    if breakdown[Metric.READABILITY.value] < 40:
        insights.append("Adding more documentation and comments would improve readability")
    if breakdown[Metric.COLLABORATION.value] < 30:
        insights.append("Consider encouraging more community contributions")
    if breakdown[Metric.INNOVATION.value] > 70:
        insights.append("Great use of modern frameworks and tools!")
    if breakdown[Metric.MAINTAINABILITY.value] < 50:
        insights.append("Consider improving folder structure and dependency management")
    if breakdown[Metric.INCLUSIVITY.value] < 40:
        insights.append("Adding multilingual documentation could improve inclusivity")

    if vibe_score.total > 80:
        insights.append("This repository has excellent vibes! Keep up the great work!")
    elif vibe_score.total > 60:
        insights.append("Good vibes detected! There's room for improvement in some areas")
    else:
        insights.append("Every repository has potential! Focus on the areas with lower scores")

    return insights
