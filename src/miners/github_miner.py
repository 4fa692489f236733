"""
GitHub Repository Snapshot Mining Module.

This module collects the metadata snapshot of a GitHub repository: repository
info, the top-level listing plus the ``.github`` directory, recent commits,
contributors, language byte counts, declared dependencies, sampled comment
density and the tagged file sets used by scoring.

PyGithub is synchronous, so each snapshot is mined in a worker thread.
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from github import Auth, Github
from github.ContentFile import ContentFile
from github.GithubException import (
    BadCredentialsException,
    GithubException,
    RateLimitExceededException,
    UnknownObjectException,
)
from github.Repository import Repository

from analyzers.language import LanguageProfile, get_profile, is_comment_line
from config import settings, logger
from exceptions import (
    AuthenticationFailedError,
    RateLimitedError,
    RepositoryNotFoundError,
    SnapshotUnavailableError,
)
from miners.base import RepositoryMiner
from miners.dependencies import PARSERS, extract_dependencies
from miners.file_tags import community_files, performance_files, security_files
from miners.models import (
    CommitEntry,
    ContentEntry,
    ContributorEntry,
    RepositorySnapshot,
)

COMMENT_SAMPLE_SIZE = 10


class GitHubMiner(RepositoryMiner):
    """
    GitHubMiner is responsible for mining snapshots of GitHub repositories.
    It transforms PyGithub objects into a RepositorySnapshot.
    """

    def __init__(
        self,
        github_token: Optional[str] = None,
        commit_limit: int = 30,
        contributor_limit: int = 30,
        github: Optional[Github] = None,
    ):
        """Initialize GitHub miner with authentication and configuration.

        Args:
            github_token (Optional[str]): GitHub API token, anonymous access without one
            commit_limit (int): Number of recent commits to collect
            contributor_limit (int): Number of contributors to collect
            github (Optional[Github]): Preconfigured client, mainly for tests
        """
        if github is None:
            if github_token is None and settings.github_token is not None:
                github_token = settings.github_token.get_secret_value()
            github = Github(auth=Auth.Token(github_token)) if github_token else Github()
        self.github = github
        self.commit_limit = commit_limit
        self.contributor_limit = contributor_limit

    def _check_rate_limit(self, check_name: str, full_name: str) -> None:
        """
        Log the GitHub API rate limit status seen on the last response.

        Raises:
            RateLimitedError: When the rate limit is exhausted
        """
        remaining, limit = self.github.rate_limiting
        reset_time = datetime.fromtimestamp(self.github.rate_limiting_resettime, timezone.utc)
        minutes_to_reset = (reset_time - datetime.now(timezone.utc)).total_seconds() / 60

        logger.debug(
            {
                "message": f"{check_name} API rate limit status",
                "remaining_points": remaining,
                "total_points": limit,
                "reset_time": reset_time.isoformat(),
                "minutes_to_reset": minutes_to_reset,
            }
        )

        if 0 < remaining < limit * 0.1:
            logger.warning(
                {
                    "message": "GitHub API rate limit running low",
                    "remaining_points": remaining,
                    "reset_time": reset_time.isoformat(),
                }
            )

        if remaining == 0:
            logger.critical(
                {
                    "message": "GitHub API rate limit exhausted",
                    "reset_time": reset_time.isoformat(),
                    "minutes_to_reset": minutes_to_reset,
                }
            )
            raise RateLimitedError(full_name, max(0.0, minutes_to_reset))

    def _list_contents(self, repo: Repository) -> List[ContentFile]:
        """Top-level listing plus everything below ``.github``."""
        try:
            items = list(repo.get_contents(""))
        except UnknownObjectException:
            # empty repository
            return []
        pending = [item for item in items if item.type == "dir" and item.name == ".github"]
        while pending:
            directory = pending.pop(0)
            try:
                children = list(repo.get_contents(directory.path))
            except UnknownObjectException:
                continue
            items.extend(children)
            pending.extend(child for child in children if child.type == "dir")
        return items

    @staticmethod
    def _to_content_entry(item: ContentFile) -> ContentEntry:
        return ContentEntry(
            name=item.name,
            path=item.path,
            type="dir" if item.type == "dir" else "file",
            size=item.size or 0,
        )

    def _get_commits(self, repo: Repository) -> List[CommitEntry]:
        commits = []
        try:
            history = list(repo.get_commits()[: self.commit_limit])
        except GithubException as e:
            if e.status != 409:
                raise
            # 409 Conflict: the repository has no commits
            return commits
        for commit in history:
            git_commit = commit.commit
            author = git_commit.author
            commits.append(
                CommitEntry(
                    author=author.name if author and author.name else "Unknown",
                    message=git_commit.message or "",
                    date=author.date if author else None,
                )
            )
        return commits

    def _get_contributors(self, repo: Repository) -> List[ContributorEntry]:
        return [
            ContributorEntry(
                login=contributor.login,
                contributions=contributor.contributions or 0,
                avatar_url=contributor.avatar_url,
                html_url=contributor.html_url,
            )
            for contributor in repo.get_contributors()[: self.contributor_limit]
        ]

    @staticmethod
    def _read_text(item: ContentFile) -> Optional[str]:
        try:
            return item.decoded_content.decode("utf-8", errors="replace")
        except (GithubException, AssertionError, ValueError) as e:
            logger.warning({"message": "Failed to read file", "path": item.path, "error": str(e)})
            return None

    def _get_dependencies(self, items: List[ContentFile]) -> List[str]:
        dependencies = []
        for item in items:
            if item.type == "file" and item.path == item.name and item.name in PARSERS:
                content = self._read_text(item)
                if content is not None:
                    dependencies.extend(extract_dependencies(content, item.name))
        return dependencies

    def _comment_density(self, items: List[ContentFile], profile: LanguageProfile) -> float:
        """Share of comment lines over up to ten source files of the primary language."""
        sources = [
            item
            for item in items
            if item.type == "file" and item.name.endswith(profile.extensions)
        ][:COMMENT_SAMPLE_SIZE]

        total_lines = comment_lines = 0
        for item in sources:
            content = self._read_text(item)
            if content is None:
                continue
            for line in content.splitlines():
                stripped = line.strip()
                if not stripped:
                    continue
                total_lines += 1
                if is_comment_line(stripped, profile):
                    comment_lines += 1
        return comment_lines / total_lines if total_lines else 0.0

    def _mine(self, owner: str, repo_name: str) -> RepositorySnapshot:
        full_name = f"{owner}/{repo_name}"
        repo: Repository = self.github.get_repo(full_name)
        self._check_rate_limit("Repository info", full_name)

        items = self._list_contents(repo)
        commits = self._get_commits(repo)
        contributors = self._get_contributors(repo)
        languages: Dict[str, int] = repo.get_languages()
        topics = repo.get_topics()
        self._check_rate_limit("Repository metadata", full_name)

        profile = get_profile(repo.language)
        dependencies = self._get_dependencies(items)
        density = self._comment_density(items, profile)
        self._check_rate_limit("File content", full_name)

        paths = [item.path for item in items]
        return RepositorySnapshot(
            full_name=repo.full_name or full_name,
            name=repo.name,
            owner=repo.owner.login if repo.owner else owner,
            description=repo.description,
            language=repo.language,
            stars=repo.stargazers_count,
            forks=repo.forks_count,
            open_issues=repo.open_issues_count,
            has_license=repo.license is not None,
            topics=topics,
            created_at=repo.created_at,
            updated_at=repo.updated_at,
            captured_at=datetime.now(timezone.utc),
            comment_density=density,
            contents=[self._to_content_entry(item) for item in items],
            commits=commits,
            contributors=contributors,
            languages=languages,
            security_files=security_files(paths),
            performance_files=performance_files(paths),
            community_files=community_files(paths),
            dependencies=dependencies,
        )

    @staticmethod
    def _translate_error(full_name: str, error: GithubException) -> SnapshotUnavailableError:
        if isinstance(error, RateLimitExceededException):
            return RateLimitedError(full_name)
        if isinstance(error, BadCredentialsException):
            return AuthenticationFailedError(full_name)
        if isinstance(error, UnknownObjectException) or error.status == 404:
            return RepositoryNotFoundError(full_name)
        if error.status == 403:
            return RateLimitedError(full_name)
        return SnapshotUnavailableError(
            full_name, f"GitHub API error {error.status} while fetching {full_name}"
        )

    async def fetch_snapshot(self, owner: str, repo: str) -> RepositorySnapshot:
        """
        Collect the snapshot of a GitHub repository.

        Args:
            owner (str): Repository owner
            repo (str): Repository name

        Returns:
            RepositorySnapshot: Mined repository metadata

        Raises:
            SnapshotUnavailableError: If the repository cannot be fetched
        """
        full_name = f"{owner}/{repo}"
        logger.info({"message": "Starting repository mining", "repository": full_name})

        try:
            snapshot = await asyncio.to_thread(self._mine, owner, repo)
        except GithubException as e:
            error = self._translate_error(full_name, e)
            logger.error(
                {
                    "message": "Repository mining failed",
                    "repository": full_name,
                    "status": e.status,
                    "error": str(error),
                }
            )
            raise error from e

        logger.info(
            {
                "message": "Repository mining complete",
                "repository": full_name,
                "files": len(snapshot.contents),
                "commits": len(snapshot.commits),
                "contributors": len(snapshot.contributors),
            }
        )
        return snapshot


def parse_repository(value: str) -> Tuple[str, str]:
    """
    Split a repository URL or ``owner/repo`` string.

    Args:
        value (str): ``https://github.com/owner/repo[.git]`` or ``owner/repo``

    Returns:
        Tuple[str, str]: Owner and repository name

    Raises:
        ValueError: If the value does not name a repository
    """
    cleaned = value.strip().rstrip("/")
    for prefix in ("https://", "http://"):
        if cleaned.startswith(prefix):
            cleaned = cleaned[len(prefix):]
    if cleaned.startswith("www."):
        cleaned = cleaned[len("www."):]
    if cleaned.startswith("github.com/"):
        cleaned = cleaned[len("github.com/"):]

    parts = cleaned.split("/")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError(f"Not a GitHub repository: {value}")
    repo = parts[1][:-4] if parts[1].endswith(".git") else parts[1]
    if not repo:
        raise ValueError(f"Not a GitHub repository: {value}")
    return parts[0], repo
