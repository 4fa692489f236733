"""
Application Exceptions.

Defines the error taxonomy shared by the scoring, insight and batch layers.

- ConfigurationError: fatal, raised at construction time
- UpstreamTimeoutError / MalformedResponseError: recovered by the insight fallback
- SnapshotUnavailableError: repository metadata could not be fetched
- BatchRequestError: the batch request list itself is invalid
"""

from typing import Optional


class RepoVibeError(Exception):
    """Base class for all application errors."""


class ConfigurationError(RepoVibeError):
    """Raised when a component is constructed with missing or invalid configuration."""


class WeightConfigurationError(ConfigurationError):
    """Raised when a metric weight table is not a valid twelve-metric table summing to 100."""


class UpstreamTimeoutError(RepoVibeError):
    """Raised when the text generation service does not answer before the deadline."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Text generation timed out after {timeout:.1f}s")


class MalformedResponseError(RepoVibeError):
    """Raised when a text generation response cannot be decoded into an insight."""


class SnapshotUnavailableError(RepoVibeError):
    """
    Raised when repository metadata cannot be fetched.

    Attributes:
        full_name (str): Repository identifier (owner/repo)
    """

    def __init__(self, full_name: str, message: Optional[str] = None):
        self.full_name = full_name
        if message is None:
            message = f"Repository snapshot unavailable: {full_name}"
        super().__init__(message)


class RepositoryNotFoundError(SnapshotUnavailableError):
    """Raised when the repository does not exist or is private."""

    def __init__(self, full_name: str):
        super().__init__(full_name, f"Repository not found or is private: {full_name}")


class RateLimitedError(SnapshotUnavailableError):
    """Raised when the metadata API rate limit is exhausted."""

    def __init__(self, full_name: str, reset_in_minutes: Optional[float] = None):
        self.reset_in_minutes = reset_in_minutes
        message = f"GitHub API rate limit exhausted while fetching {full_name}"
        if reset_in_minutes is not None:
            message += f". Resets in {reset_in_minutes:.1f} minutes"
        super().__init__(full_name, message)


class AuthenticationFailedError(SnapshotUnavailableError):
    """Raised when the metadata API rejects the configured credentials."""

    def __init__(self, full_name: str):
        super().__init__(full_name, f"GitHub authentication failed for {full_name}")


class BatchRequestError(RepoVibeError):
    """Raised when a batch request list is malformed or exceeds the batch size limit."""
