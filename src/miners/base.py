"""
Abstract Base Class for Repository Miners.

Defines the interface for repository snapshot mining implementations.
All repository miners (GitHub, GitLab, etc.) should implement this interface.
"""

from abc import ABC, abstractmethod

from miners.models import RepositorySnapshot


class RepositoryMiner(ABC):
    """
    Abstract base class for repository miners.

    Implementations should handle:
    - Authentication with the repository service
    - Metadata extraction
    - Transformation into a RepositorySnapshot
    """

    @abstractmethod
    async def fetch_snapshot(self, owner: str, repo: str) -> RepositorySnapshot:
        """
        Collect the metadata snapshot of a repository.

        Args:
            owner (str): Repository owner
            repo (str): Repository name

        Returns:
            RepositorySnapshot: Collected repository metadata

        Raises:
            SnapshotUnavailableError: If the repository metadata cannot be fetched
        """
        pass
