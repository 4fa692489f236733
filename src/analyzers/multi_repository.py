"""
Multi-Repository Analysis Module.

This module coordinates insight generation for a batch of GitHub repositories.
Each repository is mined and then passed to the insight generator. A failure
in one repository never affects the others; it is reported in that
repository's result entry instead.

- Parallel (fan-out / fan-in) or sequential processing
- Per-repository failure isolation
- Batch size validation
"""

import asyncio
from typing import List, Optional, Sequence

from config import logger
from analyzers.models import BatchItemResult, BatchResult, RepositoryRequest
from analyzers.vibe_score import VibeScoreCalculator
from exceptions import BatchRequestError
from insights.generator import InsightGenerator
from miners.base import RepositoryMiner


class MultiRepositoryAnalyzer:
    """
    Coordinates the analysis of multiple GitHub repositories.

    Attributes:
        miner (RepositoryMiner): Instance for mining repository snapshots.
        insight_generator (InsightGenerator): Instance for generating insights.
        max_batch_size (int): Largest accepted batch.
        calculator (Optional[VibeScoreCalculator]): Scores each snapshot when set.
    """

    def __init__(
        self,
        miner: RepositoryMiner,
        insight_generator: InsightGenerator,
        max_batch_size: int = 10,
        calculator: Optional[VibeScoreCalculator] = None,
    ):
        """Initialize the multi-repository analyzer.

        Args:
            miner (RepositoryMiner): Instance for mining repository snapshots.
            insight_generator (InsightGenerator): Instance for generating insights.
            max_batch_size (int): Largest accepted batch.
            calculator (Optional[VibeScoreCalculator]): Scores each snapshot when set.
        """
        self.miner = miner
        self.insight_generator = insight_generator
        self.max_batch_size = max_batch_size
        self.calculator = calculator

    def _validate(self, requests: Sequence[RepositoryRequest]) -> None:
        if not requests:
            raise BatchRequestError("At least one repository is required")
        if len(requests) > self.max_batch_size:
            raise BatchRequestError(
                f"Maximum {self.max_batch_size} repositories allowed per batch, got {len(requests)}"
            )

    async def _process(self, request: RepositoryRequest) -> BatchItemResult:
        """Mine and analyze one repository, turning any failure into an error entry."""
        try:
            snapshot = await self.miner.fetch_snapshot(request.owner, request.repo)
            insights = await self.insight_generator.generate(snapshot)
            score = self.calculator.score(snapshot) if self.calculator else None
            return BatchItemResult(
                owner=request.owner,
                repo=request.repo,
                success=True,
                data=insights,
                score=score,
            )
        except Exception as e:
            logger.error(
                {
                    "message": "Failed to analyze repository",
                    "repository": request.full_name,
                    "error": str(e),
                }
            )
            return BatchItemResult(
                owner=request.owner, repo=request.repo, success=False, error=str(e)
            )

    async def run_batch(
        self, requests: Sequence[RepositoryRequest], parallel: bool = True
    ) -> BatchResult:
        """
        Analyze a batch of repositories.

        Args:
            requests (Sequence[RepositoryRequest]): Repositories to analyze
            parallel (bool): Process all repositories concurrently when True,
                one at a time in request order otherwise

        Returns:
            BatchResult: One result per request, in request order

        Raises:
            BatchRequestError: If the batch is empty or larger than the limit
        """
        self._validate(requests)
        mode = "parallel" if parallel else "sequential"
        logger.info(
            {"message": "Starting batch analysis", "repositories": len(requests), "mode": mode}
        )

        results: List[BatchItemResult]
        if parallel:
            results = list(await asyncio.gather(*(self._process(r) for r in requests)))
        else:
            results = []
            for request in requests:
                results.append(await self._process(request))

        successful = sum(1 for result in results if result.success)
        batch = BatchResult(
            results=results,
            total=len(results),
            successful=successful,
            failed=len(results) - successful,
            mode=mode,
        )
        logger.info(
            {
                "message": "Batch analysis complete",
                "total": batch.total,
                "successful": batch.successful,
                "failed": batch.failed,
            }
        )
        return batch
