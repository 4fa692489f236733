"""
Main Application Entry Point.

This module serves as the primary entry point for the repository vibe
analysis system. It orchestrates the workflow:
- Component initialization from settings
- Repository batch execution (mining, insights, scoring)
- Score remarks logging
- JSON result output

The application can be run directly to analyze the configured repositories.
"""

import asyncio
from datetime import datetime, timezone
import json
import os
from typing import List

from openai import AsyncOpenAI
import tiktoken

from config import settings, logger
from analyzers.models import BatchResult, RepositoryRequest
from analyzers.multi_repository import MultiRepositoryAnalyzer
from analyzers.vibe_score import VibeScoreCalculator, score_insights
from exceptions import ConfigurationError
from insights.generator import InsightGenerator
from insights.text_generator import OpenAITextGenerator, TextGenerator
from miners.base import RepositoryMiner
from miners.github_miner import GitHubMiner, parse_repository
from storage.insight_cache import InsightCache


def build_text_generator() -> TextGenerator:
    """
    Create the OpenAI text generator from settings.

    Raises:
        ConfigurationError: If no OpenAI API key is configured
    """
    if settings.openai_api_key is None:
        raise ConfigurationError("OPENAI_API_KEY is not configured")
    client = AsyncOpenAI(api_key=settings.openai_api_key.get_secret_value())
    encoding = tiktoken.get_encoding(settings.openai_encoding_name)
    return OpenAITextGenerator(
        client,
        encoding,
        settings.openai_llm_model,
        settings.openai_max_requests_per_minute,
        settings.openai_max_tokens_per_minute,
        settings.openai_period,
        settings.openai_max_output_tokens,
    )


def build_requests(repository_urls: List[str]) -> List[RepositoryRequest]:
    requests = []
    for url in repository_urls:
        owner, repo = parse_repository(url)
        requests.append(RepositoryRequest(owner=owner, repo=repo))
    return requests


def write_results(batch: BatchResult, output_dir: str) -> str:
    """Write the batch result as JSON and return the file path."""
    os.makedirs(output_dir, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    path = os.path.join(output_dir, f"vibe_report_{timestamp}.json")
    with open(path, "w") as file:
        json.dump(batch.model_dump(mode="json"), file, indent=2)
    return path


async def main() -> None:
    """
    Execute the main application workflow.

    Performs the following steps:
    1. Builds the miner, text generator, cache and insight generator
    2. Runs the configured repositories as one batch
    3. Logs the score and insights of every repository
    4. Writes the batch result to the report output directory

    Raises:
        ConfigurationError: If required credentials are missing
        BatchRequestError: If no repositories or too many repositories are configured
    """
    logger.info("Starting repository vibe analysis...")

    requests = build_requests(settings.repository_urls)

    logger.debug("initializing github miner...")
    miner: RepositoryMiner = GitHubMiner(
        commit_limit=settings.commit_history_limit,
        contributor_limit=settings.contributor_limit,
    )

    logger.debug("initializing insight generator...")
    cache = InsightCache(
        ttl_seconds=settings.insight_cache_ttl_seconds,
        max_entries=settings.insight_cache_max_entries,
    )
    insight_generator = InsightGenerator(
        build_text_generator(),
        cache,
        timeout_seconds=settings.insight_timeout_seconds,
    )

    multi_analyzer = MultiRepositoryAnalyzer(
        miner,
        insight_generator,
        max_batch_size=settings.batch_max_size,
        calculator=VibeScoreCalculator(),
    )

    logger.info("analyzing repositories...")
    batch = await multi_analyzer.run_batch(requests, parallel=settings.batch_parallel)

    for result in batch.results:
        repository = f"{result.owner}/{result.repo}"
        if not result.success:
            logger.warning(
                {"message": "Repository skipped", "repository": repository, "error": result.error}
            )
            continue
        logger.info(
            {
                "message": "Repository analyzed",
                "repository": repository,
                "vibe_score": result.score.total,
                "breakdown": result.score.breakdown,
                "remarks": score_insights(result.score),
                "summary": result.data.summary,
                "fallback": result.data.fallback,
            }
        )

    path = write_results(batch, settings.report_output_dir)
    logger.info({"message": "application finished", "report": path})


def run() -> None:
    logger.info("Starting application ...")
    asyncio.run(main())


if __name__ == "__main__":
    run()
