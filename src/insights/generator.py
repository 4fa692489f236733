"""
Insight Generator.

Produces the insight report for a repository snapshot:

1. Return a live cached payload if there is one.
2. Ask the text generator for a JSON report, bounded by a deadline.
3. Parse and strictly validate the response.
4. On timeout, malformed output or any upstream error, build the report
   from snapshot heuristics instead.
5. Cache whichever payload was produced.

Concurrent requests for the same repository wait on a per-key lock so that
only one of them reaches the text generator.
"""

import asyncio
from typing import Dict, List, Optional

from pydantic import ValidationError

from config import logger
from exceptions import ConfigurationError, MalformedResponseError, UpstreamTimeoutError
from insights.contributors import analyze_contributors, commit_frequency
from insights.heuristic import (
    HeuristicInsightBuilder,
    RepositoryCounters,
    finalize_recommendations,
)
from insights.json_extractor import extract_json_block
from insights.models import InsightPayload, LLMInsightResponse, Priority, Recommendation
from insights.prompt import build_insight_prompt
from insights.text_generator import TextGenerator
from miners.models import RepositorySnapshot
from storage.insight_cache import InsightCache


def priority_for_quality(quality: int) -> Priority:
    if quality <= 60:
        return Priority.CRITICAL
    if quality <= 80:
        return Priority.MODERATE
    return Priority.INFO


def parse_insight_response(text: str) -> LLMInsightResponse:
    """
    Parse raw generated text into a validated response.

    Args:
        text (str): Raw generated text

    Returns:
        LLMInsightResponse: Validated response

    Raises:
        MalformedResponseError: If no JSON object is found or it fails validation
    """
    block = extract_json_block(text)
    if block is None:
        raise MalformedResponseError("No JSON object found in generated text")
    try:
        return LLMInsightResponse.model_validate_json(block)
    except ValidationError as e:
        raise MalformedResponseError(
            f"Generated JSON failed validation with {e.error_count()} error(s)"
        ) from e


class InsightGenerator:
    """
    Cache, deadline and fallback wrapper around a text generator.

    Attributes:
        text_generator (TextGenerator): External text generation service
        cache (InsightCache): Insight cache
        heuristic_builder (HeuristicInsightBuilder): Fallback builder
        timeout_seconds (float): Deadline for one text generation call
    """

    def __init__(
        self,
        text_generator: TextGenerator,
        cache: InsightCache,
        heuristic_builder: Optional[HeuristicInsightBuilder] = None,
        timeout_seconds: float = 8.0,
    ):
        if timeout_seconds <= 0:
            raise ConfigurationError("Insight timeout must be positive")
        self.text_generator = text_generator
        self.cache = cache
        self.heuristic_builder = heuristic_builder or HeuristicInsightBuilder()
        self.timeout_seconds = timeout_seconds
        self._locks: Dict[str, asyncio.Lock] = {}

    def _normalize(
        self, response: LLMInsightResponse, snapshot: RepositorySnapshot
    ) -> InsightPayload:
        """Merge a validated response with heuristic key insights, recommendations and contributors."""
        counters = RepositoryCounters.from_snapshot(snapshot)
        recommendations: List[Recommendation] = [
            Recommendation(
                title="Top Recommendation",
                description=response.recommendation,
                priority=priority_for_quality(response.quality),
                category="general",
            )
        ]
        recommendations.extend(self.heuristic_builder.applicable_recommendations(counters))

        return InsightPayload(
            summary=response.summary,
            strengths=response.strengths,
            improvements=response.improvements,
            recommendation=response.recommendation,
            collaboration=response.collaboration,
            activity=response.activity,
            quality=response.quality,
            key_insights=self.heuristic_builder.key_insights(counters),
            recommendations=finalize_recommendations(recommendations),
            contributor_insights=analyze_contributors(snapshot),
            commit_frequency=commit_frequency(snapshot),
        )

    async def _attempt(self, snapshot: RepositorySnapshot) -> InsightPayload:
        prompt = build_insight_prompt(snapshot)
        try:
            text = await asyncio.wait_for(
                self.text_generator.generate_text(prompt), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise UpstreamTimeoutError(self.timeout_seconds) from e
        return self._normalize(parse_insight_response(text), snapshot)

    async def _produce(self, snapshot: RepositorySnapshot) -> InsightPayload:
        try:
            return await self._attempt(snapshot)
        except ConfigurationError:
            raise
        except (UpstreamTimeoutError, MalformedResponseError) as e:
            logger.warning(
                {
                    "message": "Falling back to heuristic insights",
                    "repository": snapshot.full_name,
                    "reason": type(e).__name__,
                    "error": str(e),
                }
            )
        except Exception as e:
            logger.error(
                {
                    "message": "Text generation failed, falling back to heuristic insights",
                    "repository": snapshot.full_name,
                    "reason": type(e).__name__,
                    "error": str(e),
                }
            )
        return self.heuristic_builder.build(snapshot)

    async def generate(self, snapshot: RepositorySnapshot) -> InsightPayload:
        """
        Generate insights for a repository snapshot.

        Never raises for upstream problems; only configuration errors
        propagate.

        Args:
            snapshot (RepositorySnapshot): Repository snapshot

        Returns:
            InsightPayload: Generated or heuristic insights
        """
        key = InsightCache.key_for(snapshot.full_name, snapshot.updated_at)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug({"message": "Insight cache hit", "repository": snapshot.full_name})
            return cached

        lock = self._locks.setdefault(key, asyncio.Lock())
        try:
            async with lock:
                # Another waiter may have filled the entry meanwhile
                cached = self.cache.get(key)
                if cached is not None:
                    return cached

                payload = await self._produce(snapshot)
                self.cache.put(key, payload)
                logger.info(
                    {
                        "message": "Insights generated",
                        "repository": snapshot.full_name,
                        "fallback": payload.fallback,
                        "quality": payload.quality,
                    }
                )
                return payload
        finally:
            if not lock.locked() and self._locks.get(key) is lock:
                del self._locks[key]
