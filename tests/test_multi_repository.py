import asyncio

import pytest
from unittest.mock import Mock, AsyncMock

from analyzers.models import BatchResult, RepositoryRequest
from analyzers.multi_repository import MultiRepositoryAnalyzer
from analyzers.vibe_score import VibeScoreCalculator
from exceptions import BatchRequestError, RepositoryNotFoundError
from insights.heuristic import HeuristicInsightBuilder
from conftest import build_snapshot


def requests_for(*names):
    return [RepositoryRequest(owner="test", repo=name) for name in names]


@pytest.fixture
def mock_miner():
    """Mock repository miner returning a snapshot named after the request."""
    miner = Mock()
    miner.fetch_snapshot = AsyncMock(
        side_effect=lambda owner, repo: build_snapshot(f"{owner}/{repo}")
    )
    return miner


@pytest.fixture
def mock_insight_generator():
    """Mock insight generator producing heuristic payloads."""
    builder = HeuristicInsightBuilder()
    generator = Mock()
    generator.generate = AsyncMock(side_effect=builder.build)
    return generator


@pytest.fixture
def analyzer(mock_miner, mock_insight_generator):
    return MultiRepositoryAnalyzer(mock_miner, mock_insight_generator)


@pytest.mark.asyncio
async def test_run_batch_success(analyzer, mock_miner, mock_insight_generator):
    result = await analyzer.run_batch(requests_for("repo1", "repo2"))

    assert isinstance(result, BatchResult)
    assert result.mode == "parallel"
    assert (result.total, result.successful, result.failed) == (2, 2, 0)
    assert [r.repo for r in result.results] == ["repo1", "repo2"]
    assert all(r.data is not None and r.error is None for r in result.results)
    assert mock_miner.fetch_snapshot.await_count == 2
    assert mock_insight_generator.generate.await_count == 2


@pytest.mark.asyncio
async def test_partial_failure_is_isolated(analyzer, mock_miner):
    async def fetch(owner, repo):
        if repo == "repo2":
            raise RepositoryNotFoundError(f"{owner}/{repo}")
        return build_snapshot(f"{owner}/{repo}")

    mock_miner.fetch_snapshot.side_effect = fetch

    result = await analyzer.run_batch(requests_for("repo1", "repo2", "repo3"), parallel=True)

    assert (result.total, result.successful, result.failed) == (3, 2, 1)
    first, second, third = result.results
    assert first.success and third.success
    assert first.data.summary.startswith("repo1")
    assert third.data.summary.startswith("repo3")
    assert not second.success
    assert second.data is None
    assert second.error == "Repository not found or is private: test/repo2"


@pytest.mark.asyncio
async def test_insight_failure_is_isolated(analyzer, mock_insight_generator):
    builder = HeuristicInsightBuilder()

    async def generate(snapshot):
        if snapshot.full_name == "test/repo1":
            raise RuntimeError("unexpected")
        return builder.build(snapshot)

    mock_insight_generator.generate.side_effect = generate

    result = await analyzer.run_batch(requests_for("repo1", "repo2"))

    assert [r.success for r in result.results] == [False, True]
    assert result.results[0].error == "unexpected"


@pytest.mark.asyncio
async def test_parallel_results_follow_request_order(analyzer, mock_miner):
    delays = {"slow": 0.05, "medium": 0.02, "fast": 0.0}

    async def fetch(owner, repo):
        await asyncio.sleep(delays[repo])
        return build_snapshot(f"{owner}/{repo}")

    mock_miner.fetch_snapshot.side_effect = fetch

    result = await analyzer.run_batch(requests_for("slow", "medium", "fast"))

    assert [r.repo for r in result.results] == ["slow", "medium", "fast"]


@pytest.mark.asyncio
async def test_sequential_mode_processes_in_order(analyzer, mock_miner):
    seen = []

    async def fetch(owner, repo):
        seen.append(repo)
        return build_snapshot(f"{owner}/{repo}")

    mock_miner.fetch_snapshot.side_effect = fetch

    result = await analyzer.run_batch(requests_for("a", "b", "c"), parallel=False)

    assert result.mode == "sequential"
    assert seen == ["a", "b", "c"]
    assert result.successful == 3


@pytest.mark.asyncio
async def test_batch_size_limit(analyzer, mock_miner):
    with pytest.raises(BatchRequestError):
        await analyzer.run_batch(requests_for(*[f"repo{i}" for i in range(11)]))
    mock_miner.fetch_snapshot.assert_not_called()


@pytest.mark.asyncio
async def test_batch_of_ten_is_accepted(analyzer):
    result = await analyzer.run_batch(requests_for(*[f"repo{i}" for i in range(10)]))
    assert result.total == 10


@pytest.mark.asyncio
async def test_empty_batch_is_rejected(analyzer):
    with pytest.raises(BatchRequestError):
        await analyzer.run_batch([])


@pytest.mark.asyncio
async def test_scores_are_attached_when_calculator_is_set(mock_miner, mock_insight_generator):
    calculator = VibeScoreCalculator()
    analyzer = MultiRepositoryAnalyzer(mock_miner, mock_insight_generator, calculator=calculator)

    result = await analyzer.run_batch(requests_for("repo1"))

    item = result.results[0]
    assert item.score == calculator.score(build_snapshot("test/repo1"))


def test_batch_result_counters_are_validated():
    with pytest.raises(ValueError):
        BatchResult(results=[], total=1, successful=1, failed=0, mode="parallel")
