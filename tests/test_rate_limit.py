"""
Tests for rate limiting and request handling in OpenAITextGenerator.
"""

import pytest
import asyncio
import time
from unittest.mock import AsyncMock, Mock
from openai import AsyncOpenAI
from tenacity import wait_none

from exceptions import ConfigurationError, MalformedResponseError
from insights.text_generator import OpenAITextGenerator


@pytest.fixture
def mock_openai_client():
    """Create a mock OpenAI client."""
    client = Mock(spec=AsyncOpenAI)
    client.api_key = "sk-test"
    return client


@pytest.fixture
def mock_encoding():
    """Create a mock encoding."""
    encoding = Mock()
    encoding.encode.return_value = [1] * 10  # Each text will count as 10 tokens
    return encoding


@pytest.fixture
def rate_limiter(mock_openai_client, mock_encoding):
    """Create a generator with 10 requests and 50 tokens per second."""
    return OpenAITextGenerator(mock_openai_client, mock_encoding, "gpt-4o-mini", 10, 50, 1)


def completion(content):
    return Mock(choices=[Mock(message=Mock(content=content))])


def test_missing_api_key_is_a_configuration_error(mock_encoding):
    with pytest.raises(ConfigurationError):
        OpenAITextGenerator(None, mock_encoding, "gpt-4o-mini", 10, 50, 1)

    keyless = Mock(spec=AsyncOpenAI)
    keyless.api_key = ""
    with pytest.raises(ConfigurationError):
        OpenAITextGenerator(keyless, mock_encoding, "gpt-4o-mini", 10, 50, 1)


@pytest.mark.asyncio
async def test_rate_limit_requests(rate_limiter):
    """Test that requests are properly rate limited."""
    start_time = time.monotonic()

    # Make max_requests requests
    for _ in range(rate_limiter.max_requests):
        await rate_limiter._rate_limit(1)

    # The next request should be delayed
    await rate_limiter._rate_limit(1)

    elapsed_time = time.monotonic() - start_time
    assert (
        elapsed_time >= rate_limiter.period
    ), "Rate limit was not enforced for requests"


@pytest.mark.asyncio
async def test_rate_limit_tokens(rate_limiter):
    """Test that token usage is properly rate limited."""
    start_time = time.monotonic()

    # Use up the token limit (50 tokens) with 5 requests of 10 tokens each
    for _ in range(5):
        await rate_limiter._rate_limit(10)

    # The next request should be delayed
    await rate_limiter._rate_limit(10)

    elapsed_time = time.monotonic() - start_time
    assert elapsed_time >= rate_limiter.period, "Rate limit was not enforced for tokens"


@pytest.mark.asyncio
async def test_rate_limit_cleanup(rate_limiter):
    """Test that old entries are properly cleaned up."""
    for _ in range(5):
        await rate_limiter._rate_limit(5)

    initial_length = len(rate_limiter.request_times)

    # Wait for period to expire
    await asyncio.sleep(rate_limiter.period + 0.1)

    # Make a new request to trigger cleanup
    await rate_limiter._rate_limit(5)

    assert (
        len(rate_limiter.request_times) < initial_length
    ), "Old entries were not cleaned up"
    assert len(rate_limiter.request_times) == len(
        rate_limiter.token_counts
    ), "Request times and token counts are out of sync"


@pytest.mark.asyncio
async def test_rate_limit_concurrent(rate_limiter):
    """Test rate limiting with concurrent requests."""

    async def make_request(token_count: int):
        await rate_limiter._rate_limit(token_count)
        return time.monotonic()

    # Launch 20 concurrent requests
    start_time = time.monotonic()
    tasks = [make_request(5) for _ in range(20)]
    completion_times = await asyncio.gather(*tasks)

    # Check that requests were spread across at least 2 periods
    time_span = max(completion_times) - start_time
    assert (
        time_span >= rate_limiter.period
    ), "Concurrent requests were not properly rate limited"

    # Check that we didn't exceed our limits at any point
    assert (
        len(rate_limiter.request_times) <= rate_limiter.max_requests
    ), "Request limit was exceeded"
    assert (
        sum(rate_limiter.token_counts) <= rate_limiter.max_tokens
    ), "Token limit was exceeded"


@pytest.mark.asyncio
async def test_rate_limit_mixed_token_sizes(rate_limiter):
    """Test rate limiting with varying token counts."""
    start_time = time.monotonic()

    token_counts = [5, 15, 25, 5]  # Total: 50 tokens
    for tokens in token_counts:
        await rate_limiter._rate_limit(tokens)

    # This request should be delayed as we've hit the token limit
    await rate_limiter._rate_limit(10)

    elapsed_time = time.monotonic() - start_time
    assert (
        elapsed_time >= rate_limiter.period
    ), "Token-based rate limit was not enforced for mixed token sizes"


@pytest.mark.asyncio
async def test_generate_text_calls_chat_completions(rate_limiter, mock_openai_client):
    create = AsyncMock(return_value=completion('  {"summary": "ok"}  '))
    mock_openai_client.chat = Mock(completions=Mock(create=create))

    text = await rate_limiter.generate_text("Describe the repository")

    assert text == '{"summary": "ok"}'
    kwargs = create.await_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["messages"][1] == {"role": "user", "content": "Describe the repository"}
    assert kwargs["response_format"] == {"type": "json_object"}
    # system prompt and user prompt at 10 tokens each
    assert list(rate_limiter.token_counts) == [20]


@pytest.mark.asyncio
async def test_generate_text_retries_failures(rate_limiter, mock_openai_client):
    create = AsyncMock(
        side_effect=[RuntimeError("boom"), RuntimeError("boom"), completion("done")]
    )
    mock_openai_client.chat = Mock(completions=Mock(create=create))

    no_wait = rate_limiter.generate_text.retry_with(wait=wait_none())
    text = await no_wait(rate_limiter, "prompt")

    assert text == "done"
    assert create.await_count == 3


@pytest.mark.asyncio
async def test_generate_text_gives_up_after_three_attempts(rate_limiter, mock_openai_client):
    create = AsyncMock(side_effect=RuntimeError("boom"))
    mock_openai_client.chat = Mock(completions=Mock(create=create))

    no_wait = rate_limiter.generate_text.retry_with(wait=wait_none())
    with pytest.raises(RuntimeError):
        await no_wait(rate_limiter, "prompt")
    assert create.await_count == 3


@pytest.mark.asyncio
async def test_empty_completion_is_malformed(rate_limiter, mock_openai_client):
    create = AsyncMock(return_value=completion(None))
    mock_openai_client.chat = Mock(completions=Mock(create=create))

    no_wait = rate_limiter.generate_text.retry_with(wait=wait_none())
    with pytest.raises(MalformedResponseError):
        await no_wait(rate_limiter, "prompt")
