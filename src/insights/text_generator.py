"""
Text generation services used by the insight generator.
"""

from abc import ABC, abstractmethod
from collections import deque
import asyncio
import time
from typing import Optional

from openai import AsyncOpenAI
from tenacity import retry, stop_after_attempt, wait_exponential
from tiktoken import Encoding

from config import logger
from exceptions import ConfigurationError, MalformedResponseError
from insights.prompt import SYSTEM_PROMPT


class TextGenerator(ABC):
    """Base class for text generation services."""

    @abstractmethod
    async def generate_text(self, prompt: str) -> str:
        """
        Generate a completion for a prompt.

        Args:
            prompt (str): User prompt

        Returns:
            str: Raw generated text
        """
        pass


class OpenAITextGenerator(TextGenerator):
    """
    Text generator backed by OpenAI chat completions.

    Requests are throttled with a sliding window over both the number of
    requests and the number of prompt tokens sent in the last ``period``
    seconds. Failed requests are retried with exponential backoff.

    Attributes:
        client (AsyncOpenAI): OpenAI API client
        encoding (Encoding): Token encoder for the configured model
        model (str): Chat model name
        max_requests (int): Requests allowed per period
        max_tokens (int): Prompt tokens allowed per period
        period (int): Window length in seconds
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        encoding: Encoding,
        model: str,
        max_requests: int,
        max_tokens: int,
        period: int,
        max_output_tokens: int = 1024,
        temperature: float = 0.2,
    ):
        if client is None or not getattr(client, "api_key", None):
            raise ConfigurationError("OpenAI API key is required for text generation")
        if max_requests <= 0 or max_tokens <= 0 or period <= 0:
            raise ConfigurationError("Rate limits and period must be positive")

        self.client = client
        self.encoding = encoding
        self.model = model
        self.max_requests = max_requests
        self.max_tokens = max_tokens
        self.period = period
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature
        self.request_times = deque()
        self.token_counts = deque()
        self._lock = asyncio.Lock()

    def _count_tokens(self, text: str) -> int:
        """Count tokens in text using the model's tokenizer."""
        return len(self.encoding.encode(text))

    def _expire(self, now: float) -> None:
        while self.request_times and (now - self.request_times[0]) > self.period:
            self.request_times.popleft()
            self.token_counts.popleft()

    async def _rate_limit(self, token_count: int) -> None:
        """
        Wait until one more request of ``token_count`` tokens fits in the window.

        A single request larger than the token budget is let through once the
        window is empty.
        """
        async with self._lock:
            while True:
                now = time.monotonic()
                self._expire(now)
                within_requests = len(self.request_times) < self.max_requests
                within_tokens = (
                    not self.token_counts
                    or sum(self.token_counts) + token_count <= self.max_tokens
                )
                if within_requests and within_tokens:
                    break
                # Next slot opens when the oldest request leaves the window
                wait_time = self.period - (now - self.request_times[0])
                await asyncio.sleep(max(wait_time, 0) + 0.01)

            self.request_times.append(time.monotonic())
            self.token_counts.append(token_count)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def generate_text(self, prompt: str) -> str:
        """
        Generate a completion through the chat completions API.

        Raises:
            MalformedResponseError: If the response carries no content
        """
        token_count = self._count_tokens(SYSTEM_PROMPT) + self._count_tokens(prompt)
        logger.debug({"message": "Prompt token count", "tokens": token_count})
        await self._rate_limit(token_count)

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_output_tokens,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            logger.error({"message": "Error generating text", "error": str(e)})
            raise

        if not response.choices or not response.choices[0].message.content:
            raise MalformedResponseError("Text generation returned no content")
        return response.choices[0].message.content.strip()
