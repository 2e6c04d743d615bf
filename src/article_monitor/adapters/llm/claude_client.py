"""Claude API client for article summarization."""

import asyncio
import logging

import httpx

from article_monitor.config import Settings
from article_monitor.core import GenerationClient

logger = logging.getLogger(__name__)


class ClaudeClient(GenerationClient):
    """Claude Messages API client with retry and request pacing."""

    def __init__(self, settings: Settings) -> None:
        self.api_key = settings.anthropic_api_key
        self.model = settings.claude.model
        self.max_tokens = settings.claude.max_tokens
        self.temperature = settings.claude.temperature
        self.base_url = "https://api.anthropic.com/v1"
        self.max_retries = settings.claude.max_retries
        self.initial_retry_delay = settings.claude.initial_retry_delay
        self.request_delay = settings.claude.request_delay
        self._last_request_time = 0.0

    async def generate(self, prompt: str) -> str:
        """Send one prompt and return the concatenated text of the reply.

        429 and 5xx replies and network errors are retried up to
        ``max_retries`` times. Other HTTP errors raise at once.

        Raises:
            httpx.HTTPStatusError: non-retryable status
            httpx.RequestError: network error on the last attempt
            RuntimeError: every attempt got a retryable status
        """
        await self._wait_for_slot()

        for attempt in range(self.max_retries):
            try:
                response = await self._post(prompt)
            except httpx.RequestError as e:
                if attempt == self.max_retries - 1:
                    raise
                delay = self._backoff(attempt)
                logger.warning("Claude request failed (%s), retrying in %.1fs", e, delay)
                await asyncio.sleep(delay)
                continue

            if response.status_code == 200:
                return self._extract_text(response.json())

            if response.status_code == 429:
                delay = self._get_retry_delay(response, attempt)
            elif response.status_code >= 500:
                delay = self._backoff(attempt)
            else:
                response.raise_for_status()
                continue

            logger.warning(
                "Claude returned %d, retrying in %.1fs (attempt %d/%d)",
                response.status_code, delay, attempt + 1, self.max_retries,
            )
            await asyncio.sleep(delay)

        raise RuntimeError(f"Claude API still failing after {self.max_retries} attempts")

    async def _wait_for_slot(self) -> None:
        """Keep at least ``request_delay`` seconds between calls."""
        elapsed = asyncio.get_running_loop().time() - self._last_request_time
        if elapsed < self.request_delay:
            await asyncio.sleep(self.request_delay - elapsed)

    async def _post(self, prompt: str) -> httpx.Response:
        async with httpx.AsyncClient(timeout=120.0) as client:
            response = await client.post(
                f"{self.base_url}/messages",
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": "2023-06-01",
                    "content-type": "application/json",
                },
                json={
                    "model": self.model,
                    "max_tokens": self.max_tokens,
                    "temperature": self.temperature,
                    "messages": [{"role": "user", "content": prompt}],
                },
            )
        self._last_request_time = asyncio.get_running_loop().time()
        return response

    def _extract_text(self, data: dict) -> str:
        """Join the text blocks of a Messages API response."""
        return "".join(
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type", "text") == "text"
        )

    def _get_retry_delay(self, response: httpx.Response, attempt: int) -> float:
        """Seconds to wait before the next attempt: ``retry-after`` if given, else backoff."""
        retry_after = response.headers.get("retry-after")
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass
        return self._backoff(attempt)

    def _backoff(self, attempt: int) -> float:
        return self.initial_retry_delay * (2 ** attempt)
