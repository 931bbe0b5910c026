# services/llm/completion_client.py
"""
Thin async client for a local Ollama daemon.

``generate()`` never raises for transport or payload problems: after the
bounded retry loop is exhausted it returns ``None``, which callers treat as
"no completion available".
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from loguru import logger
from prometheus_client import Counter, Histogram
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from core.config import Settings
from core.exceptions import CompletionError

from .prompts import SMOKE_TEST_EXPECTED, SMOKE_TEST_PROMPT

# Sampling policy sent with every request.  Not configurable: changing any of
# these changes what the model writes back.
GENERATION_OPTIONS: Dict[str, Any] = {
    "temperature": 0.5,
    "top_k": 50,
    "top_p": 0.95,
    "num_predict": 2048,
    "stop": ["</response>"],
    "repeat_penalty": 1.1,
    "presence_penalty": 0.5,
}

# Failures that count as a failed attempt and are retried
RETRYABLE_ERRORS = (httpx.HTTPError, CompletionError, ValueError)

COMPLETION_ATTEMPTS = Counter('llm_completion_attempts_total', 'Total number of completion requests sent')
COMPLETION_FAILURES = Counter('llm_completion_failures_total', 'Completions that failed after all retries')
COMPLETION_DURATION = Histogram('llm_completion_duration_seconds', 'Time spent waiting for a completion')

SleepFunc = Callable[[float], Awaitable[None]]


class CompletionClient:
    """Sends prompts to ``POST {endpoint}/generate`` and returns the text."""

    def __init__(
        self,
        endpoint: str = "http://localhost:11434/api",
        model: str = "llama2:latest",
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        timeout: Optional[float] = 300.0,
        client: Optional[httpx.AsyncClient] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.model = model
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._sleep = sleep
        self.ready = False

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "CompletionClient":
        return cls(
            endpoint=settings.OLLAMA_ENDPOINT,
            model=settings.LLM_MODEL,
            retry_attempts=settings.LLM_RETRY_ATTEMPTS,
            retry_delay=settings.LLM_RETRY_DELAY_SECONDS,
            timeout=settings.LLM_TIMEOUT_SECONDS,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Readiness
    # ------------------------------------------------------------------
    async def initialize(self) -> bool:
        """
        Check that the daemon answers, that ``self.model`` is pulled and that
        the model passes a one-line smoke test.  Sets ``self.ready``.
        """
        self.ready = False
        logger.info(f"Checking Ollama connection at {self.endpoint}...")

        try:
            models = await self.list_models()
        except RETRYABLE_ERRORS as exc:
            logger.error(f"Failed to connect to Ollama: {exc}")
            return False

        logger.info(f"Available models: {', '.join(models) or '(none)'}")
        if self.model not in models:
            logger.warning(
                f"Model {self.model} not found. Please run: ollama pull {self.model}"
            )
            return False

        logger.info(f"Found required model {self.model}, testing with a simple prompt...")
        reply = await self._complete(SMOKE_TEST_PROMPT)
        if reply is None or SMOKE_TEST_EXPECTED not in reply:
            logger.error(f"Model response validation failed: {reply!r}")
            return False

        self.ready = True
        logger.info(f"✅ {self.model} is ready")
        return True

    async def list_models(self) -> List[str]:
        response = await self._client.get(f"{self.endpoint}/tags")
        response.raise_for_status()
        data = response.json()
        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            logger.warning(f"Unexpected /tags payload: {str(data)[:200]}")
            return []
        return [
            m["name"]
            for m in models
            if isinstance(m, dict) and m.get("name")
        ]

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------
    async def generate(self, prompt: str) -> Optional[str]:
        """Return the completion for ``prompt`` or ``None`` on failure."""
        if not self.ready:
            logger.error("LLM not initialized – skipping completion")
            return None
        return await self._complete(prompt)

    async def _complete(self, prompt: str) -> Optional[str]:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_incrementing(start=self.retry_delay, increment=self.retry_delay),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._request_completion(
                        prompt, attempt.retry_state.attempt_number
                    )
        except RETRYABLE_ERRORS as exc:
            COMPLETION_FAILURES.inc()
            logger.error(
                f"Giving up on completion after {self.retry_attempts} attempts: {exc}"
            )
        return None

    async def _request_completion(self, prompt: str, attempt: int) -> str:
        COMPLETION_ATTEMPTS.inc()
        logger.debug(
            f"Generating completion (attempt {attempt}/{self.retry_attempts}), "
            f"prompt length {len(prompt)} characters"
        )

        start = time.perf_counter()
        with COMPLETION_DURATION.time():
            response = await self._client.post(
                f"{self.endpoint}/generate",
                json={
                    "model": self.model,
                    "prompt": prompt,
                    "stream": False,
                    "options": GENERATION_OPTIONS,
                },
            )
        response.raise_for_status()

        payload = response.json()
        text = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            raise CompletionError("Completion payload has no 'response' text")

        logger.debug(
            f"Completion generated in {time.perf_counter() - start:.2f}s, "
            f"response length {len(text)} characters"
        )
        return text

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"Completion attempt {retry_state.attempt_number}/{self.retry_attempts} "
            f"failed: {exc}; retrying in {delay:.1f}s"
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
