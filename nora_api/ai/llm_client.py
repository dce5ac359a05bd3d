import asyncio
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError, RateLimitError
from openai.types.chat import ChatCompletion

from nora_api.config import settings

logger = logging.getLogger(__name__)


class LLMClientError(Exception):
    """Base exception for LLM client errors."""


class LLMRateLimitError(LLMClientError):
    """Raised when the provider rejects a call with HTTP 429."""

    def __init__(self, message: str, retry_after: Optional[str] = None):
        super().__init__(message)
        self.retry_after = retry_after


class LLMClient:
    """
    Low-level async LLM client.

    This class:
    - talks to the LLM provider
    - handles retries & timeouts
    - returns raw text only
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        try:
            self.client = AsyncOpenAI(
                api_key=api_key or settings.OPENAI_API_KEY,
            )
        except OpenAIError as exc:
            raise LLMClientError(str(exc)) from exc

        self.model = model or settings.OPENAI_MODEL
        self.temperature = (
            temperature
            if temperature is not None
            else settings.OPENAI_TEMPERATURE
        )
        self.max_tokens = (
            max_tokens
            if max_tokens is not None
            else settings.OPENAI_MAX_TOKENS
        )

        self.timeout = settings.OPENAI_TIMEOUT
        self.retries = settings.OPENAI_RETRIES

    # ─────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────

    async def complete(
        self,
        *,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate a completion from the LLM.

        Rate limits are raised straight away; timeouts and other
        failures are retried with backoff.
        """
        params = {
            "model": model or self.model,
            "messages": messages,
            "temperature": temperature if temperature is not None else self.temperature,
            "max_tokens": max_tokens if max_tokens is not None else self.max_tokens,
        }

        for attempt in range(1, self.retries + 1):
            try:
                return await asyncio.wait_for(
                    self._call_llm(params),
                    timeout=self.timeout,
                )

            except RateLimitError as exc:
                raise LLMRateLimitError(
                    "OpenAI rate limit exceeded",
                    retry_after=exc.response.headers.get("retry-after"),
                ) from exc

            except asyncio.TimeoutError:
                logger.warning("LLM request timed out (attempt %d/%d)", attempt, self.retries)
                if attempt == self.retries:
                    raise LLMClientError("LLM request timed out")
                await asyncio.sleep(self._backoff(attempt))

            except Exception as exc:
                logger.warning("LLM request failed (attempt %d/%d): %s", attempt, self.retries, exc)
                if attempt == self.retries:
                    raise LLMClientError(str(exc)) from exc
                await asyncio.sleep(self._backoff(attempt))

        raise LLMClientError("LLM request failed")

    # ─────────────────────────────────────────────
    # Internal helpers
    # ─────────────────────────────────────────────

    async def _call_llm(self, params: Dict[str, Any]) -> str:
        """
        Perform the actual LLM call.
        """
        completion: ChatCompletion = await self.client.chat.completions.create(**params)

        if not completion.choices:
            return ""
        content = completion.choices[0].message.content
        return content.strip() if content else ""

    def _backoff(self, attempt: int) -> float:
        """
        Exponential backoff (simple).
        """
        return min(2 ** attempt, 10)


class DevelopmentLLMClient(LLMClient):
    """
    Canned replies for local work without an OpenAI key.
    Never used outside development.
    """

    def __init__(self, **kwargs):
        self.model = kwargs.get("model") or settings.OPENAI_MODEL
        self.temperature = settings.OPENAI_TEMPERATURE
        self.max_tokens = settings.OPENAI_MAX_TOKENS
        self.timeout = settings.OPENAI_TIMEOUT
        self.retries = 1
        self.client = None

    async def _call_llm(self, params: Dict[str, Any]) -> str:
        content = params["messages"][-1].get("content", "") if params["messages"] else ""
        if isinstance(content, list):
            content = " ".join(
                part.get("text", "") for part in content if part.get("type") == "text"
            )
        return (
            f'MockResponse: I heard "{str(content)[:120]}" '
            "- here is a friendly demo reply explaining steps."
        )


def build_llm_client() -> LLMClient:
    """
    Pick the client for the current environment.
    """
    if settings.OPENAI_API_KEY:
        return LLMClient()

    if settings.is_development:
        logger.warning(
            "OPENAI_API_KEY is not set - using a development mock for OpenAI. "
            "Do NOT use this in production."
        )
        return DevelopmentLLMClient()

    logger.error(
        "OPENAI_API_KEY is not set. Set it in the environment (.env) "
        "and do not commit secrets to source control."
    )
    return LLMClient()
