"""LanguageModel protocol and the Anthropic-backed implementation.

The client is constructed once at process startup (see main.lifespan) and
injected into the services that need it; nothing in the package holds a
module-level model client.
"""

import asyncio
from typing import Protocol, runtime_checkable

import anthropic
import structlog
from anthropic._exceptions import OverloadedError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from geocities.core.config import Settings
from geocities.core.exceptions import UpstreamGenerationError

logger = structlog.get_logger(__name__)


@runtime_checkable
class LanguageModel(Protocol):
    """A single-prompt, free-text language model.

    No caching and no retry semantics are assumed beyond transport level;
    callers own both.
    """

    async def complete(self, prompt: str) -> str:
        """Send one prompt and return the model's text.

        Raises:
            UpstreamGenerationError: on any failure or empty output
        """
        ...

    async def aclose(self) -> None:
        ...


class AnthropicLanguageModel:
    """LanguageModel backed by anthropic.AsyncAnthropic.

    Every call is bounded by asyncio.wait_for(timeout). Only provider overload
    (529) is retried, with exponential backoff; everything else surfaces
    immediately as UpstreamGenerationError.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 1024,
        timeout_seconds: float = 30.0,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
        self._client = client or anthropic.AsyncAnthropic(api_key=api_key)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnthropicLanguageModel":
        return cls(
            api_key=settings.anthropic_api_key,
            model=settings.content_model,
            max_tokens=settings.content_max_tokens,
            timeout_seconds=settings.llm_timeout_seconds,
        )

    async def complete(self, prompt: str) -> str:
        try:
            text = await asyncio.wait_for(
                self._invoke_with_retry(prompt),
                timeout=self.timeout_seconds,
            )
        except UpstreamGenerationError:
            raise
        except (TimeoutError, anthropic.APIError) as exc:
            logger.warning(
                "llm_call_failed",
                model=self.model,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise UpstreamGenerationError(f"Language model call failed: {type(exc).__name__}") from exc

        if not text or not text.strip():
            logger.warning("llm_empty_response", model=self.model)
            raise UpstreamGenerationError("Language model returned an empty response")
        return text

    @retry(
        retry=retry_if_exception_type(OverloadedError),
        stop=stop_after_attempt(4),
        wait=wait_exponential(multiplier=2, min=2, max=30),
        reraise=True,
        before_sleep=lambda rs: logger.warning(
            "llm_overloaded_retrying",
            attempt=rs.attempt_number,
            sleep_seconds=rs.next_action.sleep,
        ),
    )
    async def _invoke_with_retry(self, prompt: str) -> str:
        response = await self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        # Tool-use or thinking blocks may precede the text
        for block in response.content:
            if block.type == "text":
                return block.text
        return ""

    async def aclose(self) -> None:
        await self._client.close()
