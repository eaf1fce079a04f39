"""
LLM Client for Groq API integration.

This module is the single completion provider of the assistant. It exposes
two explicit operations:
- create(): one buffered chat completion
- stream(): an async iterator of text deltas

Timeouts and retries are owned here (by the Groq SDK), not by callers.
Groq SDK exceptions are translated into the UpstreamError hierarchy so the
rest of the application never imports provider types.
"""
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional

import groq
from groq import AsyncGroq

from omanx.core.config import Settings
from omanx.core.exceptions import (
    UpstreamAuthError,
    UpstreamError,
    UpstreamRateLimitError,
    UpstreamRejectedError,
    UpstreamUnknownError,
)
from omanx.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Completion:
    """Result of a buffered completion."""
    text: str
    usage: Optional[Dict[str, Any]] = None


def translate_provider_error(error: Exception) -> UpstreamError:
    """
    Map a Groq SDK exception onto the upstream error taxonomy.

    The provider's message is kept in `details` for logging only.
    """
    if isinstance(error, UpstreamError):
        return error

    details = f"{type(error).__name__}: {error}"

    if isinstance(error, (groq.AuthenticationError, groq.PermissionDeniedError)):
        return UpstreamAuthError(details=details)
    if isinstance(error, groq.RateLimitError):
        return UpstreamRateLimitError(details=details)
    if isinstance(error, (groq.BadRequestError, groq.UnprocessableEntityError)):
        return UpstreamRejectedError(details=details)
    return UpstreamUnknownError(details=details)


class LLMClient:
    """
    Async client for Groq chat completions.

    Example:
        >>> client = LLMClient.from_settings(get_settings())
        >>> completion = await client.create("llama-3.3-70b-versatile", "Be brief.", "Hi")
        >>> async for delta in client.stream("llama-3.3-70b-versatile", "Be brief.", "Hi"):
        ...     print(delta, end="")
    """

    def __init__(
        self,
        api_key: str,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        timeout_seconds: float = 60.0,
        max_retries: int = 2,
        client: Optional[AsyncGroq] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Groq API key
            temperature: Sampling temperature
            max_tokens: Maximum completion length
            timeout_seconds: Per-request timeout enforced by the SDK
            max_retries: SDK retry count for transient failures
            client: Preconfigured AsyncGroq instance (tests)
        """
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = client or AsyncGroq(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=max_retries,
        )

        logger.info(
            f"Groq LLM client initialized: timeout={timeout_seconds}s, "
            f"max_retries={max_retries}"
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMClient":
        return cls(
            api_key=settings.groq_api_key,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout_seconds=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
        )

    async def create(self, model: str, system_text: str, user_text: str) -> Completion:
        """
        Generate one buffered completion.

        Raises:
            UpstreamError: Translated provider failure
        """
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=self._messages(system_text, user_text),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            raise translate_provider_error(e) from e

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""

        usage = response.usage.model_dump() if response.usage is not None else None
        return Completion(text=text, usage=usage)

    async def stream(self, model: str, system_text: str, user_text: str) -> AsyncIterator[str]:
        """
        Stream a completion as text deltas.

        Exhausting the iterator means the provider completed. Closing it
        early (aclose() or cancellation) closes the upstream HTTP stream.

        Raises:
            UpstreamError: Translated provider failure, before or mid-stream
        """
        try:
            upstream = await self.client.chat.completions.create(
                model=model,
                messages=self._messages(system_text, user_text),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                stream=True,
            )
        except Exception as e:
            raise translate_provider_error(e) from e

        try:
            async for chunk in upstream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        except Exception as e:
            raise translate_provider_error(e) from e
        finally:
            await upstream.close()

    @staticmethod
    def _messages(system_text: str, user_text: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": system_text},
            {"role": "user", "content": user_text},
        ]
