"""AI client abstraction with OpenAI and Anthropic API backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from riyl_chat.config import AnthropicConfig, OpenAIConfig
from riyl_chat.log import get_logger

logger = get_logger(__name__)


@dataclass
class AIResponse:
    """Unified response from any AI backend."""

    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    raw: Any = None  # Backend-specific raw response


def is_quota_error(exc: BaseException) -> bool:
    """Whether *exc* is an upstream rate/quota rejection (HTTP 429).

    Both SDKs expose the HTTP status as ``status_code`` on their API errors.
    """
    return getattr(exc, "status_code", None) == 429


class AIClient(ABC):
    """Abstract base class for AI backends."""

    @abstractmethod
    async def complete(
        self,
        system: str,
        prompt: str,
        model: str,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> AIResponse:
        """Send a single-turn prompt and return the model's reply.

        SDK errors propagate unchanged; callers use ``is_quota_error`` to
        tell quota exhaustion apart from other failures.
        """
        ...


class OpenAIClient(AIClient):
    """OpenAI chat completions backend using the official SDK."""

    def __init__(self, config: OpenAIConfig):
        import openai

        self._client = openai.AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            max_retries=config.max_retries,
            timeout=config.timeout,
        )

    async def complete(
        self,
        system: str,
        prompt: str,
        model: str,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> AIResponse:
        logger.debug("api_request", backend="openai", model=model)
        completion = await self._client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        text = ""
        if completion.choices:
            text = completion.choices[0].message.content or ""
        usage = completion.usage
        logger.debug(
            "api_response",
            backend="openai",
            model=model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )
        return AIResponse(
            text=text,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            raw=completion,
        )


class AnthropicClient(AIClient):
    """Anthropic API backend using the official SDK."""

    def __init__(self, config: AnthropicConfig):
        import anthropic

        self._client = anthropic.AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
            max_retries=config.max_retries,
            timeout=config.timeout,
        )

    async def complete(
        self,
        system: str,
        prompt: str,
        model: str,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> AIResponse:
        logger.debug("api_request", backend="anthropic", model=model)
        response = await self._client.messages.create(
            model=model,
            max_tokens=max_tokens,
            system=system,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
        )
        logger.debug(
            "api_response",
            backend="anthropic",
            model=model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason,
        )
        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        return AIResponse(
            text=text,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            raw=response,
        )
