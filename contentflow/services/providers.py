"""Provider clients wrapping the OpenAI and Anthropic SDKs behind one contract."""
from __future__ import annotations

import abc
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import anthropic
import openai

from contentflow.core.errors import GenerationError
from contentflow.core.models import TokenUsage

Message = Dict[str, str]

NATURAL_STOP_CONFIDENCE = 0.9
TRUNCATED_CONFIDENCE = 0.6


@dataclass(frozen=True, slots=True)
class ProviderResult:
    """Generated text plus usage and timing reported by a provider."""

    content: str
    token_usage: TokenUsage
    latency: float
    model: str
    finish_reason: Optional[str] = None
    confidence_score: float = NATURAL_STOP_CONFIDENCE


class ProviderClient(abc.ABC):
    """Given a prompt and parameters, return generated text, token usage and latency."""

    name: str = "provider"

    @abc.abstractmethod
    async def generate(
        self,
        *,
        model: str,
        messages: List[Message],
        temperature: float,
        max_tokens: int,
    ) -> ProviderResult:
        """Run one completion."""


class OpenAIProvider(ProviderClient):
    """Chat completions through ``openai.AsyncOpenAI``."""

    name = "openai"

    def __init__(self, api_key: str, base_url: Optional[str] = None, client: Any = None) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = openai.AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client

    async def generate(
        self,
        *,
        model: str,
        messages: List[Message],
        temperature: float,
        max_tokens: int,
    ) -> ProviderResult:
        client = self._get_client()
        started = time.perf_counter()
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as exc:
            raise GenerationError(f"OpenAI request failed: {exc}") from exc

        choice = response.choices[0]
        usage = response.usage
        token_usage = TokenUsage(
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            total_tokens=usage.total_tokens if usage else 0,
        )
        return ProviderResult(
            content=choice.message.content or "",
            token_usage=token_usage,
            latency=time.perf_counter() - started,
            model=response.model or model,
            finish_reason=choice.finish_reason,
            confidence_score=TRUNCATED_CONFIDENCE if choice.finish_reason == "length" else NATURAL_STOP_CONFIDENCE,
        )


class AnthropicProvider(ProviderClient):
    """Messages API through ``anthropic.AsyncAnthropic``."""

    name = "anthropic"

    def __init__(self, api_key: str, client: Any = None) -> None:
        self._api_key = api_key
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client

    async def generate(
        self,
        *,
        model: str,
        messages: List[Message],
        temperature: float,
        max_tokens: int,
    ) -> ProviderResult:
        # The Messages API takes the system prompt as a separate argument.
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        conversation = [m for m in messages if m["role"] != "system"]

        client = self._get_client()
        started = time.perf_counter()
        try:
            response = await client.messages.create(
                model=model,
                system=system,
                messages=conversation,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except anthropic.AnthropicError as exc:
            raise GenerationError(f"Anthropic request failed: {exc}") from exc

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        input_tokens = response.usage.input_tokens
        output_tokens = response.usage.output_tokens
        return ProviderResult(
            content=text,
            token_usage=TokenUsage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
            latency=time.perf_counter() - started,
            model=response.model or model,
            finish_reason=response.stop_reason,
            confidence_score=TRUNCATED_CONFIDENCE if response.stop_reason == "max_tokens" else NATURAL_STOP_CONFIDENCE,
        )
