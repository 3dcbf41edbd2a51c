"""Tests for the OpenAI and Anthropic provider adapters using stubbed SDK clients."""
from __future__ import annotations

from types import SimpleNamespace

import anthropic
import openai
import pytest

from contentflow.core.errors import GenerationError
from contentflow.services.providers import AnthropicProvider, OpenAIProvider

MESSAGES = [
    {"role": "system", "content": "You are a copywriter."},
    {"role": "user", "content": "Write a tagline."},
]


class RecordingCreate:
    """Async stand-in for an SDK ``create`` method."""

    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.kwargs: dict = {}

    async def __call__(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


def _openai_client(create: RecordingCreate) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def _openai_response(finish_reason: str = "stop") -> SimpleNamespace:
    return SimpleNamespace(
        model="gpt-4-0613",
        choices=[SimpleNamespace(message=SimpleNamespace(content="Fresh ideas, daily."), finish_reason=finish_reason)],
        usage=SimpleNamespace(prompt_tokens=20, completion_tokens=5, total_tokens=25),
    )


def _anthropic_response(stop_reason: str = "end_turn") -> SimpleNamespace:
    return SimpleNamespace(
        model="claude-3-5-sonnet",
        content=[
            SimpleNamespace(type="text", text="Fresh ideas, "),
            SimpleNamespace(type="tool_use", name="ignored"),
            SimpleNamespace(type="text", text="daily."),
        ],
        usage=SimpleNamespace(input_tokens=18, output_tokens=6),
        stop_reason=stop_reason,
    )


@pytest.mark.anyio
async def test_openai_provider_maps_completion() -> None:
    create = RecordingCreate(_openai_response())
    provider = OpenAIProvider("sk-test", client=_openai_client(create))

    result = await provider.generate(model="gpt-4", messages=MESSAGES, temperature=0.7, max_tokens=1500)

    assert result.content == "Fresh ideas, daily."
    assert result.model == "gpt-4-0613"
    assert result.token_usage.total_tokens == 25
    assert result.confidence_score == 0.9
    assert result.latency >= 0.0
    assert create.kwargs == {"model": "gpt-4", "messages": MESSAGES, "temperature": 0.7, "max_tokens": 1500}


@pytest.mark.anyio
async def test_openai_truncated_completion_lowers_confidence() -> None:
    provider = OpenAIProvider("sk-test", client=_openai_client(RecordingCreate(_openai_response("length"))))

    result = await provider.generate(model="gpt-4", messages=MESSAGES, temperature=0.7, max_tokens=10)

    assert result.finish_reason == "length"
    assert result.confidence_score == 0.6


@pytest.mark.anyio
async def test_openai_errors_are_wrapped() -> None:
    provider = OpenAIProvider("sk-test", client=_openai_client(RecordingCreate(error=openai.OpenAIError("boom"))))

    with pytest.raises(GenerationError, match="OpenAI request failed: boom"):
        await provider.generate(model="gpt-4", messages=MESSAGES, temperature=0.7, max_tokens=10)


@pytest.mark.anyio
async def test_anthropic_provider_lifts_system_prompt() -> None:
    create = RecordingCreate(_anthropic_response())
    provider = AnthropicProvider("sk-ant", client=SimpleNamespace(messages=SimpleNamespace(create=create)))

    result = await provider.generate(model="claude-3-5-sonnet", messages=MESSAGES, temperature=0.5, max_tokens=200)

    assert create.kwargs["system"] == "You are a copywriter."
    assert create.kwargs["messages"] == [{"role": "user", "content": "Write a tagline."}]
    assert result.content == "Fresh ideas, daily."
    assert (result.token_usage.prompt_tokens, result.token_usage.completion_tokens) == (18, 6)
    assert result.token_usage.total_tokens == 24
    assert result.confidence_score == 0.9


@pytest.mark.anyio
async def test_anthropic_max_tokens_stop_lowers_confidence() -> None:
    create = RecordingCreate(_anthropic_response("max_tokens"))
    provider = AnthropicProvider("sk-ant", client=SimpleNamespace(messages=SimpleNamespace(create=create)))

    result = await provider.generate(model="claude-3-5-sonnet", messages=MESSAGES, temperature=0.5, max_tokens=5)

    assert result.confidence_score == 0.6


@pytest.mark.anyio
async def test_anthropic_errors_are_wrapped() -> None:
    create = RecordingCreate(error=anthropic.AnthropicError("boom"))
    provider = AnthropicProvider("sk-ant", client=SimpleNamespace(messages=SimpleNamespace(create=create)))

    with pytest.raises(GenerationError, match="Anthropic request failed: boom"):
        await provider.generate(model="claude-3-5-sonnet", messages=MESSAGES, temperature=0.5, max_tokens=5)
