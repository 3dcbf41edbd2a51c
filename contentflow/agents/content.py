"""Copywriting agent backed by the configured LLM provider."""
from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING, List, Optional

from contentflow.agents.base import Agent, mentions_any
from contentflow.core.errors import UnsupportedProviderError
from contentflow.core.models import (
    AgentConfig,
    AgentType,
    GenerationRequest,
    GenerationResponse,
    Provider,
)

if TYPE_CHECKING:
    from contentflow.services.knowledge import KnowledgeBase
    from contentflow.services.llm_pool import LLMPool

logger = logging.getLogger(__name__)

CONTENT_AGENT_ID = "content-agent"

CAPABILITIES = (
    "blog-posts",
    "articles",
    "marketing-copy",
    "product-descriptions",
    "social-media",
    "email-content",
    "headlines",
    "meta-descriptions",
    "content-improvement",
    "grammar-correction",
    "tone-adjustment",
    "seo-optimization",
)

CONTENT_TYPES = (
    "blog-post",
    "article",
    "marketing",
    "product-description",
    "social-media",
    "email",
    "headline",
    "meta-description",
    "content-improvement",
    "grammar",
    "seo",
)

CONTENT_INDICATORS = (
    "write",
    "create",
    "generate",
    "improve",
    "edit",
    "rewrite",
    "optimize",
    "content",
    "copy",
    "text",
    "article",
    "blog",
    "post",
)

# First matching family wins.
CONTENT_TYPE_FAMILIES = (
    (("blog", "post", "article"), "blog-post"),
    (("product", "description", "features"), "product-description"),
    (("marketing", "advertisement", "promo"), "marketing-copy"),
    (("social", "twitter", "facebook", "instagram"), "social-media"),
    (("email", "newsletter", "subject line"), "email-content"),
    (("headline", "title", "heading"), "headline"),
    (("meta", "description", "seo"), "meta-description"),
)

SUPPORTED_PROVIDERS = (Provider.OPENAI, Provider.ANTHROPIC)
WORDS_PER_MINUTE = 200

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def detect_content_type(prompt: str) -> str:
    """Classify the requested content from keywords in the prompt."""
    for keywords, content_type in CONTENT_TYPE_FAMILIES:
        if mentions_any(prompt, keywords):
            return content_type
    return "general-content"


def calculate_seo_score(content: str, prompt: str) -> float:
    """Heuristic SEO score in [0, 1] for generated content."""
    score = 0.5

    content_lower = content.lower()
    if any(len(word) > 3 and word in content_lower for word in prompt.lower().split()):
        score += 0.2

    word_count = len(content.split())
    if 300 <= word_count <= 1500:
        score += 0.2

    # Short sentences stand in for heading-like lines.
    if any(0 < len(sentence.strip()) < 50 for sentence in _SENTENCE_SPLIT.split(content)):
        score += 0.1

    return min(score, 1.0)


class ContentAgent(Agent):
    """Handles blog posts, articles, marketing copy and general text content."""

    def __init__(
        self,
        config: AgentConfig,
        llm_pool: LLMPool,
        knowledge_base: Optional[KnowledgeBase] = None,
        *,
        max_concurrency: int = 1,
    ) -> None:
        super().__init__(
            CONTENT_AGENT_ID,
            "Content Creation Agent",
            AgentType.CONTENT,
            CAPABILITIES,
            config,
            max_concurrency=max_concurrency,
        )
        self._llm_pool = llm_pool
        self._knowledge_base = knowledge_base

    def can_handle(self, request: GenerationRequest) -> bool:
        prompt = request.prompt.lower()
        has_content_keywords = any(
            content_type.replace("-", " ", 1) in prompt or content_type in prompt
            for content_type in CONTENT_TYPES
        )
        return has_content_keywords or mentions_any(prompt, CONTENT_INDICATORS)

    async def build_system_prompt(self, request: GenerationRequest) -> str:
        system_prompt = self.config.system_prompt

        if request.context and request.context.selected_content:
            system_prompt += (
                "\n\nYou are improving existing content. "
                f'Original content: "{request.context.selected_content}"'
            )

        if request.knowledge_base_ids:
            system_prompt += "\n\nUse the brand guidelines and writing style from the knowledge base."
            if self._knowledge_base is not None:
                guidelines = await self._knowledge_base.get_context(
                    request.knowledge_base_ids, request.prompt
                )
                if guidelines:
                    system_prompt += f"\n\n{guidelines}"

        return system_prompt

    def _resolve_provider(self) -> Provider:
        try:
            provider = Provider(self.config.provider)
        except ValueError:
            provider = None
        if provider not in SUPPORTED_PROVIDERS:
            raise UnsupportedProviderError(getattr(self.config.provider, "value", self.config.provider))
        return provider

    async def generate_content(self, request: GenerationRequest) -> GenerationResponse:
        provider = self._resolve_provider()
        messages: List[dict] = [
            {"role": "system", "content": await self.build_system_prompt(request)},
            {"role": "user", "content": request.prompt},
        ]

        try:
            async with self._llm_pool.acquire(provider.value, api_key=self.config.api_key) as client:
                result = await client.generate(
                    model=self.config.model,
                    messages=messages,
                    temperature=self.config.temperature,
                    max_tokens=self.config.max_tokens,
                )
        except Exception as exc:
            logger.error(
                "Content agent generation failed (provider=%s, model=%s): %s",
                provider.value,
                self.config.model,
                exc,
            )
            raise

        word_count = len(result.content.split())
        response = GenerationResponse(
            content=result.content,
            confidence_score=result.confidence_score,
            token_usage=result.token_usage,
            processing_time=result.latency,
            agent_used=self.agent_id,
            metadata={
                "provider": provider.value,
                "model": result.model,
                "finish_reason": result.finish_reason,
                "content_type": detect_content_type(request.prompt),
                "word_count": word_count,
                "estimated_reading_time": math.ceil(word_count / WORDS_PER_MINUTE),
                "seo_score": calculate_seo_score(result.content, request.prompt),
            },
        )

        logger.info(
            "Content agent generated response (content_type=%s, word_count=%d, confidence=%.2f)",
            response.metadata["content_type"],
            word_count,
            response.confidence_score,
        )
        return response
