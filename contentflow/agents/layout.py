"""Layout and design suggestion agent."""
from __future__ import annotations

import logging

from contentflow.agents.base import Agent, mentions_any, prompt_excerpt
from contentflow.core.models import (
    AgentConfig,
    AgentType,
    GenerationRequest,
    GenerationResponse,
)

logger = logging.getLogger(__name__)

LAYOUT_AGENT_ID = "layout-agent"

CAPABILITIES = (
    "layout-design",
    "ui-suggestions",
    "ux-improvements",
    "responsive-design",
    "accessibility",
    "visual-hierarchy",
    "color-schemes",
    "typography",
    "spacing",
    "grid-layouts",
)

LAYOUT_KEYWORDS = ("layout", "design", "ui", "ux", "visual", "style", "responsive", "mobile")


class LayoutAgent(Agent):
    """UX/UI design suggestions and layout optimization."""

    def __init__(self, config: AgentConfig, *, max_concurrency: int = 1) -> None:
        super().__init__(
            LAYOUT_AGENT_ID,
            "Layout & Design Agent",
            AgentType.LAYOUT,
            CAPABILITIES,
            config,
            max_concurrency=max_concurrency,
        )

    def can_handle(self, request: GenerationRequest) -> bool:
        return mentions_any(request.prompt, LAYOUT_KEYWORDS)

    async def generate_content(self, request: GenerationRequest) -> GenerationResponse:
        logger.info("Layout agent processing request (prompt=%r)", prompt_excerpt(request.prompt))
        # TODO: ask the configured provider for structured block layout suggestions.
        return GenerationResponse(
            content="Layout suggestions will be implemented in the next phase.",
            confidence_score=0.8,
            agent_used=self.agent_id,
            metadata={"type": "layout-suggestion"},
        )
