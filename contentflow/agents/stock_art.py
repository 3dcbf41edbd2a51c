"""Stock image curation agent."""
from __future__ import annotations

from contentflow.agents.base import Agent, mentions_any
from contentflow.core.models import (
    AgentConfig,
    AgentType,
    GenerationRequest,
    GenerationResponse,
)

STOCK_ART_AGENT_ID = "stock-art-agent"

CAPABILITIES = (
    "stock-photos",
    "image-curation",
    "visual-assets",
    "photography",
    "illustrations",
    "icons",
    "graphics",
    "image-search",
)

STOCK_KEYWORDS = ("image", "photo", "stock", "picture", "visual", "illustration")
# Requests to produce new imagery belong to the AI art agent.
GENERATION_KEYWORDS = ("generate", "create")


class StockArtAgent(Agent):
    """Finds and recommends existing stock images for content."""

    def __init__(self, config: AgentConfig, *, max_concurrency: int = 1) -> None:
        super().__init__(
            STOCK_ART_AGENT_ID,
            "Stock Art Curation Agent",
            AgentType.STOCK_ART,
            CAPABILITIES,
            config,
            max_concurrency=max_concurrency,
        )

    def can_handle(self, request: GenerationRequest) -> bool:
        return mentions_any(request.prompt, STOCK_KEYWORDS) and not mentions_any(
            request.prompt, GENERATION_KEYWORDS
        )

    async def generate_content(self, request: GenerationRequest) -> GenerationResponse:
        return GenerationResponse(
            content="Stock art curation will be implemented in the next phase.",
            confidence_score=0.7,
            agent_used=self.agent_id,
            metadata={"type": "stock-art-recommendation"},
        )
