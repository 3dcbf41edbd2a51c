"""Agent for custom AI-generated imagery."""
from __future__ import annotations

from contentflow.agents.base import Agent, mentions_any
from contentflow.core.models import (
    AgentConfig,
    AgentType,
    GenerationRequest,
    GenerationResponse,
)

AI_ART_AGENT_ID = "ai-art-agent"

CAPABILITIES = (
    "ai-image-generation",
    "custom-artwork",
    "digital-art",
    "prompt-engineering",
    "style-transfer",
    "artistic-rendering",
    "concept-art",
    "creative-visuals",
)

ACTION_KEYWORDS = ("generate", "create", "make")
IMAGE_KEYWORDS = ("image", "art", "picture", "visual", "artwork")


class AIArtAgent(Agent):
    def __init__(self, config: AgentConfig, *, max_concurrency: int = 1) -> None:
        super().__init__(
            AI_ART_AGENT_ID,
            "AI Art Generation Agent",
            AgentType.AI_ART,
            CAPABILITIES,
            config,
            max_concurrency=max_concurrency,
        )

    def can_handle(self, request: GenerationRequest) -> bool:
        return mentions_any(request.prompt, ACTION_KEYWORDS) and mentions_any(
            request.prompt, IMAGE_KEYWORDS
        )

    async def generate_content(self, request: GenerationRequest) -> GenerationResponse:
        return GenerationResponse(
            content="AI art generation will be implemented in the next phase.",
            confidence_score=0.9,
            agent_used=self.agent_id,
            metadata={"type": "ai-art-generation"},
        )
