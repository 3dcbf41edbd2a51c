"""Orchestrator responsible for routing generation requests to agents."""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, List, Optional, Sequence

from contentflow.agents.ai_art import AIArtAgent
from contentflow.agents.base import Agent, prompt_excerpt
from contentflow.agents.content import ContentAgent
from contentflow.agents.layout import LayoutAgent
from contentflow.agents.stock_art import StockArtAgent
from contentflow.core.errors import NoSuitableAgentError
from contentflow.core.models import (
    AgentConfig,
    AgentSnapshot,
    AgentStatus,
    AgentType,
    GenerationRequest,
    GenerationResponse,
    Provider,
    QueueJob,
)
from contentflow.services.knowledge import KnowledgeBase
from contentflow.services.llm_pool import LLMPool
from contentflow.services.queue import JobQueue

logger = logging.getLogger(__name__)

DEFAULT_AGENT_CONFIG = AgentConfig(
    provider=Provider.OPENAI.value,
    model="gpt-4",
    temperature=0.7,
    max_tokens=1500,
    system_prompt="You are a helpful AI assistant.",
)

SYSTEM_PROMPTS = {
    AgentType.CONTENT: (
        "You are a professional content writer and copywriter. Create engaging, well-structured "
        "content that matches the user's requirements and brand voice."
    ),
    AgentType.LAYOUT: (
        "You are a UX/UI design expert. Provide layout suggestions, design recommendations, and "
        "user experience improvements for content presentation."
    ),
    AgentType.STOCK_ART: (
        "You are an image curation specialist. Help find and recommend relevant stock images, "
        "photos, and visual assets for content."
    ),
    AgentType.AI_ART: (
        "You are an AI art generation specialist. Create detailed prompts for AI image generation "
        "and provide artistic guidance."
    ),
}

BASE_SCORE = 0.5
CAPABILITY_BONUS = 0.1
TYPE_BONUS = 0.3
IDLE_BONUS = 0.1
MAX_SCORE = 1.0

CONTEXT_EXCERPT_LENGTH = 200


def _type_bonus_applies(agent_type: AgentType, prompt: str) -> bool:
    if agent_type is AgentType.CONTENT:
        return "write" in prompt or "content" in prompt or "text" in prompt
    if agent_type is AgentType.LAYOUT:
        return "design" in prompt or "layout" in prompt or "ui" in prompt
    if agent_type is AgentType.STOCK_ART:
        return "image" in prompt or "photo" in prompt or "picture" in prompt
    if agent_type is AgentType.AI_ART:
        return "generate" in prompt and ("image" in prompt or "art" in prompt)
    return False


class AgentOrchestrator:
    """Select, dispatch and chain generation requests across a pool of agents."""

    def __init__(
        self,
        *,
        queue: JobQueue,
        llm_pool: LLMPool,
        knowledge_base: Optional[KnowledgeBase] = None,
        request_timeout: Optional[float] = None,
        max_attempts: int = 3,
    ) -> None:
        self._queue = queue
        self._llm_pool = llm_pool
        self._knowledge_base = knowledge_base
        self._request_timeout = request_timeout
        self._max_attempts = max_attempts
        self._agents: Dict[str, Agent] = {}
        self._initialize_agents()

    def _initialize_agents(self) -> None:
        def config_for(agent_type: AgentType) -> AgentConfig:
            return dataclasses.replace(DEFAULT_AGENT_CONFIG, system_prompt=SYSTEM_PROMPTS[agent_type])

        for agent in (
            ContentAgent(config_for(AgentType.CONTENT), self._llm_pool, self._knowledge_base),
            LayoutAgent(config_for(AgentType.LAYOUT)),
            StockArtAgent(config_for(AgentType.STOCK_ART)),
            AIArtAgent(config_for(AgentType.AI_ART)),
        ):
            self._agents[agent.agent_id] = agent

        logger.info(
            "Agent orchestrator initialized (agent_count=%d, agents=%s)",
            len(self._agents),
            list(self._agents),
        )

    async def process_request(self, request: GenerationRequest) -> GenerationResponse:
        """Route a request to the best matching agent and return its response."""
        agent = self.select_best_agent(request)
        if agent is None:
            raise NoSuitableAgentError()

        return await self.dispatch(agent, request)

    async def dispatch(self, agent: Agent, request: GenerationRequest) -> GenerationResponse:
        """Send a request to an already selected agent. No fallback on failure."""
        logger.info(
            "Request routed to agent %s (post_id=%s, prompt=%r)",
            agent.agent_id,
            request.post_id,
            prompt_excerpt(request.prompt),
        )
        return await agent.process_request(request, timeout=self._request_timeout)

    async def process_request_async(self, request: GenerationRequest) -> str:
        """Queue a request for background processing and return the job id."""
        job = QueueJob(
            payload=request,
            type="ai-generation",
            priority=1,
            max_attempts=self._max_attempts,
        )
        await self._queue.add_job(job)
        logger.info("Request queued for async processing (job_id=%s, post_id=%s)", job.id, request.post_id)
        return job.id

    def select_best_agent(self, request: GenerationRequest) -> Optional[Agent]:
        candidates = [
            agent
            for agent in self._agents.values()
            if agent.status is not AgentStatus.ERROR and agent.can_handle(request)
        ]
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]

        # sorted() is stable: registration order decides ties.
        ranked = sorted(candidates, key=lambda agent: self.score_agent(agent, request), reverse=True)
        return ranked[0]

    def score_agent(self, agent: Agent, request: GenerationRequest) -> float:
        """How well an agent matches a request, clamped to [0, 1]."""
        score = BASE_SCORE
        prompt = request.prompt.lower()

        for capability in agent.capabilities:
            if capability.lower().replace("-", " ", 1) in prompt:
                score += CAPABILITY_BONUS

        if _type_bonus_applies(agent.agent_type, prompt):
            score += TYPE_BONUS

        if agent.status is AgentStatus.IDLE:
            score += IDLE_BONUS

        return min(score, MAX_SCORE)

    async def execute_workflow(
        self,
        request: GenerationRequest,
        agent_ids: Sequence[str],
    ) -> List[GenerationResponse]:
        """Run agents one after another, feeding earlier outputs into later prompts.

        Unknown ids and failing steps are logged and skipped, so the result
        holds only the responses that were actually produced, in order.
        """
        responses: List[GenerationResponse] = []
        logger.info("Executing multi-agent workflow (agent_ids=%s, post_id=%s)", list(agent_ids), request.post_id)

        for agent_id in agent_ids:
            agent = self._agents.get(agent_id)
            if agent is None:
                logger.warning("Agent not found: %s", agent_id)
                continue

            contextual_request = self.enhance_request_with_context(request, responses)
            try:
                response = await agent.process_request(contextual_request, timeout=self._request_timeout)
            except Exception as exc:  # noqa: BLE001
                logger.error("Agent %s failed in workflow: %s", agent_id, exc)
                continue
            responses.append(response)

        return responses

    @staticmethod
    def enhance_request_with_context(
        original: GenerationRequest,
        previous_responses: Sequence[GenerationResponse],
    ) -> GenerationRequest:
        if not previous_responses:
            return original

        prompt = original.prompt + "\n\nPrevious agent outputs for context:"
        for index, response in enumerate(previous_responses, start=1):
            prompt += f"\n{index}. {response.agent_used}: {response.content[:CONTEXT_EXCERPT_LENGTH]}..."
        return dataclasses.replace(original, prompt=prompt)

    def get_all_agent_status(self) -> List[AgentSnapshot]:
        return [agent.get_status() for agent in self._agents.values()]

    def get_agent(self, agent_id: str) -> Optional[Agent]:
        return self._agents.get(agent_id)

    def update_agent_config(self, agent_id: str, **changes: Any) -> bool:
        agent = self._agents.get(agent_id)
        if agent is None:
            return False
        agent.update_config(**changes)
        return True

    def reset_agent(self, agent_id: str) -> bool:
        agent = self._agents.get(agent_id)
        if agent is None:
            return False
        agent.reset()
        return True

    def add_agent(self, agent: Agent) -> None:
        """Register an agent, replacing any agent with the same id."""
        self._agents[agent.agent_id] = agent
        logger.info("Agent added: %s (agent_id=%s, type=%s)", agent.name, agent.agent_id, agent.agent_type.value)

    def remove_agent(self, agent_id: str) -> bool:
        removed = self._agents.pop(agent_id, None) is not None
        if removed:
            logger.info("Agent removed: %s", agent_id)
        return removed
