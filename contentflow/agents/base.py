"""Base agent definition used by the orchestrator."""
from __future__ import annotations

import abc
import asyncio
import dataclasses
import logging
import time
from typing import Any, Iterable, Optional, Sequence, Tuple

from contentflow.core.errors import CapabilityMismatchError, GenerationTimeoutError
from contentflow.core.models import (
    AgentConfig,
    AgentSnapshot,
    AgentStatus,
    AgentType,
    GenerationRequest,
    GenerationResponse,
)

logger = logging.getLogger(__name__)

REQUIRED_CONFIG_FIELDS = ("provider", "model", "system_prompt")


def prompt_excerpt(prompt: str, limit: int = 100) -> str:
    return prompt[:limit] + "..."


def mentions_any(text: str, keywords: Iterable[str]) -> bool:
    """Case-insensitive substring match of any keyword in ``text``."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


class Agent(abc.ABC):
    """Abstract agent wrapping one generation capability.

    ``status`` is derived rather than assigned: an agent reports ``error``
    once a call has failed (until :meth:`reset` or :meth:`update_config`),
    ``processing`` while at least one call is in flight and ``idle``
    otherwise. Concurrent calls are bounded by ``max_concurrency``.

    Only :meth:`reset` and :meth:`update_config` clear a recorded error. A
    call that succeeds alongside a failing one leaves the agent in ``error``.
    """

    def __init__(
        self,
        agent_id: str,
        name: str,
        agent_type: AgentType,
        capabilities: Sequence[str],
        config: AgentConfig,
        *,
        max_concurrency: int = 1,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.agent_id = agent_id
        self.name = name
        self.agent_type = agent_type
        self.capabilities: Tuple[str, ...] = tuple(capabilities)
        self._config = config
        self._slots = asyncio.Semaphore(max_concurrency)
        self._in_flight = 0
        self._last_error: Optional[str] = None
        self.task_count = 0

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def status(self) -> AgentStatus:
        if self._last_error is not None:
            return AgentStatus.ERROR
        if self._in_flight:
            return AgentStatus.PROCESSING
        return AgentStatus.IDLE

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def can_handle(self, request: GenerationRequest) -> bool:
        """Return whether this agent accepts the request. Accepts everything by default."""
        return True

    @abc.abstractmethod
    async def generate_content(self, request: GenerationRequest) -> GenerationResponse:
        """Produce content for a request the agent has accepted."""

    async def process_request(
        self,
        request: GenerationRequest,
        *,
        timeout: Optional[float] = None,
    ) -> GenerationResponse:
        """Run a request with status tracking and wall-clock timing."""
        if not self.can_handle(request):
            raise CapabilityMismatchError(f"Agent {self.name} cannot handle this type of request")

        async with self._slots:
            self._in_flight += 1
            logger.info(
                "Agent %s processing request (agent_id=%s, post_id=%s, prompt=%r)",
                self.name,
                self.agent_id,
                request.post_id,
                prompt_excerpt(request.prompt),
            )
            started = time.perf_counter()
            try:
                if timeout is None:
                    response = await self.generate_content(request)
                else:
                    try:
                        response = await asyncio.wait_for(self.generate_content(request), timeout)
                    except asyncio.TimeoutError as exc:
                        raise GenerationTimeoutError(
                            f"Agent {self.name} did not finish within {timeout} seconds"
                        ) from exc
            except Exception as exc:
                self._last_error = str(exc) or type(exc).__name__
                logger.error(
                    "Agent %s failed to process request (agent_id=%s): %s",
                    self.name,
                    self.agent_id,
                    exc,
                    exc_info=True,
                )
                raise
            else:
                self.task_count += 1
            finally:
                self._in_flight -= 1

        processing_time = time.perf_counter() - started
        logger.info(
            "Agent %s completed request (agent_id=%s, processing_time=%.3fs, confidence=%.2f, tokens=%d)",
            self.name,
            self.agent_id,
            processing_time,
            response.confidence_score,
            response.token_usage.total_tokens,
        )
        return dataclasses.replace(response, processing_time=processing_time, agent_used=self.agent_id)

    def get_status(self) -> AgentSnapshot:
        """Snapshot of the agent. Only provider and model are exposed from the config."""
        return AgentSnapshot(
            agent_id=self.agent_id,
            name=self.name,
            agent_type=self.agent_type,
            status=self.status,
            capabilities=self.capabilities,
            provider=getattr(self._config.provider, "value", self._config.provider),
            model=self._config.model,
            task_count=self.task_count,
            last_error=self._last_error,
        )

    def update_config(self, **changes: Any) -> None:
        """Shallow-merge ``changes`` into the config and clear any recorded error."""
        self._config = dataclasses.replace(self._config, **changes)
        self._last_error = None
        logger.info(
            "Agent %s configuration updated (agent_id=%s, updated_fields=%s)",
            self.name,
            self.agent_id,
            sorted(changes),
        )

    def validate_config(self) -> bool:
        for field_name in REQUIRED_CONFIG_FIELDS:
            if not getattr(self._config, field_name, None):
                logger.error("Agent %s missing required config field: %s", self.name, field_name)
                return False
        return True

    def reset(self) -> None:
        """Clear a recorded error so the agent is eligible for selection again."""
        if self._last_error is not None:
            logger.info("Agent %s reset after error: %s", self.name, self._last_error)
        self._last_error = None
