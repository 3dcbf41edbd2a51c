"""Core data models shared across orchestrator components."""
from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from contentflow.core.errors import InvalidRequestError


class Provider(str, Enum):
    """LLM providers an agent can be configured for."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


class AgentType(str, Enum):
    CONTENT = "content"
    LAYOUT = "layout"
    STOCK_ART = "stock-art"
    AI_ART = "ai-art"


class AgentStatus(str, Enum):
    """Observable state of an agent, derived from its in-flight calls and last error."""

    IDLE = "idle"
    PROCESSING = "processing"
    ERROR = "error"


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class AgentConfig:
    """Generation settings owned by a single agent."""

    provider: str
    model: str
    temperature: float = 0.7
    max_tokens: int = 1500
    system_prompt: str = "You are a helpful AI assistant."
    api_key: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True, slots=True)
class GenerationContext:
    """Editor-side context attached to a request."""

    post_id: Optional[int] = None
    block_id: Optional[str] = None
    selected_content: Optional[str] = None


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """A natural-language generation request routed by the orchestrator."""

    prompt: str
    workflow_id: Optional[Union[int, str]] = None
    context: Optional[GenerationContext] = None
    knowledge_base_ids: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.prompt, str) or not self.prompt.strip():
            raise InvalidRequestError("Generation request prompt must be a non-empty string")
        if not isinstance(self.knowledge_base_ids, tuple):
            object.__setattr__(self, "knowledge_base_ids", tuple(self.knowledge_base_ids))

    @property
    def post_id(self) -> Optional[int]:
        return self.context.post_id if self.context else None


@dataclass(frozen=True, slots=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True, slots=True)
class GenerationResponse:
    """Result of one successful generation."""

    content: str
    confidence_score: float
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    processing_time: float = 0.0
    agent_used: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AgentSnapshot:
    """Read-only view of an agent exposed to callers. Never carries secrets."""

    agent_id: str
    name: str
    agent_type: AgentType
    status: AgentStatus
    capabilities: Tuple[str, ...]
    provider: str
    model: str
    task_count: int = 0
    last_error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.agent_id,
            "name": self.name,
            "type": self.agent_type.value,
            "status": self.status.value,
            "capabilities": list(self.capabilities),
            "config": {"provider": self.provider, "model": self.model},
            "task_count": self.task_count,
            "last_error": self.last_error,
        }


def _new_job_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"ai-gen-{int(time.time() * 1000)}-{suffix}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class QueueJob:
    """Unit of asynchronous work handed to the job queue."""

    payload: GenerationRequest
    type: str = "ai-generation"
    priority: int = 1
    status: JobStatus = JobStatus.PENDING
    attempts: int = 0
    max_attempts: int = 3
    id: str = field(default_factory=_new_job_id)
    created_at: datetime = field(default_factory=_utcnow)
    processed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error: Optional[str] = None
    result: Optional[GenerationResponse] = None
    agent_id: Optional[str] = None
