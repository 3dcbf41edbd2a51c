"""HTTP API exposing agent administration."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from contentflow.core.errors import AgentNotFoundError
from contentflow.core.models import AgentSnapshot
from contentflow.orchestration.orchestrator import AgentOrchestrator
from contentflow.runtime import get_orchestrator

router = APIRouter(prefix="/agents", tags=["agents"])


class AgentConfigView(BaseModel):
    provider: str
    model: str


class AgentResponse(BaseModel):
    id: str
    name: str
    type: str
    status: str
    capabilities: List[str]
    config: AgentConfigView
    task_count: int
    last_error: Optional[str]

    @classmethod
    def from_snapshot(cls, snapshot: AgentSnapshot) -> "AgentResponse":
        return cls(**snapshot.as_dict())


class AgentConfigUpdate(BaseModel):
    provider: Optional[str] = Field(default=None, description="openai, anthropic or google")
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    system_prompt: Optional[str] = None
    api_key: Optional[str] = None


def _snapshot(orchestrator: AgentOrchestrator, agent_id: str) -> AgentResponse:
    agent = orchestrator.get_agent(agent_id)
    if agent is None:
        raise AgentNotFoundError(agent_id)
    return AgentResponse.from_snapshot(agent.get_status())


@router.get("", response_model=List[AgentResponse])
async def list_agents(orchestrator: AgentOrchestrator = Depends(get_orchestrator)) -> List[AgentResponse]:
    return [AgentResponse.from_snapshot(snapshot) for snapshot in orchestrator.get_all_agent_status()]


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(agent_id: str, orchestrator: AgentOrchestrator = Depends(get_orchestrator)) -> AgentResponse:
    return _snapshot(orchestrator, agent_id)


@router.patch("/{agent_id}/config", response_model=AgentResponse)
async def update_agent_config(
    agent_id: str,
    request: AgentConfigUpdate,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> AgentResponse:
    changes = request.model_dump(exclude_unset=True)
    if not orchestrator.update_agent_config(agent_id, **changes):
        raise AgentNotFoundError(agent_id)
    return _snapshot(orchestrator, agent_id)


@router.post("/{agent_id}/reset", response_model=AgentResponse)
async def reset_agent(agent_id: str, orchestrator: AgentOrchestrator = Depends(get_orchestrator)) -> AgentResponse:
    if not orchestrator.reset_agent(agent_id):
        raise AgentNotFoundError(agent_id)
    return _snapshot(orchestrator, agent_id)


@router.delete("/{agent_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_agent(agent_id: str, orchestrator: AgentOrchestrator = Depends(get_orchestrator)) -> None:
    if not orchestrator.remove_agent(agent_id):
        raise AgentNotFoundError(agent_id)
