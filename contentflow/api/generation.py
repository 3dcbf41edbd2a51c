"""Generation endpoints: synchronous, queued and multi-agent workflows."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from contentflow.core.models import (
    GenerationContext,
    GenerationRequest,
    GenerationResponse,
    QueueJob,
)
from contentflow.orchestration.orchestrator import AgentOrchestrator
from contentflow.runtime import get_job_queue, get_orchestrator
from contentflow.services.queue import InMemoryJobQueue

router = APIRouter(tags=["generation"])


class ContextBody(BaseModel):
    post_id: Optional[int] = None
    block_id: Optional[str] = None
    selected_content: Optional[str] = None


class GenerationBody(BaseModel):
    prompt: str = Field(..., min_length=1, description="Natural-language generation request")
    workflow_id: Optional[Union[int, str]] = None
    context: Optional[ContextBody] = None
    knowledge_base_ids: List[str] = Field(default_factory=list)

    def to_request(self) -> GenerationRequest:
        context = GenerationContext(**self.context.model_dump()) if self.context else None
        return GenerationRequest(
            prompt=self.prompt,
            workflow_id=self.workflow_id,
            context=context,
            knowledge_base_ids=tuple(self.knowledge_base_ids),
        )


class WorkflowBody(GenerationBody):
    agent_ids: List[str] = Field(..., min_length=1, description="Agents to run, in order")


class TokenUsageBody(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class GenerationResult(BaseModel):
    content: str
    confidence_score: float
    token_usage: TokenUsageBody
    processing_time: float
    agent_used: str
    metadata: Dict[str, Any]

    @classmethod
    def from_response(cls, response: GenerationResponse) -> "GenerationResult":
        usage = response.token_usage
        return cls(
            content=response.content,
            confidence_score=response.confidence_score,
            token_usage=TokenUsageBody(
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens,
                total_tokens=usage.total_tokens,
            ),
            processing_time=response.processing_time,
            agent_used=response.agent_used,
            metadata=dict(response.metadata),
        )


class JobAccepted(BaseModel):
    job_id: str


class JobView(BaseModel):
    id: str
    type: str
    status: str
    priority: int
    attempts: int
    max_attempts: int
    created_at: datetime
    processed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error: Optional[str] = None
    agent_id: Optional[str] = None
    result: Optional[GenerationResult] = None

    @classmethod
    def from_job(cls, job: QueueJob) -> "JobView":
        return cls(
            id=job.id,
            type=job.type,
            status=job.status.value,
            priority=job.priority,
            attempts=job.attempts,
            max_attempts=job.max_attempts,
            created_at=job.created_at,
            processed_at=job.processed_at,
            completed_at=job.completed_at,
            error=job.error,
            agent_id=job.agent_id,
            result=GenerationResult.from_response(job.result) if job.result else None,
        )


@router.post("/ai/generate", response_model=GenerationResult)
async def generate(
    body: GenerationBody,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> GenerationResult:
    response = await orchestrator.process_request(body.to_request())
    return GenerationResult.from_response(response)


@router.post("/ai/generate/async", response_model=JobAccepted, status_code=status.HTTP_202_ACCEPTED)
async def generate_async(
    body: GenerationBody,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> JobAccepted:
    job_id = await orchestrator.process_request_async(body.to_request())
    return JobAccepted(job_id=job_id)


@router.post("/ai/workflows/execute", response_model=List[GenerationResult])
async def execute_workflow(
    body: WorkflowBody,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> List[GenerationResult]:
    responses = await orchestrator.execute_workflow(body.to_request(), body.agent_ids)
    return [GenerationResult.from_response(response) for response in responses]


@router.get("/jobs/{job_id}", response_model=JobView)
async def get_job(job_id: str, queue: InMemoryJobQueue = Depends(get_job_queue)) -> JobView:
    return JobView.from_job(queue.get_job(job_id))
