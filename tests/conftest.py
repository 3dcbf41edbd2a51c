"""Shared fixtures for the orchestrator test-suite."""
from __future__ import annotations

import pytest

from contentflow.orchestration.orchestrator import AgentOrchestrator
from contentflow.services.llm_pool import LLMPool
from contentflow.services.queue import InMemoryJobQueue

from tests.fakes import FakeProvider


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def llm_pool(fake_provider: FakeProvider) -> LLMPool:
    pool = LLMPool()
    pool.register_client("openai", fake_provider)
    return pool


@pytest.fixture
def job_queue() -> InMemoryJobQueue:
    return InMemoryJobQueue()


@pytest.fixture
def orchestrator(job_queue: InMemoryJobQueue, llm_pool: LLMPool) -> AgentOrchestrator:
    return AgentOrchestrator(queue=job_queue, llm_pool=llm_pool)


@pytest.fixture
def empty_orchestrator(job_queue: InMemoryJobQueue, llm_pool: LLMPool) -> AgentOrchestrator:
    """Orchestrator with the default agents removed."""
    instance = AgentOrchestrator(queue=job_queue, llm_pool=llm_pool)
    for snapshot in instance.get_all_agent_status():
        instance.remove_agent(snapshot.agent_id)
    return instance
