"""Application runtime composition helpers."""
from __future__ import annotations

from functools import lru_cache

from contentflow.config import config
from contentflow.orchestration.orchestrator import AgentOrchestrator
from contentflow.orchestration.worker import QueueWorker
from contentflow.services.knowledge import InMemoryKnowledgeBase
from contentflow.services.llm_pool import LLMPool
from contentflow.services.queue import InMemoryJobQueue


@lru_cache
def get_job_queue() -> InMemoryJobQueue:
    return InMemoryJobQueue(retention=config.queue_job_retention)


@lru_cache
def get_knowledge_base() -> InMemoryKnowledgeBase:
    return InMemoryKnowledgeBase()


@lru_cache
def get_llm_pool() -> LLMPool:
    pool = LLMPool()
    pool.enable_agent_keys(openai_base_url=config.openai.base_url if config.openai else None)

    # Register providers that have credentials configured
    if config.openai:
        pool.register_openai(config.openai)
    if config.anthropic:
        pool.register_anthropic(config.anthropic)

    return pool


@lru_cache
def get_orchestrator() -> AgentOrchestrator:
    return AgentOrchestrator(
        queue=get_job_queue(),
        llm_pool=get_llm_pool(),
        knowledge_base=get_knowledge_base(),
        request_timeout=config.request_timeout,
        max_attempts=config.queue_max_attempts,
    )


@lru_cache
def get_queue_worker() -> QueueWorker:
    return QueueWorker(
        get_orchestrator(),
        get_job_queue(),
        retry_delay=config.queue_retry_delay,
    )
