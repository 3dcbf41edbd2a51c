"""Tests for agent selection, dispatch and multi-agent workflows."""
from __future__ import annotations

import re

import pytest

from contentflow.core.errors import NoSuitableAgentError
from contentflow.core.models import AgentStatus, AgentType, GenerationRequest, JobStatus
from contentflow.orchestration.orchestrator import AgentOrchestrator
from contentflow.services.queue import InMemoryJobQueue

from tests.fakes import ScriptedAgent

DEFAULT_AGENT_IDS = ["content-agent", "layout-agent", "stock-art-agent", "ai-art-agent"]


def test_initializes_default_agents(orchestrator: AgentOrchestrator) -> None:
    statuses = orchestrator.get_all_agent_status()

    assert [s.agent_id for s in statuses] == DEFAULT_AGENT_IDS
    assert all(s.status is AgentStatus.IDLE for s in statuses)
    assert all((s.provider, s.model) == ("openai", "gpt-4") for s in statuses)

    layout = orchestrator.get_agent("layout-agent")
    assert layout.config.temperature == 0.7
    assert layout.config.max_tokens == 1500
    assert "UX/UI design expert" in layout.config.system_prompt


def test_single_candidate_skips_scoring(orchestrator: AgentOrchestrator, monkeypatch: pytest.MonkeyPatch) -> None:
    def fail_scoring(agent, request):
        raise AssertionError("scoring should not run for a single candidate")

    monkeypatch.setattr(orchestrator, "score_agent", fail_scoring)

    agent = orchestrator.select_best_agent(GenerationRequest(prompt="find a photo of a beach"))

    assert agent.agent_id == "stock-art-agent"


def test_generate_image_prefers_ai_art_over_stock_art(orchestrator: AgentOrchestrator) -> None:
    request = GenerationRequest(prompt="generate an image of a mountain")

    assert orchestrator.get_agent("stock-art-agent").can_handle(request) is False
    assert orchestrator.get_agent("ai-art-agent").can_handle(request) is True
    assert orchestrator.select_best_agent(request).agent_id == "ai-art-agent"


def test_layout_request_outscores_content_agent(orchestrator: AgentOrchestrator) -> None:
    request = GenerationRequest(prompt="improve the layout design for mobile")

    layout_score = orchestrator.score_agent(orchestrator.get_agent("layout-agent"), request)
    content_score = orchestrator.score_agent(orchestrator.get_agent("content-agent"), request)

    assert layout_score == pytest.approx(1.0)
    assert content_score == pytest.approx(0.6)
    assert orchestrator.select_best_agent(request).agent_id == "layout-agent"


def test_score_is_clamped(empty_orchestrator: AgentOrchestrator) -> None:
    greedy = ScriptedAgent(
        "greedy",
        agent_type=AgentType.CONTENT,
        capabilities=["alpha", "beta", "gamma", "delta", "epsilon"],
    )
    request = GenerationRequest(prompt="write alpha beta gamma delta epsilon")

    assert empty_orchestrator.score_agent(greedy, request) == 1.0
    assert empty_orchestrator.score_agent(greedy, GenerationRequest(prompt="nothing")) == pytest.approx(0.6)


def test_hyphenated_capabilities_match_with_spaces(empty_orchestrator: AgentOrchestrator) -> None:
    agent = ScriptedAgent("tagged", agent_type=AgentType.LAYOUT, capabilities=["grid-layouts"])

    score = empty_orchestrator.score_agent(agent, GenerationRequest(prompt="two grid layouts please"))

    # capability +0.1, "layout" type bonus +0.3, idle +0.1
    assert score == pytest.approx(1.0)


def test_ties_go_to_first_registered(empty_orchestrator: AgentOrchestrator) -> None:
    empty_orchestrator.add_agent(ScriptedAgent("first"))
    empty_orchestrator.add_agent(ScriptedAgent("second"))

    assert empty_orchestrator.select_best_agent(GenerationRequest(prompt="hello")).agent_id == "first"

    empty_orchestrator.add_agent(ScriptedAgent("specialist", capabilities=["hello"]))
    assert empty_orchestrator.select_best_agent(GenerationRequest(prompt="hello")).agent_id == "specialist"


@pytest.mark.anyio
async def test_no_suitable_agent(orchestrator: AgentOrchestrator) -> None:
    with pytest.raises(NoSuitableAgentError):
        await orchestrator.process_request(GenerationRequest(prompt="hello there"))


@pytest.mark.anyio
async def test_failed_agent_is_excluded_until_config_update(empty_orchestrator: AgentOrchestrator) -> None:
    flaky = ScriptedAgent("flaky", error=RuntimeError("rate limited"))
    empty_orchestrator.add_agent(flaky)
    request = GenerationRequest(prompt="write something")

    with pytest.raises(RuntimeError, match="rate limited"):
        await empty_orchestrator.process_request(request)

    assert empty_orchestrator.select_best_agent(request) is None

    assert empty_orchestrator.update_agent_config("flaky", model="gpt-4o") is True
    assert empty_orchestrator.select_best_agent(request) is flaky

    flaky.error = None
    response = await empty_orchestrator.process_request(request)
    assert response.agent_used == "flaky"
    assert flaky.status is AgentStatus.IDLE


@pytest.mark.anyio
async def test_reset_agent_readmits_failed_agent(empty_orchestrator: AgentOrchestrator) -> None:
    flaky = ScriptedAgent("flaky", error=RuntimeError("boom"))
    empty_orchestrator.add_agent(flaky)
    with pytest.raises(RuntimeError):
        await empty_orchestrator.process_request(GenerationRequest(prompt="x"))

    assert empty_orchestrator.reset_agent("flaky") is True
    assert empty_orchestrator.reset_agent("ghost") is False
    assert flaky.status is AgentStatus.IDLE


@pytest.mark.anyio
async def test_no_fallback_to_second_agent(empty_orchestrator: AgentOrchestrator) -> None:
    best = ScriptedAgent("best", capabilities=["poem"], error=RuntimeError("down"))
    backup = ScriptedAgent("backup")
    empty_orchestrator.add_agent(best)
    empty_orchestrator.add_agent(backup)

    with pytest.raises(RuntimeError, match="down"):
        await empty_orchestrator.process_request(GenerationRequest(prompt="a poem"))

    assert backup.prompts == []


@pytest.mark.anyio
async def test_workflow_tolerates_failures_and_unknown_ids(empty_orchestrator: AgentOrchestrator) -> None:
    first = ScriptedAgent("a", content="draft from a")
    broken = ScriptedAgent("b", error=RuntimeError("b is down"))
    last = ScriptedAgent("c", content="polish from c")
    for agent in (first, broken, last):
        empty_orchestrator.add_agent(agent)

    responses = await empty_orchestrator.execute_workflow(
        GenerationRequest(prompt="build a landing page"), ["a", "ghost", "b", "c"]
    )

    assert [r.agent_used for r in responses] == ["a", "c"]
    assert [r.content for r in responses] == ["draft from a", "polish from c"]
    assert "1. a: draft from a..." in last.prompts[0]


@pytest.mark.anyio
async def test_workflow_chains_truncated_context(empty_orchestrator: AgentOrchestrator) -> None:
    writer = ScriptedAgent("writer", content="x" * 300)
    designer = ScriptedAgent("designer")
    empty_orchestrator.add_agent(writer)
    empty_orchestrator.add_agent(designer)
    request = GenerationRequest(prompt="launch announcement")

    await empty_orchestrator.execute_workflow(request, ["writer", "designer"])

    assert writer.prompts == ["launch announcement"]
    second_prompt = designer.prompts[0]
    assert second_prompt.startswith("launch announcement\n\nPrevious agent outputs for context:")
    assert "\n1. writer: " + "x" * 200 + "..." in second_prompt
    assert "x" * 201 not in second_prompt
    assert request.prompt == "launch announcement"


@pytest.mark.anyio
async def test_workflow_first_success_after_failure_uses_original_prompt(
    empty_orchestrator: AgentOrchestrator,
) -> None:
    broken = ScriptedAgent("broken", error=RuntimeError("nope"))
    worker = ScriptedAgent("worker")
    empty_orchestrator.add_agent(broken)
    empty_orchestrator.add_agent(worker)

    responses = await empty_orchestrator.execute_workflow(GenerationRequest(prompt="go"), ["broken", "worker"])

    assert len(responses) == 1
    assert worker.prompts == ["go"]


@pytest.mark.anyio
async def test_process_request_async_queues_job(
    orchestrator: AgentOrchestrator, job_queue: InMemoryJobQueue
) -> None:
    request = GenerationRequest(prompt="find a photo of a beach", workflow_id=3)

    job_id = await orchestrator.process_request_async(request)

    assert re.fullmatch(r"ai-gen-\d+-[a-z0-9]{9}", job_id)
    job = job_queue.get_job(job_id)
    assert job.type == "ai-generation"
    assert job.priority == 1
    assert job.status is JobStatus.PENDING
    assert job.attempts == 0
    assert job.max_attempts == 3
    assert job.payload is request
    assert job_queue.pending_count() == 1


def test_agent_registry_administration(orchestrator: AgentOrchestrator) -> None:
    assert orchestrator.update_agent_config("ghost", model="gpt-4o") is False
    assert orchestrator.remove_agent("ghost") is False

    assert orchestrator.update_agent_config("layout-agent", temperature=0.1) is True
    assert orchestrator.get_agent("layout-agent").config.temperature == 0.1

    replacement = ScriptedAgent("layout-agent", agent_type=AgentType.LAYOUT)
    orchestrator.add_agent(replacement)
    assert orchestrator.get_agent("layout-agent") is replacement
    assert len(orchestrator.get_all_agent_status()) == 4

    assert orchestrator.remove_agent("layout-agent") is True
    assert orchestrator.get_agent("layout-agent") is None
    assert len(orchestrator.get_all_agent_status()) == 3
