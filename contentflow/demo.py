"""CLI demonstration of agent selection and workflow chaining."""
from __future__ import annotations

import asyncio

from contentflow.core.errors import ContentFlowError
from contentflow.core.models import GenerationRequest
from contentflow.log import configure_logging
from contentflow.orchestration.orchestrator import AgentOrchestrator
from contentflow.services.llm_pool import LLMPool
from contentflow.services.queue import InMemoryJobQueue

SAMPLE_PROMPTS = (
    "find a stock photo of a mountain lake",
    "generate an image of a mountain at sunrise",
    "suggest a responsive layout for a landing page",
)


async def main() -> None:
    configure_logging("WARNING")
    queue = InMemoryJobQueue()
    orchestrator = AgentOrchestrator(queue=queue, llm_pool=LLMPool())

    for prompt in SAMPLE_PROMPTS:
        request = GenerationRequest(prompt=prompt)
        agent = orchestrator.select_best_agent(request)
        print(f"{prompt!r} -> {agent.agent_id if agent else 'no agent'}")
        try:
            response = await orchestrator.process_request(request)
        except ContentFlowError as exc:
            print(f"  failed: {exc}")
            continue
        print(f"  {response.content} (confidence {response.confidence_score:.2f})")

    responses = await orchestrator.execute_workflow(
        GenerationRequest(prompt="pick a hero picture and a mobile layout for a travel post"),
        ["stock-art-agent", "layout-agent"],
    )
    print(f"Workflow produced {len(responses)} responses: {[r.agent_used for r in responses]}")

    job_id = await orchestrator.process_request_async(GenerationRequest(prompt="find a photo of a beach"))
    print(f"Queued job {job_id} ({queue.pending_count()} pending)")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
