"""Exception hierarchy surfaced by agents, the orchestrator and the HTTP layer."""
from __future__ import annotations


class ContentFlowError(Exception):
    """Base error carrying a machine-readable code and an HTTP status."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(ContentFlowError):
    code = "INVALID_REQUEST"
    status_code = 400


class CapabilityMismatchError(ContentFlowError):
    """Raised when a request is sent directly to an agent that cannot handle it."""

    code = "CAPABILITY_MISMATCH"
    status_code = 422


class NoSuitableAgentError(ContentFlowError):
    code = "NO_SUITABLE_AGENT"
    status_code = 422

    def __init__(self, message: str = "No suitable agent found for this request") -> None:
        super().__init__(message)


class AgentNotFoundError(ContentFlowError):
    code = "AGENT_NOT_FOUND"
    status_code = 404

    def __init__(self, agent_id: str) -> None:
        super().__init__(f"Agent not found: {agent_id}")
        self.agent_id = agent_id


class JobNotFoundError(ContentFlowError):
    code = "JOB_NOT_FOUND"
    status_code = 404

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class GenerationError(ContentFlowError):
    """The generation backend failed to produce content."""

    code = "GENERATION_FAILED"
    status_code = 502


class UnsupportedProviderError(GenerationError):
    code = "UNSUPPORTED_PROVIDER"
    status_code = 500

    def __init__(self, provider: str) -> None:
        super().__init__(f"Unsupported AI provider: {provider}")
        self.provider = provider


class ProviderNotConfiguredError(GenerationError):
    code = "PROVIDER_NOT_CONFIGURED"
    status_code = 503

    def __init__(self, provider: str) -> None:
        super().__init__(f"Provider '{provider}' not registered in LLM pool")
        self.provider = provider


class GenerationTimeoutError(GenerationError):
    code = "GENERATION_TIMEOUT"
    status_code = 504
