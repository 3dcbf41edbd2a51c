"""Configuration management for the content generation service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class OpenAIConfig:
    """OpenAI service configuration."""

    api_key: str
    base_url: Optional[str] = None
    max_concurrent: int = 50


@dataclass(frozen=True)
class AnthropicConfig:
    """Anthropic service configuration."""

    api_key: str
    max_concurrent: int = 50


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return float(value)


@dataclass(frozen=True)
class Config:
    """Application configuration loaded from environment variables."""

    openai: Optional[OpenAIConfig] = None
    anthropic: Optional[AnthropicConfig] = None
    environment: str = "development"
    log_level: str = "INFO"
    request_timeout: Optional[float] = None
    queue_max_attempts: int = 3
    queue_retry_delay: float = 2.0
    queue_job_retention: int = 1000

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables."""
        openai_key = os.getenv("OPENAI_API_KEY")
        anthropic_key = os.getenv("ANTHROPIC_API_KEY")

        openai_config = None
        if openai_key:
            openai_config = OpenAIConfig(
                api_key=openai_key,
                base_url=os.getenv("OPENAI_BASE_URL") or None,
                max_concurrent=int(os.getenv("OPENAI_MAX_CONCURRENT", "50")),
            )

        anthropic_config = None
        if anthropic_key:
            anthropic_config = AnthropicConfig(
                api_key=anthropic_key,
                max_concurrent=int(os.getenv("ANTHROPIC_MAX_CONCURRENT", "50")),
            )

        return cls(
            openai=openai_config,
            anthropic=anthropic_config,
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            request_timeout=_optional_float("AGENT_REQUEST_TIMEOUT"),
            queue_max_attempts=int(os.getenv("QUEUE_MAX_ATTEMPTS", "3")),
            queue_retry_delay=float(os.getenv("QUEUE_RETRY_DELAY", "2.0")),
            queue_job_retention=int(os.getenv("QUEUE_JOB_RETENTION", "1000")),
        )


# Global config instance
config = Config.from_env()
