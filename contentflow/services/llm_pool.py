"""LLM client pool for shared provider access with concurrency control."""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, Iterable, Optional, Tuple

from contentflow.config import AnthropicConfig, OpenAIConfig
from contentflow.core.errors import ProviderNotConfiguredError
from contentflow.services.providers import AnthropicProvider, OpenAIProvider, ProviderClient

ClientFactory = Callable[[], ProviderClient]
KeyedClientFactory = Callable[[str], ProviderClient]


class LLMPool:
    """Manages shared provider clients with concurrency limiting.

    Each provider has a default client built from service credentials and,
    optionally, a keyed factory used when an agent carries its own API key.
    Keyed clients are cached per key and share the provider's semaphore.
    """

    def __init__(self) -> None:
        self._factories: Dict[str, ClientFactory] = {}
        self._keyed_factories: Dict[str, KeyedClientFactory] = {}
        self._clients: Dict[str, ProviderClient] = {}
        self._keyed_clients: Dict[Tuple[str, str], ProviderClient] = {}
        self._semaphores: Dict[str, asyncio.Semaphore] = {}

    def register(self, provider: str, factory: ClientFactory, max_concurrent: int = 50) -> None:
        """Register a lazily built client for a provider name."""
        self._factories[provider] = factory
        self._clients.pop(provider, None)
        self._semaphores[provider] = asyncio.Semaphore(max_concurrent)

    def register_client(self, provider: str, client: ProviderClient, max_concurrent: int = 50) -> None:
        """Register an already constructed client."""
        self.register(provider, lambda: client, max_concurrent)

    def register_keyed(self, provider: str, factory: KeyedClientFactory, max_concurrent: int = 50) -> None:
        """Register a factory building a client for a caller-supplied API key."""
        self._keyed_factories[provider] = factory
        for cached in [key for key in self._keyed_clients if key[0] == provider]:
            del self._keyed_clients[cached]
        self._semaphores.setdefault(provider, asyncio.Semaphore(max_concurrent))

    def register_openai(self, config: OpenAIConfig) -> None:
        self.register(
            "openai",
            lambda: OpenAIProvider(api_key=config.api_key, base_url=config.base_url),
            config.max_concurrent,
        )

    def register_anthropic(self, config: AnthropicConfig) -> None:
        self.register(
            "anthropic",
            lambda: AnthropicProvider(api_key=config.api_key),
            config.max_concurrent,
        )

    def enable_agent_keys(self, openai_base_url: Optional[str] = None) -> None:
        """Let agents with their own ``api_key`` reach OpenAI and Anthropic."""
        self.register_keyed(
            "openai",
            lambda api_key: OpenAIProvider(api_key=api_key, base_url=openai_base_url),
        )
        self.register_keyed("anthropic", lambda api_key: AnthropicProvider(api_key=api_key))

    @property
    def providers(self) -> Iterable[str]:
        return tuple(self._factories)

    def _client_for(self, provider: str, api_key: Optional[str]) -> ProviderClient:
        if api_key is None:
            if provider not in self._clients:
                self._clients[provider] = self._factories[provider]()
            return self._clients[provider]

        cache_key = (provider, api_key)
        if cache_key not in self._keyed_clients:
            self._keyed_clients[cache_key] = self._keyed_factories[provider](api_key)
        return self._keyed_clients[cache_key]

    @asynccontextmanager
    async def acquire(self, provider: str, api_key: Optional[str] = None) -> AsyncIterator[ProviderClient]:
        """Acquire access to a provider client with concurrency control.

        With ``api_key`` the client is built by the provider's keyed factory
        instead of the service-wide default.
        """
        registry = self._factories if api_key is None else self._keyed_factories
        if provider not in registry:
            raise ProviderNotConfiguredError(provider)

        semaphore = self._semaphores[provider]
        await semaphore.acquire()

        try:
            # Lazy initialization on first use
            yield self._client_for(provider, api_key)
        finally:
            semaphore.release()
