"""Static provider registry used by the AI routing layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List

from .providers import AIProvider, AvailabilityState, ClaudeProvider, MistralProvider, OpenAIProvider


class ProviderNotFoundError(KeyError):
    """Raised when a requested provider is not present in the registry."""


@dataclass
class ProviderDescriptor:
    """Point-in-time view of a provider, computed on demand and never stored."""

    name: str
    status: AvailabilityState
    has_api_key: bool
    models: List[str] = field(default_factory=list)


_BASE_REGISTRY: Dict[str, Callable[[], AIProvider]] = {
    "claude": ClaudeProvider,
    "openai": OpenAIProvider,
    "mistral": MistralProvider,
}


def load_provider_registry() -> Dict[str, AIProvider]:
    """Return a fresh mapping of provider name to provider instance."""
    return {name: factory() for name, factory in _BASE_REGISTRY.items()}


def get_provider(name: str) -> AIProvider:
    """Return a new instance of the requested provider."""
    factory = _BASE_REGISTRY.get(name)
    if factory is None:
        raise ProviderNotFoundError(name)
    return factory()


def registry_keys() -> List[str]:
    """List names of registered providers."""
    return list(_BASE_REGISTRY.keys())


def describe_providers(registry: Dict[str, AIProvider] | None = None) -> List[ProviderDescriptor]:
    """Describe every registered provider from the current environment."""
    providers = registry if registry is not None else load_provider_registry()
    return [
        ProviderDescriptor(
            name=name,
            status=provider.status(),
            has_api_key=provider.has_api_key(),
            models=list(provider.models),
        )
        for name, provider in providers.items()
    ]
