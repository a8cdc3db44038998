import importlib
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from omega_air.services.llm import provider_registry  # noqa: E402
from omega_air.services.llm.providers import AvailabilityState  # noqa: E402


EXPECTED_UNCONFIGURED = {
    "claude": AvailabilityState.STUB,
    "openai": AvailabilityState.OFFLINE,
    "mistral": AvailabilityState.STUB,
}


def test_registry_contains_required_providers():
    registry = provider_registry.load_provider_registry()
    assert set(registry) == set(EXPECTED_UNCONFIGURED)
    for name, provider in registry.items():
        assert provider.name == name
        assert provider.models


def test_status_without_credentials():
    registry = provider_registry.load_provider_registry()
    for name, expected in EXPECTED_UNCONFIGURED.items():
        assert registry[name].status() is expected


def test_status_online_when_credential_present(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("CLAUDE_API_KEY", "sk-ant-test")
    registry = provider_registry.load_provider_registry()
    assert registry["openai"].status() is AvailabilityState.ONLINE
    assert registry["claude"].status() is AvailabilityState.ONLINE
    assert registry["mistral"].status() is AvailabilityState.STUB


def test_blank_credential_counts_as_missing(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "   ")
    assert provider_registry.get_provider("openai").status() is AvailabilityState.OFFLINE


def test_load_returns_fresh_mapping():
    first = provider_registry.load_provider_registry()
    first.pop("claude")
    assert "claude" in provider_registry.load_provider_registry()


def test_reload_does_not_require_env():
    reloaded = importlib.reload(provider_registry)
    assert "openai" in reloaded.load_provider_registry()


def test_unknown_provider_raises():
    with pytest.raises(provider_registry.ProviderNotFoundError):
        provider_registry.get_provider("does-not-exist")


def test_describe_providers_reports_every_provider(monkeypatch):
    monkeypatch.setenv("MISTRAL_API_KEY", "key")
    descriptors = {d.name: d for d in provider_registry.describe_providers()}
    assert list(descriptors) == provider_registry.registry_keys()
    assert descriptors["mistral"].status is AvailabilityState.ONLINE
    assert descriptors["mistral"].has_api_key is True
    assert descriptors["openai"].has_api_key is False
