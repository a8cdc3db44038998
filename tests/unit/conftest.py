import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

CREDENTIAL_VARS = ("OPENAI_API_KEY", "CLAUDE_API_KEY", "MISTRAL_API_KEY")


@pytest.fixture(autouse=True)
def clear_credentials(monkeypatch):
    """Start every test with no provider credentials in the environment."""
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def routing_file(tmp_path, monkeypatch):
    """Point the policy loader at a temporary ai-routing.json."""
    from omega_air.config.settings import settings
    from omega_air.services.llm import policies

    path = tmp_path / "config" / "ai-routing.json"
    monkeypatch.setattr(settings, "AI_ROUTING_CONFIG_PATH", None)
    monkeypatch.setattr(policies, "_ROUTING_CONFIG_FILE", path)
    return path
