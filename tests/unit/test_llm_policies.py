import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from omega_air.config.settings import settings  # noqa: E402
from omega_air.services.llm import policies  # noqa: E402


def write_config(path: Path, payload) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload))


def test_default_policy_shape():
    policy = policies.default_policy()
    assert policy.priority == ["claude", "openai", "mistral"]
    assert policy.fallbacks == {"claude": True, "openai": True, "mistral": True}
    assert policy.global_fallback is True


def test_missing_and_malformed_files_yield_identical_defaults(routing_file, tmp_path):
    missing = policies.load_routing_policy()

    write_config(routing_file, "{ not json")
    malformed = policies.load_routing_policy()

    assert missing == malformed == policies.default_policy()


def test_malformed_file_logs_warning(routing_file, caplog):
    write_config(routing_file, "{ not json")
    with caplog.at_level("WARNING"):
        policies.load_routing_policy()
    assert "using defaults" in caplog.text


def test_schema_violation_yields_defaults(routing_file):
    write_config(routing_file, {"models": "claude", "globalFallback": False})
    assert policies.load_routing_policy() == policies.default_policy()


def test_priority_derived_from_ranks(routing_file):
    write_config(routing_file, {
        "models": [
            {"provider": "claude", "priority": 3, "fallbackEnabled": True},
            {"provider": "mistral", "priority": 1, "fallbackEnabled": False},
            {"provider": "openai", "priority": 2, "fallbackEnabled": True},
        ],
        "globalFallback": False,
    })

    policy = policies.load_routing_policy()

    assert policy.priority == ["mistral", "openai", "claude"]
    assert policy.fallbacks == {"mistral": False, "openai": True, "claude": True}
    assert policy.global_fallback is False


def test_omitted_providers_inherit_default_fallback(routing_file):
    write_config(routing_file, {
        "models": [{"provider": "openai", "priority": 1, "fallbackEnabled": False}],
    })

    policy = policies.load_routing_policy()

    assert policy.priority == ["openai"]
    assert policy.fallbacks == {"openai": False, "claude": True, "mistral": True}
    assert policy.global_fallback is True


def test_missing_fallback_flag_is_disabled(routing_file):
    write_config(routing_file, {"models": [{"provider": "claude", "priority": 1}]})
    assert policies.load_routing_policy().fallback_enabled("claude") is False


def test_document_without_models_keeps_default_order(routing_file):
    write_config(routing_file, {"globalFallback": False})
    policy = policies.load_routing_policy()
    assert policy.priority == policies.default_policy().priority
    assert policy.global_fallback is False


def test_settings_path_override(tmp_path, monkeypatch):
    override = tmp_path / "custom.json"
    write_config(override, {"models": [{"provider": "mistral", "priority": 1, "fallbackEnabled": True}]})
    monkeypatch.setattr(settings, "AI_ROUTING_CONFIG_PATH", str(override))

    assert policies.routing_config_path() == override
    assert policies.load_routing_policy().priority == ["mistral"]


def test_save_then_load_round_trip(routing_file):
    saved = policies.save_routing_document({
        "models": [
            {"provider": "openai", "priority": 1, "fallbackEnabled": True},
            {"provider": "claude", "priority": 2, "fallbackEnabled": False},
        ],
        "globalFallback": True,
    })

    assert "lastUpdated" in saved
    assert json.loads(routing_file.read_text())["lastUpdated"] == saved["lastUpdated"]
    assert policies.load_routing_policy().priority == ["openai", "claude"]


def test_save_rejects_missing_models(routing_file):
    with pytest.raises(policies.RoutingConfigError):
        policies.save_routing_document({"globalFallback": True})
    assert not routing_file.exists()


def test_read_document_defaults_when_unsaved(routing_file, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    document = policies.read_routing_document()
    entries = {entry["provider"]: entry for entry in document["models"]}

    assert [entry["priority"] for entry in document["models"]] == [1, 2, 3]
    assert entries["openai"]["status"] == "online"
    assert entries["openai"]["hasApiKey"] is True
    assert entries["claude"]["status"] == "stub"
    assert document["globalFallback"] is True


def test_routing_preferences_summary():
    prefs = policies.routing_preferences({
        "models": [
            {"provider": "mistral", "priority": 2, "fallbackEnabled": True},
            {"provider": "claude", "priority": 1, "fallbackEnabled": False},
        ],
        "globalFallback": False,
    })

    assert prefs["priority"] == ["claude", "mistral"]
    assert prefs["fallbackEnabled"] is False
    assert prefs["modelSettings"]["claude"] == {"enabled": False, "priority": 1}


def test_duplicate_entries_keep_lowest_rank(routing_file, caplog):
    write_config(routing_file, {
        "models": [
            {"provider": "openai", "priority": 3, "fallbackEnabled": True},
            {"provider": "claude", "priority": 2, "fallbackEnabled": True},
            {"provider": "openai", "priority": 1, "fallbackEnabled": False},
        ],
    })

    with caplog.at_level("WARNING"):
        policy = policies.load_routing_policy()

    assert policy.priority == ["openai", "claude"]
    assert policy.fallbacks["openai"] is False
    assert "duplicate routing entry for openai" in caplog.text
