import sys
from pathlib import Path

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from omega_air.api.routes import stats as stats_module  # noqa: E402
from omega_air.services.llm.telemetry import ProviderMetrics  # noqa: E402


class StubTelemetry:
    def __init__(self):
        self._metrics = {
            "claude": ProviderMetrics(
                provider="claude",
                total_calls=5,
                successes=4,
                failures=1,
                total_latency_ms=450.0,
                last_error="timeout",
                last_updated="2025-10-07T16:55:00Z",
            )
        }

    def get_all_metrics(self):  # pragma: no cover - simple stub
        return dict(self._metrics)


@pytest.fixture
def client(monkeypatch):
    app = FastAPI()
    app.include_router(stats_module.router)

    monkeypatch.setattr(stats_module, "get_telemetry_store", lambda: StubTelemetry())

    return TestClient(app)


def test_llm_provider_metrics(client):
    response = client.get("/api/stats/llm/providers")
    assert response.status_code == 200
    payload = response.json()
    providers = {entry["provider"]: entry for entry in payload["providers"]}
    assert set(providers) == {"claude", "openai", "mistral"}
    metrics = providers["claude"]
    assert metrics["status"] == "stub"
    assert metrics["total_calls"] == 5
    assert metrics["success_rate"] == pytest.approx(0.8)
    assert providers["openai"]["total_calls"] == 0
    assert providers["openai"]["status"] == "offline"
