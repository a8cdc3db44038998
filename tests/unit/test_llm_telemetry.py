import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

import redis  # noqa: E402

from omega_air.services.llm.telemetry import TelemetryStore  # noqa: E402


class FakeRedis:
    def __init__(self, fail=False):
        self.data = {}
        self.fail = fail

    def get(self, key):
        if self.fail:
            raise redis.ConnectionError("down")
        return self.data.get(key)

    def set(self, key, value):
        if self.fail:
            raise redis.ConnectionError("down")
        self.data[key] = value

    def keys(self, pattern):
        prefix = pattern.rstrip("*")
        return [key.encode("utf-8") for key in self.data if key.startswith(prefix)]


def test_record_success_updates_metrics():
    store = TelemetryStore(redis_client=None, namespace="test:telemetry")
    metrics = store.record_success("claude", latency_ms=100.0)

    assert metrics.total_calls == 1
    assert metrics.successes == 1
    assert metrics.failures == 0
    assert metrics.average_latency_ms == 100.0
    assert metrics.success_rate == 1.0


def test_record_failure_tracks_error():
    store = TelemetryStore(redis_client=None, namespace="test:telemetry")
    store.record_failure("openai", latency_ms=80.0, error="timeout")
    metrics = store.get_metrics("openai")

    assert metrics.failures == 1
    assert metrics.last_error == "timeout"
    assert metrics.total_calls == 1


def test_success_clears_last_error():
    store = TelemetryStore(redis_client=None, namespace="test:telemetry")
    store.record_failure("mistral", latency_ms=120.0, error="rate limit")
    metrics = store.record_success("mistral", latency_ms=90.0)

    assert metrics.last_error is None
    assert metrics.total_calls == 2
    assert metrics.success_rate == 0.5


def test_metrics_persist_to_redis_and_reload():
    client = FakeRedis()
    TelemetryStore(redis_client=client, namespace="test:telemetry").record_success("claude", latency_ms=50.0)

    assert json.loads(client.data["test:telemetry:claude"])["successes"] == 1

    fresh = TelemetryStore(redis_client=client, namespace="test:telemetry")
    metrics = fresh.get_all_metrics()["claude"]
    assert metrics.successes == 1
    assert metrics.total_latency_ms == 50.0


def test_redis_errors_fall_back_to_memory(caplog):
    store = TelemetryStore(redis_client=FakeRedis(fail=True), namespace="test:telemetry")

    with caplog.at_level("WARNING"):
        metrics = store.record_failure("openai", latency_ms=10.0, error="boom")

    assert metrics.failures == 1
    assert store.get_metrics("openai").failures == 1
    assert "Failed to" in caplog.text
