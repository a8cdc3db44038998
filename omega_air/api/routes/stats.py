"""Stats endpoints for provider telemetry."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter

from omega_air.services.llm import ProviderMetrics, describe_providers, get_telemetry_store

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/llm/providers")
async def get_llm_provider_metrics() -> Dict[str, Any]:
    """Expose provider availability and telemetry for dashboards and tooling."""

    telemetry_store = get_telemetry_store()
    metrics_map = telemetry_store.get_all_metrics()

    providers: List[Dict[str, Any]] = []
    for descriptor in describe_providers():
        metrics: ProviderMetrics = metrics_map.get(descriptor.name, ProviderMetrics(provider=descriptor.name))
        providers.append({
            "provider": descriptor.name,
            "status": descriptor.status.value,
            "has_api_key": descriptor.has_api_key,
            "models": descriptor.models,
            "total_calls": metrics.total_calls,
            "successes": metrics.successes,
            "failures": metrics.failures,
            "success_rate": metrics.success_rate,
            "average_latency_ms": metrics.average_latency_ms,
            "last_error": metrics.last_error,
            "last_updated": metrics.last_updated,
        })

    return {
        "providers": providers,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
