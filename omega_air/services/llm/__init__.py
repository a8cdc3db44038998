"""AI provider routing services package."""

from .providers import (  # noqa: F401
    AIProvider,
    AvailabilityState,
    GenerationOptions,
    ProviderError,
)
from .provider_registry import (  # noqa: F401
    ProviderDescriptor,
    ProviderNotFoundError,
    describe_providers,
    get_provider,
    load_provider_registry,
)
from .policies import (  # noqa: F401
    RoutingConfigError,
    RoutingPolicy,
    default_policy,
    load_routing_policy,
)
from .router import (  # noqa: F401
    AIDispatcher,
    AttemptOutcome,
    NoProviderAvailable,
    ProviderAttempt,
    ProviderSelection,
    RoutingResult,
    get_best_model,
    get_default_dispatcher,
    get_provider_statuses,
    is_any_provider_available,
    send_ai_request,
)
from .telemetry import (  # noqa: F401
    ProviderMetrics,
    TelemetryStore,
    get_telemetry_store,
)

__all__ = [
    "AIProvider",
    "AvailabilityState",
    "GenerationOptions",
    "ProviderError",
    "ProviderDescriptor",
    "ProviderNotFoundError",
    "describe_providers",
    "get_provider",
    "load_provider_registry",
    "RoutingConfigError",
    "RoutingPolicy",
    "default_policy",
    "load_routing_policy",
    "AIDispatcher",
    "AttemptOutcome",
    "NoProviderAvailable",
    "ProviderAttempt",
    "ProviderSelection",
    "RoutingResult",
    "get_best_model",
    "get_default_dispatcher",
    "get_provider_statuses",
    "is_any_provider_available",
    "send_ai_request",
    "ProviderMetrics",
    "TelemetryStore",
    "get_telemetry_store",
]
