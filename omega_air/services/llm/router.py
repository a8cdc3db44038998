"""Routing logic for the AI provider layer.

The dispatcher walks the policy's priority list and returns the first
eligible provider's output. A provider is eligible when it is ``online``, or
when it is a ``stub`` and its fallback flag is set. Failures cascade to the
next candidate only while both the provider's flag and the global flag allow
it; otherwise the provider's error is raised as-is.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .policies import RoutingPolicy, load_routing_policy
from .provider_registry import load_provider_registry
from .providers import AIProvider, AvailabilityState, OptionsLike, ProviderError, coerce_options
from .telemetry import TelemetryStore, get_telemetry_store

logger = logging.getLogger(__name__)

_NO_PROVIDER_MESSAGE = "No available AI models found."


class AttemptOutcome(str, Enum):
    UNREGISTERED = "unregistered"
    INELIGIBLE = "ineligible"
    FAILED = "failed"
    SUCCEEDED = "succeeded"


@dataclass
class ProviderAttempt:
    """What happened to one provider during a routing pass."""

    provider: str
    outcome: AttemptOutcome
    status: Optional[AvailabilityState] = None
    error: Optional[str] = None
    latency_ms: float = 0.0


@dataclass
class RoutingResult:
    """Generated text plus the provider that produced it."""

    text: str
    provider: str
    attempts: List[ProviderAttempt] = field(default_factory=list)


@dataclass
class ProviderSelection:
    """Result of choosing a provider without generating."""

    provider: str
    policy: RoutingPolicy
    attempted_providers: Dict[str, str]


class NoProviderAvailable(Exception):
    """No provider in the priority list was eligible, or all eligible ones failed."""

    def __init__(
        self,
        message: str = _NO_PROVIDER_MESSAGE,
        last_error: Optional[ProviderError] = None,
        attempts: Optional[List[ProviderAttempt]] = None,
    ) -> None:
        super().__init__(message)
        self.last_error = last_error
        self.attempts = attempts or []


def is_eligible(state: AvailabilityState, fallback_enabled: bool) -> bool:
    return state is AvailabilityState.ONLINE or (state is AvailabilityState.STUB and fallback_enabled)


class AIDispatcher:
    """Selects exactly one provider's output for a prompt."""

    def __init__(
        self,
        registry: Optional[Dict[str, AIProvider]] = None,
        policy: Optional[RoutingPolicy] = None,
        policy_loader: Optional[Callable[[], RoutingPolicy]] = None,
        telemetry_store: Optional[TelemetryStore] = None,
    ) -> None:
        self.registry = registry if registry is not None else load_provider_registry()
        self._policy = policy
        self._policy_loader = policy_loader or load_routing_policy
        self._telemetry = telemetry_store

    @property
    def telemetry(self) -> TelemetryStore:
        if self._telemetry is None:
            self._telemetry = get_telemetry_store()
        return self._telemetry

    def current_policy(self) -> RoutingPolicy:
        """Injected policy if any, otherwise a fresh load for this decision."""
        if self._policy is not None:
            return self._policy.copy()
        return self._policy_loader()

    def _candidate(
        self, name: str, policy: RoutingPolicy
    ) -> Tuple[Optional[AIProvider], Optional[AvailabilityState], Optional[ProviderAttempt]]:
        """Return (provider, state, None) when eligible, else (None, state, skipped attempt)."""
        provider = self.registry.get(name)
        if provider is None:
            logger.debug("Skipping unregistered provider %s", name)
            return None, None, ProviderAttempt(provider=name, outcome=AttemptOutcome.UNREGISTERED)

        state = provider.status()
        if not is_eligible(state, policy.fallback_enabled(name)):
            logger.debug("Skipping provider %s (status=%s)", name, state.value)
            return None, state, ProviderAttempt(provider=name, outcome=AttemptOutcome.INELIGIBLE, status=state)
        return provider, state, None

    async def dispatch(self, prompt: str, options: OptionsLike = None) -> RoutingResult:
        if not prompt or not prompt.strip():
            raise ValueError("prompt must be a non-empty string")

        opts = coerce_options(options)
        policy = self.current_policy()
        attempts: List[ProviderAttempt] = []
        last_error: Optional[ProviderError] = None
        tried = set()

        for name in policy.priority:
            if name in tried:
                continue
            tried.add(name)
            provider, state, skipped = self._candidate(name, policy)
            if provider is None:
                attempts.append(skipped)
                continue

            started = time.perf_counter()
            try:
                text = await provider.generate(prompt, opts)
            except Exception as exc:
                latency_ms = (time.perf_counter() - started) * 1000
                error = exc if isinstance(exc, ProviderError) else ProviderError(name, str(exc), cause=exc)
                attempts.append(ProviderAttempt(
                    provider=name,
                    outcome=AttemptOutcome.FAILED,
                    status=state,
                    error=str(error),
                    latency_ms=latency_ms,
                ))
                self.telemetry.record_failure(name, latency_ms, str(error))
                logger.warning("Provider %s failed: %s", name, error)

                if not policy.fallback_enabled(name) or not policy.global_fallback:
                    error.attempts = list(attempts)
                    if error is exc:
                        raise
                    raise error from exc

                last_error = error
                continue

            latency_ms = (time.perf_counter() - started) * 1000
            attempts.append(ProviderAttempt(
                provider=name,
                outcome=AttemptOutcome.SUCCEEDED,
                status=state,
                latency_ms=latency_ms,
            ))
            self.telemetry.record_success(name, latency_ms)
            logger.info("Routed request to %s (%s) in %.1f ms", name, state.value, latency_ms)
            return RoutingResult(text=text, provider=name, attempts=attempts)

        message = str(last_error) if last_error is not None else _NO_PROVIDER_MESSAGE
        raise NoProviderAvailable(message, last_error=last_error, attempts=attempts)

    async def send_ai_request(self, prompt: str, options: OptionsLike = None) -> str:
        result = await self.dispatch(prompt, options)
        return result.text

    def select(self) -> ProviderSelection:
        policy = self.current_policy()
        attempted: Dict[str, str] = {}

        for name in policy.priority:
            provider, _, skipped = self._candidate(name, policy)
            if provider is None:
                attempted[name] = skipped.outcome.value
                continue
            attempted[name] = "selected"
            return ProviderSelection(provider=name, policy=policy, attempted_providers=attempted)

        raise NoProviderAvailable(
            f"{_NO_PROVIDER_MESSAGE} (checked: {attempted})",
            attempts=[
                ProviderAttempt(provider=name, outcome=AttemptOutcome(outcome))
                for name, outcome in attempted.items()
            ],
        )

    def get_best_model(self) -> str:
        return self.select().provider

    def get_provider_statuses(self) -> Dict[str, AvailabilityState]:
        return {name: provider.status() for name, provider in self.registry.items()}

    def is_any_provider_available(self) -> bool:
        """Advisory only; a later dispatch re-evaluates eligibility."""
        try:
            self.get_best_model()
        except NoProviderAvailable:
            return False
        return True


_default_dispatcher: Optional[AIDispatcher] = None


def get_default_dispatcher() -> AIDispatcher:
    """Get or create the process-wide dispatcher."""
    global _default_dispatcher
    if _default_dispatcher is None:
        _default_dispatcher = AIDispatcher()
    return _default_dispatcher


async def send_ai_request(prompt: str, options: OptionsLike = None) -> str:
    return await get_default_dispatcher().send_ai_request(prompt, options)


def get_best_model() -> str:
    return get_default_dispatcher().get_best_model()


def get_provider_statuses() -> Dict[str, AvailabilityState]:
    return get_default_dispatcher().get_provider_statuses()


def is_any_provider_available() -> bool:
    return get_default_dispatcher().is_any_provider_available()
