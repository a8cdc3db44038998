"""
AI Routing API Routes - provider status, selection and generation
"""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
import logging

from omega_air.services.llm import (
    AIDispatcher,
    GenerationOptions,
    NoProviderAvailable,
    ProviderAttempt,
    ProviderError,
    get_default_dispatcher,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


def get_dispatcher() -> AIDispatcher:
    """Dispatcher used by the request handlers."""
    return get_default_dispatcher()


class GenerateRequest(BaseModel):
    """Request model for generation endpoints."""
    prompt: str = Field(..., min_length=1, max_length=20_000, description="Prompt text")
    temperature: Optional[float] = Field(None, ge=0.0, le=1.0, description="Sampling randomness")
    max_tokens: Optional[int] = Field(None, gt=0, alias="maxTokens", description="Upper bound on generated length")
    model: Optional[str] = Field(None, description="Provider-specific model override")
    system_prompt: Optional[str] = Field(None, alias="systemPrompt")

    class Config:
        populate_by_name = True

    def to_options(self) -> GenerationOptions:
        values: Dict[str, Any] = {"model": self.model, "system_prompt": self.system_prompt}
        if self.temperature is not None:
            values["temperature"] = self.temperature
        if self.max_tokens is not None:
            values["max_tokens"] = self.max_tokens
        return GenerationOptions(**values)


class AttemptModel(BaseModel):
    provider: str
    outcome: str
    status: Optional[str] = None
    error: Optional[str] = None
    latency_ms: float = 0.0


class GenerateResponse(BaseModel):
    output: str
    provider: str
    attempts: List[AttemptModel] = Field(default_factory=list)


def _attempts_payload(attempts: List[ProviderAttempt]) -> List[Dict[str, Any]]:
    return [
        {
            "provider": attempt.provider,
            "outcome": attempt.outcome.value,
            "status": attempt.status.value if attempt.status else None,
            "error": attempt.error,
            "latency_ms": attempt.latency_ms,
        }
        for attempt in attempts
    ]


@router.get("/status")
async def get_status() -> Dict[str, Any]:
    """Raw availability of every registered provider."""
    dispatcher = get_dispatcher()
    statuses = dispatcher.get_provider_statuses()
    return {
        "providers": {name: state.value for name, state in statuses.items()},
        "available": dispatcher.is_any_provider_available(),
    }


@router.get("/best-model")
async def get_best_model() -> Dict[str, Any]:
    """Provider that would serve the next request under the current policy."""
    try:
        selection = get_dispatcher().select()
    except NoProviderAvailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    return {"provider": selection.provider, "attempted": selection.attempted_providers}


@router.post("/generate", response_model=GenerateResponse)
async def generate(request: GenerateRequest) -> GenerateResponse:
    """
    Generate text through the routing policy.

    Raises:
        502: the provider that was tried failed and the policy forbade fallback
        503: no provider was eligible, or every eligible provider failed
    """
    if not request.prompt.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Prompt cannot be empty")

    try:
        result = await get_dispatcher().dispatch(request.prompt, request.to_options())
    except ProviderError as exc:
        logger.error("Generation aborted by %s: %s", exc.provider, exc.message)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"provider": exc.provider, "error": exc.message, "attempts": _attempts_payload(exc.attempts)},
        )
    except NoProviderAvailable as exc:
        logger.error("No provider could serve the request: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": str(exc), "attempts": _attempts_payload(exc.attempts)},
        )

    return GenerateResponse(
        output=result.text,
        provider=result.provider,
        attempts=_attempts_payload(result.attempts),
    )


@router.post("/test/{provider_name}")
async def test_provider(provider_name: str, request: GenerateRequest) -> Dict[str, Any]:
    """Call a single provider directly, bypassing the routing policy."""
    provider = get_dispatcher().registry.get(provider_name.lower())
    if provider is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown provider: {provider_name}",
        )

    state = provider.status()
    try:
        output = await provider.generate(request.prompt, request.to_options())
    except ProviderError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"provider": exc.provider, "status": state.value, "error": exc.message},
        )

    return {"provider": provider_name.lower(), "status": state.value, "output": output}
