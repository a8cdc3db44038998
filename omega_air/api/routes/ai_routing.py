"""Admin endpoints for reading and saving the AI routing configuration."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, HTTPException, status

from omega_air.services.llm.policies import (
    RoutingConfigError,
    read_routing_document,
    routing_preferences,
    save_routing_document,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/ai-routing", tags=["ai-routing"])


def _load_document() -> Dict[str, Any]:
    try:
        return read_routing_document()
    except (OSError, ValueError) as exc:
        logger.error("Failed to read AI routing config: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read configuration",
        )


@router.get("/config")
async def get_config() -> Dict[str, Any]:
    """Saved routing configuration, or the default one when nothing is saved."""
    return _load_document()


@router.post("/config")
async def save_config(config: Dict[str, Any] = Body(...)) -> Dict[str, str]:
    try:
        save_routing_document(config)
    except RoutingConfigError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except OSError as exc:
        logger.error("Failed to save AI routing config: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save configuration",
        )
    return {"message": "Configuration saved successfully"}


@router.get("/preferences")
async def get_preferences() -> Dict[str, Any]:
    """Provider order and fallback flags derived from the current configuration."""
    document = _load_document()
    try:
        return routing_preferences(document)
    except ValueError as exc:
        logger.error("Failed to get routing preferences: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get preferences",
        )
