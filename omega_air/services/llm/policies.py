"""Routing policy loader for the AI provider dispatcher."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from omega_air.config.settings import settings
from omega_air.models.routing import RoutingConfigDocument

from .provider_registry import load_provider_registry

logger = logging.getLogger(__name__)

_ROUTING_CONFIG_FILE = Path(__file__).resolve().parent.parent.parent.parent / "config" / "ai-routing.json"

_DEFAULT_PRIORITY = ["claude", "openai", "mistral"]

_DISPLAY_NAMES = {"claude": "Claude", "openai": "OpenAI", "mistral": "Mistral"}


class RoutingConfigError(ValueError):
    """Raised when a routing configuration document cannot be saved."""


@dataclass
class RoutingPolicy:
    """Ordered provider preference plus fallback permissions."""

    priority: List[str]
    fallbacks: Dict[str, bool] = field(default_factory=dict)
    global_fallback: bool = True

    def fallback_enabled(self, provider: str) -> bool:
        return bool(self.fallbacks.get(provider, False))

    def copy(self) -> "RoutingPolicy":
        return RoutingPolicy(
            priority=list(self.priority),
            fallbacks=dict(self.fallbacks),
            global_fallback=self.global_fallback,
        )


def default_policy() -> RoutingPolicy:
    return RoutingPolicy(
        priority=list(_DEFAULT_PRIORITY),
        fallbacks={name: True for name in _DEFAULT_PRIORITY},
        global_fallback=True,
    )


def routing_config_path() -> Path:
    """Resolve the well-known routing configuration path."""
    if settings.AI_ROUTING_CONFIG_PATH:
        return Path(settings.AI_ROUTING_CONFIG_PATH)
    return _ROUTING_CONFIG_FILE


def _read_document(path: Path) -> Optional[RoutingConfigDocument]:
    """Parse the routing file; None when absent, unreadable or malformed."""
    if not path.exists():
        return None

    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
        return RoutingConfigDocument.model_validate(data)
    except (OSError, ValueError, ValidationError) as exc:
        logger.warning("Failed to load routing config %s, using defaults: %s", path, exc)
        return None


def policy_from_document(document: RoutingConfigDocument) -> RoutingPolicy:
    """Derive a RoutingPolicy from a validated configuration document."""
    base = default_policy()
    if document.models is None:
        return RoutingPolicy(
            priority=base.priority,
            fallbacks=base.fallbacks,
            global_fallback=document.global_fallback,
        )

    ranked = []
    seen = set()
    for entry in sorted(document.models, key=lambda entry: entry.priority):
        if entry.provider in seen:
            logger.warning("Ignoring duplicate routing entry for %s (priority %s)", entry.provider, entry.priority)
            continue
        seen.add(entry.provider)
        ranked.append(entry)

    fallbacks = {entry.provider: entry.fallback_enabled for entry in ranked}
    for name, enabled in base.fallbacks.items():
        fallbacks.setdefault(name, enabled)

    return RoutingPolicy(
        priority=[entry.provider for entry in ranked],
        fallbacks=fallbacks,
        global_fallback=document.global_fallback,
    )


def load_routing_policy(path: Optional[Path] = None) -> RoutingPolicy:
    """Load the routing policy, falling back to defaults on any failure."""
    document = _read_document(path or routing_config_path())
    if document is None:
        return default_policy()
    return policy_from_document(document)


def default_routing_document() -> Dict[str, Any]:
    """Default configuration document, with status computed from the environment."""
    registry = load_provider_registry()
    models = []
    for rank, name in enumerate(_DEFAULT_PRIORITY, start=1):
        provider = registry.get(name)
        models.append({
            "id": name,
            "name": _DISPLAY_NAMES.get(name, name),
            "provider": name,
            "status": provider.status().value if provider else "offline",
            "priority": rank,
            "fallbackEnabled": True,
            "hasApiKey": provider.has_api_key() if provider else False,
            "models": list(provider.models) if provider else [],
        })
    return {
        "models": models,
        "globalFallback": True,
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
    }


def read_routing_document(path: Optional[Path] = None) -> Dict[str, Any]:
    """Return the saved configuration document, or the default one."""
    target = path or routing_config_path()
    if not target.exists():
        return default_routing_document()
    with open(target, "r", encoding="utf-8") as handle:
        return json.load(handle)


def save_routing_document(document: Dict[str, Any], path: Optional[Path] = None) -> Dict[str, Any]:
    """Validate, timestamp and persist a configuration document."""
    if not isinstance(document.get("models"), list):
        raise RoutingConfigError("Invalid configuration format: 'models' must be a list")
    try:
        RoutingConfigDocument.model_validate(document)
    except ValidationError as exc:
        raise RoutingConfigError(f"Invalid configuration format: {exc}") from exc

    saved = dict(document)
    saved["lastUpdated"] = datetime.now(timezone.utc).isoformat()

    target = path or routing_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as handle:
        json.dump(saved, handle, indent=2)

    logger.info("Saved routing config to %s", target)
    return saved


def routing_preferences(document: Dict[str, Any]) -> Dict[str, Any]:
    """Summarise a configuration document for consumers of the routing order."""
    parsed = RoutingConfigDocument.model_validate(document)
    policy = policy_from_document(parsed)
    model_settings = {
        entry.provider: {"enabled": entry.fallback_enabled, "priority": entry.priority}
        for entry in (parsed.models or [])
    }
    return {
        "priority": policy.priority,
        "fallbackEnabled": policy.global_fallback,
        "modelSettings": model_settings,
    }
