"""
OmegaAIR Models
Data models for the persisted AI routing configuration
"""

from .routing import ModelRoutingEntry, RoutingConfigDocument

__all__ = [
    "ModelRoutingEntry",
    "RoutingConfigDocument",
]
