"""
Routing Config Models - shape of the persisted AI routing configuration
Consumed by the policy loader and the admin routing endpoints.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, validator


class ModelRoutingEntry(BaseModel):
    """One provider's entry in the routing configuration file."""

    provider: str = Field(..., min_length=1, description="Registered provider name")
    priority: int = Field(..., description="Rank; lower numbers are tried earlier")
    fallback_enabled: bool = Field(
        default=False,
        alias="fallbackEnabled",
        description="Whether a failure on this provider may cascade to the next one",
    )
    id: Optional[str] = None
    name: Optional[str] = None
    models: List[str] = Field(default_factory=list)

    @validator('provider')
    def normalise_provider(cls, v):
        """Provider names are matched case-insensitively against the registry"""
        return v.strip().lower()

    class Config:
        populate_by_name = True
        extra = "allow"


class RoutingConfigDocument(BaseModel):
    """
    Routing configuration document.

    ``models`` is optional so that a document carrying only
    ``globalFallback`` keeps the default provider order.
    """

    models: Optional[List[ModelRoutingEntry]] = None
    global_fallback: bool = Field(default=True, alias="globalFallback")
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")

    class Config:
        populate_by_name = True
        extra = "allow"
        json_schema_extra = {
            "example": {
                "models": [
                    {"provider": "claude", "priority": 1, "fallbackEnabled": True},
                    {"provider": "openai", "priority": 2, "fallbackEnabled": True},
                    {"provider": "mistral", "priority": 3, "fallbackEnabled": False},
                ],
                "globalFallback": True,
            }
        }
