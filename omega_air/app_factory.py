"""
OmegaAIR - AI Provider Routing Service
Routes text-generation requests across OpenAI, Claude and Mistral

Architecture:
- Provider Registry: fixed set of backends with status/generate
- Routing Policy: priority order and fallback flags from ai-routing.json
- Dispatcher: first eligible provider wins, fallback per policy
- Telemetry: per-provider call metrics for dashboards
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from omega_air.config.settings import settings, configure_logging, get_cors_config

logger = logging.getLogger(__name__)

def create_app() -> FastAPI:
    """Create and configure the OmegaAIR application."""

    configure_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        description="AI provider routing with policy-driven fallback",
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # CORS
    cors_config = get_cors_config()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_config["allow_origins"],
        allow_credentials=cors_config["allow_credentials"],
        allow_methods=cors_config["allow_methods"],
        allow_headers=cors_config["allow_headers"],
    )

    # Import routes (deferred to avoid circular imports)
    from omega_air.api.routes import ai, ai_routing, stats

    # Register routes
    app.include_router(ai.router)
    app.include_router(ai_routing.router)
    app.include_router(stats.router)

    @app.get("/")
    async def root():
        """Root endpoint - service information"""
        return {
            "service": "OmegaAIR",
            "version": settings.APP_VERSION,
            "description": "AI provider routing with policy-driven fallback",
            "status": "operational",
            "endpoints": {
                "generate": "/api/ai/generate",
                "status": "/api/ai/status",
                "best_model": "/api/ai/best-model",
                "routing_config": "/api/admin/ai-routing/config",
                "provider_stats": "/api/stats/llm/providers",
                "health": "/health",
                "docs": "/docs"
            }
        }

    @app.get("/health")
    async def health():
        """Health check endpoint"""
        return {
            "status": "ok",
            "service": "omega-air",
            "version": settings.APP_VERSION
        }

    logger.info(f"OmegaAIR initialized on port {settings.PORT}")
    return app

# Create app instance
app = create_app()
