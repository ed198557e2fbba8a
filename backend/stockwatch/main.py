"""
FastAPI application entry point.
"""
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockwatch.api import analyses, cache, health, market, watchlist
from stockwatch.api.errors import register_exception_handlers
from stockwatch.core.config import get_settings
from stockwatch.core.container import ServiceContainer, build_services
from stockwatch.core.logging_config import configure_logging
from stockwatch.services.scheduler import run_cache_sweep, start_cache_sweeper, stop_cache_sweeper

logger = logging.getLogger(__name__)


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Build the application.

    Args:
        container: Pre-built services (tests). When None, services are built
            from settings on startup.
    """
    app = FastAPI(
        title="Stock Watch API",
        description="Watchlist, market data and AI news analysis",
        version="0.1.0",
    )

    # CORS middleware (adjust origins for production)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",      # Frontend dev server (localhost)
            "http://127.0.0.1:3000",      # Frontend dev server (127.0.0.1)
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.container = container
    register_exception_handlers(app)

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(watchlist.router, prefix="/api/watchlist", tags=["watchlist"])
    app.include_router(market.router, prefix="/api/market", tags=["market"])
    app.include_router(analyses.router, prefix="/api/analysis", tags=["analysis"])
    app.include_router(cache.router, prefix="/api/cache", tags=["cache"])

    @app.on_event("startup")
    async def startup_event():
        """Initialize services, clear stale cache rows and start the sweeper."""
        settings = get_settings()
        configure_logging(settings.log_level)

        if app.state.container is None:
            app.state.container = build_services(settings)

        services: ServiceContainer = app.state.container
        run_cache_sweep(services.cache)
        start_cache_sweeper(services.cache, services.sweep_interval_hours)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown."""
        stop_cache_sweeper()
        services: Optional[ServiceContainer] = app.state.container
        if services is not None:
            try:
                await services.aclose()
            except Exception as e:
                logger.warning(f"Error closing services: {e}")

    return app


app = create_app()
