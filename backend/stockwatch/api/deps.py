"""
Request dependencies resolving services from the application state.
"""
from fastapi import HTTPException, Request

from stockwatch.core.container import ServiceContainer
from stockwatch.services.analysis.analysis_service import AnalysisService
from stockwatch.services.data.adapters import MarketDataAdapter


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(status_code=503, detail="Services are not initialised yet")
    return container


def get_market(request: Request) -> MarketDataAdapter:
    container = get_container(request)
    if container.market is None:
        raise HTTPException(status_code=503, detail="Market data provider is not configured (ALPHA_VANTAGE_API_KEY)")
    return container.market


def get_analysis_service(request: Request) -> AnalysisService:
    container = get_container(request)
    if container.analysis is None:
        raise HTTPException(status_code=503, detail="Analysis provider is not configured (PERPLEXITY_API_KEY)")
    return container.analysis
