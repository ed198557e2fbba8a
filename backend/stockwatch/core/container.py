"""
Service wiring shared by the API and the scheduler.
"""
from dataclasses import dataclass, field
from typing import Optional
import logging

from sqlalchemy.engine import Engine

from stockwatch.core.database import create_db_engine, create_session_factory, init_db
from stockwatch.services.analysis.analysis_service import AnalysisService
from stockwatch.services.cache import CacheStore
from stockwatch.services.consumption import UsageMeter
from stockwatch.services.data.adapters import AlphaVantageAdapter, MarketDataAdapter
from stockwatch.services.guard import InFlightGuard
from stockwatch.services.llm.client import LLMClient
from stockwatch.services.watchlist import WatchlistStore

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Everything a request handler needs.

    market and analysis are None when their provider key is not configured;
    the routes that need them answer 503 instead of failing at startup.
    """
    cache: CacheStore
    watchlist: WatchlistStore
    market: Optional[MarketDataAdapter] = None
    analysis: Optional[AnalysisService] = None
    meter: Optional[UsageMeter] = None
    guard: InFlightGuard = field(default_factory=InFlightGuard)
    engine: Optional[Engine] = None
    sweep_interval_hours: float = 6

    async def aclose(self) -> None:
        """Drain metering and close every HTTP client the container owns."""
        if self.meter is not None:
            await self.meter.aclose()
        if self.analysis is not None:
            await self.analysis.llm.aclose()
        if isinstance(self.market, AlphaVantageAdapter):
            await self.market.aclose()
        if self.engine is not None:
            self.engine.dispose()


def build_services(settings) -> ServiceContainer:
    """Build the container from a settings object (see core.config.get_settings)."""
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    session_factory = create_session_factory(engine)

    cache = CacheStore(session_factory)
    watchlist = WatchlistStore(session_factory)
    guard = InFlightGuard()
    meter = UsageMeter(
        url=settings.metering_url,
        api_key=settings.paid_api_key,
        customer_id=settings.metering_customer_id,
        agent_id=settings.metering_agent_id,
        timeout=settings.http_timeout_seconds,
    )

    market = None
    if settings.alpha_vantage_api_key:
        market = AlphaVantageAdapter(
            api_key=settings.alpha_vantage_api_key,
            cache=cache,
            base_url=settings.alpha_vantage_base_url,
            timeout=settings.http_timeout_seconds,
        )
    else:
        logger.warning("ALPHA_VANTAGE_API_KEY not set, market data endpoints disabled")

    analysis = None
    if settings.perplexity_api_key:
        llm = LLMClient(
            api_key=settings.perplexity_api_key,
            base_url=settings.perplexity_base_url,
            model=settings.default_llm_model,
            timeout=settings.http_timeout_seconds,
        )
        analysis = AnalysisService(llm, cache, guard=guard, meter=meter)
    else:
        logger.warning("PERPLEXITY_API_KEY not set, analysis endpoints disabled")

    return ServiceContainer(
        cache=cache,
        watchlist=watchlist,
        market=market,
        analysis=analysis,
        meter=meter,
        guard=guard,
        engine=engine,
        sweep_interval_hours=settings.cache_sweep_interval_hours,
    )
