"""
News analysis and financial events backed by the AI-text provider.

Both results are cached for a day under separate categories ("analysis" and
"events") so either can be invalidated without touching the other. Each
fetch is guarded per ticker against duplicate concurrent calls.
"""
from typing import List, Optional
import logging

from pydantic import ValidationError

from stockwatch.core.clock import Clock, utcnow
from stockwatch.core.config import ttl_for
from stockwatch.core.exceptions import ParseFailure, RefreshInProgressError
from stockwatch.services.analysis.parsing import build_analysis, parse_financial_events
from stockwatch.services.cache import CacheStore, normalize_key
from stockwatch.services.consumption import FINANCIAL_EVENT_SIGNAL, NEWS_SIGNAL, UsageMeter
from stockwatch.services.data.normalized import FinancialEvent, StockAnalysis
from stockwatch.services.guard import InFlightGuard, InFlightKind
from stockwatch.services.llm.client import LLMClient

logger = logging.getLogger(__name__)

ANALYSIS_CATEGORY = "analysis"
EVENTS_CATEGORY = "events"

ANALYSIS_PROMPT = """Analyze {ticker} stock with exactly these sections:
1. Most recent news (past 7 days) - factual news, no stock analysis yet.
2. Major events in past 12 months related to the stock or the company.
3. Current valuation assessment - undervalued/fairly valued/overvalued with brief reasoning"""

EVENTS_PROMPT = """Find specific financial events for {ticker} stock in the past 12 months with EXACT dates:
- Earnings releases and surprises
- Major news announcements
- Analyst upgrades/downgrades
- Leadership changes
- Product launches or recalls
- Regulatory issues

For each event, provide:
1. Exact date (YYYY-MM-DD format)
2. Brief description (max 10 words)
3. Impact type (positive/negative/neutral)

Format as: DATE | DESCRIPTION | IMPACT"""


class AnalysisService:
    """Cached, deduplicated access to AI generated analyses."""

    def __init__(
        self,
        llm: LLMClient,
        cache: CacheStore,
        guard: Optional[InFlightGuard] = None,
        meter: Optional[UsageMeter] = None,
        clock: Clock = utcnow,
    ):
        self.llm = llm
        self.cache = cache
        self.guard = guard or InFlightGuard()
        self.meter = meter or UsageMeter(url=None)
        self._clock = clock

    def _cached_analysis(self, key: str) -> Optional[StockAnalysis]:
        cached = self.cache.get(key, ANALYSIS_CATEGORY)
        if cached is None:
            return None
        try:
            logger.info(f"Using cached analysis data for {key}")
            return StockAnalysis.model_validate(cached)
        except ValidationError:
            logger.warning(f"Discarding unreadable cached analysis for {key}")
            return None

    async def get_analysis(self, ticker: str) -> StockAnalysis:
        """Three-section analysis with the event timeline attached.

        Only the sections are stored under "analysis"; the timeline always
        comes from the "events" category, so a late or failed events fetch
        never leaves a cached analysis without its events.

        Raises:
            RefreshInProgressError: an analysis fetch for this ticker is already running
            RateLimitExceededError, UpstreamHttpError: provider failures (not retried)
        """
        key = normalize_key(ticker)

        with self.guard.claim(InFlightKind.NEWS_ANALYSIS, key) as acquired:
            if not acquired:
                raise RefreshInProgressError(key, InFlightKind.NEWS_ANALYSIS.value)

            analysis = self._cached_analysis(key)
            if analysis is None:
                logger.info(f"Making Perplexity API call for analysis: {key}")
                try:
                    result = await self.llm.complete(
                        ANALYSIS_PROMPT.format(ticker=key),
                        max_tokens=3000,
                        temperature=0.2,
                    )
                except ParseFailure as e:
                    # Degrade to placeholders, but don't keep them for a day
                    logger.warning(f"Unusable analysis response for {key}: {e}")
                    analysis = build_analysis(key, "", self._clock())
                else:
                    analysis = build_analysis(key, result.content, self._clock())
                    payload = analysis.model_dump(mode="json", exclude={"events"})
                    if self.cache.put(key, ANALYSIS_CATEGORY, payload, ttl_for(ANALYSIS_CATEGORY)):
                        logger.info(f"Cached analysis data for {key} for {ttl_for(ANALYSIS_CATEGORY)} hours")
                    self.meter.report_cost(NEWS_SIGNAL, result.cost_usd)

            events = await self.get_financial_events(key)
            return analysis.model_copy(update={"events": events})

    async def get_financial_events(self, ticker: str, raise_if_busy: bool = False) -> List[FinancialEvent]:
        """Dated events for the ticker; [] on any upstream or parse failure.

        A failing events query must not blank the rest of the analysis, so
        errors are logged here instead of propagated.

        Args:
            ticker: Symbol to fetch events for
            raise_if_busy: Raise RefreshInProgressError when a fetch for the
                ticker is already running, instead of returning []
        """
        key = normalize_key(ticker)

        with self.guard.claim(InFlightKind.FINANCIAL_EVENTS, key) as acquired:
            if not acquired:
                if raise_if_busy:
                    raise RefreshInProgressError(key, InFlightKind.FINANCIAL_EVENTS.value)
                return []

            try:
                cached = self.cache.get(key, EVENTS_CATEGORY)
                if cached is not None:
                    logger.info(f"Using cached events data for {key}")
                    return [FinancialEvent.model_validate(item) for item in cached]

                logger.info(f"Making Perplexity API call for events: {key}")
                result = await self.llm.complete(
                    EVENTS_PROMPT.format(ticker=key),
                    max_tokens=2000,
                    temperature=0.1,
                )
                events = parse_financial_events(result.content)

                if self.cache.put(key, EVENTS_CATEGORY, [e.model_dump(mode="json") for e in events], ttl_for(EVENTS_CATEGORY)):
                    logger.info(f"Cached {len(events)} events for {key} for {ttl_for(EVENTS_CATEGORY)} hours")

                self.meter.report_cost(FINANCIAL_EVENT_SIGNAL, result.cost_usd)
                return events
            except Exception as e:
                logger.error(f"Error fetching events for {key}: {e}")
                return []
