"""
API endpoints for AI generated stock analyses.
"""
from typing import List

from fastapi import APIRouter, Depends

from stockwatch.api.deps import get_analysis_service
from stockwatch.services.analysis.analysis_service import AnalysisService
from stockwatch.services.data.normalized import FinancialEvent, StockAnalysis

router = APIRouter()


@router.get("/{ticker}", response_model=StockAnalysis)
async def get_analysis(ticker: str, service: AnalysisService = Depends(get_analysis_service)):
    """News, major events and valuation for a ticker, with the event timeline.

    Served from cache for a day. A second request while the first is still
    running gets 409.
    """
    return await service.get_analysis(ticker)


@router.get("/{ticker}/events", response_model=List[FinancialEvent])
async def get_events(ticker: str, service: AnalysisService = Depends(get_analysis_service)):
    """Dated events, oldest first. 409 while a fetch for the ticker is running."""
    return await service.get_financial_events(ticker, raise_if_busy=True)
