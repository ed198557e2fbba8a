"""
Usage metering for AI calls.
"""
from stockwatch.services.consumption.usage_meter import UsageMeter
from stockwatch.services.consumption.consumption_models import (
    CostRecord,
    NEWS_SIGNAL,
    FINANCIAL_EVENT_SIGNAL,
)

__all__ = [
    "UsageMeter",
    "CostRecord",
    "NEWS_SIGNAL",
    "FINANCIAL_EVENT_SIGNAL",
]
