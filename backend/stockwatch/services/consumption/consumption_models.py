"""
Consumption model classes for AI usage metering.
"""
from dataclasses import dataclass
from typing import Any, Dict

# Signal names reported to the metering service
NEWS_SIGNAL = "news_summary"
FINANCIAL_EVENT_SIGNAL = "major_events"


@dataclass
class CostRecord:
    """Cost of one successful AI call."""
    signal: str  # NEWS_SIGNAL or FINANCIAL_EVENT_SIGNAL
    amount: float
    currency: str = "USD"
    vendor: str = "perplexity"

    def to_usage_event(self, customer_id: str, agent_id: str) -> Dict[str, Any]:
        """Body of the usage record POSTed to the metering service."""
        return {
            "event_name": self.signal,
            "customer_id": customer_id,
            "external_agent_id": agent_id,
            "data": {
                "costData": {
                    "vendor": self.vendor,
                    "cost": {
                        "amount": self.amount,
                        "currency": self.currency,
                    },
                },
            },
        }
