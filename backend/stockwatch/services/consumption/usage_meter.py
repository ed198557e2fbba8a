"""
Usage metering for AI calls.

Cost records are sent fire-and-forget: report_cost() schedules a detached
task and returns immediately. A slow or unreachable metering service must
never delay or fail the analysis path, so the task contains its own errors.
"""
import asyncio
from typing import Optional, Set
import logging

import httpx

from stockwatch.core.config import HTTP_TIMEOUT_SECONDS
from stockwatch.services.consumption.consumption_models import CostRecord

logger = logging.getLogger(__name__)


class UsageMeter:
    """Posts cost records to the metering service."""

    def __init__(
        self,
        url: Optional[str],
        api_key: Optional[str] = None,
        customer_id: str = "joe",
        agent_id: str = "sentry_agent",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        """Initialize usage meter.

        Args:
            url: Usage endpoint. None disables metering.
            api_key: Bearer token for the metering service
            customer_id: Customer the usage is billed to
            agent_id: Agent identifier attached to every record
            http_client: Optional client (tests pass one with a mock transport)
            timeout: Request timeout when the meter creates its own client
        """
        self.url = url
        self.api_key = api_key
        self.customer_id = customer_id
        self.agent_id = agent_id
        self._http_client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout
        self._pending: Set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def send(self, record: CostRecord) -> bool:
        """Send one record. Never raises.

        Returns:
            True if the metering service accepted the record
        """
        if not self.enabled:
            logger.debug(f"Metering disabled, dropping {record.signal} cost {record.amount}")
            return False

        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            response = await self._client().post(
                self.url,
                json=record.to_usage_event(self.customer_id, self.agent_id),
                headers=headers,
            )
            if response.status_code >= 400:
                logger.warning(f"Metering rejected {record.signal}: HTTP {response.status_code}")
                return False
            logger.info(f"Usage cost for {record.signal} sent: {record.amount} {record.currency}")
            return True
        except Exception as e:
            logger.warning(f"Failed to send usage cost for {record.signal}: {e}")
            return False

    def report_cost(self, signal: str, amount: Optional[float], currency: str = "USD") -> Optional[asyncio.Task]:
        """Schedule a cost record without waiting for it.

        Must be called from inside the event loop. Returns the detached task,
        or None when there is nothing to send.
        """
        if amount is None:
            logger.debug(f"No cost reported for {signal}, skipping metering")
            return None
        if not self.enabled:
            return None

        task = asyncio.create_task(self.send(CostRecord(signal=signal, amount=amount, currency=currency)))
        # Hold a reference until done so the task is not garbage collected mid-flight
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for outstanding sends (used on shutdown)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
