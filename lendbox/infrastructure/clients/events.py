"""Portfolio event webhook client with exponential backoff retry logic"""

import httpx
import asyncio
import logging
from typing import Dict, Any, Optional
from lendbox.config import settings
from lendbox.domain.exceptions import EventDeliveryError
from lendbox.infrastructure.observability.metrics import webhook_latency_histogram, webhook_failure_counter

logger = logging.getLogger(__name__)


class EventClient:
    """Client for pushing portfolio events to a subscriber webhook"""

    def __init__(
        self,
        webhook_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_retries: Optional[int] = None,
        backoff_base: Optional[float] = None,
    ):
        self.webhook_url = webhook_url
        self.transport = transport
        self.timeout = settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.webhook_max_retries
        self.backoff_base = backoff_base if backoff_base is not None else settings.webhook_backoff_base

    async def send_event(self, event: str, payload: Dict[str, Any]) -> None:
        """
        Deliver an event to the webhook with retry logic.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^attempt)
        - Retries on HTTP errors and network failures
        - Tracks latency histogram and failure counter

        Raises:
            EventDeliveryError: After the final failed attempt
        """
        body = {"event": event, **payload}
        attempt = 0
        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=body)
                        response.raise_for_status()
                        return  # Success

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    webhook_failure_counter.inc()

                    if attempt >= self.max_retries:
                        logger.error(
                            f"Event delivery failed after {attempt} attempts: {e}",
                            extra={"event": event},
                        )
                        raise EventDeliveryError(f"Could not deliver {event} to {self.webhook_url}") from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
