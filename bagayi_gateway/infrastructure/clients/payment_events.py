"""Payment events webhook client with exponential backoff retry logic"""

import httpx
import asyncio
import logging
from typing import Dict, Any
from bagayi_gateway.config import settings
from bagayi_gateway.infrastructure.observability.metrics import webhook_latency_histogram, webhook_failure_counter

logger = logging.getLogger(__name__)


class PaymentEventsClient:
    """Client for notifying the payment-processing backend of submitted transfers"""

    def __init__(self, webhook_url: str | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.webhook_url = webhook_url or settings.payment_events_url
        self.transport = transport
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    async def send_transfer_event(self, payload: Dict[str, Any]) -> None:
        """
        Send a TRANSFER_SUBMITTED event with retry logic.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s, 16s (base^attempt)
        - Retries on 5xx errors and network failures; 4xx responses raise immediately
        - Tracks latency histogram and failure counter
        """
        attempt = 0
        async with httpx.AsyncClient(transport=self.transport) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(
                            self.webhook_url,
                            json=payload,
                            timeout=10.0,
                        )
                        response.raise_for_status()
                        return

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    webhook_failure_counter.inc()

                    if isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500:
                        logger.error(
                            "Payment event rejected",
                            extra={"transfer_id": payload.get("transfer_id"), "status": e.response.status_code},
                        )
                        raise

                    if attempt >= self.max_retries:
                        raise

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
