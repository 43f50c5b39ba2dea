"""
Workforce scheduling integration
Tells the downstream scheduling system that a new booking exists
"""

import logging
from typing import Optional

import httpx

from ..config import WEBHOOK_TIMEOUT_SECONDS, WORKFORCE_WEBHOOK_URL

logger = logging.getLogger(__name__)


class WorkforceWebhookError(Exception):
    pass


class WorkforceWebhook:
    def __init__(
        self,
        base_url: Optional[str] = WORKFORCE_WEBHOOK_URL,
        timeout: float = WEBHOOK_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    async def trigger(self, booking_number: str) -> Optional[int]:
        """
        POST {"bookingNumber": ...} to the configured URL.

        Returns the response status code, or None when no URL is configured.
        Raises WorkforceWebhookError on network errors and non-2xx responses.
        """
        if not self.enabled:
            logger.debug(f"Workforce webhook not configured - skipping {booking_number}")
            return None

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.base_url, json={"bookingNumber": booking_number})
        except httpx.HTTPError as e:
            raise WorkforceWebhookError(f"Webhook request failed: {e}") from e

        if not response.is_success:
            raise WorkforceWebhookError(
                f"Webhook returned HTTP {response.status_code}: {response.text[:200]}"
            )

        logger.info(f"🔗 Workforce webhook accepted {booking_number} (HTTP {response.status_code})")
        return response.status_code
