"""
Telemetry Agent - Transporter

Delivers envelopes to the remote collector with bounded retry, falls back to
the offline buffer, and drains that buffer after a successful send.
"""

import asyncio
import re
from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError

from ..models import ApiResponse, Envelope, Tier
from .buffer import OfflineBuffer
from .errors import DeliveryOutcome, TransportError, classify_status
from .http import HttpTransport

logger = structlog.get_logger(__name__)

HEALTH_TIMEOUT = 5.0


class Transporter:
    """Sends envelopes to the collector.

    Transport failures, 5xx responses and malformed success bodies are retried
    up to ``retry_count`` attempts, sleeping ``retry_delay * attempt`` seconds
    between attempts. A 4xx response ends the attempt sequence at once. An
    envelope that could not be delivered is pushed onto the offline buffer
    when one is configured.
    """

    def __init__(
        self,
        server_url: str,
        device_id: str,
        transport: HttpTransport,
        api_key: str = "",
        buffer: Optional[OfflineBuffer] = None,
        retry_count: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 10.0,
        dry_run: bool = False,
    ):
        if retry_count < 1:
            raise ValueError("retry_count must be at least 1")

        self._server_url = server_url.rstrip("/")
        self._device_id = device_id
        self._transport = transport
        self._api_key = api_key
        self._buffer = buffer
        self._retry_count = retry_count
        self._retry_delay = retry_delay
        self._timeout = timeout
        self._dry_run = dry_run
        self._draining = False

    @classmethod
    def from_settings(cls, settings, transport: HttpTransport) -> "Transporter":
        buffer = OfflineBuffer(settings.offline_buffer_max_size) if settings.offline_buffer_enabled else None
        return cls(
            server_url=settings.server_url,
            device_id=settings.device_id,
            transport=transport,
            api_key=settings.api_key,
            buffer=buffer,
            retry_count=settings.api_retry_count,
            retry_delay=settings.api_retry_delay_ms / 1000,
            timeout=settings.api_timeout_ms / 1000,
            dry_run=settings.dry_run,
        )

    @property
    def buffer(self) -> Optional[OfflineBuffer]:
        return self._buffer

    @property
    def backlog(self) -> int:
        """Number of envelopes waiting in the offline buffer."""
        return len(self._buffer) if self._buffer is not None else 0

    @property
    def batch_url(self) -> str:
        return f"{self._server_url}/batch"

    @property
    def health_url(self) -> str:
        return re.sub(r"/telemetry$", "/health", self._server_url)

    def _headers(self, tier: Optional[Tier] = None) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "X-Device-ID": self._device_id,
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        if tier is not None:
            headers["X-Telemetry-Frequency"] = tier.value
        return headers

    async def send(self, envelope: Envelope) -> bool:
        """Deliver one envelope. Returns False if it ended up buffered or dropped."""
        if self._dry_run:
            logger.info("[DRY RUN] Would send telemetry", tier=envelope.tier.value, id=envelope.id)
            logger.debug("[DRY RUN] Payload", payload=envelope.to_dict())
            return True

        body = envelope.to_dict()
        headers = self._headers(envelope.tier)

        for attempt in range(1, self._retry_count + 1):
            outcome = await self._attempt(self._server_url, body, headers, self._timeout, attempt)

            if outcome is DeliveryOutcome.SUCCESS:
                if self.backlog > 0:
                    await self.drain()
                return True

            if outcome is DeliveryOutcome.TERMINAL:
                break

            if attempt < self._retry_count:
                await asyncio.sleep(self._retry_delay * attempt)

        if self._buffer is not None:
            self._buffer.push(envelope)
        else:
            logger.warning("Telemetry dropped, offline buffer disabled", tier=envelope.tier.value, id=envelope.id)

        return False

    async def _attempt(
        self,
        url: str,
        body: Any,
        headers: Dict[str, str],
        timeout: float,
        attempt: int = 1,
    ) -> DeliveryOutcome:
        """Run one request and classify how it ended."""
        try:
            response = await self._transport.post(url, body, headers, timeout)
        except TransportError as e:
            logger.warning(
                "Delivery attempt failed",
                attempt=attempt,
                retry_count=self._retry_count,
                error=str(e),
            )
            return DeliveryOutcome.RETRYABLE

        outcome = classify_status(response.status)
        if outcome is not DeliveryOutcome.SUCCESS:
            logger.warning(
                "Collector returned error status",
                status=response.status,
                reason=response.reason,
                attempt=attempt,
                outcome=outcome.value,
            )
            return outcome

        try:
            ack = ApiResponse.model_validate(response.body)
        except ValidationError as e:
            logger.warning("Malformed collector response", attempt=attempt, error=str(e))
            return DeliveryOutcome.RETRYABLE

        if not ack.success:
            logger.warning("Collector reported failure", attempt=attempt, error=ack.error)
            return DeliveryOutcome.RETRYABLE

        logger.debug("Telemetry sent", ack_id=ack.data.id if ack.data else None)
        return DeliveryOutcome.SUCCESS

    async def drain(self) -> int:
        """Deliver buffered envelopes oldest first, one attempt each.

        Stops at the first failure and leaves the rest for the next drain.
        Returns the number of envelopes delivered.
        """
        if self._buffer is None or len(self._buffer) == 0:
            return 0

        if self._draining:
            logger.debug("Offline buffer drain already in progress")
            return 0

        self._draining = True
        delivered = 0
        logger.info("Flushing offline buffer", entries=len(self._buffer))

        try:
            while len(self._buffer) > 0:
                envelope = self._buffer.peek_oldest()
                outcome = await self._attempt(
                    self.batch_url,
                    {"payloads": [envelope.to_dict()]},
                    self._headers(),
                    self._timeout,
                )

                if outcome is not DeliveryOutcome.SUCCESS:
                    logger.warning("Failed to flush buffer, will retry later", remaining=len(self._buffer))
                    break

                # A push during the request may have evicted this entry already
                if self._buffer.peek_oldest() is envelope:
                    self._buffer.pop_oldest()
                delivered += 1
                logger.debug("Flushed buffered entry", remaining=len(self._buffer))
        finally:
            self._draining = False

        return delivered

    async def send_batch(self, envelopes: List[Envelope]) -> bool:
        """Send several envelopes in one request. Single attempt, no buffering."""
        if not envelopes:
            return True

        if self._dry_run:
            logger.info("[DRY RUN] Would send telemetry batch", count=len(envelopes))
            return True

        outcome = await self._attempt(
            self.batch_url,
            {"payloads": [e.to_dict() for e in envelopes]},
            self._headers(),
            self._timeout * 2,
        )

        if outcome is DeliveryOutcome.SUCCESS:
            logger.debug("Telemetry batch sent", count=len(envelopes))
            return True

        logger.warning("Telemetry batch failed", count=len(envelopes), outcome=outcome.value)
        return False

    async def check_health(self) -> bool:
        """Probe the collector's health endpoint. Never raises."""
        if self._dry_run:
            logger.info("[DRY RUN] Skipping server health check")
            return True

        try:
            response = await self._transport.get(self.health_url, HEALTH_TIMEOUT)
        except TransportError as e:
            logger.debug("Health check failed", url=self.health_url, error=str(e))
            return False

        return 200 <= response.status < 300
