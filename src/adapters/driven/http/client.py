"""HTTP sender adapter delivering CloudEvents with metrics integration."""

import asyncio
import logging
from types import TracebackType

import aiohttp
from aiohttp import ClientTimeout

from src.ports.event import Event
from src.ports.metrics import DeliveryAttemptDto, MetricsPort
from src.ports.sender import SendResult

__all__ = ["HttpSender", "HttpStatusError"]

logger = logging.getLogger(__name__)

CLOUDEVENTS_CONTENT_TYPE = "application/cloudevents+json"
DEFAULT_TIMEOUT = 10
FIRST_FAILING_HTTP_CODE = 300

# Errors that classify a delivery as not acknowledged instead of raising
DELIVERY_ERRORS = (
    aiohttp.ClientError,  # Connection refused, DNS failed, payload errors
    asyncio.TimeoutError,  # Request exceeded ClientTimeout
)


class HttpStatusError(Exception):
    """Receiver answered with a non-2xx status code."""

    def __init__(self, status: int) -> None:
        super().__init__(f"receiver returned HTTP {status}")
        self.status = status


class HttpSender:
    """Delivers events to an HTTP receiver.

    Features:
    - CloudEvents structured-mode JSON body.
    - Classifies every attempt as acknowledged (2xx) or not; never raises
      for transport errors.
    - Metrics collection (latency, ack rate).
    - Context manager for proper resource cleanup.
    """

    def __init__(
        self,
        endpoint: str,
        metrics: MetricsPort | None = None,
        timeout_sec: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize HTTP sender.

        Args:
            endpoint: URL of the receiver.
            metrics: Optional metrics collector to track attempts.
            timeout_sec: Total timeout for one request.
        """
        self.endpoint = endpoint
        self.metrics = metrics
        self.timeout = ClientTimeout(total=timeout_sec)
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpSender":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session).

        Args:
            exc_type: Exception type if raised in context.
            exc: Exception instance if raised in context.
            tb: Traceback if raised in context.
        """
        if self.session:
            await self.session.close()

    async def _post(self, event: Event) -> int:
        """Single HTTP POST of one event.

        Args:
            event: Event to encode and send.

        Returns:
            HTTP status code.

        Raises:
            RuntimeError: If session not initialized.
            aiohttp exceptions: Network/timeout errors.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")

        async with self.session.post(
            self.endpoint,
            json=event.to_cloudevent(),
            headers={"Content-Type": CLOUDEVENTS_CONTENT_TYPE},
        ) as resp:
            return resp.status

    async def send(self, event: Event) -> SendResult:
        """Send event and record metrics.

        Args:
            event: Event to deliver.

        Returns:
            Acknowledged result for 2xx responses, not acknowledged otherwise.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        status: int | None = None

        try:
            status = await self._post(event)
        except DELIVERY_ERRORS as e:
            logger.warning(f"Receiver unreachable at {self.endpoint}: {e!r}")
            result = SendResult.nack(e)
        else:
            if status < FIRST_FAILING_HTTP_CODE:
                result = SendResult.ack(status)
            else:
                result = SendResult.nack(HttpStatusError(status), status_code=status)

        if self.metrics:
            self.metrics.update(
                DeliveryAttemptDto(
                    sequence=event.data.sequence,
                    started_at_sec=started,
                    finished_at_sec=loop.time(),
                    acknowledged=result.acknowledged,
                    status_code=status,
                )
            )
            logger.debug(f"Delivery metrics: {self.metrics}")

        return result
