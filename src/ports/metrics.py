"""Metrics port definition (interface and DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

__all__ = ["DeliveryAttemptDto", "MetricsPort"]


@dataclass(slots=True, frozen=True)
class DeliveryAttemptDto:
    """Immutable record of a single delivery attempt.

    Attributes:
        sequence: Sequence number of the delivered event.
        started_at_sec: Monotonic time when the request left the process.
        finished_at_sec: Monotonic time when the outcome was known.
        acknowledged: True if the receiver accepted the event.
        status_code: HTTP status code when a response arrived; None otherwise.
    """

    sequence: int
    started_at_sec: float
    finished_at_sec: float
    acknowledged: bool = True
    status_code: int | None = None


class MetricsPort(Protocol):
    """Interface for recording delivery attempt metrics.

    Implementations must be async-safe and non-blocking.
    Senders call update() after each attempt; presentation layers call
    __str__() to render summaries.
    """

    def update(self, attempt: DeliveryAttemptDto, /) -> None:
        """Record a finished delivery attempt.

        Args:
            attempt: The attempt to record.
        """
        ...

    def __str__(self) -> str:
        """Return concise textual summary for humans.

        Returns:
            Formatted metrics string.
        """
        ...
