"""Sender port definition (interface and DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from src.ports.event import Event

__all__ = ["SendResult", "SenderPort"]


@dataclass(slots=True, frozen=True)
class SendResult:
    """Outcome of one delivery attempt.

    Attributes:
        acknowledged: True if the receiver accepted the event.
        status_code: Receiver status code, if a response arrived.
        error: Cause of the failure when not acknowledged.
    """

    acknowledged: bool
    status_code: int | None = None
    error: BaseException | None = None

    @classmethod
    def ack(cls, status_code: int | None = None) -> SendResult:
        return cls(acknowledged=True, status_code=status_code)

    @classmethod
    def nack(cls, error: BaseException, status_code: int | None = None) -> SendResult:
        return cls(acknowledged=False, status_code=status_code, error=error)


class SenderPort(Protocol):
    """Interface for delivering events to a downstream receiver.

    Anything other than an acknowledged result is treated by the producer
    as a transient failure.
    """

    async def send(self, event: Event, /) -> SendResult:
        """Deliver one event.

        Args:
            event: The event to deliver.

        Returns:
            Classified delivery result.
        """
        ...
