"""Tests for HTTP sender adapter."""

import asyncio
from unittest.mock import MagicMock, patch

import aiohttp
import pytest

from src.adapters.driven.http.client import CLOUDEVENTS_CONTENT_TYPE, HttpSender, HttpStatusError
from src.ports.event import Event, EventData
from src.ports.metrics import DeliveryAttemptDto, MetricsPort

__all__ = []

SINK = "http://test/events"


class DummyMetrics(MetricsPort):
    """Metrics implementation for testing."""

    def __init__(self) -> None:
        self.attempts: list[DeliveryAttemptDto] = []

    def update(self, attempt: DeliveryAttemptDto) -> None:
        """Record attempt."""
        self.attempts.append(attempt)

    def __str__(self) -> str:
        """Return string representation."""
        return f"Recorded {len(self.attempts)} attempts"


def make_event(sequence: int = 7) -> Event:
    return Event(
        type="dev.test",
        source="test/source",
        data=EventData(sequence=sequence, heartbeat="1s", message="hi"),
    )


def make_sender_with_status(status: int, metrics: MetricsPort | None = None) -> HttpSender:
    """Create sender whose session answers every POST with status."""
    sender = HttpSender(endpoint=SINK, metrics=metrics)
    sender.session = MagicMock()
    response = MagicMock()
    response.status = status
    sender.session.post.return_value.__aenter__.return_value = response
    return sender


@pytest.mark.asyncio
async def test_http_sender_context_manager() -> None:
    """HTTP sender should initialize and close session."""
    sender = HttpSender(endpoint=SINK)
    assert sender.session is None

    async with sender as s:
        assert s.session is not None
        assert s is sender

    assert sender.session.closed


@pytest.mark.asyncio
async def test_http_sender_posts_cloudevent() -> None:
    """send() should POST the structured CloudEvent to the sink."""
    sender = make_sender_with_status(202)
    event = make_event()

    result = await sender.send(event)

    assert result.acknowledged is True
    assert result.status_code == 202
    args, kwargs = sender.session.post.call_args
    assert args == (SINK,)
    assert kwargs["json"] == event.to_cloudevent()
    assert kwargs["headers"]["Content-Type"] == CLOUDEVENTS_CONTENT_TYPE


@pytest.mark.asyncio
async def test_http_sender_with_metrics() -> None:
    """HTTP sender should update metrics after each attempt."""
    metrics = DummyMetrics()
    sender = make_sender_with_status(201, metrics=metrics)

    with patch("src.adapters.driven.http.client.asyncio.get_running_loop") as mock_loop:
        mock_loop.return_value.time.side_effect = [100.0, 100.05]
        await sender.send(make_event(sequence=3))

    assert len(metrics.attempts) == 1
    attempt = metrics.attempts[0]
    assert attempt.sequence == 3
    assert attempt.status_code == 201
    assert attempt.acknowledged is True
    assert attempt.finished_at_sec - attempt.started_at_sec == pytest.approx(0.05)


@pytest.mark.asyncio
async def test_http_sender_marks_error_status_not_acknowledged() -> None:
    """Non-2xx responses should be not acknowledged with an HttpStatusError cause."""
    metrics = DummyMetrics()
    sender = make_sender_with_status(500, metrics=metrics)

    result = await sender.send(make_event())

    assert result.acknowledged is False
    assert result.status_code == 500
    assert isinstance(result.error, HttpStatusError)
    assert result.error.status == 500
    assert metrics.attempts[0].acknowledged is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc",
    [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()],
)
async def test_http_sender_transport_error_not_acknowledged(exc: BaseException) -> None:
    """Transport errors should be reported as not acknowledged, not raised."""
    metrics = DummyMetrics()
    sender = HttpSender(endpoint=SINK, metrics=metrics)
    sender.session = MagicMock()
    sender.session.post.side_effect = exc

    result = await sender.send(make_event())

    assert result.acknowledged is False
    assert result.error is exc
    assert metrics.attempts[0].status_code is None


@pytest.mark.asyncio
async def test_http_sender_requires_session() -> None:
    """send() outside 'async with' should raise."""
    sender = HttpSender(endpoint=SINK)

    with pytest.raises(RuntimeError, match="Session not initialized"):
        await sender.send(make_event())
