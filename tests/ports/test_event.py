"""Tests for the event DTO."""

import dataclasses
from datetime import timezone

import pytest

from src.ports.event import DEFAULT_EVENT_SOURCE, DEFAULT_EVENT_TYPE, Event, EventData
from src.ports.sender import SendResult

__all__ = []


def make_event() -> Event:
    return Event(
        type=DEFAULT_EVENT_TYPE,
        source=DEFAULT_EVENT_SOURCE,
        data=EventData(sequence=2, heartbeat="10ms", message="tick 1"),
    )


def test_event_to_cloudevent() -> None:
    """Events should encode as structured CloudEvents."""
    event = make_event()

    encoded = event.to_cloudevent()

    assert encoded["specversion"] == "1.0"
    assert encoded["id"] == event.id
    assert encoded["type"] == DEFAULT_EVENT_TYPE
    assert encoded["source"] == DEFAULT_EVENT_SOURCE
    assert encoded["datacontenttype"] == "application/json"
    assert encoded["data"] == {"sequence": 2, "heartbeat": "10ms", "message": "tick 1"}


def test_event_defaults_are_fresh() -> None:
    """Each event should get its own id and a UTC timestamp."""
    first, second = make_event(), make_event()

    assert first.id != second.id
    assert first.time.tzinfo == timezone.utc


def test_event_is_immutable() -> None:
    """Events are values; fields cannot be reassigned."""
    event = make_event()

    with pytest.raises(dataclasses.FrozenInstanceError):
        event.type = "other"  # type: ignore[misc]


def test_send_result_helpers() -> None:
    """ack()/nack() should classify results."""
    cause = RuntimeError("down")

    assert SendResult.ack(202) == SendResult(acknowledged=True, status_code=202)
    nack = SendResult.nack(cause, status_code=503)
    assert nack.acknowledged is False
    assert nack.error is cause
    assert nack.status_code == 503
