"""Settings port definition (DTO)."""

from dataclasses import dataclass

from src.ports.event import DEFAULT_EVENT_SOURCE, DEFAULT_EVENT_TYPE

__all__ = ["SettingsPort"]


@dataclass
class SettingsPort:
    """Runtime settings for the core producer.

    Decouples core from concrete configuration sources, enabling
    easy testing and implementation swapping.

    Attributes:
        interval_sec: Seconds between ticks.
        message_template: Message text with {{.name}} placeholders.
        send_timeout_sec: Deadline for one delivery; defaults to interval_sec.
        event_type: Type identifier set on every event.
        event_source: Source identifier set on every event.
    """

    interval_sec: float
    message_template: str
    send_timeout_sec: float | None = None
    event_type: str = DEFAULT_EVENT_TYPE
    event_source: str = DEFAULT_EVENT_SOURCE

    @property
    def effective_send_timeout_sec(self) -> float:
        """Per-send deadline used by the producer."""
        return self.send_timeout_sec or self.interval_sec
