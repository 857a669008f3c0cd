"""Interval-driven producer that renders and emits one event per tick."""

import asyncio
import logging

from src.core.config_store import ConfigStore
from src.core.durations import format_duration
from src.core.template import RenderError, render_template
from src.ports.event import Event, EventData
from src.ports.sender import SenderPort
from src.ports.settings import SettingsPort

__all__ = ["EventProducer"]


class EventProducer:
    """Emits heartbeat events until cancelled.

    Each tick renders the message template against the current config
    snapshot, builds an event with the next sequence number, and hands it
    to the sender. Delivery failures are logged and never stop the loop;
    cancellation is the only way out.
    """

    def __init__(
        self,
        settings: SettingsPort,
        store: ConfigStore,
        sender: SenderPort,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize producer.

        Args:
            settings: Runtime settings (interval, template, envelope ids).
            store: Source of configuration variables for rendering.
            sender: Delivers events to the receiver.
            logger: Logger to use instead of the module logger.
        """
        self._settings = settings
        self._store = store
        self._sender = sender
        self._logger = logger or logging.getLogger(__name__)
        self._heartbeat = format_duration(settings.interval_sec)
        self._next_sequence = 0

    @property
    def sequence(self) -> int:
        """Sequence number the next event will carry."""
        return self._next_sequence

    async def start(self, cancel: asyncio.Event) -> None:
        """Run the producer loop until cancel is set.

        Periodically:
        1. Wait one interval, or until cancel is set.
        2. Render the message and build the next event.
        3. Deliver it in a background task (the timer does not wait for it).

        Args:
            cancel: Set to request a graceful shutdown.

        Notes:
            - If cancel is set by the time the interval elapses, no event is
              sent for that tick.
            - In-flight deliveries are not interrupted; they are awaited on
              shutdown, each bounded by the send timeout.
        """
        self._logger.info(f"Starting heartbeat, interval={self._heartbeat}")
        pending: set[asyncio.Task[None]] = set()
        loop = asyncio.get_running_loop()

        while not await self._wait_for_tick(cancel):
            event = self._new_event()
            self._logger.info(f"Sending new event: seq={event.data.sequence} id={event.id}")

            task: asyncio.Task[None] = loop.create_task(self._deliver(event))
            pending.add(task)
            task.add_done_callback(pending.discard)

        self._logger.info("Shutting down...")
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _wait_for_tick(self, cancel: asyncio.Event) -> bool:
        """Wait for the interval to elapse or cancel to be set.

        Returns:
            True if the loop should stop.
        """
        try:
            await asyncio.wait_for(cancel.wait(), timeout=self._settings.interval_sec)
        except asyncio.TimeoutError:
            # Cancellation wins a tie with the timer.
            return cancel.is_set()
        return True

    def _new_event(self) -> Event:
        variables = self._store.get_snapshot()
        try:
            message = render_template(self._settings.message_template, variables)
        except RenderError as e:
            self._logger.error(f"Failed to execute message template: {e}")
            message = ""

        event = Event(
            type=self._settings.event_type,
            source=self._settings.event_source,
            data=EventData(
                sequence=self._next_sequence,
                heartbeat=self._heartbeat,
                message=message,
            ),
        )
        self._next_sequence += 1
        return event

    async def _deliver(self, event: Event) -> None:
        """Send one event and log the outcome."""
        seq = event.data.sequence
        timeout = self._settings.effective_send_timeout_sec
        try:
            result = await asyncio.wait_for(self._sender.send(event), timeout=timeout)
        except asyncio.TimeoutError:
            self._logger.warning(f"Send of event seq={seq} timed out after {timeout}s")
            return
        except Exception as e:  # noqa: BLE001
            self._logger.error(f"Unexpected error sending event seq={seq}: {e}", exc_info=True)
            return

        if not result.acknowledged:
            # Could be transient, try again next interval.
            self._logger.info(f"Failed to send event seq={seq}: {result.error}")
