"""Signal handling for graceful shutdown."""

import asyncio
import logging
import signal

__all__ = ["make_cancel_on_sigterm"]

logger = logging.getLogger(__name__)


def make_cancel_on_sigterm() -> asyncio.Event:
    """Create SIGTERM-based cancellation signal for the producer.

    Registers SIGTERM/SIGINT handlers that set an asyncio.Event, which
    the producer and the config watcher wait on.

    On Docker/Kubernetes, SIGTERM is sent 30s before SIGKILL,
    allowing graceful shutdown.

    Returns:
        Event that is set once a termination signal has been received.
    """
    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()

    def handle_signal() -> None:
        """Signal handler that sets the cancel event on SIGTERM/SIGINT."""
        logger.info("Termination signal received, initiating graceful shutdown...")
        cancel.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_signal)

    return cancel
