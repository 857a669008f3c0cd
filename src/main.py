"""Application entrypoint."""

import asyncio
import logging

from src.adapters.driven.config.settings import Settings, load_settings
from src.adapters.driven.http.client import HttpSender
from src.adapters.driven.logging.logging_config import configure_logs
from src.adapters.driven.metrics.delivery_metrics import Metrics
from src.adapters.driving.config_watcher import CONFIG_VARS_NAME, ConfigFileWatcher, ConfigSourceError
from src.adapters.driving.signals import make_cancel_on_sigterm
from src.core.config_store import ConfigSnapshot, ConfigStore
from src.core.producer import EventProducer
from src.ports.settings import SettingsPort

__all__ = ["main"]

logger = logging.getLogger(__name__)


def log_config_update(name: str, snapshot: ConfigSnapshot) -> None:
    """ConfigStore callback that reports every installed snapshot."""
    logger.info(f"Config vars {name!r} updated: keys={sorted(snapshot)}")


async def main() -> None:
    """Start the heartbeat source service.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration.
    3. Populate the config store from inline vars and the vars file.
    4. Run the producer (and the vars file watcher, if configured).
    5. Gracefully shutdown on SIGTERM.
    """
    configure_logs()
    logger.info("Starting heartbeat source...")

    try:
        config = load_settings()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check INTERVAL, MESSAGE_TEMPLATE, K_SINK and, if set, "
            "CONFIG_VARS, CONFIG_VARS_PATH, CONFIG_POLL_INTERVAL and SEND_TIMEOUT.",
            exc,
        )
        return

    store = ConfigStore(log_config_update)
    try:
        watcher = prime_config_store(config, store)
    except ConfigSourceError as exc:
        logger.error(f"Config vars error: {exc}")
        return

    # Wrap config into port so core depends on interface (hexagonal)
    settings_port = SettingsPort(
        interval_sec=config.interval_sec,
        message_template=config.message_template,
        send_timeout_sec=config.send_timeout_sec,
        event_type=config.event_type,
        event_source=config.event_source,
    )

    sender = HttpSender(
        endpoint=config.sink,
        metrics=Metrics(),
        timeout_sec=settings_port.effective_send_timeout_sec,
    )

    async with sender:
        cancel = make_cancel_on_sigterm()
        producer = EventProducer(settings=settings_port, store=store, sender=sender)

        try:
            await run_until_cancelled(producer, watcher, cancel)
        except Exception as e:
            logger.error(f"Unhandled exception in producer: {e}", exc_info=True)

        logger.info("Heartbeat source stopped.")


def prime_config_store(config: Settings, store: ConfigStore) -> ConfigFileWatcher | None:
    """Install the initial snapshot before the producer starts.

    Args:
        config: Loaded settings.
        store: Store to populate.

    Returns:
        Watcher for the vars file, or None when no file is configured.

    Raises:
        ConfigSourceError: If the configured vars file is missing or malformed.
    """
    if not config.config_vars_path:
        store.replace(CONFIG_VARS_NAME, config.config_vars)
        return None

    watcher = ConfigFileWatcher(
        config.config_vars_path,
        store,
        poll_interval_sec=config.config_poll_interval_sec,
    )
    watcher.prime(base=config.config_vars)
    return watcher


async def run_until_cancelled(
    producer: EventProducer,
    watcher: ConfigFileWatcher | None,
    cancel: asyncio.Event,
) -> None:
    """Run the producer and the optional watcher until cancel is set."""
    if watcher is None:
        await producer.start(cancel)
        return

    await asyncio.gather(producer.start(cancel), watcher.watch(cancel))


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")
