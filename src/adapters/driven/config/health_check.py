"""Healthcheck validator for container orchestration."""

import logging

from src.adapters.driven.config.settings import load_settings
from src.adapters.driven.logging.logging_config import configure_logs
from src.adapters.driving.config_watcher import ConfigFileWatcher
from src.core.config_store import ConfigStore

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Run health check for container orchestration.

    Validates:
    - Required environment variables are set and parse.
    - The config vars file (if configured) exists and decodes.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        settings = load_settings()
        if settings.config_vars_path:
            ConfigFileWatcher(settings.config_vars_path, ConfigStore()).load()
    except Exception as exc:
        logger.error(f"Heartbeat healthcheck FAILED: {exc}")
        return 1

    logger.info("Heartbeat healthcheck OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
