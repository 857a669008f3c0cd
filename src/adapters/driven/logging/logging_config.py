"""Structured logging setup for the heartbeat source."""

import logging
import os

__all__ = ["configure_logs"]

_HANDLER_NAME = "heartbeat-console"


def configure_logs(level: str | None = None) -> None:
    """Configure console logging.

    Sets up:
    - Root logger at INFO level.
    - Framework loggers (aiohttp, asyncio) at WARNING level.
    - Application loggers (src) at LOG_LEVEL, DEBUG by default.
    - Structured format with timestamp, level, module, and line number.

    Safe to call more than once; the console handler is installed only once.

    Args:
        level: Level name for application loggers; overrides LOG_LEVEL.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
    date_format = "%d/%m/%y %H:%M:%S"

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(log_format, date_format))
        root.addHandler(handler)

    # Suppress verbose framework loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    app_level = (level or os.getenv("LOG_LEVEL") or "DEBUG").upper()
    logging.getLogger("src").setLevel(app_level)
