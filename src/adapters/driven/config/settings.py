"""Configuration loading from environment variables."""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, field_validator

from src.core.durations import format_duration, parse_duration
from src.ports.event import DEFAULT_EVENT_SOURCE, DEFAULT_EVENT_TYPE

__all__ = ["Settings", "load_settings", "parse_config_vars"]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)

DEFAULT_POLL_INTERVAL_SEC = 1.0


class Settings(BaseModel):
    """Runtime configuration for the heartbeat source.

    Attributes:
        interval_sec: Interval between events in seconds (must be positive).
        message_template: Message text with {{.name}} placeholders.
        sink: HTTP endpoint that will receive events.
        config_vars_path: Optional YAML/JSON file watched for variables.
        config_vars: Inline variables used as the initial snapshot.
        config_poll_interval_sec: How often the variables file is checked.
        send_timeout_sec: Deadline for one delivery; None means one interval.
        event_type: Type identifier set on every event.
        event_source: Source identifier set on every event.
    """

    interval_sec: float = Field(..., gt=0, description="Interval between events in seconds.")
    message_template: str = Field(..., description="Message template rendered on every tick.")
    sink: str = Field(..., description="HTTP endpoint that will receive events.")
    config_vars_path: str | None = Field(
        default=None,
        description=(
            "Optional YAML/JSON file with configuration variables. "
            "If not set, only inline variables are used and nothing is watched."
        ),
    )
    config_vars: dict[str, str] = Field(
        default_factory=dict,
        description="Inline configuration variables.",
    )
    config_poll_interval_sec: float = Field(default=DEFAULT_POLL_INTERVAL_SEC, gt=0)
    send_timeout_sec: float | None = Field(default=None, gt=0)
    event_type: str = Field(default=DEFAULT_EVENT_TYPE, min_length=1)
    event_source: str = Field(default=DEFAULT_EVENT_SOURCE, min_length=1)

    @field_validator("sink")
    @classmethod
    def validate_sink(cls, v: str) -> str:
        """Validate that sink is a valid HTTP(S) URL.

        Args:
            v: Sink URL to validate.

        Returns:
            The validated URL.

        Raises:
            ValueError: If URL is invalid or not http(s).
        """
        try:
            url = _http_url_adapter.validate_python(v)
            if url.scheme not in ("http", "https"):
                raise ValueError("Only http:// and https:// sinks allowed")
        except Exception as e:
            raise ValueError(f"Invalid sink: {e}") from e
        return v


def parse_config_vars(raw: str) -> dict[str, str]:
    """Parse inline variables written as ``key:value,key2:value2``.

    Args:
        raw: Comma separated key:value pairs; blank entries are skipped.

    Returns:
        Parsed variables.

    Raises:
        ValueError: If an entry has no ':' or an empty key.
    """
    result: dict[str, str] = {}
    for entry in raw.split(","):
        if not entry.strip():
            continue
        key, sep, value = entry.partition(":")
        if not sep or not key.strip():
            raise ValueError(f"Invalid CONFIG_VARS entry {entry!r}; expected key:value")
        result[key.strip()] = value.strip()
    return result


def _duration_env(name: str, raw: str) -> float:
    try:
        return parse_duration(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be a duration like 5s or 100ms (got: {raw})") from e


def load_settings() -> Settings:
    """Load and validate settings from environment.

    Required environment variables:
    - INTERVAL: Positive duration between events ("5s", "100ms", or seconds).
    - MESSAGE_TEMPLATE: Message text with {{.name}} placeholders.
    - K_SINK: Valid HTTP(S) URL of the receiver.

    Optional:
    - CONFIG_VARS_PATH: YAML/JSON file with variables, watched for changes.
    - CONFIG_VARS: Inline variables as key:value,key2:value2.
    - CONFIG_POLL_INTERVAL: Duration between checks of CONFIG_VARS_PATH.
    - SEND_TIMEOUT: Deadline for one delivery (defaults to INTERVAL).
    - EVENT_TYPE / EVENT_SOURCE: Event envelope identifiers.

    Returns:
        Validated Settings object.

    Raises:
        RuntimeError: If required env vars missing or unparseable.
        ValueError: If configuration is invalid.
    """
    try:
        interval_raw = os.environ["INTERVAL"]
        message_template = os.environ["MESSAGE_TEMPLATE"]
        sink = os.environ["K_SINK"]
    except KeyError as e:
        raise RuntimeError(f"Missing required environment variable: {e.args[0]}") from e

    interval_sec = _duration_env("INTERVAL", interval_raw)
    if interval_sec <= 0:
        raise RuntimeError(f"INTERVAL must be a positive duration (got: {interval_raw})")

    try:
        config_vars = parse_config_vars(os.getenv("CONFIG_VARS", ""))
    except ValueError as e:
        raise RuntimeError(str(e)) from e

    optional: dict[str, object] = {}
    if poll_raw := os.getenv("CONFIG_POLL_INTERVAL"):
        optional["config_poll_interval_sec"] = _duration_env("CONFIG_POLL_INTERVAL", poll_raw)
    if timeout_raw := os.getenv("SEND_TIMEOUT"):
        optional["send_timeout_sec"] = _duration_env("SEND_TIMEOUT", timeout_raw)
    if event_type := os.getenv("EVENT_TYPE"):
        optional["event_type"] = event_type
    if event_source := os.getenv("EVENT_SOURCE"):
        optional["event_source"] = event_source

    settings = Settings(
        interval_sec=interval_sec,
        message_template=message_template,
        sink=sink,
        config_vars_path=os.getenv("CONFIG_VARS_PATH") or None,
        config_vars=config_vars,
        **optional,
    )

    logger.info(
        f"Heartbeat configured: interval={format_duration(settings.interval_sec)}, "
        f"sink={settings.sink}, "
        f"inline_vars={len(settings.config_vars)}, "
        f"config_vars_path={settings.config_vars_path or '<disabled>'}"
    )

    return settings
