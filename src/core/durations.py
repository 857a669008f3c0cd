"""Parsing and formatting of duration strings such as "5s" or "1m30s"."""

import math
import re

__all__ = ["format_duration", "parse_duration"]

_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(text: str) -> float:
    """Parse a duration string into seconds.

    Accepts a sequence of number+unit components ("1h", "1m30s", "250ms")
    or a bare number, which is read as seconds.

    Args:
        text: Duration to parse.

    Returns:
        Duration in seconds.

    Raises:
        ValueError: If text is not a valid duration.
    """
    value = text.strip()
    if not value:
        raise ValueError("Empty duration")

    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise ValueError(f"Invalid duration: {text!r}")
        return seconds

    total = 0.0
    pos = 0
    while pos < len(value):
        match = _COMPONENT.match(value, pos)
        if match is None:
            raise ValueError(f"Invalid duration: {text!r}")
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()

    return total


def _with_fraction(value: int, digits: int) -> str:
    whole, frac = divmod(value, 10**digits)
    if not frac:
        return str(whole)
    return f"{whole}.{frac:0{digits}d}".rstrip("0")


def format_duration(seconds: float) -> str:
    """Render seconds the way durations are written in configuration.

    Works in whole nanoseconds, so no digits are dropped.
    Examples: 5 -> "5s", 0.1 -> "100ms", 90 -> "1m30s", 3600 -> "1h0m0s",
    1.2345678 -> "1.2345678s".

    Args:
        seconds: Non-negative duration in seconds.

    Returns:
        Compact duration string.
    """
    ns = round(seconds * 1e9)
    if ns == 0:
        return "0s"
    if ns < 1_000:
        return f"{ns}ns"
    if ns < 1_000_000:
        return f"{_with_fraction(ns, 3)}µs"
    if ns < 1_000_000_000:
        return f"{_with_fraction(ns, 6)}ms"

    minutes, sec_ns = divmod(ns, 60 * 1_000_000_000)
    hours, minutes = divmod(minutes, 60)

    out = ""
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return f"{out}{_with_fraction(sec_ns, 9)}s"
