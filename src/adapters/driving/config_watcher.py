"""Watch a configuration variables file and feed it into the ConfigStore."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from src.core.config_store import ConfigStore

__all__ = ["CONFIG_VARS_NAME", "ConfigFileWatcher", "ConfigSourceError", "decode_config_vars"]

CONFIG_VARS_NAME = "heartbeat-config-vars"

_Fingerprint = tuple[int, int]


class ConfigSourceError(ValueError):
    """Raised when the variables file is missing or cannot be decoded."""


def decode_config_vars(document: Any) -> dict[str, str]:
    """Turn a decoded YAML document into a flat string mapping.

    A Kubernetes ConfigMap manifest is unwrapped to its ``data`` section.

    Args:
        document: Result of yaml.safe_load; None counts as empty.

    Returns:
        Variables with scalar values converted to strings.

    Raises:
        ConfigSourceError: If the document is not a mapping or a value is
            nested.
    """
    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise ConfigSourceError("Config vars must be a YAML mapping")

    if document.get("kind") == "ConfigMap":
        document = document.get("data") or {}
        if not isinstance(document, Mapping):
            raise ConfigSourceError("ConfigMap data must be a mapping")

    result: dict[str, str] = {}
    for key, value in document.items():
        if isinstance(value, (Mapping, list)):
            raise ConfigSourceError(f"Config var {key!r} must be a scalar")
        if value is None:
            value = ""
        elif isinstance(value, bool):
            value = str(value).lower()
        result[str(key)] = str(value)
    return result


class ConfigFileWatcher:
    """Polls a YAML/JSON file and replaces the store snapshot on change.

    Malformed revisions are rejected here and never reach the store; the
    previous snapshot stays active.
    """

    def __init__(
        self,
        path: str | Path,
        store: ConfigStore,
        *,
        poll_interval_sec: float = 1.0,
        name: str = CONFIG_VARS_NAME,
        logger: logging.Logger | None = None,
    ) -> None:
        self._path = Path(path)
        self._store = store
        self._poll_interval_sec = poll_interval_sec
        self._name = name
        self._logger = logger or logging.getLogger(__name__)
        self._base: dict[str, str] = {}
        self._fingerprint: _Fingerprint | None = None

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, str]:
        """Read and decode the variables file.

        Raises:
            ConfigSourceError: If the file is missing or malformed.
        """
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                document = yaml.safe_load(handle)
        except FileNotFoundError as e:
            raise ConfigSourceError(f"Config vars file not found: {self._path}") from e
        except OSError as e:
            raise ConfigSourceError(f"Cannot read config vars file {self._path}: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigSourceError(f"Config vars file is not valid UTF-8: {self._path}") from e
        except yaml.YAMLError as e:
            raise ConfigSourceError(f"Config vars file is not valid YAML: {self._path}") from e
        return decode_config_vars(document)

    def prime(self, base: Mapping[str, str] | None = None) -> None:
        """Populate the store before the producer starts.

        Args:
            base: Inline variables; values from the file take precedence.

        Raises:
            ConfigSourceError: If the file is missing or malformed.
        """
        self._base = dict(base or {})
        self._fingerprint = self._stat()
        self._install(self.load())

    async def watch(self, cancel: asyncio.Event) -> None:
        """Poll for changes until cancel is set.

        Each check runs in a worker thread so file IO never stalls the loop.

        Args:
            cancel: Set to stop watching.
        """
        self._logger.info(f"Watching {self._path} every {self._poll_interval_sec}s")
        while not cancel.is_set():
            try:
                await asyncio.wait_for(cancel.wait(), timeout=self._poll_interval_sec)
            except asyncio.TimeoutError:
                await asyncio.to_thread(self.poll_once)

    def poll_once(self) -> bool:
        """Reload the file if its fingerprint changed.

        Returns:
            True if a new snapshot was installed.
        """
        try:
            fingerprint = self._stat()
        except ConfigSourceError as e:
            self._logger.error(f"Cannot check config vars file, keeping last snapshot: {e}")
            return False
        if fingerprint is None:
            if self._fingerprint is not None:
                self._logger.warning(f"Config vars file {self._path} disappeared; keeping last snapshot")
                self._fingerprint = None
            return False
        if fingerprint == self._fingerprint:
            return False

        self._fingerprint = fingerprint
        try:
            variables = self.load()
        except ConfigSourceError as e:
            self._logger.error(f"Rejected config vars update: {e}")
            return False

        self._install(variables)
        return True

    def _install(self, variables: Mapping[str, str]) -> None:
        self._store.replace(self._name, {**self._base, **variables})

    def _stat(self) -> _Fingerprint | None:
        try:
            st = self._path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise ConfigSourceError(f"Cannot stat config vars file {self._path}: {e}") from e
        return st.st_mtime_ns, st.st_size
