"""Concurrency-safe store for the live set of configuration variables."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from types import MappingProxyType

__all__ = ["ConfigSnapshot", "ConfigStore", "OnAfterStore"]

ConfigSnapshot = Mapping[str, str]
OnAfterStore = Callable[[str, ConfigSnapshot], None]


class ConfigStore:
    """Holds exactly one immutable snapshot of configuration variables.

    Readers get the current snapshot through get_snapshot(); the single
    writer swaps it as a whole through replace(). Published snapshots are
    read-only views over a private copy, so a reader can keep using one
    after a later replace() without further locking.

    Callbacks run synchronously on the writer's call stack after the swap.
    They must not block, otherwise later replacements stall. They must not
    call replace() on the same store either: the writer lock is not
    reentrant, so that deadlocks.
    """

    def __init__(self, *on_after_store: OnAfterStore, logger: logging.Logger | None = None) -> None:
        """Initialize store with an empty snapshot.

        Args:
            on_after_store: Callbacks invoked after every replacement.
            logger: Logger to use instead of the module logger.
        """
        self._logger = logger or logging.getLogger(__name__)
        self._snapshot: ConfigSnapshot = MappingProxyType({})
        self._callbacks: list[OnAfterStore] = list(on_after_store)
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()

    def get_snapshot(self) -> ConfigSnapshot:
        """Return the currently active snapshot.

        Returns:
            Read-only mapping of variable name to value.
        """
        with self._lock:
            return self._snapshot

    def replace(self, name: str, snapshot: Mapping[str, str]) -> None:
        """Atomically install a new snapshot, then notify callbacks.

        Args:
            name: Identifier of the configuration resource that produced it.
            snapshot: New variables; copied, so later mutation by the caller
                is not visible to readers.
        """
        frozen: ConfigSnapshot = MappingProxyType(dict(snapshot))
        with self._write_lock:
            with self._lock:
                self._snapshot = frozen
                callbacks = tuple(self._callbacks)

            self._logger.debug(f"Installed config snapshot from {name!r} ({len(frozen)} keys)")
            for callback in callbacks:
                callback(name, frozen)

    def register_callback(self, callback: OnAfterStore) -> None:
        """Append an observer invoked on every future replace().

        Args:
            callback: Called with (name, new_snapshot).
        """
        with self._lock:
            self._callbacks.append(callback)
