"""Runtime data passed between test cases during a single run.

Three mechanisms coexist: the implicit previous response (``prev``) in
scenario mode, named values saved from responses, and per-alias streams of
plugin events. A store is thread-safe; consumers may read synchronously or
block until a producer sets a value.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from apiqube.events import PluginEvent


class StoreClosedError(RuntimeError):
    """Raised when waiting on a store that has been closed."""

    def __init__(self) -> None:
        super().__init__("dataflow: store closed")


@dataclass
class Snapshot:
    """A test response kept as ``prev`` in scenario mode."""

    name: str = ""
    status: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)


class Store:
    """Holds runtime data for cross-test communication in one run."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._values: dict[str, Any] = {}
        self._prev: Optional[Snapshot] = None
        self._events: dict[str, list[PluginEvent]] = {}
        self._closed = False

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __contains__(self, key: object) -> bool:
        with self._cond:
            return key in self._values

    def get(self, key: str) -> Any:
        """Return the value stored under ``key``; raise KeyError if unset."""
        with self._cond:
            return self._values[key]

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key`` and wake every waiter on it."""
        with self._cond:
            self._values[key] = value
            self._cond.notify_all()

    @property
    def prev(self) -> Optional[Snapshot]:
        """The most recent previous-test snapshot, or None."""
        with self._cond:
            return self._prev

    @prev.setter
    def prev(self, snapshot: Optional[Snapshot]) -> None:
        with self._cond:
            self._prev = snapshot

    def wait_for(self, key: str, timeout: Optional[float] = None) -> Any:
        """Block until ``key`` has a value and return it.

        Raises :class:`StoreClosedError` if the store is or becomes closed
        first, and :class:`TimeoutError` when ``timeout`` seconds pass.
        """
        with self._cond:
            if self._closed:
                raise StoreClosedError()
            self._cond.wait_for(
                lambda: key in self._values or self._closed, timeout
            )
            if key in self._values:
                return self._values[key]
            if self._closed:
                raise StoreClosedError()
            raise TimeoutError(f"timed out waiting for {key!r}")

    def append_event(self, alias: str, event: PluginEvent) -> None:
        """Record a streaming event for ``alias``."""
        with self._cond:
            self._events.setdefault(alias, []).append(event)

    def events(self, alias: str) -> list[PluginEvent]:
        """Return a copy of the events recorded for ``alias``."""
        with self._cond:
            return list(self._events.get(alias, ()))

    def close(self) -> None:
        """Release every waiter and mark the store closed. Idempotent."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()