"""Routing of engine events to handlers by event type or plugin event name."""

from __future__ import annotations

import dataclasses
import json
import threading
from typing import Any, Callable, TypeVar

from apiqube.events import Event, PluginEvent

T = TypeVar("T")
E = TypeVar("E", bound=Event)


def _decode(factory: Callable[..., T], data: Any) -> T:
    """Decode plugin event data into a value built by ``factory``.

    The data goes through a JSON round trip. A dataclass factory receives the
    keys that match its init fields as keyword arguments (unknown keys are
    ignored); any other factory receives the decoded mapping.
    """
    payload = json.loads(json.dumps({} if data is None else data))
    if isinstance(factory, type) and dataclasses.is_dataclass(factory):
        names = {f.name for f in dataclasses.fields(factory) if f.init}
        return factory(**{k: v for k, v in payload.items() if k in names})
    return factory(payload)


class Dispatcher:
    """Routes events to handlers registered by type or by plugin event name.

    A Dispatcher is itself an event handler. It is safe to subscribe and
    dispatch from several threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._typed: dict[type, list[Callable[[Event], None]]] = {}
        self._raw_plugin: dict[str, list[Callable[[PluginEvent], None]]] = {}
        self._typed_plugin: dict[str, list[Callable[[PluginEvent], None]]] = {}

    def handle(self, event: Event) -> None:
        """Dispatch ``event`` to every matching handler in registration order."""
        with self._lock:
            typed = list(self._typed.get(type(event), ()))
        for fn in typed:
            fn(event)

        if isinstance(event, PluginEvent):
            name = event.full_name()
            with self._lock:
                raw = list(self._raw_plugin.get(name, ()))
                decoders = list(self._typed_plugin.get(name, ()))
            for fn in raw:
                fn(event)
            for decoder in decoders:
                decoder(event)

    def subscribe(self, event_type: type[E], fn: Callable[[E], None]) -> None:
        """Register ``fn`` for events of exactly ``event_type``."""
        if not (
            isinstance(event_type, type)
            and issubclass(event_type, Event)
            and event_type is not Event
        ):
            raise TypeError(f"not a concrete event type: {event_type!r}")
        with self._lock:
            self._typed.setdefault(event_type, []).append(fn)

    def subscribe_plugin_event(
        self, name: str, fn: Callable[[PluginEvent], None]
    ) -> None:
        """Register a raw handler for the plugin event ``<plugin>.<kind>``."""
        with self._lock:
            self._raw_plugin.setdefault(name, []).append(fn)

    def subscribe_plugin_typed(
        self, name: str, factory: Callable[..., T], fn: Callable[[T], None]
    ) -> None:
        """Register a handler that receives the plugin event's data decoded by ``factory``.

        If the data cannot be decoded the handler silently does not fire.
        """

        def decoder(event: PluginEvent) -> None:
            try:
                value = _decode(factory, event.data)
            except (TypeError, ValueError):
                return
            fn(value)

        with self._lock:
            self._typed_plugin.setdefault(name, []).append(decoder)