"""Events emitted by the engine to frontends during a run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Protocol, runtime_checkable


class Event:
    """Base of every event the engine emits."""

    def type(self) -> str:
        """Return a stable identifier for the kind of event."""
        return type(self).__name__


@runtime_checkable
class EventHandler(Protocol):
    """Receives events from the engine during execution."""

    def handle(self, event: Event) -> None:
        """Receive one event."""


class NopHandler:
    """An event handler that discards every event."""

    def handle(self, event: Event) -> None:
        """Discard the event."""


@dataclass(frozen=True)
class PluginEvent(Event):
    """Universal wrapper for events emitted by plugins."""

    plugin: str = ""
    kind: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    def full_name(self) -> str:
        """Return the fully-qualified name ``<plugin>.<kind>``."""
        return f"{self.plugin}.{self.kind}"


@dataclass(frozen=True)
class RunStarted(Event):
    """Emitted once when a run begins, after parsing and graph building."""

    files: list[str] = field(default_factory=list)
    total_tests: int = 0
    total_waves: int = 0


@dataclass(frozen=True)
class RunCompleted(Event):
    """Emitted once when all waves have finished."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    errored: int = 0
    duration: timedelta = timedelta(0)


@dataclass(frozen=True)
class WaveStarted(Event):
    """Emitted before a wave begins executing."""

    index: int = 0
    test_names: list[str] = field(default_factory=list)
    parallel: bool = False


@dataclass(frozen=True)
class TestStarted(Event):
    """Emitted before a single test case runs."""

    __test__ = False

    name: str = ""
    file: str = ""
    protocol: str = ""
    target: str = ""


@dataclass(frozen=True)
class GraphResolved(Event):
    """Emitted after the dependency graph is built, before execution."""

    total_waves: int = 0
    dependencies: int = 0
    save_requirements: int = 0
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PluginLoaded(Event):
    """Emitted when a plugin is successfully loaded."""

    name: str = ""
    version: str = ""
    protocols: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ConfigLoaded(Event):
    """Emitted after the project config file is parsed."""

    path: str = ""
    targets: list[str] = field(default_factory=list)
    plugin_count: int = 0


@dataclass(frozen=True)
class TemplateError(Event):
    """Emitted when a template reference cannot be resolved."""

    file: str = ""
    test: str = ""
    expression: str = ""
    message: str = ""


@dataclass(frozen=True)
class Progress(Event):
    """Emitted periodically to report execution progress."""

    completed: int = 0
    total: int = 0
    wave: int = 0