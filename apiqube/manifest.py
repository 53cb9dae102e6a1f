"""Data model of a parsed and normalized test manifest."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class TestMode(str, Enum):
    """How the tests of one file are executed."""

    __test__ = False

    UNSET = ""
    TEST = "test"
    SCENARIO = "scenario"
    LOAD = "load"

    def is_valid(self) -> bool:
        """Report whether this is a known, explicitly chosen mode."""
        return self is not TestMode.UNSET


@dataclass
class FileDefaults:
    """Per-file defaults applied to every test of the file."""

    headers: dict[str, str] = field(default_factory=dict)
    timeout: str = ""


@dataclass
class Expect:
    """Expected outcome of a test.

    ``body`` is keyed by dotted path ("user.name", "items.0.id"); the key "."
    matches the whole body against the given value.
    """

    status: Any = None
    body: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, Any] = field(default_factory=dict)
    duration: str = ""


@dataclass
class RetryConfig:
    """Automatic retry with polling until ``until`` passes."""

    max_attempts: int = 0
    interval: str = ""
    until: Optional[Expect] = None


@dataclass
class LoadStage:
    """One stage of a staged load profile."""

    duration: str = ""
    users: int = 0


@dataclass
class LoadScenario:
    """A weighted group of tests run together under load."""

    weight: int = 0
    tests: list[str] = field(default_factory=list)


@dataclass
class LoadConfig:
    """Load-testing parameters, used when the file mode is ``load``."""

    users: int = 0
    duration: str = ""
    rps: int = 0
    ramp_up: str = ""
    stages: list[LoadStage] = field(default_factory=list)
    thresholds: dict[str, dict[str, str]] = field(default_factory=dict)
    scenarios: dict[str, LoadScenario] = field(default_factory=dict)


@dataclass
class TestCase:
    """One request-response cycle plus its assertions.

    ``method`` and ``resource`` are core fields every plugin reads;
    plugin-specific fields land in ``extra``.
    """

    __test__ = False

    name: str = ""
    alias: str = ""
    target: str = ""
    method: str = ""
    resource: str = ""
    tags: list[str] = field(default_factory=list)
    skip: bool = False
    headers: dict[str, str] = field(default_factory=dict)
    timeout: str = ""
    expect: Expect = field(default_factory=Expect)
    save: dict[str, str] = field(default_factory=dict)
    when: str = ""
    retry: Optional[RetryConfig] = None
    matrix: list[dict[str, Any]] = field(default_factory=list)
    depends: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=False)
class TestFile:
    """A single parsed manifest document.

    Files are compared and hashed by identity: two documents with the same
    content are still distinct files.
    """

    __test__ = False

    path: str = ""
    mode: TestMode = TestMode.UNSET
    target: str = ""
    targets: dict[str, str] = field(default_factory=dict)
    defaults: Optional[FileDefaults] = None
    parallel: Optional[bool] = None
    depends: list[str] = field(default_factory=list)
    load: Optional[LoadConfig] = None
    tests: list[TestCase] = field(default_factory=list)