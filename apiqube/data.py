"""Records of what was sent, what came back and how assertions fared."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any


@dataclass
class RequestData:
    """What was sent to the target. Protocol-specific fields go in ``metadata``."""

    method: str = ""
    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ResponseData:
    """What the target returned.

    ``status`` is protocol dependent: an integer for HTTP, a string for others.
    """

    status: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    duration: timedelta = timedelta(0)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class AssertionResult:
    """The outcome of a single assertion check."""

    expression: str = ""
    passed: bool = False
    expected: Any = None
    actual: Any = None
    message: str = ""