"""Discovery of cross-test template references such as ``{{ alias.path }}``."""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from apiqube.manifest import TestCase

_TEMPLATE_BODY_RE = re.compile(r"\{\{\s*(.*?)\s*\}\}")
_METHOD_TAIL_RE = re.compile(r"\.[A-Z][a-zA-Z0-9]*\([^)]*\)\Z")
_SKIPPED_NAMES = frozenset({"fake", "env"})


@dataclass(frozen=True)
class Reference:
    """A template reference: the alias name and the path below it."""

    name: str
    path: str = ""


def parse_ref(body: str) -> Optional[Reference]:
    """Parse the body of one template expression.

    Trailing method chains (``.ToUpper()``) are dropped. Generator and
    environment expressions (``fake.*``, ``env.*``, ``regex(...)``) are not
    references, nor is an empty body; for those None is returned.
    """
    body = body.strip()
    while True:
        stripped = _METHOD_TAIL_RE.sub("", body, count=1)
        if stripped == body:
            break
        body = stripped.rstrip(" \t\n\r")

    if body.startswith("regex("):
        return None

    name, _, path = body.partition(".")
    if not name or name in _SKIPPED_NAMES:
        return None
    return Reference(name=name, path=path)


def _iter_strings(value: Any) -> Iterator[str]:
    """Yield every string found in ``value``, recursing into containers."""
    if value is None or isinstance(value, Enum):
        return
    if isinstance(value, str):
        yield value
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from _iter_strings(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _iter_strings(item)
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        for f in dataclasses.fields(value):
            yield from _iter_strings(getattr(value, f.name))


def extract_references(value: Any) -> list[Reference]:
    """Collect every distinct template reference found anywhere in ``value``."""
    found: dict[Reference, None] = {}
    for text in _iter_strings(value):
        for match in _TEMPLATE_BODY_RE.finditer(text):
            ref = parse_ref(match.group(1))
            if ref is not None:
                found.setdefault(ref, None)
    return list(found)


def extract_references_from_test(test_case: Optional[TestCase]) -> list[Reference]:
    """Collect the references in every string-bearing field of a test case."""
    if test_case is None:
        return []
    collected: list[Any] = [
        test_case.method,
        test_case.resource,
        test_case.target,
        test_case.timeout,
        test_case.when,
        test_case.headers,
        test_case.save,
        test_case.expect,
        test_case.extra,
        test_case.matrix,
    ]
    if test_case.retry is not None:
        collected.extend([test_case.retry.until, test_case.retry.interval])
    return extract_references(collected)