"""Normalization of raw test entries into :class:`~apiqube.manifest.TestCase`.

A test entry may be written in one of three forms:

* a one-liner string, ``"GET /users -> 200"``;
* a compact mapping with a single ``"METHOD RESOURCE"`` key;
* a full mapping of test case fields.

Fields that are not core test case fields are kept in ``TestCase.extra`` for
protocol plugins to interpret.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Optional

from apiqube.manifest import Expect, RetryConfig, TestCase

_ONE_LINER_RE = re.compile(r"([A-Z][A-Z0-9_]*)\s+(\S+)\s*->\s*(\S+)", re.ASCII)
_METHOD_RESOURCE_RE = re.compile(r"([A-Z][A-Z0-9_]*)\s+(\S+)", re.ASCII)

_KNOWN_FIELDS = frozenset(
    {
        "name", "alias", "target",
        "method", "resource", "tags",
        "skip", "headers", "timeout",
        "expect", "save", "when",
        "retry", "matrix", "depends",
    }
)


class NormalizeError(ValueError):
    """Raised when a test entry cannot be turned into a test case."""


# ---------------------------------------------------------------------------
# Field conversion


def _as_str(value: Any, name: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    raise NormalizeError(f"{name}: expected a string, got {type(value).__name__}")


def _as_int(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise NormalizeError(f"{name}: expected an integer, got {type(value).__name__}")
    return value


def _as_bool(value: Any, name: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise NormalizeError(f"{name}: expected a boolean, got {type(value).__name__}")
    return value


def _as_mapping(value: Any, name: str) -> dict[Any, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise NormalizeError(f"{name}: expected a mapping, got {type(value).__name__}")
    return value


def _as_list(value: Any, name: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise NormalizeError(f"{name}: expected a list, got {type(value).__name__}")
    return value


def _as_str_map(value: Any, name: str) -> dict[str, str]:
    return {str(k): _as_str(v, f"{name}.{k}") for k, v in _as_mapping(value, name).items()}


def _as_str_list(value: Any, name: str) -> list[str]:
    return [_as_str(item, name) for item in _as_list(value, name)]


def _as_any_map(value: Any, name: str) -> dict[str, Any]:
    return {str(k): v for k, v in _as_mapping(value, name).items()}


def _as_expect(value: Any, name: str) -> Expect:
    raw = _as_mapping(value, name)
    return Expect(
        status=raw.get("status"),
        body=_as_any_map(raw.get("body"), f"{name}.body"),
        headers=_as_any_map(raw.get("headers"), f"{name}.headers"),
        duration=_as_str(raw.get("duration"), f"{name}.duration"),
    )


def _as_retry(value: Any, name: str) -> Optional[RetryConfig]:
    if value is None:
        return None
    raw = _as_mapping(value, name)
    until = raw.get("until")
    return RetryConfig(
        max_attempts=_as_int(raw.get("maxAttempts"), f"{name}.maxAttempts"),
        interval=_as_str(raw.get("interval"), f"{name}.interval"),
        until=None if until is None else _as_expect(until, f"{name}.until"),
    )


# ---------------------------------------------------------------------------
# Entry forms


def parse_one_liner(text: str) -> TestCase:
    """Parse ``"METHOD RESOURCE -> STATUS"``; the status is kept as a string."""
    match = _ONE_LINER_RE.fullmatch(text)
    if match is None:
        raise NormalizeError(f'invalid one-liner: "{text}"')
    method, resource, status = match.groups()
    return TestCase(method=method, resource=resource, expect=Expect(status=status))


def parse_full_form(
    mapping: dict[Any, Any], method: str = "", resource: str = ""
) -> TestCase:
    """Build a test case from a full-form mapping.

    A non-empty ``method`` or ``resource`` (from a compact-form key) overrides
    the mapping's own. Unknown keys go to ``extra``.
    """
    known = {k: v for k, v in mapping.items() if k in _KNOWN_FIELDS}
    extra = {str(k): v for k, v in mapping.items() if k not in _KNOWN_FIELDS}

    test_case = TestCase(
        name=_as_str(known.get("name"), "name"),
        alias=_as_str(known.get("alias"), "alias"),
        target=_as_str(known.get("target"), "target"),
        method=_as_str(known.get("method"), "method"),
        resource=_as_str(known.get("resource"), "resource"),
        tags=_as_str_list(known.get("tags"), "tags"),
        skip=_as_bool(known.get("skip"), "skip"),
        headers=_as_str_map(known.get("headers"), "headers"),
        timeout=_as_str(known.get("timeout"), "timeout"),
        expect=_as_expect(known.get("expect"), "expect"),
        save=_as_str_map(known.get("save"), "save"),
        when=_as_str(known.get("when"), "when"),
        retry=_as_retry(known.get("retry"), "retry"),
        matrix=[_as_any_map(row, "matrix") for row in _as_list(known.get("matrix"), "matrix")],
        depends=_as_str_list(known.get("depends"), "depends"),
        extra=extra,
    )
    if method:
        test_case.method = method
    if resource:
        test_case.resource = resource
    return test_case


def normalize_one(item: Any) -> TestCase:
    """Turn one raw entry, in any of the three forms, into a test case."""
    if isinstance(item, str):
        return parse_one_liner(item)
    if isinstance(item, dict):
        if len(item) == 1:
            ((key, value),) = item.items()
            match = _METHOD_RESOURCE_RE.fullmatch(key) if isinstance(key, str) else None
            if match is not None:
                sub = value if isinstance(value, dict) else {}
                return parse_full_form(sub, match.group(1), match.group(2))
        return parse_full_form(item)
    raise NormalizeError(f"unsupported test entry type {type(item).__name__}")


def normalize_tests(raw: Optional[list[Any]]) -> list[TestCase]:
    """Normalize every raw entry; errors name the failing entry's position."""
    cases = []
    for index, item in enumerate(raw or ()):
        try:
            cases.append(normalize_one(item))
        except NormalizeError as exc:
            raise NormalizeError(f"test[{index}]: {exc}") from exc
    return cases