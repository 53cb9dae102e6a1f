"""Extraction of values from nested data by dotted path."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_INDEX_RE = re.compile(r"[+-]?[0-9]+")


class ExtractError(LookupError):
    """Raised when a path does not lead to a value."""


def _length(value: Any) -> int:
    if isinstance(value, (str, list, tuple, Mapping)):
        return len(value)
    raise ExtractError("length of unsupported value")


def _step(current: Any, segment: str) -> Any:
    if isinstance(current, Mapping):
        if segment in current:
            return current[segment]
        raise ExtractError(f"missing key {segment!r}")
    if isinstance(current, (list, tuple)):
        if not _INDEX_RE.fullmatch(segment):
            raise ExtractError(f"not an index: {segment!r}")
        index = int(segment)
        if index < 0 or index >= len(current):
            raise ExtractError(f"index out of range: {index}")
        return current[index]
    raise ExtractError(f"cannot descend into value with {segment!r}")


def extract(source: Any, path: str) -> Any:
    """Return the value at the dot-separated ``path`` inside ``source``.

    Segments are mapping keys or non-negative list indexes; the segment
    ``length`` yields the length of a list, mapping or string. An empty path
    returns ``source`` unchanged. Raises :class:`ExtractError` when the path
    does not resolve.
    """
    if path == "":
        return source
    current = source
    for segment in path.split("."):
        if segment == "":
            raise ExtractError(f"empty segment in path {path!r}")
        try:
            if segment == "length":
                current = _length(current)
            else:
                current = _step(current, segment)
        except ExtractError as exc:
            raise ExtractError(f"path {path!r}: {exc}") from None
    return current