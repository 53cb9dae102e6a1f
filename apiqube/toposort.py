"""Ordering of tests into waves that respect their dependencies."""

from __future__ import annotations

import functools
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from apiqube.manifest import TestCase, TestFile, TestMode


class DependencyType(IntEnum):
    """How a dependency was discovered."""

    TEMPLATE = 0
    EXPLICIT = 1
    PREV = 2


@dataclass(eq=False)
class TestRef:
    """Points to one test within one file; compared by identity."""

    __test__ = False

    file: Optional[TestFile] = None
    test: Optional[TestCase] = None
    mode: TestMode = TestMode.UNSET
    index: int = 0

    def id(self) -> str:
        """Return a stable identifier built from the file path and index."""
        path = self.file.path if self.file is not None else ""
        return f"{path}#{self.index}"


@dataclass
class Dependency:
    """``from_ref`` must run after ``to_ref``."""

    from_ref: TestRef
    to_ref: TestRef
    kind: DependencyType
    alias: str = ""
    paths: list[str] = field(default_factory=list)


@dataclass
class Wave:
    """Tests with no dependencies between them, runnable in parallel."""

    index: int
    parallel: bool
    tests: list[TestRef] = field(default_factory=list)


class CycleError(ValueError):
    """Raised when dependencies form a cycle; ``cycle`` lists the tests involved."""

    def __init__(self, cycle: Iterable[TestRef]) -> None:
        self.cycle = list(cycle)
        names = " ".join(ref.id() for ref in self.cycle)
        super().__init__(f"dependency cycle: [{names}]")


def _test_name(ref: TestRef) -> str:
    return ref.test.name if ref.test is not None else ""


def _compare(a: TestRef, b: TestRef) -> int:
    if a.file is not None and b.file is not None and a.file.path != b.file.path:
        return -1 if a.file.path < b.file.path else 1
    if a.index != b.index:
        return -1 if a.index < b.index else 1
    name_a, name_b = _test_name(a), _test_name(b)
    if name_a == name_b:
        return 0
    return -1 if name_a < name_b else 1


def _ordered(refs: Iterable[TestRef]) -> list[TestRef]:
    return sorted(refs, key=functools.cmp_to_key(_compare))


def toposort(
    tests: Iterable[TestRef], deps: Iterable[Dependency] = ()
) -> list[Wave]:
    """Group ``tests`` into waves whose dependencies lie in earlier waves.

    Within a wave tests are ordered by file path, in-file index and name.
    Self-edges are ignored. Raises :class:`CycleError` when no progress is
    possible.
    """
    tests = list(tests)
    if not tests:
        return []

    in_degree = {ref: 0 for ref in tests}
    dependents: dict[TestRef, list[TestRef]] = {}
    for dep in deps:
        if dep.from_ref is dep.to_ref:
            continue
        dependents.setdefault(dep.to_ref, []).append(dep.from_ref)
        in_degree[dep.from_ref] = in_degree.get(dep.from_ref, 0) + 1

    processed: set[TestRef] = set()
    waves: list[Wave] = []
    while len(processed) < len(tests):
        ready = [r for r in tests if r not in processed and in_degree[r] == 0]
        if not ready:
            raise CycleError(_ordered(r for r in tests if r not in processed))
        ready = _ordered(ready)
        waves.append(Wave(index=len(waves), parallel=len(ready) > 1, tests=ready))
        for ref in ready:
            processed.add(ref)
            for dependent in dependents.get(ref, ()):
                in_degree[dependent] -= 1
    return waves