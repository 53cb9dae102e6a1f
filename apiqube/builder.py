"""Construction of the execution plan from the dependencies between tests.

Template references (``{{ alias.path }}``), explicit ``depends:`` lists and
scenario-mode ordering become "must run after" edges. The resulting graph is
topologically sorted into waves of tests that can run in parallel, and for
every producer the fields its consumers read are recorded.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from apiqube.manifest import TestFile, TestMode
from apiqube.references import extract_references_from_test
from apiqube.toposort import Dependency, DependencyType, TestRef, Wave, toposort


class GraphError(ValueError):
    """Raised on duplicate aliases or references to unknown aliases."""


@dataclass
class SaveRequirement:
    """What a producer test must persist for its consumers."""

    required: bool = False
    paths: list[str] = field(default_factory=list)
    consumers: list[str] = field(default_factory=list)


@dataclass
class Plan:
    """The execution plan produced by the builder."""

    waves: list[Wave] = field(default_factory=list)
    dependencies: list[Dependency] = field(default_factory=list)
    save_requirements: dict[str, SaveRequirement] = field(default_factory=dict)


def _merge_paths(first: Iterable[str], second: Iterable[str]) -> list[str]:
    return list(dict.fromkeys([*first, *second]))


def _merge_dependency(deps: list[Dependency], new: Dependency) -> None:
    """Add ``new``, or merge its paths into an existing edge of the same kind."""
    for dep in deps:
        if (
            dep.from_ref is new.from_ref
            and dep.to_ref is new.to_ref
            and dep.kind == new.kind
        ):
            dep.paths = _merge_paths(dep.paths, new.paths)
            return
    deps.append(new)


def _collect_refs(files: list[TestFile]) -> tuple[list[TestRef], dict[str, TestRef]]:
    refs: list[TestRef] = []
    aliases: dict[str, TestRef] = {}
    for test_file in files:
        for index, test_case in enumerate(test_file.tests):
            ref = TestRef(file=test_file, test=test_case, mode=test_file.mode, index=index)
            refs.append(ref)
            alias = test_case.alias
            if not alias:
                continue
            existing = aliases.get(alias)
            if existing is not None:
                raise GraphError(
                    f'duplicate alias "{alias}" (in {existing.id()} and {ref.id()})'
                )
            aliases[alias] = ref
    return refs, aliases


def _save_requirements(deps: list[Dependency]) -> dict[str, SaveRequirement]:
    out: dict[str, SaveRequirement] = {}
    for dep in deps:
        if dep.kind is not DependencyType.TEMPLATE:
            continue
        req = out.setdefault(dep.to_ref.id(), SaveRequirement())
        req.required = True
        req.paths = _merge_paths(req.paths, dep.paths)
        consumer = dep.from_ref.id()
        if consumer not in req.consumers:
            req.consumers.append(consumer)
    return out


class Builder:
    """Builds the dependency graph and execution plan for a set of test files."""

    def build(self, files: Optional[Iterable[TestFile]]) -> Plan:
        """Analyze every test in ``files`` and return the plan.

        Raises :class:`GraphError` on duplicate aliases or an explicit
        dependency on an unknown alias, and
        :class:`~apiqube.toposort.CycleError` on a dependency cycle.
        """
        files = list(files or ())
        refs, aliases = _collect_refs(files)
        deps: list[Dependency] = []

        for ref in refs:
            for reference in extract_references_from_test(ref.test):
                target = aliases.get(reference.name)
                if target is None or target is ref:
                    continue
                _merge_dependency(
                    deps,
                    Dependency(
                        from_ref=ref,
                        to_ref=target,
                        kind=DependencyType.TEMPLATE,
                        alias=reference.name,
                        paths=[reference.path] if reference.path else [],
                    ),
                )

        for ref in refs:
            for alias in ref.test.depends:
                target = aliases.get(alias)
                if target is None:
                    raise GraphError(f'test {ref.id()}: depends on unknown alias "{alias}"')
                if target is ref:
                    continue
                _merge_dependency(
                    deps,
                    Dependency(
                        from_ref=ref, to_ref=target, kind=DependencyType.EXPLICIT, alias=alias
                    ),
                )

        for test_file in files:
            if test_file.mode is not TestMode.SCENARIO:
                continue
            file_refs = [ref for ref in refs if ref.file is test_file]
            for previous, current in zip(file_refs, file_refs[1:]):
                _merge_dependency(
                    deps,
                    Dependency(from_ref=current, to_ref=previous, kind=DependencyType.PREV),
                )

        waves = toposort(refs, deps)
        return Plan(
            waves=waves,
            dependencies=deps,
            save_requirements=_save_requirements(deps),
        )