"""Loading of test manifests from YAML files, directories, bytes and streams.

The parser is a pure transformation layer: it reads YAML documents, splits
multi-document streams, and normalizes every test entry. It does not execute
tests, resolve templates or validate plugin fields.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Iterator
from typing import IO, Any, Optional, Union

import yaml

from apiqube.manifest import FileDefaults, LoadConfig, LoadScenario, LoadStage, TestFile, TestMode
from apiqube.normalize import (
    NormalizeError,
    _as_bool,
    _as_int,
    _as_list,
    _as_mapping,
    _as_str,
    _as_str_list,
    _as_str_map,
    normalize_tests,
)


class ParseError(ValueError):
    """Raised when a manifest cannot be parsed."""


def is_yaml_file(path: Union[str, "os.PathLike[str]"]) -> bool:
    """Report whether ``path`` has a ``.yaml`` or ``.yml`` extension."""
    name = os.path.basename(os.fspath(path))
    _, dot, ext = name.rpartition(".")
    return bool(dot) and ext.lower() in ("yaml", "yml")


def _walk(root: str) -> Iterator[str]:
    """Yield YAML files below ``root`` in lexical order, depth first."""
    with os.scandir(root) as iterator:
        entries = sorted(iterator, key=lambda entry: entry.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk(entry.path)
        elif is_yaml_file(entry.path):
            yield entry.path


def _file_defaults(value: Any) -> Optional[FileDefaults]:
    if value is None:
        return None
    raw = _as_mapping(value, "defaults")
    return FileDefaults(
        headers=_as_str_map(raw.get("headers"), "defaults.headers"),
        timeout=_as_str(raw.get("timeout"), "defaults.timeout"),
    )


def _load_config(value: Any) -> Optional[LoadConfig]:
    if value is None:
        return None
    raw = _as_mapping(value, "load")
    stages = []
    for item in _as_list(raw.get("stages"), "load.stages"):
        stage = _as_mapping(item, "load.stages")
        stages.append(
            LoadStage(
                duration=_as_str(stage.get("duration"), "load.stages.duration"),
                users=_as_int(stage.get("users"), "load.stages.users"),
            )
        )
    scenarios = {}
    for key, item in _as_mapping(raw.get("scenarios"), "load.scenarios").items():
        scenario = _as_mapping(item, f"load.scenarios.{key}")
        scenarios[str(key)] = LoadScenario(
            weight=_as_int(scenario.get("weight"), f"load.scenarios.{key}.weight"),
            tests=_as_str_list(scenario.get("tests"), f"load.scenarios.{key}.tests"),
        )
    return LoadConfig(
        users=_as_int(raw.get("users"), "load.users"),
        duration=_as_str(raw.get("duration"), "load.duration"),
        rps=_as_int(raw.get("rps"), "load.rps"),
        ramp_up=_as_str(raw.get("rampUp"), "load.rampUp"),
        stages=stages,
        thresholds={
            str(k): _as_str_map(v, f"load.thresholds.{k}")
            for k, v in _as_mapping(raw.get("thresholds"), "load.thresholds").items()
        },
        scenarios=scenarios,
    )


def _mode(value: Any) -> TestMode:
    text = _as_str(value, "mode")
    try:
        return TestMode(text)
    except ValueError:
        raise NormalizeError(f'unknown mode "{text}"') from None


def _build_test_file(document: Any) -> TestFile:
    if not isinstance(document, dict):
        raise NormalizeError(
            f"manifest must be a mapping, got {type(document).__name__}"
        )
    parallel = document.get("parallel")
    return TestFile(
        mode=_mode(document.get("mode")),
        target=_as_str(document.get("target"), "target"),
        targets=_as_str_map(document.get("targets"), "targets"),
        defaults=_file_defaults(document.get("defaults")),
        parallel=None if parallel is None else _as_bool(parallel, "parallel"),
        depends=_as_str_list(document.get("depends"), "depends"),
        load=_load_config(document.get("load")),
        tests=normalize_tests(_as_list(document.get("tests"), "tests")),
    )


class Parser:
    """Loads and normalizes test manifests. Stateless and thread-safe."""

    def parse_paths(self, *paths: Union[str, "os.PathLike[str]"]) -> list[TestFile]:
        """Load test files from file or directory paths.

        Directories are walked recursively for ``.yaml`` and ``.yml`` files.
        A missing path raises :class:`FileNotFoundError`.
        """
        files: list[TestFile] = []
        for root in map(os.fspath, paths):
            if stat.S_ISDIR(os.stat(root).st_mode):
                for path in _walk(root):
                    files.extend(self._parse_file(path))
            else:
                files.extend(self._parse_file(root))
        return files

    def parse_bytes(self, data: Union[bytes, str]) -> list[TestFile]:
        """Parse raw YAML into one test file per document."""
        return self._parse(data, "")

    def parse_reader(self, reader: IO[Any]) -> list[TestFile]:
        """Read YAML from a file-like object and parse it."""
        return self._parse(reader.read(), "")

    def _parse_file(self, path: str) -> list[TestFile]:
        with open(path, "rb") as handle:
            data = handle.read()
        return self._parse(data, path)

    def _parse(self, data: Union[bytes, str], path: str) -> list[TestFile]:
        try:
            documents = list(yaml.safe_load_all(data))
        except yaml.YAMLError as exc:
            raise ParseError(self._at(path, str(exc))) from exc
        files = []
        for document in documents:
            if document is None:
                continue
            try:
                test_file = _build_test_file(document)
            except NormalizeError as exc:
                raise ParseError(self._at(path, str(exc))) from exc
            test_file.path = path
            files.append(test_file)
        return files

    @staticmethod
    def _at(path: str, message: str) -> str:
        return f"{path}: {message}" if path else message