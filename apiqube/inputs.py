"""Sources of test manifests and options for validating them."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import IO, Any, Callable, Optional, Union

from apiqube.manifest import TestFile
from apiqube.parser import Parser


class NoInputError(ValueError):
    """Raised when no input source is provided."""

    def __init__(self) -> None:
        super().__init__("engine: no input source provided")


class Input:
    """A source of test manifests; create one with the ``from_*`` functions."""


@dataclass(frozen=True)
class PathsInput(Input):
    """Manifests read from files and directories."""

    paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class BytesInput(Input):
    """Manifests held in memory as raw YAML."""

    data: Union[bytes, str] = b""


@dataclass(frozen=True)
class ReaderInput(Input):
    """Manifests read from a file-like object."""

    reader: Any = None


@dataclass
class CheckConfig:
    """Settings for one validation of manifests without executing them."""

    input: Optional[Input] = None
    config_path: str = ""
    plugin_dir: str = ""


CheckOption = Callable[[CheckConfig], None]


def from_paths(*paths: Union[str, "os.PathLike[str]"]) -> PathsInput:
    """Load manifests from files or directories, walked recursively for YAML."""
    return PathsInput(paths=tuple(os.fspath(p) for p in paths))


def from_bytes(data: Union[bytes, str]) -> BytesInput:
    """Load manifests from raw YAML."""
    return BytesInput(data=data)


def from_reader(reader: IO[Any]) -> ReaderInput:
    """Load manifests from a file-like object."""
    return ReaderInput(reader=reader)


def with_check_config_path(path: str) -> CheckOption:
    """Use a specific project configuration file for validation context."""

    def apply(config: CheckConfig) -> None:
        config.config_path = path

    return apply


def with_check_plugins(directory: str) -> CheckOption:
    """Use a plugin directory so plugin-specific fields can be validated."""

    def apply(config: CheckConfig) -> None:
        config.plugin_dir = directory

    return apply


def load_input(source: Optional[Input]) -> list[TestFile]:
    """Parse the manifests of ``source``.

    Raises :class:`NoInputError` when ``source`` is None and
    :class:`TypeError` for an unknown kind of input.
    """
    if source is None:
        raise NoInputError()
    parser = Parser()
    if isinstance(source, PathsInput):
        return parser.parse_paths(*source.paths)
    if isinstance(source, BytesInput):
        return parser.parse_bytes(source.data)
    if isinstance(source, ReaderInput):
        return parser.parse_reader(source.reader)
    raise TypeError(f"engine: unknown input form {type(source).__name__}")