"""Loading of the project configuration file (``.qube.yaml``)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Any, Optional, Union

import yaml


class ConfigError(ValueError):
    """Raised when configuration content cannot be parsed."""


class OutputFormat(str, Enum):
    """Format used to render or serialize results."""

    PRETTY = "pretty"
    JSON = "json"
    JUNIT = "junit"
    TAP = "tap"


@dataclass
class Defaults:
    """Defaults applied to every test."""

    headers: dict[str, str] = field(default_factory=dict)
    timeout: str = ""


@dataclass
class Runner:
    """Execution settings."""

    parallel: bool = False
    max_concurrent: int = 0
    fail_fast: bool = False


@dataclass
class HookAction:
    """One action run by a hook."""

    run: str = ""
    wait: str = ""
    notify: str = ""


@dataclass
class Hooks:
    """Actions run around a test run."""

    before: list[HookAction] = field(default_factory=list)
    after: list[HookAction] = field(default_factory=list)
    on_failure: list[HookAction] = field(default_factory=list)


@dataclass
class Output:
    """Result rendering settings.

    ``format`` is an :class:`OutputFormat` for the known formats and the raw
    string otherwise.
    """

    format: Union[OutputFormat, str] = ""
    verbose: bool = False
    save_results: str = ""


@dataclass
class Config:
    """The parsed shape of a configuration file."""

    version: int = 0
    targets: dict[str, str] = field(default_factory=dict)
    defaults: Optional[Defaults] = None
    plugins: list[str] = field(default_factory=list)
    runner: Runner = field(default_factory=lambda: Runner(parallel=True))
    hooks: Optional[Hooks] = None
    services: dict[str, Any] = field(default_factory=dict)
    output: Output = field(default_factory=lambda: Output(format=OutputFormat.PRETTY))
    env: dict[str, str] = field(default_factory=dict)
    plugin_configs: dict[str, dict[str, Any]] = field(default_factory=dict)


def _mapping(value: Any, name: str) -> dict[Any, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"parse config: {name}: expected a mapping")
    return value


def _string(value: Any, name: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigError(f"parse config: {name}: expected a string")


def _integer(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"parse config: {name}: expected an integer")
    return value


def _boolean(value: Any, name: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"parse config: {name}: expected a boolean")
    return value


def _string_map(value: Any, name: str) -> dict[str, str]:
    return {
        str(k): _string(v, f"{name}.{k}") for k, v in _mapping(value, name).items()
    }


def _string_list(value: Any, name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"parse config: {name}: expected a list")
    return [_string(v, name) for v in value]


def _hook_actions(value: Any, name: str) -> list[HookAction]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"parse config: {name}: expected a list")
    actions = []
    for item in value:
        raw = _mapping(item, name)
        actions.append(
            HookAction(
                run=_string(raw.get("run"), f"{name}.run"),
                wait=_string(raw.get("wait"), f"{name}.wait"),
                notify=_string(raw.get("notify"), f"{name}.notify"),
            )
        )
    return actions


def _output_format(value: Any) -> Union[OutputFormat, str]:
    text = _string(value, "output.format")
    try:
        return OutputFormat(text)
    except ValueError:
        return text


def _parse(data: Union[str, bytes]) -> Config:
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise ConfigError(f"parse config: {exc}") from exc
    raw = _mapping(document, "document")
    config = Config(
        version=_integer(raw.get("version"), "version"),
        targets=_string_map(raw.get("targets"), "targets"),
        plugins=_string_list(raw.get("plugins"), "plugins"),
        services={str(k): v for k, v in _mapping(raw.get("services"), "services").items()},
        env=_string_map(raw.get("env"), "env"),
        plugin_configs={
            str(k): {str(ik): iv for ik, iv in _mapping(v, f"pluginConfigs.{k}").items()}
            for k, v in _mapping(raw.get("pluginConfigs"), "pluginConfigs").items()
        },
    )
    if raw.get("defaults") is not None:
        section = _mapping(raw["defaults"], "defaults")
        config.defaults = Defaults(
            headers=_string_map(section.get("headers"), "defaults.headers"),
            timeout=_string(section.get("timeout"), "defaults.timeout"),
        )
    if raw.get("runner") is not None:
        section = _mapping(raw["runner"], "runner")
        config.runner = Runner(
            parallel=_boolean(section.get("parallel"), "runner.parallel"),
            max_concurrent=_integer(section.get("maxConcurrent"), "runner.maxConcurrent"),
            fail_fast=_boolean(section.get("failFast"), "runner.failFast"),
        )
    if raw.get("hooks") is not None:
        section = _mapping(raw["hooks"], "hooks")
        config.hooks = Hooks(
            before=_hook_actions(section.get("before"), "hooks.before"),
            after=_hook_actions(section.get("after"), "hooks.after"),
            on_failure=_hook_actions(section.get("onFailure"), "hooks.onFailure"),
        )
    if raw.get("output") is not None:
        section = _mapping(raw["output"], "output")
        config.output = Output(
            format=_output_format(section.get("format")),
            verbose=_boolean(section.get("verbose"), "output.verbose"),
            save_results=_string(section.get("saveResults"), "output.saveResults"),
        )
    return config


def load(path: Union[str, "os.PathLike[str]", None]) -> Optional[Config]:
    """Read and parse the configuration file at ``path``.

    Returns None when ``path`` is empty. A missing file raises
    :class:`FileNotFoundError`; malformed content raises :class:`ConfigError`.
    """
    if not path:
        return None
    with open(path, "rb") as handle:
        data = handle.read()
    return _parse(data)


def load_reader(reader: IO[Any]) -> Config:
    """Parse configuration content read from a file-like object."""
    return _parse(reader.read())