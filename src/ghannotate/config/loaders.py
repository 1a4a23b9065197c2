# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Layered configuration: pyproject, TOML files, environment, CLI overrides.

Every source yields a plain nested mapping. :func:`load_config` deep-merges
them in order (later sources win) and validates the result once.
"""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Protocol

from pydantic import ValidationError

from ..core.errors import ConfigError
from .models import RunnerConfig

INCLUDE_KEY: Final[str] = "include"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_SECTION: Final[tuple[str, str]] = ("tool", "ghannotate")

# Environment variable -> dotted configuration key.
ENVIRONMENT_KEYS: Final[dict[str, str]] = {
    "GITHUB_TOKEN": "github.token",
    "GITHUB_REPOSITORY": "github.repository",
    "GITHUB_SHA": "github.sha",
    "GITHUB_API_URL": "github.api_url",
    "GITHUB_STEP_SUMMARY": "summary_path",
    "CARGO": "cargo",
    "GHANNOTATE_ALLOW_WARNINGS": "allow_warnings",
    "GHANNOTATE_GRAMMAR": "grammar",
    "GHANNOTATE_EMITTER": "emitter",
}

_PLACEHOLDER = re.compile(r"\$\{(?P<braced>[^}]+)\}|\$(?P<bare>\w+)")
# Tables whose keys are user-chosen names rather than settings.
_VERBATIM_TABLES: Final[frozenset[str]] = frozenset({"custom_grammars"})
# What to run. A layer naming one of these replaces the other layers' choice.
_INVOCATION_KEYS: Final[tuple[str, str]] = ("command", "preset")

Section = Callable[[Mapping[str, Any]], Any]


class ConfigSource(Protocol):
    """One layer of raw configuration data."""

    name: str

    def load(self) -> Mapping[str, Any]: ...

    def describe(self) -> str: ...


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        both_tables = isinstance(current, Mapping) and isinstance(value, Mapping)
        merged[key] = _deep_merge(current, value) if both_tables else value
    return merged


def _substitute(value: Any, env: Mapping[str, str]) -> Any:
    """Replace ``$VAR`` and ``${VAR}`` in strings; unknown names stay as written."""

    if isinstance(value, str):

        def _lookup(match: re.Match[str]) -> str:
            return env.get(match.group("braced") or match.group("bare"), match.group(0))

        return _PLACEHOLDER.sub(_lookup, value)
    if isinstance(value, Mapping):
        return {key: _substitute(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute(item, env) for item in value]
    return value


def _snake_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Accept ``kebab-case`` keys as commonly written in TOML."""

    converted: dict[str, Any] = {}
    for key, value in data.items():
        snake = key.replace("-", "_")
        if isinstance(value, Mapping) and snake not in _VERBATIM_TABLES:
            value = _snake_keys(value)
        converted[snake] = value
    return converted


def _assign(target: dict[str, Any], dotted: str, value: Any) -> None:
    *parents, leaf = dotted.split(".")
    for part in parents:
        target = target.setdefault(part, {})
    target[leaf] = value


def _whole_document(data: Mapping[str, Any]) -> Any:
    return data


def _pyproject_section(data: Mapping[str, Any]) -> Any:
    section: Any = data
    for part in PYPROJECT_SECTION:
        section = section.get(part) if isinstance(section, Mapping) else None
    return section if section is not None else {}


@dataclass(slots=True)
class TomlConfigSource:
    """Settings stored in a TOML file, optionally pulling in other files.

    ``include`` (a path or list of paths, relative to the including file) is
    read first so the including file overrides what it includes.
    """

    path: Path
    env: Mapping[str, str] | None = None
    required: bool = False
    section: Section = _whole_document
    name: str = ""

    def __post_init__(self) -> None:
        self.name = self.name or str(self.path)

    def load(self) -> Mapping[str, Any]:
        if self.required and not self.path.is_file():
            raise ConfigError(f"Configuration file {self.path} does not exist")
        env = os.environ if self.env is None else self.env
        return _substitute(self._read(self.path, ()), env)

    def describe(self) -> str:
        return f"TOML file {self.name}"

    def _read(self, path: Path, chain: tuple[Path, ...]) -> dict[str, Any]:
        if not path.is_file():
            return {}
        resolved = path.resolve()
        if resolved in chain:
            cycle = " -> ".join(str(entry) for entry in (*chain, resolved))
            raise ConfigError(f"Circular include detected: {cycle}")
        try:
            document = tomllib.loads(resolved.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
        table = self.section(document)
        if not isinstance(table, Mapping):
            raise ConfigError(f"Settings in {path} must be a TOML table")
        own = dict(table)
        merged: dict[str, Any] = {}
        for included in _include_paths(own.pop(INCLUDE_KEY, None), resolved.parent):
            merged = _deep_merge(merged, self._read(included, (*chain, resolved)))
        return _deep_merge(merged, _snake_keys(own))


def _include_paths(raw: Any, base_dir: Path) -> list[Path]:
    if raw is None:
        return []
    entries = [raw] if isinstance(raw, str) else raw
    if not isinstance(entries, list) or not all(isinstance(entry, str) for entry in entries):
        raise ConfigError(f"'include' must be a path or a list of paths, got {raw!r}")
    return [base_dir / entry for entry in entries]


def pyproject_source(path: Path, *, env: Mapping[str, str] | None = None) -> TomlConfigSource:
    """Return a source reading ``[tool.ghannotate]`` from ``path``."""

    return TomlConfigSource(path, env=env, section=_pyproject_section, name=f"{path} [tool.ghannotate]")


@dataclass(slots=True)
class EnvironmentConfigSource:
    """CI environment variables mapped onto configuration keys.

    Empty variables are treated as unset.
    """

    env: Mapping[str, str] | None = None
    name: str = "environment"

    def load(self) -> Mapping[str, Any]:
        env = os.environ if self.env is None else self.env
        fragment: dict[str, Any] = {}
        for variable, dotted in ENVIRONMENT_KEYS.items():
            if value := env.get(variable):
                _assign(fragment, dotted, value)
        return fragment

    def describe(self) -> str:
        return "environment variables"


@dataclass(slots=True)
class MappingConfigSource:
    """Dotted keys supplied programmatically, e.g. command-line overrides."""

    data: Mapping[str, Any] = field(default_factory=dict)
    name: str = "overrides"

    def load(self) -> Mapping[str, Any]:
        fragment: dict[str, Any] = {}
        for dotted, value in self.data.items():
            if value is not None:
                _assign(fragment, dotted, value)
        return fragment

    def describe(self) -> str:
        return f"{self.name} (command line)"


def default_sources(
    root: Path,
    *,
    config_file: Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> list[ConfigSource]:
    """Return the standard sources for ``root``, lowest precedence first."""

    sources: list[ConfigSource] = [pyproject_source(root / PYPROJECT_FILENAME, env=env)]
    if config_file is not None:
        sources.append(TomlConfigSource(config_file, env=env, required=True))
    sources.append(EnvironmentConfigSource(env))
    if overrides:
        sources.append(MappingConfigSource(overrides))
    return sources


def _merge_layer(merged: Mapping[str, Any], layer: Mapping[str, Any], *, origin: str) -> dict[str, Any]:
    """Merge ``layer`` over ``merged``, treating command and preset as one setting."""

    chosen = [key for key in _INVOCATION_KEYS if layer.get(key) is not None]
    if len(chosen) > 1:
        raise ConfigError(f"{origin}: set either 'command' or 'preset', not both")
    if chosen:
        merged = {key: value for key, value in merged.items() if key not in (*_INVOCATION_KEYS, "args")}
    return _deep_merge(merged, layer)


def load_config(sources: Iterable[ConfigSource]) -> RunnerConfig:
    """Merge ``sources`` in order and validate the result.

    Raises:
        ConfigError: If a source cannot be read or the merged settings are
            invalid. The message names every offending field.
    """

    merged: dict[str, Any] = {}
    for source in sources:
        merged = _merge_layer(merged, source.load(), origin=source.describe())
    try:
        return RunnerConfig.model_validate(merged)
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}" for error in exc.errors()
        ]
        raise ConfigError(f"Invalid configuration: {'; '.join(problems)}") from exc


__all__ = [
    "ENVIRONMENT_KEYS",
    "ConfigSource",
    "EnvironmentConfigSource",
    "MappingConfigSource",
    "TomlConfigSource",
    "default_sources",
    "load_config",
    "pyproject_source",
]
