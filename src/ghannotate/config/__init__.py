# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and layered loaders."""

from __future__ import annotations

from .loaders import (
    ENVIRONMENT_KEYS,
    ConfigSource,
    EnvironmentConfigSource,
    MappingConfigSource,
    TomlConfigSource,
    default_sources,
    load_config,
    pyproject_source,
)
from .models import EmitterKind, GitHubSettings, RunnerConfig

__all__ = [
    "ENVIRONMENT_KEYS",
    "ConfigSource",
    "EmitterKind",
    "EnvironmentConfigSource",
    "GitHubSettings",
    "MappingConfigSource",
    "RunnerConfig",
    "TomlConfigSource",
    "default_sources",
    "load_config",
    "pyproject_source",
]
