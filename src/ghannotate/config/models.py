# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for the ghannotate runner."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from ..core.runtime.process import DEFAULT_QUEUE_SIZE, DEFAULT_TERMINATE_GRACE
from ..core.severity import build_severity_rules
from ..emission.emitter import DEFAULT_BACKOFF_BASE, DEFAULT_BACKOFF_MAX, DEFAULT_MAX_RETRIES
from ..emission.records import DEFAULT_BATCH_SIZE
from ..emission.transports import CHECKS_API_LIMIT, DEFAULT_API_URL, DEFAULT_CHECK_NAME
from ..pipeline import DEFAULT_DIAGNOSTIC_QUEUE_SIZE


class EmitterKind(str, Enum):
    """Where annotations are delivered."""

    WORKFLOW = "workflow"
    CHECKS = "checks"
    NONE = "none"


class GitHubSettings(BaseModel):
    """Credentials and coordinates used by the Checks API transport.

    The token is read once at startup and injected here; nothing else reads it
    from the environment.
    """

    model_config = ConfigDict(validate_assignment=True)

    token: SecretStr | None = None
    repository: str | None = None
    sha: str | None = None
    api_url: str = DEFAULT_API_URL
    check_name: str = DEFAULT_CHECK_NAME

    def missing_for_checks(self) -> list[str]:
        """Return the settings the Checks API transport still needs."""

        missing: list[str] = []
        if self.token is None or not self.token.get_secret_value():
            missing.append("token (GITHUB_TOKEN)")
        if not self.repository:
            missing.append("repository (GITHUB_REPOSITORY)")
        if not self.sha:
            missing.append("sha (GITHUB_SHA)")
        return missing


class RunnerConfig(BaseModel):
    """Fully resolved runner configuration."""

    model_config = ConfigDict(validate_assignment=True)

    command: str | None = None
    args: list[str] = Field(default_factory=list)
    preset: str | None = None
    cargo: str = "cargo"
    allow_warnings: bool = False
    grammar: str | None = None
    emitter: EmitterKind = EmitterKind.WORKFLOW
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1, le=CHECKS_API_LIMIT)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    backoff_base: float = Field(default=DEFAULT_BACKOFF_BASE, ge=0)
    backoff_max: float = Field(default=DEFAULT_BACKOFF_MAX, ge=0)
    line_queue_size: int = Field(default=DEFAULT_QUEUE_SIZE, ge=1)
    diagnostic_queue_size: int = Field(default=DEFAULT_DIAGNOSTIC_QUEUE_SIZE, ge=1)
    timeout: float | None = Field(default=None, gt=0)
    terminate_grace: float = Field(default=DEFAULT_TERMINATE_GRACE, ge=0)
    summary_path: Path | None = None
    echo_output: bool = True
    custom_grammars: dict[str, str] = Field(default_factory=dict)
    severity_rules: list[str] = Field(default_factory=list)
    github: GitHubSettings = Field(default_factory=GitHubSettings)

    @field_validator("severity_rules")
    @classmethod
    def _validate_rules(cls, value: list[str]) -> list[str]:
        """Compile the rules once so malformed declarations fail early."""

        build_severity_rules(value)
        return value

    @field_validator("summary_path", mode="before")
    @classmethod
    def _blank_path(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


__all__ = ["EmitterKind", "GitHubSettings", "RunnerConfig"]
