# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the ghannotate package."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from ..errors import RunStateError
from ..severity import Severity, max_severity


class Diagnostic(BaseModel):
    """Normalized diagnostic reported by a build tool.

    Instances are frozen once parsed so they can be shared between workers and
    deduplicated through hashing.
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity
    file: str
    line: int = Field(ge=1)
    column: int | None = Field(default=None, ge=1)
    end_line: int | None = Field(default=None, ge=1)
    end_column: int | None = Field(default=None, ge=1)
    message: str
    code: str | None = None
    title: str | None = None
    tool: str = "unknown"

    @field_validator("message")
    @classmethod
    def _require_message(cls, value: str) -> str:
        """Reject blank messages."""

        if not value.strip():
            raise ValueError("diagnostic message must not be empty")
        return value

    @field_validator("file")
    @classmethod
    def _require_file(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("diagnostic file must not be empty")
        return value

    @property
    def location(self) -> str:
        """Return a ``file:line[:column]`` rendering of the diagnostic position."""

        if self.column is None:
            return f"{self.file}:{self.line}"
        return f"{self.file}:{self.line}:{self.column}"


class RunResult(BaseModel):
    """Aggregate result for one tool invocation.

    Diagnostics keep the order in which the tool emitted them. The exit status
    is recorded exactly once, after the subprocess has terminated.
    """

    model_config = ConfigDict(validate_assignment=True)

    command: tuple[str, ...]
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    duration: float = 0.0
    cancelled: bool = False
    _returncode: int | None = PrivateAttr(default=None)

    @property
    def returncode(self) -> int | None:
        """Return the subprocess exit status, or ``None`` while still running."""

        return self._returncode

    @property
    def completed(self) -> bool:
        """Return ``True`` once the exit status has been recorded."""

        return self._returncode is not None

    def add_diagnostic(self, diagnostic: Diagnostic) -> None:
        """Append ``diagnostic`` while the run is still in progress.

        Raises:
            RunStateError: If the exit status was already recorded.
        """

        if self.completed:
            raise RunStateError("cannot add diagnostics to a completed run")
        self.diagnostics.append(diagnostic)

    def record_exit(self, returncode: int, *, duration: float, cancelled: bool = False) -> None:
        """Record the subprocess exit status.

        Args:
            returncode: Exit status reported by the operating system.
            duration: Wall-clock duration of the run in seconds.
            cancelled: Whether the run was stopped by a cancellation request.

        Raises:
            RunStateError: If the exit status was already recorded.
        """

        if self._returncode is not None:
            raise RunStateError(f"exit status already recorded ({self._returncode})")
        self._returncode = returncode
        self.duration = duration
        self.cancelled = cancelled

    def severity_counts(self) -> Counter[Severity]:
        """Return the number of diagnostics per severity."""

        return Counter(diagnostic.severity for diagnostic in self.diagnostics)

    def has_severity(self, severity: Severity) -> bool:
        """Return ``True`` when any diagnostic carries ``severity``."""

        return any(diagnostic.severity is severity for diagnostic in self.diagnostics)

    @property
    def max_severity(self) -> Severity | None:
        """Return the most severe diagnostic level seen, if any."""

        return max_severity(diagnostic.severity for diagnostic in self.diagnostics)


def unique_diagnostics(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Return ``diagnostics`` without duplicates, preserving first-seen order."""

    return list(dict.fromkeys(diagnostics))


__all__ = [
    "Diagnostic",
    "RunResult",
    "unique_diagnostics",
]
