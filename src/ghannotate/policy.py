# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exit policy deciding the runner's own exit status."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from .core.errors import PolicyViolation, RunStateError
from .core.models import RunResult
from .core.severity import Severity

EXIT_SUCCESS: Final[int] = 0
EXIT_FAILURE: Final[int] = 1


class RunState(str, Enum):
    """Lifecycle of a run as seen by the policy evaluator."""

    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class PolicyDecision:
    """Final exit code and, on failure, the violation that caused it."""

    exit_code: int
    violation: PolicyViolation | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == EXIT_SUCCESS


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def evaluate_exit(result: RunResult, *, allow_warnings: bool) -> PolicyDecision:
    """Decide the exit code for a completed ``result``.

    Errors always fail the run. Warnings fail it unless ``allow_warnings`` is
    set. Notes never fail it. Without failing diagnostics, the run fails when
    it was cancelled or when the tool itself exited non-zero.

    Raises:
        RunStateError: If ``result`` has no recorded exit status yet.
    """

    if result.returncode is None:
        raise RunStateError("cannot evaluate a run that has not completed")

    counts = result.severity_counts()
    errors = counts.get(Severity.ERROR, 0)
    warnings = counts.get(Severity.WARNING, 0)
    if errors:
        return _fail(f"{_plural(errors, 'error')} reported")
    if warnings and not allow_warnings:
        return _fail(f"{_plural(warnings, 'warning')} reported and warnings are not allowed")
    if result.cancelled:
        return _fail("run was cancelled before the tool finished")
    if result.returncode != 0:
        return _fail(f"tool exited with status {result.returncode}")
    return PolicyDecision(exit_code=EXIT_SUCCESS)


def _fail(reason: str) -> PolicyDecision:
    return PolicyDecision(exit_code=EXIT_FAILURE, violation=PolicyViolation(reason, exit_code=EXIT_FAILURE))


class ExitPolicyEvaluator:
    """Two-state machine (``RUNNING`` then ``COMPLETED``) wrapping :func:`evaluate_exit`."""

    def __init__(self, *, allow_warnings: bool = False) -> None:
        self.allow_warnings = allow_warnings
        self._state = RunState.RUNNING
        self._decision: PolicyDecision | None = None

    @property
    def state(self) -> RunState:
        return self._state

    def complete(self, result: RunResult) -> PolicyDecision:
        """Transition to ``COMPLETED`` and return the decision for ``result``.

        Raises:
            RunStateError: If the evaluator already completed or ``result`` is unfinished.
        """

        if self._state is RunState.COMPLETED:
            raise RunStateError("exit policy already completed")
        decision = evaluate_exit(result, allow_warnings=self.allow_warnings)
        self._state = RunState.COMPLETED
        self._decision = decision
        return decision

    def decide(self) -> PolicyDecision:
        """Return the decision taken on completion.

        Raises:
            RunStateError: If called while the run is still in progress.
        """

        if self._decision is None:
            raise RunStateError("exit policy is still running")
        return self._decision


__all__ = [
    "EXIT_FAILURE",
    "EXIT_SUCCESS",
    "ExitPolicyEvaluator",
    "PolicyDecision",
    "RunState",
    "evaluate_exit",
]
