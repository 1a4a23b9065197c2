# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the exit policy."""

from __future__ import annotations

import pytest

from ghannotate.core.errors import RunStateError
from ghannotate.core.models import RunResult
from ghannotate.core.severity import Severity
from ghannotate.policy import EXIT_FAILURE, EXIT_SUCCESS, ExitPolicyEvaluator, RunState, evaluate_exit


def _result(make_diagnostic, *severities: Severity, returncode: int = 0, cancelled: bool = False) -> RunResult:
    result = RunResult(command=("tool",))
    for index, severity in enumerate(severities, start=1):
        result.add_diagnostic(make_diagnostic(severity=severity, line=index))
    result.record_exit(returncode, duration=0.1, cancelled=cancelled)
    return result


@pytest.mark.parametrize(
    ("severities", "allow_warnings", "returncode", "expected"),
    [
        ((), False, 0, EXIT_SUCCESS),
        ((Severity.NOTE, Severity.NOTE), False, 0, EXIT_SUCCESS),
        ((Severity.WARNING,), False, 0, EXIT_FAILURE),
        ((Severity.WARNING,), True, 0, EXIT_SUCCESS),
        ((Severity.ERROR,), True, 0, EXIT_FAILURE),
        ((Severity.ERROR, Severity.WARNING), True, 101, EXIT_FAILURE),
        ((), False, 2, EXIT_FAILURE),
    ],
)
def test_evaluate_exit(make_diagnostic, severities, allow_warnings, returncode, expected) -> None:
    decision = evaluate_exit(_result(make_diagnostic, *severities, returncode=returncode), allow_warnings=allow_warnings)

    assert decision.exit_code == expected
    assert decision.ok is (expected == EXIT_SUCCESS)


def test_violation_explains_failure(make_diagnostic) -> None:
    decision = evaluate_exit(_result(make_diagnostic, Severity.WARNING, Severity.WARNING), allow_warnings=False)

    assert decision.violation is not None
    assert decision.violation.reason == "2 warnings reported and warnings are not allowed"


def test_cancelled_run_fails(make_diagnostic) -> None:
    decision = evaluate_exit(_result(make_diagnostic, returncode=0, cancelled=True), allow_warnings=True)

    assert decision.exit_code == EXIT_FAILURE
    assert "cancelled" in decision.violation.reason


def test_policy_refuses_incomplete_runs() -> None:
    with pytest.raises(RunStateError):
        evaluate_exit(RunResult(command=("tool",)), allow_warnings=False)


def test_evaluator_transitions_once(make_diagnostic) -> None:
    evaluator = ExitPolicyEvaluator(allow_warnings=True)

    assert evaluator.state is RunState.RUNNING
    with pytest.raises(RunStateError):
        evaluator.decide()

    decision = evaluator.complete(_result(make_diagnostic, Severity.WARNING))

    assert evaluator.state is RunState.COMPLETED
    assert decision.ok
    assert evaluator.decide() is decision
    with pytest.raises(RunStateError):
        evaluator.complete(_result(make_diagnostic))
