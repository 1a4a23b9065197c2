# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for diagnostics and run results."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ghannotate.core.errors import RunStateError
from ghannotate.core.models import Diagnostic, RunResult, unique_diagnostics
from ghannotate.core.severity import Severity


def test_diagnostic_rejects_invalid_positions(make_diagnostic) -> None:
    with pytest.raises(ValidationError):
        make_diagnostic(line=0)
    with pytest.raises(ValidationError):
        make_diagnostic(column=0)
    with pytest.raises(ValidationError):
        make_diagnostic(message="   ")
    with pytest.raises(ValidationError):
        make_diagnostic(file="")


def test_diagnostic_is_frozen_and_hashable(make_diagnostic) -> None:
    diagnostic = make_diagnostic(column=4)

    with pytest.raises(ValidationError):
        diagnostic.line = 3  # type: ignore[misc]
    assert diagnostic == make_diagnostic(column=4)
    assert len({diagnostic, make_diagnostic(column=4)}) == 1
    assert diagnostic.location == "src/lib.rs:1:4"


def test_unique_diagnostics_keeps_first_seen_order(make_diagnostic) -> None:
    first = make_diagnostic(line=2)
    second = make_diagnostic(line=1)

    assert unique_diagnostics([first, second, first, second]) == [first, second]


def test_run_result_records_exit_exactly_once(make_diagnostic) -> None:
    result = RunResult(command=("cargo", "check"))
    result.add_diagnostic(make_diagnostic(severity=Severity.ERROR))

    assert result.returncode is None
    assert not result.completed

    result.record_exit(101, duration=1.5)

    assert result.returncode == 101
    assert result.completed
    assert result.duration == 1.5
    with pytest.raises(RunStateError):
        result.record_exit(0, duration=2.0)
    with pytest.raises(RunStateError):
        result.add_diagnostic(make_diagnostic())


def test_run_result_counts_severities(make_diagnostic) -> None:
    result = RunResult(command=("make",))
    for severity in (Severity.WARNING, Severity.WARNING, Severity.NOTE):
        result.add_diagnostic(make_diagnostic(severity=severity, line=len(result.diagnostics) + 1))

    counts = result.severity_counts()

    assert counts[Severity.WARNING] == 2
    assert counts[Severity.NOTE] == 1
    assert counts[Severity.ERROR] == 0
    assert result.has_severity(Severity.WARNING)
    assert not result.has_severity(Severity.ERROR)
    assert result.max_severity is Severity.WARNING


def test_diagnostic_preserves_message_text() -> None:
    diagnostic = Diagnostic(severity=Severity.NOTE, file="a.c", line=3, message="  padded  ")

    assert diagnostic.message == "  padded  "
    assert diagnostic.tool == "unknown"
