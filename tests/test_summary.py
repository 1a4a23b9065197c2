# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the Markdown job summary."""

from __future__ import annotations

from pathlib import Path

from ghannotate.core.severity import Severity
from ghannotate.parsing import FORMAT_MISMATCH_TITLE
from ghannotate.reporting import render_summary, write_summary


def test_summary_table_lists_unique_diagnostics(make_diagnostic) -> None:
    error = make_diagnostic(severity=Severity.ERROR, file="src/main.rs", line=4, title="mismatched types")
    warning = make_diagnostic(line=9, message="unused | pipe\nsecond line")

    summary = render_summary([error, warning, error])

    lines = summary.splitlines()
    assert lines[0] == "> **TOTAL:** 1 :x: Errors, 1 :warning: Warnings, 0 :information_source: Notices"
    assert "|Level|Message|Location|" in lines
    assert "|:x: Error|mismatched types|`src/main.rs:4`|" in lines
    assert "|:warning: Warning|unused \\| pipe|`src/lib.rs:9`|" in lines
    assert summary.count("src/main.rs:4") == 1


def test_summary_groups_format_mismatches(make_diagnostic) -> None:
    mismatches = [
        make_diagnostic(file="src/a.rs", line=3, title=FORMAT_MISMATCH_TITLE, tool="rustfmt"),
        make_diagnostic(file="src/a.rs", line=8, title=FORMAT_MISMATCH_TITLE, tool="rustfmt"),
        make_diagnostic(file="src/b.rs", line=1, title=FORMAT_MISMATCH_TITLE, tool="rustfmt"),
    ]

    summary = render_summary(mismatches)

    assert "> **TOTAL:** 3 mismatches" in summary
    assert "- `src/a.rs`\n  - L3\n  - L8\n- `src/b.rs`\n  - L1" in summary
    assert "|Level|" not in summary


def test_empty_summary_reports_zero_totals() -> None:
    expected = "> **TOTAL:** 0 :x: Errors, 0 :warning: Warnings, 0 :information_source: Notices"
    assert render_summary([]).startswith(expected)


def test_write_summary_appends(tmp_path: Path, make_diagnostic) -> None:
    target = tmp_path / "summary.md"
    target.write_text("# Previous step\n", encoding="utf-8")

    write_summary(target, [make_diagnostic()])

    content = target.read_text(encoding="utf-8")
    assert content.startswith("# Previous step\n")
    assert "> **TOTAL:** 0 :x: Errors, 1 :warning: Warnings, 0 :information_source: Notices" in content


def test_summary_labels_notes_as_notices(make_diagnostic) -> None:
    note = make_diagnostic(severity=Severity.NOTE, file="src/lib.rs", line=2, message="consider borrowing")

    summary = render_summary([note])

    assert "|:information_source: Notice|consider borrowing|`src/lib.rs:2`|" in summary.splitlines()
