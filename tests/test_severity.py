# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for severity normalisation and override rules."""

from __future__ import annotations

import pytest

from ghannotate.core.severity import (
    Severity,
    apply_severity_rules,
    build_severity_rules,
    max_severity,
    severity_from_label,
)


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("error", Severity.ERROR),
        ("Fatal Error", Severity.ERROR),
        ("error: internal compiler error", Severity.ERROR),
        ("warning", Severity.WARNING),
        ("WARN", Severity.WARNING),
        ("note", Severity.NOTE),
        ("help", Severity.NOTE),
        ("failure-note", Severity.NOTE),
    ],
)
def test_severity_from_label_normalises_tool_vocabulary(label: str, expected: Severity) -> None:
    assert severity_from_label(label) is expected


def test_severity_from_label_rejects_unknown_labels() -> None:
    with pytest.raises(ValueError, match="unknown severity"):
        severity_from_label("catastrophe")


def test_max_severity_orders_levels() -> None:
    assert max_severity([Severity.NOTE, Severity.ERROR, Severity.WARNING]) is Severity.ERROR
    assert max_severity([Severity.NOTE]) is Severity.NOTE
    assert max_severity([]) is None


def test_severity_rules_override_matching_codes() -> None:
    rules = build_severity_rules(["cargo:^clippy::pedantic=note", "gcc:-Wunused=error"])

    assert apply_severity_rules("cargo", "clippy::pedantic", Severity.WARNING, rules=rules) is Severity.NOTE
    assert apply_severity_rules("cargo", "E0308", Severity.ERROR, rules=rules) is Severity.ERROR
    assert apply_severity_rules("gcc", "unused [-Wunused]", Severity.WARNING, rules=rules) is Severity.ERROR
    assert apply_severity_rules("other", "clippy::pedantic", Severity.WARNING, rules=rules) is Severity.WARNING


@pytest.mark.parametrize("declaration", ["no-separator", "cargo:(unclosed=note", "cargo:x=bogus"])
def test_build_severity_rules_rejects_malformed_declarations(declaration: str) -> None:
    with pytest.raises(ValueError, match="invalid severity rule"):
        build_severity_rules([declaration])
