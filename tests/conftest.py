# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from ghannotate.core.models import Diagnostic
from ghannotate.core.severity import Severity

DiagnosticFactory = Callable[..., Diagnostic]


@pytest.fixture
def make_diagnostic() -> DiagnosticFactory:
    """Return a factory building diagnostics with sensible defaults."""

    def _factory(**overrides: Any) -> Diagnostic:
        fields: dict[str, Any] = {
            "severity": Severity.WARNING,
            "file": "src/lib.rs",
            "line": 1,
            "message": "something looks off",
            "tool": "test",
        }
        fields.update(overrides)
        return Diagnostic(**fields)

    return _factory
