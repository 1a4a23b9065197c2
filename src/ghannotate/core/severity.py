# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, MutableMapping
from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels normalising different tool vocabularies."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


SeverityRule = tuple[re.Pattern[str], Severity]
SeverityRuleMap = MutableMapping[str, list[SeverityRule]]
SeverityRuleView = Mapping[str, Iterable[SeverityRule]]

SEVERITY_RANK: Final[dict[Severity, int]] = {
    Severity.NOTE: 0,
    Severity.WARNING: 1,
    Severity.ERROR: 2,
}

# Labels emitted by rustc, cargo, gcc/clang and friends.
_SEVERITY_ALIASES: Final[dict[str, Severity]] = {
    "error": Severity.ERROR,
    "err": Severity.ERROR,
    "fatal": Severity.ERROR,
    "fatal error": Severity.ERROR,
    "failure": Severity.ERROR,
    "error: internal compiler error": Severity.ERROR,
    "warning": Severity.WARNING,
    "warn": Severity.WARNING,
    "note": Severity.NOTE,
    "notice": Severity.NOTE,
    "info": Severity.NOTE,
    "help": Severity.NOTE,
    "failure-note": Severity.NOTE,
}


def severity_from_label(label: str) -> Severity:
    """Return the :class:`Severity` matching a tool-specific ``label``.

    Args:
        label: Severity keyword as printed by the tool (case-insensitive).

    Returns:
        Severity: Normalised severity.

    Raises:
        ValueError: If ``label`` is not a recognised severity keyword.
    """

    normalized = label.strip().lower()
    try:
        return _SEVERITY_ALIASES[normalized]
    except KeyError:
        raise ValueError(f"unknown severity label {label!r}") from None


def severity_rank(severity: Severity) -> int:
    """Return the ordering rank of ``severity`` (higher is more severe)."""

    return SEVERITY_RANK[severity]


def max_severity(severities: Iterable[Severity]) -> Severity | None:
    """Return the most severe entry of ``severities`` or ``None`` when empty."""

    return max(severities, key=severity_rank, default=None)


def apply_severity_rules(
    tool: str,
    code_or_message: str,
    severity: Severity,
    *,
    rules: SeverityRuleView,
) -> Severity:
    """Return the level of the first rule for ``tool`` matching the code or message.

    ``severity`` is returned unchanged when no rule matches.
    """

    subject = code_or_message or ""
    return next(
        (override for pattern, override in rules.get(tool, ()) if pattern.search(subject)),
        severity,
    )


def add_custom_rule(declaration: str, *, rules: SeverityRuleMap) -> None:
    """Add a custom severity override defined as ``tool:regex=level``.

    Args:
        declaration: Rule declaration such as ``cargo:clippy::pedantic=note``.
        rules: Mutable rule map receiving the compiled override.

    Raises:
        ValueError: If ``declaration`` is malformed or names an unknown level.
    """

    tool, sep, remainder = declaration.partition(":")
    pattern, eq, label = remainder.rpartition("=")
    if not (sep and eq and tool and pattern):
        raise ValueError(f"invalid severity rule '{declaration}': expected tool:regex=level")
    try:
        entry = (re.compile(pattern), severity_from_label(label))
    except (ValueError, re.error) as exc:
        raise ValueError(f"invalid severity rule '{declaration}': {exc}") from exc
    rules.setdefault(tool, []).append(entry)


def build_severity_rules(declarations: Iterable[str]) -> dict[str, list[SeverityRule]]:
    """Return a fresh rule map compiled from ``declarations``."""

    rules: dict[str, list[SeverityRule]] = {}
    for declaration in declarations:
        add_custom_rule(declaration, rules=rules)
    return rules


__all__ = [
    "SEVERITY_RANK",
    "Severity",
    "SeverityRule",
    "SeverityRuleMap",
    "SeverityRuleView",
    "add_custom_rule",
    "apply_severity_rules",
    "build_severity_rules",
    "max_severity",
    "severity_from_label",
    "severity_rank",
]
