# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Regex grammars for line-oriented compiler and linter output."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from ..core.errors import ParseWarning
from ..core.models import Diagnostic
from ..core.severity import Severity, severity_from_label
from .base import build_diagnostic

# ``severity: file:line[:col]: message``
DEFAULT_PATTERN: Final[str] = (
    r"^(?P<severity>[A-Za-z][\w -]*?):\s+"
    r"(?P<file>[^:\s][^:]*):(?P<line>\d+)(?::(?P<column>\d+))?:\s+"
    r"(?P<message>.*\S)\s*$"
)

# ``file:line[:col]: severity: message [code]`` as printed by gcc and clang.
GCC_PATTERN: Final[str] = (
    r"^(?P<file>[^:\s][^:]*):(?P<line>\d+):(?:(?P<column>\d+):)?\s+"
    r"(?P<severity>fatal error|error|warning|note):\s+"
    r"(?P<message>.*?\S)(?:\s+\[(?P<code>[^\]\s]+)\])?\s*$"
)

_REQUIRED_GROUPS: Final[frozenset[str]] = frozenset({"file", "line", "message"})


@dataclass(slots=True)
class RegexGrammar:
    """Parse lines matching a regular expression with named groups.

    Recognised groups are ``severity``, ``file``, ``line``, ``column``,
    ``code`` and ``message``. When the pattern has no ``severity`` group every
    match uses ``default_severity``.
    """

    name: str
    pattern: re.Pattern[str]
    tool: str = "unknown"
    default_severity: Severity = Severity.WARNING

    @classmethod
    def from_source(
        cls,
        name: str,
        source: str,
        *,
        tool: str | None = None,
        default_severity: Severity = Severity.WARNING,
    ) -> RegexGrammar:
        """Compile ``source`` into a grammar after checking its named groups.

        Raises:
            ValueError: If the pattern does not compile or misses a required group.
        """

        try:
            pattern = re.compile(source)
        except re.error as exc:
            raise ValueError(f"grammar '{name}' has an invalid pattern: {exc}") from exc
        missing = _REQUIRED_GROUPS.difference(pattern.groupindex)
        if missing:
            joined = ", ".join(sorted(missing))
            raise ValueError(f"grammar '{name}' is missing named group(s): {joined}")
        return cls(name=name, pattern=pattern, tool=tool or name, default_severity=default_severity)

    def parse_line(self, line: str) -> Sequence[Diagnostic]:
        match = self.pattern.match(line)
        if match is None:
            return ()
        groups = match.groupdict()
        label = groups.get("severity")
        if label is None:
            severity = self.default_severity
        else:
            try:
                severity = severity_from_label(label)
            except ValueError as exc:
                raise ParseWarning(self.name, line, str(exc)) from exc
        column = groups.get("column")
        return (
            build_diagnostic(
                self.name,
                line,
                severity=severity,
                file=groups["file"],
                line=groups["line"],
                column=column or None,
                message=groups["message"],
                code=groups.get("code"),
                tool=self.tool,
            ),
        )


def default_grammar() -> RegexGrammar:
    """Return the ``severity: file:line:col: message`` grammar."""

    return RegexGrammar.from_source("default", DEFAULT_PATTERN, tool="default")


def gcc_grammar() -> RegexGrammar:
    """Return the gcc/clang style grammar."""

    return RegexGrammar.from_source("gcc", GCC_PATTERN)


__all__ = [
    "DEFAULT_PATTERN",
    "GCC_PATTERN",
    "RegexGrammar",
    "default_grammar",
    "gcc_grammar",
]
