# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Lazy diagnostic extraction from a live output stream."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import TextIO

from ..core.errors import ParseWarning
from ..core.models import Diagnostic
from ..core.runtime.process import OutputLine, Stream
from ..core.severity import SeverityRuleView, apply_severity_rules
from .base import Grammar

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ParseStats:
    """Counters describing one parse pass."""

    lines: int = 0
    diagnostics: int = 0
    warnings: int = 0
    discarded_partial: int = 0


@dataclass(slots=True)
class DiagnosticParser:
    """Feed output lines through a :class:`Grammar` and yield diagnostics.

    Lines the grammar does not recognise are ignored. Lines it rejects raise
    :class:`ParseWarning`, which is logged at debug level before moving on. A
    partial trailing line is kept only when it parses.

    Attributes:
        grammar: Grammar matching the tool's output format.
        severity_rules: Optional per-tool severity overrides keyed by tool name.
        echo: Stream receiving a verbatim copy of the tool's stderr lines.
    """

    grammar: Grammar
    severity_rules: SeverityRuleView | None = None
    echo: TextIO | None = None
    stats: ParseStats = field(default_factory=ParseStats)

    def parse(self, lines: Iterable[OutputLine | str]) -> Iterator[Diagnostic]:
        """Yield diagnostics lazily as ``lines`` are consumed."""

        for item in lines:
            if isinstance(item, OutputLine):
                text, partial = item.text, item.partial
                if self.echo is not None and item.stream is Stream.STDERR:
                    self.echo.write(f"{text}\n")
            else:
                text, partial = item, False
            self.stats.lines += 1
            try:
                found = self.grammar.parse_line(text)
            except ParseWarning as warning:
                if partial:
                    self.stats.discarded_partial += 1
                    LOGGER.debug("discarding partial trailing line: %r", text)
                else:
                    self.stats.warnings += 1
                    LOGGER.debug("%s", warning)
                continue
            if partial and not found:
                self.stats.discarded_partial += 1
                continue
            for diagnostic in found:
                self.stats.diagnostics += 1
                yield self._apply_rules(diagnostic)

    def _apply_rules(self, diagnostic: Diagnostic) -> Diagnostic:
        if not self.severity_rules:
            return diagnostic
        severity = apply_severity_rules(
            diagnostic.tool,
            diagnostic.code or diagnostic.message,
            diagnostic.severity,
            rules=self.severity_rules,
        )
        if severity is diagnostic.severity:
            return diagnostic
        return diagnostic.model_copy(update={"severity": severity})


__all__ = ["DiagnosticParser", "ParseStats"]
