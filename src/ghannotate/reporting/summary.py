# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Render the Markdown job summary shown on the workflow run page."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Final

from ..core.models import Diagnostic, unique_diagnostics
from ..core.severity import Severity
from ..parsing.cargo import FORMAT_MISMATCH_TITLE

# Annotation kinds as GitHub names them, with the emoji shown in the summary.
_LEVEL_LABELS: Final[dict[Severity, str]] = {
    Severity.ERROR: ":x: Error",
    Severity.WARNING: ":warning: Warning",
    Severity.NOTE: ":information_source: Notice",
}


def _cell(text: str) -> str:
    """Return ``text`` flattened for a Markdown table cell."""

    first_line = text.strip().splitlines()[0] if text.strip() else ""
    return first_line.replace("|", "\\|")


def _diagnostic_table(diagnostics: Sequence[Diagnostic]) -> list[str]:
    counts = Counter(diagnostic.severity for diagnostic in diagnostics)
    totals = ", ".join(f"{counts[level]} {_LEVEL_LABELS[level]}s" for level in Severity)
    lines = [
        f"> **TOTAL:** {totals}",
        "",
        "|Level|Message|Location|",
        "|:--|:--|--:|",
    ]
    for diagnostic in diagnostics:
        level = _LEVEL_LABELS[diagnostic.severity]
        message = _cell(diagnostic.title or diagnostic.message)
        lines.append(f"|{level}|{message}|`{diagnostic.file}:{diagnostic.line}`|")
    return lines


def _mismatch_list(diagnostics: Sequence[Diagnostic]) -> list[str]:
    by_file: dict[str, list[int]] = {}
    for diagnostic in diagnostics:
        by_file.setdefault(diagnostic.file, []).append(diagnostic.line)
    lines = [f"> **TOTAL:** {len(diagnostics)} mismatches", ""]
    for file, line_numbers in by_file.items():
        lines.append(f"- `{file}`")
        lines.extend(f"  - L{number}" for number in line_numbers)
    return lines


def render_summary(diagnostics: Iterable[Diagnostic]) -> str:
    """Return the Markdown summary for ``diagnostics`` (duplicates removed)."""

    unique = unique_diagnostics(diagnostics)
    mismatches = [diagnostic for diagnostic in unique if diagnostic.title == FORMAT_MISMATCH_TITLE]
    others = [diagnostic for diagnostic in unique if diagnostic.title != FORMAT_MISMATCH_TITLE]
    sections: list[list[str]] = []
    if others or not mismatches:
        sections.append(_diagnostic_table(others))
    if mismatches:
        sections.append(_mismatch_list(mismatches))
    return "\n\n".join("\n".join(section) for section in sections) + "\n"


def write_summary(path: Path, diagnostics: Iterable[Diagnostic]) -> None:
    """Append the rendered summary to ``path``.

    Raises:
        OSError: If the summary file cannot be written.
    """

    with path.open("a", encoding="utf-8") as handle:
        handle.write(render_summary(diagnostics))


__all__ = ["render_summary", "write_summary"]
