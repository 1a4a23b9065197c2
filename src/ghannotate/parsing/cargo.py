# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Grammars for Cargo, rustc and rustfmt JSON output."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ..core.errors import ParseWarning
from ..core.models import Diagnostic
from ..core.severity import Severity, severity_from_label
from .base import (
    JsonValue,
    build_diagnostic,
    coerce_optional_int,
    coerce_optional_str,
    iter_mappings,
    load_json_line,
    relative_to_cwd,
)

LOGGER = logging.getLogger(__name__)

CARGO_DIAGNOSTIC_REASON: Final[str] = "compiler-message"
FORMAT_MISMATCH_TITLE: Final[str] = "Format mismatch"
_EMPTY_EXPECTATION: Final[str] = "Remove the highlighted lines"


@dataclass(slots=True)
class CargoJsonGrammar:
    """Parse ``cargo --message-format=json`` records (and bare rustc JSON).

    Only ``compiler-message`` records carry diagnostics; artifact and build
    script records are ignored. The primary span locates the annotation, the
    rendered text becomes the message and the short message its title.
    """

    name: str = "cargo"
    tool: str = "cargo"

    def parse_line(self, line: str) -> Sequence[Diagnostic]:
        payload = load_json_line(self.name, line)
        if not isinstance(payload, Mapping):
            return ()
        reason = payload.get("reason")
        if reason is None:
            if "level" not in payload or "spans" not in payload:
                return ()
            message: JsonValue = payload
        elif reason == CARGO_DIAGNOSTIC_REASON:
            message = payload.get("message")
            if not isinstance(message, Mapping):
                raise ParseWarning(self.name, line, "compiler-message without a message object")
        else:
            return ()
        return self._convert(line, message)

    def _convert(self, line: str, message: Mapping[str, JsonValue]) -> Sequence[Diagnostic]:
        level = coerce_optional_str(message.get("level")) or ""
        try:
            severity = severity_from_label(level)
        except ValueError as exc:
            raise ParseWarning(self.name, line, str(exc)) from exc

        spans = list(iter_mappings(message.get("spans")))
        primary = next((span for span in spans if span.get("is_primary")), None)
        short = (coerce_optional_str(message.get("message")) or "").strip()
        if primary is None:
            # "aborting due to ..." and "N warnings emitted" have no location.
            LOGGER.debug("skipping %s without primary span: %s", level, short)
            return ()

        rendered = coerce_optional_str(message.get("rendered"))
        code_mapping = message.get("code")
        code = coerce_optional_str(code_mapping.get("code")) if isinstance(code_mapping, Mapping) else None
        return (
            build_diagnostic(
                self.name,
                line,
                severity=severity,
                file=coerce_optional_str(primary.get("file_name")) or "",
                line=coerce_optional_int(primary.get("line_start")) or 0,
                end_line=coerce_optional_int(primary.get("line_end")),
                column=coerce_optional_int(primary.get("column_start")),
                end_column=coerce_optional_int(primary.get("column_end")),
                title=short if rendered else None,
                message=rendered if rendered and rendered.strip() else short,
                code=code,
                tool=self.tool,
            ),
        )


@dataclass(slots=True)
class RustfmtJsonGrammar:
    """Parse ``cargo fmt --message-format=json`` mismatch reports.

    Each mismatch becomes a warning spanning the original lines, with the
    expected code as message.
    """

    name: str = "rustfmt-json"
    tool: str = "rustfmt"
    cwd: Path | None = None

    def parse_line(self, line: str) -> Sequence[Diagnostic]:
        payload = load_json_line(self.name, line)
        if not isinstance(payload, list):
            return ()
        results: list[Diagnostic] = []
        for entry in iter_mappings(payload):
            name = coerce_optional_str(entry.get("name"))
            mismatches = entry.get("mismatches")
            if not name or not isinstance(mismatches, list):
                raise ParseWarning(self.name, line, "file entry without name or mismatches")
            file = relative_to_cwd(name, self.cwd)
            for mismatch in iter_mappings(mismatches):
                expected = coerce_optional_str(mismatch.get("expected")) or ""
                results.append(
                    build_diagnostic(
                        self.name,
                        line,
                        severity=Severity.WARNING,
                        file=file,
                        line=coerce_optional_int(mismatch.get("original_begin_line")) or 0,
                        end_line=coerce_optional_int(mismatch.get("original_end_line")),
                        title=FORMAT_MISMATCH_TITLE,
                        message=expected if expected.strip() else _EMPTY_EXPECTATION,
                        tool=self.tool,
                    ),
                )
        return results


__all__ = [
    "CARGO_DIAGNOSTIC_REASON",
    "FORMAT_MISMATCH_TITLE",
    "CargoJsonGrammar",
    "RustfmtJsonGrammar",
]
