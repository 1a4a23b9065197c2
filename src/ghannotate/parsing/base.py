# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared grammar infrastructure and helper utilities."""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from typing import Protocol, TypeAlias, runtime_checkable

from pydantic import ValidationError

from ..core.errors import ParseWarning
from ..core.models import Diagnostic

JsonValue: TypeAlias = str | int | float | bool | None | list["JsonValue"] | dict[str, "JsonValue"]


@runtime_checkable
class Grammar(Protocol):
    """Turn single output lines of one tool into diagnostics."""

    name: str

    def parse_line(self, line: str) -> Sequence[Diagnostic]:
        """Return diagnostics found in ``line``.

        An empty sequence means the line is not part of this grammar and is
        ignored. A line the grammar recognises but cannot convert raises
        :class:`ParseWarning`.
        """
        ...


def load_json_line(grammar: str, line: str) -> JsonValue | None:
    """Decode ``line`` as JSON when it looks like a JSON document.

    Returns:
        JsonValue | None: Decoded payload, or ``None`` when the line is plain text.

    Raises:
        ParseWarning: If the line starts like JSON but does not decode.
    """

    stripped = line.strip()
    if not stripped or stripped[0] not in "[{":
        return None
    try:
        return json.loads(stripped)
    except json.JSONDecodeError as exc:
        raise ParseWarning(grammar, line, f"invalid JSON ({exc.msg})") from exc


def iter_mappings(value: JsonValue | None) -> Iterator[Mapping[str, JsonValue]]:
    """Yield mapping items from ``value`` when it is a sequence of dict-like objects."""

    if isinstance(value, list):
        for item in value:
            if isinstance(item, Mapping):
                yield item


def coerce_optional_int(value: JsonValue | None) -> int | None:
    """Return ``value`` as ``int`` when it holds an integral value."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def coerce_optional_str(value: JsonValue | None) -> str | None:
    """Return ``value`` as ``str`` unless it is missing."""

    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def relative_to_cwd(path: str, cwd: Path | None = None) -> str:
    """Strip the working directory prefix from ``path`` when present."""

    base = cwd or Path.cwd()
    try:
        relative = Path(path).relative_to(base)
    except ValueError:
        return path
    return relative.as_posix() if relative.parts else path


def build_diagnostic(grammar: str, raw_line: str, /, **fields: object) -> Diagnostic:
    """Validate ``fields`` into a :class:`Diagnostic`.

    Numeric positions may arrive as strings (regex groups) and are coerced
    by the model.

    Raises:
        ParseWarning: If the fields violate a diagnostic invariant.
    """

    try:
        return Diagnostic.model_validate(fields)
    except ValidationError as exc:
        reasons = "; ".join(str(error["msg"]) for error in exc.errors())
        raise ParseWarning(grammar, raw_line, reasons) from exc


__all__ = [
    "Grammar",
    "JsonValue",
    "build_diagnostic",
    "coerce_optional_int",
    "coerce_optional_str",
    "iter_mappings",
    "load_json_line",
    "relative_to_cwd",
]
