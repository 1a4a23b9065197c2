# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Boolean literal parsing for flags passed as strings by workflow inputs."""

from __future__ import annotations

from typing import Final

TRUTHY_LITERALS: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
FALSY_LITERALS: Final[frozenset[str]] = frozenset({"0", "false", "no", "off", ""})


def coerce_bool_literal(value: str) -> bool:
    """Interpret ``value`` as a boolean, ignoring case and surrounding whitespace.

    An empty string is ``False`` because unset workflow inputs arrive that way.

    Raises:
        ValueError: For anything outside the known literals.
    """

    literal = value.strip().lower()
    if literal not in TRUTHY_LITERALS | FALSY_LITERALS:
        raise ValueError(f"Unsupported boolean literal: {value!r}")
    return literal in TRUTHY_LITERALS


def parse_allow_flag(value: str | None) -> bool | None:
    """Interpret the ``--allow-warnings`` option; ``None`` leaves it unset."""

    if value is None:
        return None
    return coerce_bool_literal(value)


__all__ = ["FALSY_LITERALS", "TRUTHY_LITERALS", "coerce_bool_literal", "parse_allow_flag"]
