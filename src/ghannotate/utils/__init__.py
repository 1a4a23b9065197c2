# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Small shared helpers."""

from __future__ import annotations

from .bool_utils import coerce_bool_literal, parse_allow_flag

__all__ = ["coerce_bool_literal", "parse_allow_flag"]
