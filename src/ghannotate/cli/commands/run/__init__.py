# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Run command package."""

from __future__ import annotations

from .command import CONTEXT_SETTINGS, run_command

__all__ = ["CONTEXT_SETTINGS", "run_command"]
