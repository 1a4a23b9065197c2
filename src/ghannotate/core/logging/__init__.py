# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared logging helpers for user-facing output and debug tracing."""

from __future__ import annotations

from .public import (
    PACKAGE_LOGGER,
    StatusLevel,
    configure_debug_logging,
    emoji,
    fail,
    info,
    ok,
    status,
    warn,
)

__all__ = [
    "PACKAGE_LOGGER",
    "StatusLevel",
    "configure_debug_logging",
    "emoji",
    "fail",
    "info",
    "ok",
    "status",
    "warn",
]
