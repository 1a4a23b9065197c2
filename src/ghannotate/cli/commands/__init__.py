# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Command registration for the ghannotate CLI."""

from __future__ import annotations

from ..core.typer_ext import SortedTyper
from .run import CONTEXT_SETTINGS, run_command


def register_commands(app: SortedTyper) -> None:
    """Attach every command to ``app``."""

    app.command(context_settings=CONTEXT_SETTINGS)(run_command)


__all__ = ["register_commands"]
