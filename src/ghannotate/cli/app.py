# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point."""

from __future__ import annotations

from .commands import register_commands
from .core.typer_ext import TyperAppConfig, create_typer

app = create_typer(
    config=TyperAppConfig(
        name="ghannotate",
        help_text="Run a build tool and publish its diagnostics as GitHub annotations.",
    ),
)
register_commands(app)


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["app", "main"]
