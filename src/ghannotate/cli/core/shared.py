# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Error type and logger adapter shared by CLI commands."""

from __future__ import annotations

from dataclasses import dataclass

import typer
from rich.console import Console
from rich.text import Text

from ...core.logging import fail as core_fail
from ...core.logging import info as core_info
from ...core.logging import ok as core_ok
from ...core.logging import warn as core_warn


class CLIError(RuntimeError):
    """Failure that should end the command with ``exit_code``."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Bind the status helpers to the emoji preference of one invocation.

    Status lines go to stderr; only :meth:`echo` writes to stdout, for output
    the user asked for explicitly (such as ``--list-grammars``).
    """

    console: Console
    use_emoji: bool
    debug_enabled: bool = False

    def info(self, message: str) -> None:
        core_info(message, use_emoji=self.use_emoji)

    def ok(self, message: str) -> None:
        core_ok(message, use_emoji=self.use_emoji)

    def warn(self, message: str) -> None:
        core_warn(message, use_emoji=self.use_emoji)

    def fail(self, message: str) -> None:
        core_fail(message, use_emoji=self.use_emoji)

    def echo(self, message: str) -> None:
        typer.echo(message)

    def debug(self, message: str) -> None:
        """Print ``message`` dimmed when ``--debug`` is active."""

        if self.debug_enabled:
            self.console.print(Text.assemble(("[debug] ", "bold cyan"), (message, "dim")))


def build_cli_logger(*, emoji: bool, debug: bool = False) -> CLILogger:
    """Return a :class:`CLILogger` with its own stderr console."""

    console = Console(stderr=True, highlight=False)
    return CLILogger(console=console, use_emoji=emoji, debug_enabled=debug)


__all__ = ["CLIError", "CLILogger", "build_cli_logger"]
