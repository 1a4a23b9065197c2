# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich consoles bound to stderr.

stdout belongs to the workflow commands that the Actions runner turns into
annotations, so every human-facing line is printed on stderr.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field

from rich.console import Console


def detect_tty() -> bool:
    """Return ``True`` when stderr is attached to a terminal."""

    stream = sys.stderr
    try:
        return bool(stream is not None and stream.isatty())
    except (AttributeError, ValueError):
        # Closed or replaced streams (pytest capture, CliRunner) behave like files.
        return False


@dataclass(slots=True)
class RichConsoleManager:
    """Hand out one cached stderr :class:`Console` per (colour, emoji, tty) triple."""

    _consoles: dict[tuple[bool, bool, bool], Console] = field(default_factory=dict)

    def get(self, *, color: bool, emoji: bool) -> Console:
        tty = detect_tty()
        key = (color, emoji, tty)
        console = self._consoles.get(key)
        if console is None:
            coloured = color and tty
            console = Console(
                stderr=True,
                color_system="auto" if coloured else None,
                force_terminal=tty,
                no_color=not coloured,
                emoji=emoji,
                highlight=False,
                soft_wrap=True,
            )
            self._consoles[key] = console
        return console


_CONSOLE_MANAGER = RichConsoleManager()


def get_console_manager() -> RichConsoleManager:
    """Return the process-wide console manager."""

    return _CONSOLE_MANAGER


__all__ = ["RichConsoleManager", "detect_tty", "get_console_manager"]
