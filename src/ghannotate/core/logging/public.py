# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Status lines for the person reading the CI log, plus opt-in debug tracing."""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Final

from rich.text import Text

from .console import detect_tty, get_console_manager

PACKAGE_LOGGER: Final[str] = "ghannotate"
_DEBUG_HANDLER_NAME: Final[str] = "ghannotate-debug"


class StatusLevel(Enum):
    """Prefix glyph and colour of a status line."""

    INFO = ("ℹ️ ", "cyan")
    OK = ("✅ ", "green")
    WARN = ("⚠️ ", "yellow")
    FAIL = ("❌ ", "red")

    @property
    def glyph(self) -> str:
        return self.value[0]

    @property
    def style(self) -> str:
        return self.value[1]


def emoji(symbol: str, enable: bool) -> str:
    """Return ``symbol`` when emoji output is enabled, else an empty string."""

    return symbol if enable else ""


def status(level: StatusLevel, msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print ``msg`` on stderr, prefixed and coloured according to ``level``.

    Args:
        level: Kind of status line.
        msg: Message text; Rich markup is not interpreted.
        use_emoji: Whether to prefix the line with the level glyph.
        use_color: Force colour on or off; ``None`` follows the terminal.
    """

    colour = detect_tty() if use_color is None else use_color
    text = Text(f"{emoji(level.glyph, use_emoji)}{msg}")
    if colour:
        text.stylize(level.style)
    get_console_manager().get(color=colour, emoji=use_emoji).print(text)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    status(StatusLevel.INFO, msg, use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    status(StatusLevel.OK, msg, use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    status(StatusLevel.WARN, msg, use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    status(StatusLevel.FAIL, msg, use_emoji=use_emoji, use_color=use_color)


def configure_debug_logging() -> logging.Logger:
    """Send records of the ``ghannotate`` logger tree to stderr at DEBUG.

    Calling it again is harmless: the handler is attached only once.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    if any(handler.get_name() == _DEBUG_HANDLER_NAME for handler in logger.handlers):
        return logger
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.set_name(_DEBUG_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("[debug] %(threadName)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger


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
