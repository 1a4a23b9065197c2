# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typer application factory with alphabetically sorted option help."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import typer
from click.core import Context, Parameter
from click.formatting import HelpFormatter
from typer.core import TyperCommand

CommandCallback = TypeVar("CommandCallback", bound=Callable[..., Any])


@dataclass(frozen=True, slots=True)
class TyperAppConfig:
    """Construction options for a Typer application."""

    help_text: str
    name: str | None = None
    add_completion: bool = False
    no_args_is_help: bool = False


def _sort_key(param: Parameter) -> str:
    """Return the long option name (or the parameter name) without dashes."""

    names = [*getattr(param, "opts", ()), *getattr(param, "secondary_opts", ())]
    long_names = [name for name in names if name.startswith("--")]
    chosen = long_names[0] if long_names else (names[0] if names else param.name or "")
    return chosen.lstrip("-").lower()


class SortedTyperCommand(TyperCommand):
    """Command whose help lists arguments first, then options sorted by name."""

    def format_options(self, ctx: Context, formatter: HelpFormatter) -> None:
        params = self.get_params(ctx)
        arguments = [param for param in params if param.param_type_name == "argument"]
        options = sorted((param for param in params if param.param_type_name != "argument"), key=_sort_key)
        for title, group in (("Arguments", arguments), ("Options", options)):
            records = [record for param in group if (record := param.get_help_record(ctx)) is not None]
            if records:
                with formatter.section(title):
                    formatter.write_dl(records)


class SortedTyper(typer.Typer):
    """Typer application registering :class:`SortedTyperCommand` commands."""

    def command(
        self,
        name: str | None = None,
        *,
        cls: type[TyperCommand] | None = None,
        **kwargs: Any,
    ) -> Callable[[CommandCallback], CommandCallback]:
        return super().command(name, cls=cls or SortedTyperCommand, **kwargs)


def create_typer(*, config: TyperAppConfig) -> SortedTyper:
    """Return a :class:`SortedTyper` built from ``config``."""

    return SortedTyper(
        name=config.name,
        help=config.help_text,
        add_completion=config.add_completion,
        no_args_is_help=config.no_args_is_help,
    )


__all__ = ["SortedTyper", "SortedTyperCommand", "TyperAppConfig", "create_typer"]
