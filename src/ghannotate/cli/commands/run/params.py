# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Option declarations and the structured options of the run command."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import typer

from ....config import EmitterKind
from ....utils import parse_allow_flag
from ...core.shared import CLIError

EXIT_USAGE = 2

ARGS_ARGUMENT = Annotated[
    list[str] | None,
    typer.Argument(help="Arguments passed to the build tool (place them after '--')."),
]
CMD_OPTION = Annotated[
    str | None,
    typer.Option("--cmd", "-c", help="Executable to run (e.g. cargo, make, gcc)."),
]
PRESET_OPTION = Annotated[
    str | None,
    typer.Option("--preset", "-p", help="Named invocation such as cargo-clippy or cargo-fmt."),
]
ALLOW_WARNINGS_OPTION = Annotated[
    str | None,
    typer.Option(
        "--allow-warnings",
        metavar="BOOL",
        help="Whether warnings are tolerated (true/false, yes/no, 1/0).",
    ),
]
GRAMMAR_OPTION = Annotated[
    str | None,
    typer.Option("--grammar", "-g", help="Grammar used to parse the tool's output."),
]
EMITTER_OPTION = Annotated[
    EmitterKind | None,
    typer.Option("--emitter", "-e", case_sensitive=False, help="Annotation transport."),
]
BATCH_SIZE_OPTION = Annotated[
    int | None,
    typer.Option("--batch-size", min=1, help="Maximum annotations per batch."),
]
MAX_RETRIES_OPTION = Annotated[
    int | None,
    typer.Option("--max-retries", min=0, help="Retries for transient delivery failures."),
]
TIMEOUT_OPTION = Annotated[
    float | None,
    typer.Option("--timeout", help="Terminate the tool after this many seconds."),
]
SUMMARY_OPTION = Annotated[
    Path | None,
    typer.Option("--summary", help="Append a Markdown job summary to this file."),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", help="Additional TOML configuration file."),
]
ROOT_OPTION = Annotated[
    Path | None,
    typer.Option("--root", "-r", help="Working directory for the tool and config lookup."),
]
ECHO_OPTION = Annotated[
    bool | None,
    typer.Option("--echo/--no-echo", help="Mirror the tool's stderr while it runs."),
]
LIST_GRAMMARS_OPTION = Annotated[
    bool,
    typer.Option("--list-grammars", help="List the available grammars and exit."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Stream internal debug logging to stderr."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]


@dataclass(slots=True)
class RunCLIOptions:
    """Capture CLI overrides supplied to the run command."""

    root: Path
    config_file: Path | None
    command: str | None = None
    args: tuple[str, ...] = ()
    preset: str | None = None
    allow_warnings: bool | None = None
    grammar: str | None = None
    emitter: EmitterKind | None = None
    batch_size: int | None = None
    max_retries: int | None = None
    timeout: float | None = None
    summary: Path | None = None
    echo: bool | None = None
    list_grammars: bool = False
    debug: bool = False
    emoji: bool = True

    def overrides(self) -> dict[str, Any]:
        """Return dotted configuration keys set explicitly on the command line."""

        values: dict[str, Any] = {
            "command": self.command,
            "preset": self.preset,
            "allow_warnings": self.allow_warnings,
            "grammar": self.grammar,
            "emitter": self.emitter.value if self.emitter is not None else None,
            "batch_size": self.batch_size,
            "max_retries": self.max_retries,
            "timeout": self.timeout,
            "summary_path": self.summary,
            "echo_output": self.echo,
        }
        if self.args:
            values["args"] = list(self.args)
        return {key: value for key, value in values.items() if value is not None}


def build_run_options(
    *,
    root: Path | None,
    config_file: Path | None,
    command: str | None,
    args: Sequence[str] | None,
    preset: str | None,
    allow_warnings: str | None,
    grammar: str | None,
    emitter: EmitterKind | None,
    batch_size: int | None,
    max_retries: int | None,
    timeout: float | None,
    summary: Path | None,
    echo: bool | None,
    list_grammars: bool,
    debug: bool,
    emoji: bool,
) -> RunCLIOptions:
    """Construct :class:`RunCLIOptions` from raw Typer parameters.

    Raises:
        CLIError: If ``allow_warnings`` is not a recognised boolean literal.
    """

    try:
        allow = parse_allow_flag(allow_warnings)
    except ValueError as exc:
        raise CLIError(f"--allow-warnings: {exc}", exit_code=EXIT_USAGE) from exc
    resolved_root = (root or Path.cwd()).resolve()
    return RunCLIOptions(
        root=resolved_root,
        config_file=config_file,
        command=command,
        args=tuple(args or ()),
        preset=preset,
        allow_warnings=allow,
        grammar=grammar,
        emitter=emitter,
        batch_size=batch_size,
        max_retries=max_retries,
        timeout=timeout,
        summary=summary,
        echo=echo,
        list_grammars=list_grammars,
        debug=debug,
        emoji=emoji,
    )


__all__ = [
    "ALLOW_WARNINGS_OPTION",
    "ARGS_ARGUMENT",
    "BATCH_SIZE_OPTION",
    "CMD_OPTION",
    "CONFIG_OPTION",
    "DEBUG_OPTION",
    "ECHO_OPTION",
    "EMITTER_OPTION",
    "EMOJI_OPTION",
    "EXIT_USAGE",
    "GRAMMAR_OPTION",
    "LIST_GRAMMARS_OPTION",
    "MAX_RETRIES_OPTION",
    "PRESET_OPTION",
    "ROOT_OPTION",
    "SUMMARY_OPTION",
    "TIMEOUT_OPTION",
    "RunCLIOptions",
    "build_run_options",
]
