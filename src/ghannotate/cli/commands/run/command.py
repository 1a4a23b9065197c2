# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI command running a build tool and annotating its diagnostics."""

from __future__ import annotations

import typer

from ....core.errors import ConfigError
from ....core.logging import configure_debug_logging
from ....parsing import build_registry
from ...core.shared import CLIError, build_cli_logger
from .params import (
    ALLOW_WARNINGS_OPTION,
    ARGS_ARGUMENT,
    BATCH_SIZE_OPTION,
    CMD_OPTION,
    CONFIG_OPTION,
    DEBUG_OPTION,
    ECHO_OPTION,
    EMITTER_OPTION,
    EMOJI_OPTION,
    EXIT_USAGE,
    GRAMMAR_OPTION,
    LIST_GRAMMARS_OPTION,
    MAX_RETRIES_OPTION,
    PRESET_OPTION,
    ROOT_OPTION,
    SUMMARY_OPTION,
    TIMEOUT_OPTION,
    build_run_options,
)
from .services import execute_run, load_run_config, render_grammar_listing, report_decision

CONTEXT_SETTINGS = {"allow_interspersed_args": False}


def run_command(
    args: ARGS_ARGUMENT = None,
    cmd: CMD_OPTION = None,
    preset: PRESET_OPTION = None,
    allow_warnings: ALLOW_WARNINGS_OPTION = None,
    grammar: GRAMMAR_OPTION = None,
    emitter: EMITTER_OPTION = None,
    batch_size: BATCH_SIZE_OPTION = None,
    max_retries: MAX_RETRIES_OPTION = None,
    timeout: TIMEOUT_OPTION = None,
    summary: SUMMARY_OPTION = None,
    config: CONFIG_OPTION = None,
    root: ROOT_OPTION = None,
    echo: ECHO_OPTION = None,
    list_grammars: LIST_GRAMMARS_OPTION = False,
    debug: DEBUG_OPTION = False,
    emoji: EMOJI_OPTION = True,
) -> None:
    """Run a build tool and turn its diagnostics into annotations.

    Raises:
        typer.Exit: Always raised to terminate the command with an exit status.
    """

    logger = build_cli_logger(emoji=emoji, debug=debug)
    if debug:
        configure_debug_logging()
    try:
        options = build_run_options(
            root=root,
            config_file=config,
            command=cmd,
            args=args,
            preset=preset,
            allow_warnings=allow_warnings,
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
        runner_config = load_run_config(options)
        if options.list_grammars:
            try:
                registry = build_registry(runner_config.custom_grammars)
            except ConfigError as exc:
                raise CLIError(str(exc), exit_code=EXIT_USAGE) from exc
            for line in render_grammar_listing(registry):
                logger.echo(line)
            raise typer.Exit(code=0)
        summary_result = execute_run(runner_config, root=options.root, logger=logger)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    report_decision(summary_result, logger=logger)
    raise typer.Exit(code=summary_result.decision.exit_code)


__all__ = ["CONTEXT_SETTINGS", "run_command"]
