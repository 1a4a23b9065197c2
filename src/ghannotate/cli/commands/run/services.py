# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helper services for the run command."""

from __future__ import annotations

import signal
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from types import FrameType

from ....config import EmitterKind, RunnerConfig, default_sources, load_config
from ....core.errors import ConfigError, GhAnnotateError, SpawnError, TransportError
from ....core.runtime import InvokerOptions, ProcessInvoker
from ....core.severity import Severity, build_severity_rules
from ....emission import (
    AnnotationEmitter,
    ChecksApiTransport,
    MemoryTransport,
    RetryPolicy,
    Transport,
    WorkflowCommandTransport,
)
from ....parsing import DiagnosticParser, GrammarRegistry, build_registry
from ....pipeline import AnnotationPipeline, PipelineOptions, PipelineOutcome
from ....policy import ExitPolicyEvaluator, PolicyDecision
from ....presets import get_preset
from ....reporting import write_summary
from ...core.shared import CLIError, CLILogger
from .params import EXIT_USAGE, RunCLIOptions

_CANCEL_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@dataclass(slots=True)
class RunInvocation:
    """Executable, arguments and grammar name resolved from configuration."""

    command: str
    args: list[str]
    grammar: str


@dataclass(slots=True)
class RunSummary:
    """Everything the command needs to report after a run."""

    outcome: PipelineOutcome
    decision: PolicyDecision


def load_run_config(options: RunCLIOptions, *, env: Mapping[str, str] | None = None) -> RunnerConfig:
    """Return the merged configuration for ``options``.

    Raises:
        CLIError: If any configuration layer is invalid.
    """

    sources = default_sources(
        options.root,
        config_file=options.config_file,
        env=env,
        overrides=options.overrides(),
    )
    try:
        return load_config(sources)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=EXIT_USAGE) from exc


def resolve_invocation(config: RunnerConfig) -> RunInvocation:
    """Return what to spawn, from a preset or an explicit command.

    Raises:
        ConfigError: If neither a command nor a preset is configured, or the
            preset is unknown.
    """

    if config.command:
        return RunInvocation(config.command, list(config.args), config.grammar or "default")
    if config.preset:
        preset = get_preset(config.preset)
        command, args = preset.resolve(config.cargo, config.args)
        return RunInvocation(command, args, config.grammar or preset.grammar)
    raise ConfigError("No command to run: pass --cmd or --preset")


def build_transport(config: RunnerConfig) -> Transport:
    """Return the transport selected by ``config.emitter``.

    Raises:
        ConfigError: If the Checks API transport lacks credentials.
    """

    if config.emitter is EmitterKind.NONE:
        return MemoryTransport()
    if config.emitter is EmitterKind.WORKFLOW:
        return WorkflowCommandTransport()
    github = config.github
    missing = github.missing_for_checks()
    if missing:
        raise ConfigError(f"Checks API emitter requires: {', '.join(missing)}")
    token = github.token.get_secret_value() if github.token is not None else ""
    return ChecksApiTransport(
        token=token,
        repository=github.repository or "",
        head_sha=github.sha or "",
        api_url=github.api_url,
        check_name=github.check_name,
    )


def build_pipeline(
    config: RunnerConfig,
    *,
    root: Path,
    grammar: str,
    transport: Transport,
    registry: GrammarRegistry | None = None,
) -> AnnotationPipeline:
    """Assemble the invoker, parser and emitter described by ``config``."""

    registry = registry or build_registry(config.custom_grammars)
    rules = build_severity_rules(config.severity_rules)
    parser = DiagnosticParser(
        registry.get(grammar),
        severity_rules=rules or None,
        echo=sys.stderr if config.echo_output else None,
    )
    emitter = AnnotationEmitter(
        transport,
        batch_size=config.batch_size,
        retry=RetryPolicy(
            max_retries=config.max_retries,
            backoff_base=config.backoff_base,
            backoff_max=config.backoff_max,
        ),
    )
    invoker = ProcessInvoker(InvokerOptions(cwd=root, queue_size=config.line_queue_size))
    return AnnotationPipeline(
        invoker,
        parser,
        emitter,
        options=PipelineOptions(
            diagnostic_queue_size=config.diagnostic_queue_size,
            timeout=config.timeout,
            terminate_grace=config.terminate_grace,
        ),
    )


@contextmanager
def cancel_on_signals(pipeline: AnnotationPipeline) -> Iterator[None]:
    """Route SIGINT/SIGTERM to :meth:`AnnotationPipeline.cancel` while active.

    Handlers can only be installed from the main thread; elsewhere this is a
    no-op.
    """

    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum: int, frame: FrameType | None) -> None:
        del signum, frame
        pipeline.cancel()

    previous = {signum: signal.signal(signum, _handler) for signum in _CANCEL_SIGNALS}
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def execute_run(config: RunnerConfig, *, root: Path, logger: CLILogger) -> RunSummary:
    """Run the configured tool, annotate its output and decide the exit status.

    Raises:
        CLIError: On configuration problems (exit 2), when the tool cannot be
            launched (exit 127) or when the run aborts on an internal error
            (exit 1).
    """

    try:
        invocation = resolve_invocation(config)
        transport = build_transport(config)
        pipeline = build_pipeline(config, root=root, grammar=invocation.grammar, transport=transport)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=EXIT_USAGE) from exc

    logger.info(f"Running {' '.join([invocation.command, *invocation.args])}")
    logger.debug(f"cmd={invocation.command} grammar={invocation.grammar} emitter={transport.name}")
    try:
        with cancel_on_signals(pipeline):
            outcome = pipeline.run(invocation.command, invocation.args)
    except SpawnError as exc:
        raise CLIError(str(exc), exit_code=SpawnError.exit_code) from exc
    except GhAnnotateError as exc:
        close_transport(transport, success=False, logger=logger)
        raise CLIError(f"Run aborted: {exc}") from exc

    decision = ExitPolicyEvaluator(allow_warnings=config.allow_warnings).complete(outcome.result)
    close_transport(transport, success=decision.ok, logger=logger)
    report_emission(outcome, logger=logger)
    if config.summary_path is not None:
        try:
            write_summary(config.summary_path, outcome.result.diagnostics)
        except OSError as exc:
            logger.warn(f"Unable to write job summary to {config.summary_path}: {exc}")
    return RunSummary(outcome=outcome, decision=decision)


def close_transport(transport: Transport, *, success: bool, logger: CLILogger) -> None:
    """Finalise ``transport``, reporting delivery errors as a warning."""

    try:
        transport.close(success=success)
    except TransportError as exc:
        logger.warn(f"Unable to finalise {transport.name} annotations: {exc}")


def report_emission(outcome: PipelineOutcome, *, logger: CLILogger) -> None:
    """Log delivery failures and the annotation count."""

    report = outcome.report
    if report is None:
        return
    for failure in report.failures:
        logger.warn(str(failure))
    logger.debug(
        f"annotated={report.annotated} duplicates={report.duplicates} failures={len(report.failures)}",
    )


def report_decision(summary: RunSummary, *, logger: CLILogger) -> None:
    """Log the final verdict for the run."""

    counts = summary.outcome.result.severity_counts()
    totals = ", ".join(f"{counts[level]} {level.value}(s)" for level in Severity if counts.get(level))
    detail = f" ({totals})" if totals else ""
    if summary.decision.ok:
        logger.ok(f"Run passed{detail}")
        return
    violation = summary.decision.violation
    reason = violation.reason if violation is not None else "run failed"
    logger.fail(f"Run failed: {reason}{detail}")


def render_grammar_listing(registry: GrammarRegistry) -> list[str]:
    """Return one ``name  description`` line per registered grammar."""

    width = max((len(name) for name in registry.names()), default=0)
    return [f"{name.ljust(width)}  {description}".rstrip() for name, description in registry.describe()]


__all__ = [
    "RunInvocation",
    "RunSummary",
    "build_pipeline",
    "build_transport",
    "cancel_on_signals",
    "close_transport",
    "execute_run",
    "load_run_config",
    "render_grammar_listing",
    "report_decision",
    "report_emission",
    "resolve_invocation",
]
