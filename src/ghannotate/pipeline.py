# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Wire the invoker, parser and emitter workers together.

Reader threads feed a bounded line queue, a parser worker turns lines into
diagnostics and pushes them onto a second bounded queue, and an emitter worker
delivers them. On cancellation the subprocess is terminated first; the queues
are then drained so every diagnostic parsed so far is still emitted.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from .core.models import Diagnostic, RunResult
from .core.runtime.process import DEFAULT_TERMINATE_GRACE, ProcessInvoker, RunningProcess
from .emission.emitter import AnnotationEmitter, EmitReport
from .parsing.parser import DiagnosticParser

LOGGER = logging.getLogger(__name__)

DEFAULT_DIAGNOSTIC_QUEUE_SIZE: Final[int] = 256
_POLL_INTERVAL: Final[float] = 0.1


@dataclass(slots=True)
class PipelineOptions:
    """Tuning knobs for the worker pipeline."""

    diagnostic_queue_size: int = DEFAULT_DIAGNOSTIC_QUEUE_SIZE
    timeout: float | None = None
    terminate_grace: float = DEFAULT_TERMINATE_GRACE


@dataclass(slots=True)
class PipelineOutcome:
    """Completed run plus the emission report (``None`` without an emitter)."""

    result: RunResult
    report: EmitReport | None


class AnnotationPipeline:
    """Run a build tool and annotate its diagnostics while it is still running."""

    def __init__(
        self,
        invoker: ProcessInvoker,
        parser: DiagnosticParser,
        emitter: AnnotationEmitter | None = None,
        *,
        options: PipelineOptions | None = None,
    ) -> None:
        self._invoker = invoker
        self._parser = parser
        self._emitter = emitter
        self._options = options or PipelineOptions()
        self._cancel = threading.Event()
        self._errors: list[BaseException] = []

    def cancel(self) -> None:
        """Request cancellation; safe to call from signal handlers."""

        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def run(self, command: str, args: Sequence[str] = ()) -> PipelineOutcome:
        """Run ``command`` to completion (or cancellation) and return the outcome.

        Raises:
            SpawnError: If the tool cannot be launched.
        """

        process = self._invoker.start(command, args)
        result = RunResult(command=process.command)
        diagnostics: queue.Queue[Diagnostic | None] | None = None
        workers: list[threading.Thread] = []
        if self._emitter is not None:
            diagnostics = queue.Queue(maxsize=self._options.diagnostic_queue_size)
            workers.append(
                threading.Thread(
                    target=self._emit_worker,
                    args=(self._emitter, diagnostics),
                    name="ghannotate-emitter",
                    daemon=True,
                ),
            )
        workers.append(
            threading.Thread(
                target=self._parse_worker,
                args=(process, result, diagnostics),
                name="ghannotate-parser",
                daemon=True,
            ),
        )
        for worker in workers:
            worker.start()

        returncode, cancelled = self._supervise(process)
        process.wait()
        for worker in reversed(workers):
            worker.join()
        result.record_exit(returncode, duration=process.elapsed, cancelled=cancelled)
        if self._errors:
            raise self._errors[0]
        report = self._emitter.report if self._emitter is not None else None
        LOGGER.debug(
            "run finished returncode=%s cancelled=%s diagnostics=%s",
            returncode,
            cancelled,
            len(result.diagnostics),
        )
        return PipelineOutcome(result=result, report=report)

    def _supervise(self, process: RunningProcess) -> tuple[int, bool]:
        """Wait for the process, terminating it on cancellation or timeout."""

        deadline = None if self._options.timeout is None else time.monotonic() + self._options.timeout
        while True:
            returncode = process.poll_exit(_POLL_INTERVAL)
            if returncode is not None:
                return returncode, False
            timed_out = deadline is not None and time.monotonic() >= deadline
            if self._cancel.is_set() or timed_out:
                LOGGER.debug("cancelling run (timeout=%s)", timed_out)
                self._cancel.set()
                process.terminate(self._options.terminate_grace)
                return process.wait(), True

    def _parse_worker(
        self,
        process: RunningProcess,
        result: RunResult,
        sink: queue.Queue[Diagnostic | None] | None,
    ) -> None:
        lines = process.lines()
        try:
            for diagnostic in self._parser.parse(lines):
                result.add_diagnostic(diagnostic)
                if sink is not None:
                    sink.put(diagnostic)
        except Exception as exc:  # surfaced by run() after the workers are joined
            self._errors.append(exc)
            for _ in lines:
                pass
        finally:
            if sink is not None:
                sink.put(None)

    def _emit_worker(self, emitter: AnnotationEmitter, source: queue.Queue[Diagnostic | None]) -> None:
        failed = False
        while (diagnostic := source.get()) is not None:
            if failed:
                continue
            try:
                emitter.add(diagnostic)
            except Exception as exc:  # surfaced by run() after the workers are joined
                self._errors.append(exc)
                failed = True
        if not failed:
            try:
                emitter.flush()
            except Exception as exc:  # surfaced by run() after the workers are joined
                self._errors.append(exc)


__all__ = ["AnnotationPipeline", "PipelineOptions", "PipelineOutcome"]
