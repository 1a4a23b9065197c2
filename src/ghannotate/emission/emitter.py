# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Batch, deduplicate and deliver annotations with retry and backoff."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Final

from ..core.errors import EmitError, TransientTransportError, TransportError
from ..core.models import Diagnostic
from .records import DEFAULT_BATCH_SIZE, AnnotationBatch, make_batch
from .transports import Transport

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES: Final[int] = 3
DEFAULT_BACKOFF_BASE: Final[float] = 0.5
DEFAULT_BACKOFF_MAX: Final[float] = 30.0


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Exponential backoff schedule applied to transient transport failures."""

    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base: float = DEFAULT_BACKOFF_BASE
    backoff_max: float = DEFAULT_BACKOFF_MAX

    def delay(self, attempt: int) -> float:
        """Return the pause before retry number ``attempt`` (0-based)."""

        return min(self.backoff_base * (2**attempt), self.backoff_max)


@dataclass(slots=True)
class EmitReport:
    """Outcome of an emission pass.

    Delivered batches are recorded as soon as they succeed and are never rolled
    back when a later batch fails.
    """

    delivered: list[AnnotationBatch] = field(default_factory=list)
    failures: list[EmitError] = field(default_factory=list)
    duplicates: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def annotated(self) -> int:
        """Return the number of annotations successfully delivered."""

        return sum(len(batch) for batch in self.delivered)


class AnnotationEmitter:
    """Group diagnostics into bounded batches and deliver them through a transport.

    ``add`` accepts diagnostics one at a time and sends a batch as soon as it is
    full; ``flush`` sends the remainder. A diagnostic already seen in this run
    is skipped.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        batch_size: int | None = None,
        retry: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        requested = batch_size if batch_size is not None else DEFAULT_BATCH_SIZE
        if requested < 1:
            raise ValueError("batch_size must be at least 1")
        self.transport = transport
        self.limit = min(requested, transport.limit)
        self.retry = retry or RetryPolicy()
        self.report = EmitReport()
        self._sleep = sleep
        self._seen: set[Diagnostic] = set()
        self._pending: list[Diagnostic] = []
        self._sequence = 0

    def add(self, diagnostic: Diagnostic) -> None:
        """Queue ``diagnostic`` for delivery, sending a batch once it is full."""

        if diagnostic in self._seen:
            self.report.duplicates += 1
            return
        self._seen.add(diagnostic)
        self._pending.append(diagnostic)
        if len(self._pending) >= self.limit:
            self._send_pending()

    def flush(self) -> EmitReport:
        """Deliver any queued diagnostics and return the report."""

        if self._pending:
            self._send_pending()
        return self.report

    def emit(self, diagnostics: Iterable[Diagnostic]) -> EmitReport:
        """Deliver every diagnostic from ``diagnostics`` and return the report."""

        for diagnostic in diagnostics:
            self.add(diagnostic)
        return self.flush()

    def _send_pending(self) -> None:
        batch = make_batch(self._sequence, self.limit, self._pending)
        self._sequence += 1
        self._pending = []
        self._deliver(batch)

    def _deliver(self, batch: AnnotationBatch) -> None:
        attempts = self.retry.max_retries + 1
        for attempt in range(attempts):
            try:
                self.transport.send(batch)
            except TransientTransportError as exc:
                if attempt + 1 == attempts:
                    self.report.failures.append(EmitError(batch.sequence, attempts, exc))
                    return
                delay = self.retry.delay(attempt)
                LOGGER.debug(
                    "batch=%s attempt=%s/%s failed (%s); retrying in %.2fs",
                    batch.sequence,
                    attempt + 1,
                    attempts,
                    exc,
                    delay,
                )
                self._sleep(delay)
            except TransportError as exc:
                self.report.failures.append(EmitError(batch.sequence, attempt + 1, exc))
                return
            else:
                self.report.delivered.append(batch)
                return


__all__ = [
    "DEFAULT_BACKOFF_BASE",
    "DEFAULT_BACKOFF_MAX",
    "DEFAULT_MAX_RETRIES",
    "AnnotationEmitter",
    "EmitReport",
    "RetryPolicy",
]
