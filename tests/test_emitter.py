# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for batching, retries and deduplication in the annotation emitter."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from pydantic import ValidationError

from ghannotate.core.errors import TransientTransportError, TransportError
from ghannotate.emission import (
    AnnotationBatch,
    AnnotationEmitter,
    MemoryTransport,
    RetryPolicy,
    build_batches,
    make_batch,
)


@dataclass
class FlakyTransport:
    """Fail a configurable number of times per batch before succeeding."""

    failures_per_batch: dict[int, int]
    error: type[TransportError] = TransientTransportError
    name: str = "flaky"
    limit: int = 50
    attempts: dict[int, int] = field(default_factory=dict)
    delivered: list[AnnotationBatch] = field(default_factory=list)

    def send(self, batch: AnnotationBatch) -> None:
        count = self.attempts.get(batch.sequence, 0) + 1
        self.attempts[batch.sequence] = count
        if count <= self.failures_per_batch.get(batch.sequence, 0):
            raise self.error(f"attempt {count} failed")
        self.delivered.append(batch)

    def close(self, *, success: bool) -> None:
        del success


def _diagnostics(make_diagnostic, count: int):
    return [make_diagnostic(line=index + 1) for index in range(count)]


def test_batches_never_exceed_limit(make_diagnostic) -> None:
    transport = MemoryTransport()
    emitter = AnnotationEmitter(transport, batch_size=3)

    report = emitter.emit(_diagnostics(make_diagnostic, 7))

    assert [len(batch) for batch in transport.batches] == [3, 3, 1]
    assert [batch.sequence for batch in transport.batches] == [0, 1, 2]
    assert report.annotated == 7
    assert report.ok


def test_batch_size_is_capped_by_transport_limit(make_diagnostic) -> None:
    transport = MemoryTransport(limit=2)
    emitter = AnnotationEmitter(transport, batch_size=10)

    emitter.emit(_diagnostics(make_diagnostic, 5))

    assert emitter.limit == 2
    assert max(len(batch) for batch in transport.batches) == 2


def test_oversized_or_empty_batches_are_rejected(make_diagnostic) -> None:
    with pytest.raises(ValidationError):
        make_batch(0, 2, _diagnostics(make_diagnostic, 3))
    with pytest.raises(ValidationError):
        make_batch(0, 2, [])


def test_build_batches_splits_in_order(make_diagnostic) -> None:
    batches = list(build_batches(_diagnostics(make_diagnostic, 5), limit=2, start=4))

    assert [batch.sequence for batch in batches] == [4, 5, 6]
    assert [diagnostic.line for batch in batches for diagnostic in batch.diagnostics] == [1, 2, 3, 4, 5]


def test_transient_failures_are_retried_and_recorded_once(make_diagnostic) -> None:
    transport = FlakyTransport(failures_per_batch={0: 3})
    delays: list[float] = []
    emitter = AnnotationEmitter(
        transport,
        batch_size=10,
        retry=RetryPolicy(max_retries=3, backoff_base=0.5, backoff_max=30.0),
        sleep=delays.append,
    )

    report = emitter.emit(_diagnostics(make_diagnostic, 2))

    assert transport.attempts[0] == 4
    assert delays == [0.5, 1.0, 2.0]
    assert len(report.delivered) == 1
    assert report.annotated == 2
    assert report.ok


def test_exhausted_batch_is_reported_and_later_batches_continue(make_diagnostic) -> None:
    transport = FlakyTransport(failures_per_batch={0: 10})
    emitter = AnnotationEmitter(transport, batch_size=1, retry=RetryPolicy(max_retries=2), sleep=lambda _: None)

    report = emitter.emit(_diagnostics(make_diagnostic, 2))

    assert transport.attempts == {0: 3, 1: 1}
    assert [batch.sequence for batch in report.delivered] == [1]
    (failure,) = report.failures
    assert failure.sequence == 0
    assert failure.attempts == 3
    assert not report.ok


def test_permanent_failures_are_not_retried(make_diagnostic) -> None:
    transport = FlakyTransport(failures_per_batch={0: 1}, error=TransportError)
    emitter = AnnotationEmitter(transport, retry=RetryPolicy(max_retries=5), sleep=lambda _: None)

    report = emitter.emit(_diagnostics(make_diagnostic, 1))

    assert transport.attempts == {0: 1}
    assert report.failures[0].attempts == 1
    assert isinstance(report.failures[0].cause, TransportError)


def test_duplicates_are_emitted_once(make_diagnostic) -> None:
    transport = MemoryTransport()
    emitter = AnnotationEmitter(transport)
    diagnostic = make_diagnostic()

    report = emitter.emit([diagnostic, make_diagnostic(line=2), diagnostic])

    assert len(transport.records) == 2
    assert report.duplicates == 1


def test_backoff_is_capped() -> None:
    policy = RetryPolicy(backoff_base=1.0, backoff_max=5.0)

    assert [policy.delay(attempt) for attempt in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]


def test_invalid_batch_size_is_rejected() -> None:
    with pytest.raises(ValueError, match="batch_size"):
        AnnotationEmitter(MemoryTransport(), batch_size=0)
