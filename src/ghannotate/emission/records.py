# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Annotation records and bounded batches."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.models import Diagnostic
from ..core.severity import Severity

DEFAULT_BATCH_SIZE: Final[int] = 10


class AnnotationLevel(str, Enum):
    """Annotation levels understood by the GitHub Checks API."""

    NOTICE = "notice"
    WARNING = "warning"
    FAILURE = "failure"


_LEVELS: Final[dict[Severity, AnnotationLevel]] = {
    Severity.ERROR: AnnotationLevel.FAILURE,
    Severity.WARNING: AnnotationLevel.WARNING,
    Severity.NOTE: AnnotationLevel.NOTICE,
}


class AnnotationRecord(BaseModel):
    """Platform-facing rendering of a :class:`Diagnostic`."""

    model_config = ConfigDict(frozen=True)

    path: str
    start_line: int
    end_line: int
    start_column: int | None = None
    end_column: int | None = None
    annotation_level: AnnotationLevel
    message: str
    title: str | None = None
    raw_details: str | None = None

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> AnnotationRecord:
        """Map ``diagnostic`` onto the annotation schema."""

        title = diagnostic.title
        if title is None and diagnostic.code:
            title = diagnostic.code
        return cls(
            path=diagnostic.file,
            start_line=diagnostic.line,
            end_line=diagnostic.end_line or diagnostic.line,
            start_column=diagnostic.column,
            end_column=diagnostic.end_column,
            annotation_level=_LEVELS[diagnostic.severity],
            message=diagnostic.message.strip(),
            title=title,
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON object sent to the Checks API.

        Columns are only accepted by the API for single-line annotations.
        """

        payload = self.model_dump(mode="json", exclude_none=True)
        if self.start_line != self.end_line:
            payload.pop("start_column", None)
            payload.pop("end_column", None)
        return payload


class BatchEntry(BaseModel):
    """Pair a diagnostic with the record derived from it."""

    model_config = ConfigDict(frozen=True)

    diagnostic: Diagnostic
    record: AnnotationRecord


class AnnotationBatch(BaseModel):
    """Ordered group of annotations delivered in one outbound call."""

    model_config = ConfigDict(frozen=True)

    sequence: int = Field(ge=0)
    limit: int = Field(ge=1)
    entries: tuple[BatchEntry, ...]

    @model_validator(mode="after")
    def _check_bound(self) -> AnnotationBatch:
        """Reject empty batches and batches above ``limit``."""

        if not self.entries:
            raise ValueError("annotation batches must not be empty")
        if len(self.entries) > self.limit:
            raise ValueError(f"batch of {len(self.entries)} exceeds the limit of {self.limit}")
        return self

    @property
    def records(self) -> tuple[AnnotationRecord, ...]:
        return tuple(entry.record for entry in self.entries)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(entry.diagnostic for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def make_batch(sequence: int, limit: int, diagnostics: Iterable[Diagnostic]) -> AnnotationBatch:
    """Build a batch from ``diagnostics`` (at most ``limit`` of them)."""

    entries = tuple(
        BatchEntry(diagnostic=diagnostic, record=AnnotationRecord.from_diagnostic(diagnostic))
        for diagnostic in diagnostics
    )
    return AnnotationBatch(sequence=sequence, limit=limit, entries=entries)


def build_batches(diagnostics: Iterable[Diagnostic], *, limit: int, start: int = 0) -> Iterator[AnnotationBatch]:
    """Split ``diagnostics`` into consecutive batches of at most ``limit`` entries."""

    if limit < 1:
        raise ValueError("batch limit must be at least 1")
    pending: list[Diagnostic] = []
    sequence = start
    for diagnostic in diagnostics:
        pending.append(diagnostic)
        if len(pending) == limit:
            yield make_batch(sequence, limit, pending)
            sequence += 1
            pending = []
    if pending:
        yield make_batch(sequence, limit, pending)


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "AnnotationBatch",
    "AnnotationLevel",
    "AnnotationRecord",
    "BatchEntry",
    "build_batches",
    "make_batch",
]
