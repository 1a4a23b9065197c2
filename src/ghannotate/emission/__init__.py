# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Annotation records, transports and the batching emitter."""

from __future__ import annotations

from .emitter import AnnotationEmitter, EmitReport, RetryPolicy
from .records import (
    DEFAULT_BATCH_SIZE,
    AnnotationBatch,
    AnnotationLevel,
    AnnotationRecord,
    BatchEntry,
    build_batches,
    make_batch,
)
from .transports import (
    CHECKS_API_LIMIT,
    ChecksApiTransport,
    MemoryTransport,
    Transport,
    WorkflowCommandTransport,
    format_workflow_command,
)

__all__ = [
    "CHECKS_API_LIMIT",
    "DEFAULT_BATCH_SIZE",
    "AnnotationBatch",
    "AnnotationEmitter",
    "AnnotationLevel",
    "AnnotationRecord",
    "BatchEntry",
    "ChecksApiTransport",
    "EmitReport",
    "MemoryTransport",
    "RetryPolicy",
    "Transport",
    "WorkflowCommandTransport",
    "build_batches",
    "format_workflow_command",
    "make_batch",
]
