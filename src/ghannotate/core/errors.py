# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by the runner components."""

from __future__ import annotations

from collections.abc import Sequence


class GhAnnotateError(RuntimeError):
    """Base class for errors raised by ghannotate."""


class ConfigError(GhAnnotateError):
    """Raised when configuration input is invalid."""


class RunStateError(GhAnnotateError):
    """Raised when a run or policy state transition is attempted out of order."""


class SpawnError(GhAnnotateError):
    """Raised when the build tool executable cannot be found or launched."""

    exit_code = 127

    def __init__(self, command: Sequence[str], reason: str) -> None:
        """Initialise the error with the offending command.

        Args:
            command: Command (executable followed by arguments) that failed to start.
            reason: Human-readable explanation of the failure.
        """

        head = command[0] if command else "<empty>"
        super().__init__(f"Unable to launch '{head}': {reason}")
        self.command = tuple(command)
        self.reason = reason


class ParseWarning(GhAnnotateError):
    """Raised by a grammar when it recognises a line it cannot turn into a diagnostic."""

    def __init__(self, grammar: str, line: str, reason: str) -> None:
        """Initialise the warning with the offending line.

        Args:
            grammar: Name of the grammar that rejected the line.
            line: Raw output line.
            reason: Why the line could not be converted.
        """

        super().__init__(f"[{grammar}] {reason}: {line!r}")
        self.grammar = grammar
        self.line = line
        self.reason = reason


class TransportError(GhAnnotateError):
    """Raised by annotation transports when a request is rejected."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class TransientTransportError(TransportError):
    """Transport failure that may succeed when retried."""


class EmitError(GhAnnotateError):
    """Raised (and recorded) when a batch could not be delivered."""

    def __init__(self, sequence: int, attempts: int, cause: BaseException) -> None:
        """Initialise the error with the failed batch metadata.

        Args:
            sequence: Sequence number of the batch that failed.
            attempts: Number of delivery attempts performed.
            cause: Last transport error observed.
        """

        super().__init__(f"Batch #{sequence} not delivered after {attempts} attempt(s): {cause}")
        self.sequence = sequence
        self.attempts = attempts
        self.cause = cause


class PolicyViolation(GhAnnotateError):
    """Describe why the exit policy decided the run failed."""

    def __init__(self, reason: str, *, exit_code: int = 1) -> None:
        super().__init__(reason)
        self.reason = reason
        self.exit_code = exit_code


__all__ = [
    "ConfigError",
    "EmitError",
    "GhAnnotateError",
    "ParseWarning",
    "PolicyViolation",
    "RunStateError",
    "SpawnError",
    "TransientTransportError",
    "TransportError",
]
