# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Launch build tools and stream their output line by line."""

from __future__ import annotations

import logging
import os
import queue
import shutil
import signal

# Bandit: subprocess usage is intentional; the invoker normalises arguments and
# never enables ``shell=True``.
import subprocess  # nosec B404
import threading
import time
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import IO, Final

from ..errors import SpawnError

LOGGER = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE: Final[int] = 1024
DEFAULT_TERMINATE_GRACE: Final[float] = 5.0
_POSIX: Final[bool] = os.name == "posix"


class Stream(str, Enum):
    """Name of the child process stream a line was read from."""

    STDOUT = "stdout"
    STDERR = "stderr"


@dataclass(frozen=True, slots=True)
class OutputLine:
    """Single line of tool output.

    ``partial`` marks a trailing fragment that ended without a newline when the
    stream closed.
    """

    stream: Stream
    text: str
    partial: bool = False


@dataclass(slots=True)
class InvokerOptions:
    """Options controlling how the build tool is spawned."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    queue_size: int = DEFAULT_QUEUE_SIZE
    encoding: str = "utf-8"


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Normalise the subprocess argument sequence.

    Args:
        args: Raw command arguments supplied by the caller.

    Returns:
        list[str]: Argument list whose head is an absolute executable path.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If the executable cannot be located on ``PATH``.
    """

    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def _pump(pipe: IO[bytes], stream: Stream, sink: queue.Queue[OutputLine | None], encoding: str) -> None:
    """Copy ``pipe`` into ``sink`` line by line, then post an end marker.

    ``sink.put`` blocks while the queue is full, which in turn stops draining
    the pipe and makes the child wait on its own writes.
    """

    try:
        for raw in iter(pipe.readline, b""):
            partial = not raw.endswith(b"\n")
            text = raw.decode(encoding, errors="replace").rstrip("\r\n")
            sink.put(OutputLine(stream=stream, text=text, partial=partial))
    finally:
        pipe.close()
        sink.put(None)


@dataclass(slots=True)
class RunningProcess:
    """Handle on a spawned build tool and the reader threads draining it."""

    command: tuple[str, ...]
    popen: subprocess.Popen[bytes]
    lines_queue: queue.Queue[OutputLine | None]
    readers: tuple[threading.Thread, ...]
    started: float = field(default_factory=time.monotonic)

    @property
    def pid(self) -> int:
        """Return the operating-system process identifier."""

        return self.popen.pid

    @property
    def elapsed(self) -> float:
        """Return the seconds elapsed since the process was spawned."""

        return time.monotonic() - self.started

    def lines(self) -> Iterator[OutputLine]:
        """Yield merged stdout/stderr lines until both streams are closed.

        Only one consumer may iterate; the generator is not restartable.
        """

        remaining = len(self.readers)
        while remaining:
            item = self.lines_queue.get()
            if item is None:
                remaining -= 1
                continue
            yield item

    def poll_exit(self, timeout: float) -> int | None:
        """Wait up to ``timeout`` seconds and return the exit status when available."""

        try:
            return self.popen.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            return None

    def wait(self) -> int:
        """Block until the process exits and every reader has drained its pipe."""

        returncode = self.popen.wait()
        for reader in self.readers:
            reader.join()
        return returncode

    def terminate(self, grace: float = DEFAULT_TERMINATE_GRACE) -> None:
        """Stop the process (and its process group on POSIX).

        Sends ``SIGTERM`` first and escalates to ``SIGKILL`` when the process has
        not exited after ``grace`` seconds.
        """

        if self.popen.poll() is not None:
            return
        LOGGER.debug("terminating pid=%s", self.popen.pid)
        self._signal(signal.SIGTERM)
        try:
            self.popen.wait(timeout=grace)
        except subprocess.TimeoutExpired:
            LOGGER.debug("pid=%s ignored SIGTERM; killing", self.popen.pid)
            self._signal(signal.SIGKILL if _POSIX else signal.SIGTERM)
            self.popen.wait()

    def _signal(self, sig: signal.Signals) -> None:
        if _POSIX:
            try:
                os.killpg(self.popen.pid, sig)
            except ProcessLookupError:
                return
        elif sig == signal.SIGTERM:
            self.popen.terminate()
        else:
            self.popen.kill()


class ProcessInvoker:
    """Spawn build tools with both output streams captured incrementally."""

    def __init__(self, options: InvokerOptions | None = None) -> None:
        self.options = options or InvokerOptions()

    def start(self, command: str, args: Sequence[str] = ()) -> RunningProcess:
        """Spawn ``command`` with ``args`` and start draining its output.

        Args:
            command: Executable name or absolute path.
            args: Ordered arguments passed to the executable.

        Returns:
            RunningProcess: Handle exposing the merged line stream and exit status.

        Raises:
            SpawnError: If the executable cannot be found or launched.
        """

        requested = (command, *args)
        try:
            normalized = _normalize_args(requested)
        except (FileNotFoundError, ValueError) as exc:
            raise SpawnError(requested, str(exc)) from exc

        env = None
        if self.options.env:
            env = os.environ.copy()
            env.update(self.options.env)

        try:
            # Bandit: the argument vector is passed directly without a shell.
            popen = subprocess.Popen(  # nosec B603
                normalized,
                cwd=str(self.options.cwd) if self.options.cwd is not None else None,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=_POSIX,
            )
        except OSError as exc:
            raise SpawnError(requested, exc.strerror or str(exc)) from exc

        LOGGER.debug("spawned pid=%s command=%s", popen.pid, " ".join(normalized))
        sink: queue.Queue[OutputLine | None] = queue.Queue(maxsize=self.options.queue_size)
        readers = tuple(
            threading.Thread(
                target=_pump,
                args=(pipe, stream, sink, self.options.encoding),
                name=f"ghannotate-{stream.value}-reader",
                daemon=True,
            )
            for pipe, stream in ((popen.stdout, Stream.STDOUT), (popen.stderr, Stream.STDERR))
            if pipe is not None
        )
        for reader in readers:
            reader.start()
        return RunningProcess(
            command=tuple(normalized),
            popen=popen,
            lines_queue=sink,
            readers=readers,
        )


__all__ = [
    "InvokerOptions",
    "OutputLine",
    "ProcessInvoker",
    "RunningProcess",
    "Stream",
]
