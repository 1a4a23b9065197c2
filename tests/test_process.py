# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the subprocess invoker."""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path

import pytest

from ghannotate.core.errors import SpawnError
from ghannotate.core.runtime import InvokerOptions, ProcessInvoker, Stream


def _python(code: str) -> tuple[str, list[str]]:
    return sys.executable, ["-c", code]


def test_invoker_captures_both_streams_in_per_stream_order() -> None:
    command, args = _python(
        "import sys\n"
        "for i in range(3):\n"
        "    print(f'out {i}', flush=True)\n"
        "    print(f'err {i}', file=sys.stderr, flush=True)\n"
        "sys.exit(3)\n",
    )
    process = ProcessInvoker().start(command, args)

    lines = list(process.lines())
    returncode = process.wait()

    assert returncode == 3
    stdout = [line.text for line in lines if line.stream is Stream.STDOUT]
    stderr = [line.text for line in lines if line.stream is Stream.STDERR]
    assert stdout == ["out 0", "out 1", "out 2"]
    assert stderr == ["err 0", "err 1", "err 2"]
    assert not any(line.partial for line in lines)


def test_invoker_flags_trailing_partial_line() -> None:
    command, args = _python("import sys; sys.stdout.write('complete\\nno newline')")
    process = ProcessInvoker().start(command, args)

    lines = list(process.lines())
    process.wait()

    assert [(line.text, line.partial) for line in lines] == [("complete", False), ("no newline", True)]


def test_invoker_reports_missing_executable() -> None:
    with pytest.raises(SpawnError) as excinfo:
        ProcessInvoker().start("ghannotate-definitely-missing-tool", ["--version"])

    assert excinfo.value.exit_code == 127
    assert excinfo.value.command[0] == "ghannotate-definitely-missing-tool"


def test_invoker_honours_cwd_and_env(tmp_path: Path) -> None:
    command, args = _python("import os; print(os.getcwd()); print(os.environ['GHANNOTATE_PROBE'])")
    invoker = ProcessInvoker(InvokerOptions(cwd=tmp_path, env={"GHANNOTATE_PROBE": "42"}))
    process = invoker.start(command, args)

    texts = [line.text for line in process.lines()]
    process.wait()

    assert Path(texts[0]).resolve() == tmp_path.resolve()
    assert texts[1] == "42"


def test_invoker_output_flows_through_small_queue() -> None:
    command, args = _python("for i in range(500): print(i)")
    process = ProcessInvoker(InvokerOptions(queue_size=2)).start(command, args)

    texts = [line.text for line in process.lines()]

    assert process.wait() == 0
    assert texts == [str(i) for i in range(500)]


@pytest.mark.skipif(os.name != "posix", reason="process groups are POSIX only")
def test_terminate_escalates_when_sigterm_is_ignored() -> None:
    command, args = _python(
        "import signal, time\n"
        "signal.signal(signal.SIGTERM, signal.SIG_IGN)\n"
        "print('ready', flush=True)\n"
        "time.sleep(60)\n",
    )
    process = ProcessInvoker().start(command, args)
    lines = process.lines()
    assert next(lines).text == "ready"

    started = time.monotonic()
    process.terminate(grace=0.2)
    returncode = process.wait()

    assert returncode != 0
    assert time.monotonic() - started < 10
    assert list(lines) == []
