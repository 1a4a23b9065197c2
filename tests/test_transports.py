# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for annotation records and transports."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Any

import pytest
import requests

from ghannotate.core.errors import TransientTransportError, TransportError
from ghannotate.core.severity import Severity
from ghannotate.emission import (
    AnnotationEmitter,
    AnnotationLevel,
    AnnotationRecord,
    ChecksApiTransport,
    WorkflowCommandTransport,
    format_workflow_command,
    make_batch,
)


@dataclass
class FakeResponse:
    status_code: int
    body: dict[str, Any] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    raw: str | None = None

    @property
    def content(self) -> bytes:
        if self.raw is not None:
            return self.raw.encode()
        return b"{}" if self.body is not None else b""

    @property
    def text(self) -> str:
        return self.raw if self.raw is not None else str(self.body)

    def json(self) -> dict[str, Any] | None:
        if self.raw is not None:
            raise requests.JSONDecodeError("Expecting value", self.raw, 0)
        return self.body


@dataclass
class FakeSession:
    responses: list[FakeResponse | Exception]
    calls: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    def request(self, method: str, url: str, *, json: dict[str, Any], headers: dict[str, str], timeout: float):
        self.calls.append((method, url, json))
        assert headers["Authorization"] == "Bearer secret"
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _transport(session: FakeSession) -> ChecksApiTransport:
    return ChecksApiTransport(
        token="secret",
        repository="octo/demo",
        head_sha="abc123",
        session=session,  # type: ignore[arg-type]
    )


def test_record_maps_severity_and_falls_back_to_code_title(make_diagnostic) -> None:
    record = AnnotationRecord.from_diagnostic(
        make_diagnostic(severity=Severity.ERROR, code="E0308", column=2, end_column=6, message="bad\n"),
    )

    assert record.annotation_level is AnnotationLevel.FAILURE
    assert record.title == "E0308"
    assert record.message == "bad"
    assert record.end_line == record.start_line == 1
    assert record.to_payload()["start_column"] == 2


def test_record_payload_drops_columns_for_multiline_ranges(make_diagnostic) -> None:
    record = AnnotationRecord.from_diagnostic(make_diagnostic(line=3, end_line=5, column=1, end_column=4))

    payload = record.to_payload()

    assert payload["start_line"] == 3
    assert payload["end_line"] == 5
    assert "start_column" not in payload
    assert "end_column" not in payload


def test_workflow_command_escapes_properties_and_data(make_diagnostic) -> None:
    record = AnnotationRecord.from_diagnostic(
        make_diagnostic(
            severity=Severity.ERROR,
            file="src/a,b.rs",
            line=4,
            column=7,
            title="mismatched: types",
            message="expected `u8`\nfound 100%",
        ),
    )

    command = format_workflow_command(record)

    assert command == (
        "::error file=src/a%2Cb.rs,line=4,col=7,title=mismatched%3A types::expected `u8`%0Afound 100%25"
    )


def test_workflow_transport_writes_one_command_per_record(make_diagnostic) -> None:
    stream = io.StringIO()
    transport = WorkflowCommandTransport(stream=stream)
    batch = make_batch(
        0,
        10,
        [make_diagnostic(severity=Severity.NOTE), make_diagnostic(line=2, end_line=3)],
    )

    transport.send(batch)

    lines = stream.getvalue().splitlines()
    assert lines == [
        "::notice file=src/lib.rs,line=1::something looks off",
        "::warning file=src/lib.rs,line=2,endLine=3::something looks off",
    ]


def test_checks_transport_creates_run_once_and_completes_it(make_diagnostic) -> None:
    session = FakeSession(
        [
            FakeResponse(201, {"id": 7}),
            FakeResponse(200, {"id": 7}),
            FakeResponse(200, {"id": 7}),
            FakeResponse(200, {"id": 7}),
        ],
    )
    transport = _transport(session)

    transport.send(make_batch(0, 50, [make_diagnostic()]))
    transport.send(make_batch(1, 50, [make_diagnostic(line=2)]))
    transport.close(success=False)

    methods = [(method, url) for method, url, _ in session.calls]
    assert methods == [
        ("POST", "https://api.github.com/repos/octo/demo/check-runs"),
        ("PATCH", "https://api.github.com/repos/octo/demo/check-runs/7"),
        ("PATCH", "https://api.github.com/repos/octo/demo/check-runs/7"),
        ("PATCH", "https://api.github.com/repos/octo/demo/check-runs/7"),
    ]
    assert session.calls[0][2]["head_sha"] == "abc123"
    assert session.calls[1][2]["output"]["annotations"][0]["annotation_level"] == "warning"
    assert session.calls[-1][2] == {"status": "completed", "conclusion": "failure"}
    assert transport.annotated == 2


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(502),
        FakeResponse(429),
        FakeResponse(403, headers={"X-RateLimit-Remaining": "0"}),
        requests.ConnectionError("reset"),
        requests.Timeout("slow"),
    ],
)
def test_checks_transport_classifies_transient_failures(make_diagnostic, response) -> None:
    transport = _transport(FakeSession([FakeResponse(201, {"id": 1}), response]))

    with pytest.raises(TransientTransportError):
        transport.send(make_batch(0, 50, [make_diagnostic()]))


def test_checks_transport_treats_client_errors_as_permanent(make_diagnostic) -> None:
    transport = _transport(FakeSession([FakeResponse(201, {"id": 1}), FakeResponse(422, {"message": "bad"})]))

    with pytest.raises(TransportError) as excinfo:
        transport.send(make_batch(0, 50, [make_diagnostic()]))

    assert not isinstance(excinfo.value, TransientTransportError)
    assert excinfo.value.status == 422


def test_checks_transport_close_without_batches_is_noop() -> None:
    session = FakeSession([])
    _transport(session).close(success=True)

    assert session.calls == []


def test_checks_transport_rejects_non_json_success_bodies(make_diagnostic) -> None:
    transport = _transport(FakeSession([FakeResponse(201, raw="<html>maintenance</html>")]))

    with pytest.raises(TransportError, match="non-JSON") as excinfo:
        transport.send(make_batch(0, 50, [make_diagnostic()]))

    assert not isinstance(excinfo.value, TransientTransportError)


def test_emitter_records_non_json_checks_response_as_failed_batch(make_diagnostic) -> None:
    session = FakeSession(
        [
            FakeResponse(201, raw="<html>"),
            FakeResponse(201, {"id": 7}),
            FakeResponse(200, {}),
        ],
    )
    emitter = AnnotationEmitter(_transport(session), batch_size=1)

    report = emitter.emit([make_diagnostic(line=1), make_diagnostic(line=2)])

    assert len(report.failures) == 1
    assert report.annotated == 1
    assert [method for method, _, _ in session.calls] == ["POST", "POST", "PATCH"]
