# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Outbound transports delivering annotation batches to the CI platform."""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final, Protocol, TextIO

import requests

from ..core.errors import TransientTransportError, TransportError
from .records import AnnotationBatch, AnnotationLevel, AnnotationRecord

LOGGER = logging.getLogger(__name__)

DEFAULT_API_URL: Final[str] = "https://api.github.com"
DEFAULT_CHECK_NAME: Final[str] = "ghannotate"
CHECKS_API_LIMIT: Final[int] = 50
WORKFLOW_COMMAND_LIMIT: Final[int] = 50
_API_VERSION: Final[str] = "2022-11-28"
_RATE_LIMIT_HEADER: Final[str] = "X-RateLimit-Remaining"

_WORKFLOW_LEVELS: Final[dict[AnnotationLevel, str]] = {
    AnnotationLevel.FAILURE: "error",
    AnnotationLevel.WARNING: "warning",
    AnnotationLevel.NOTICE: "notice",
}


class Transport(Protocol):
    """Deliver annotation batches to a platform."""

    name: str
    limit: int

    def send(self, batch: AnnotationBatch) -> None:
        """Deliver ``batch`` or raise :class:`TransportError`."""
        ...

    def close(self, *, success: bool) -> None:
        """Finalise delivery once the run outcome is known."""
        ...


def escape_data(value: str) -> str:
    """Escape a workflow command message."""

    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    """Escape a workflow command property value."""

    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def format_workflow_command(record: AnnotationRecord) -> str:
    """Render ``record`` as a ``::level file=...::message`` workflow command."""

    properties = [f"file={escape_property(record.path)}", f"line={record.start_line}"]
    if record.end_line != record.start_line:
        properties.append(f"endLine={record.end_line}")
    if record.start_column is not None:
        properties.append(f"col={record.start_column}")
        if record.end_column is not None:
            properties.append(f"endColumn={record.end_column}")
    if record.title:
        properties.append(f"title={escape_property(record.title)}")
    level = _WORKFLOW_LEVELS[record.annotation_level]
    return f"::{level} {','.join(properties)}::{escape_data(record.message.strip())}"


@dataclass(slots=True)
class WorkflowCommandTransport:
    """Print workflow commands that the Actions runner turns into annotations."""

    stream: TextIO | None = None
    name: str = "workflow"
    limit: int = WORKFLOW_COMMAND_LIMIT

    def send(self, batch: AnnotationBatch) -> None:
        out = self.stream or sys.stdout
        try:
            for record in batch.records:
                out.write(f"{format_workflow_command(record)}\n")
            out.flush()
        except OSError as exc:
            raise TransportError(f"unable to write workflow commands: {exc}") from exc

    def close(self, *, success: bool) -> None:
        del success


@dataclass(slots=True)
class MemoryTransport:
    """Keep delivered batches in memory (dry runs and tests)."""

    name: str = "memory"
    limit: int = CHECKS_API_LIMIT
    batches: list[AnnotationBatch] = field(default_factory=list)
    outcome: bool | None = None

    def send(self, batch: AnnotationBatch) -> None:
        self.batches.append(batch)

    def close(self, *, success: bool) -> None:
        self.outcome = success

    @property
    def records(self) -> list[AnnotationRecord]:
        return [record for batch in self.batches for record in batch.records]


@dataclass(slots=True)
class ChecksApiTransport:
    """Publish annotations on a GitHub check run through the REST API.

    The check run is created lazily with the first batch and completed by
    :meth:`close` once the exit policy has decided the outcome.
    """

    token: str
    repository: str
    head_sha: str
    api_url: str = DEFAULT_API_URL
    check_name: str = DEFAULT_CHECK_NAME
    timeout: float = 10.0
    session: requests.Session = field(default_factory=requests.Session)
    name: str = "checks"
    limit: int = CHECKS_API_LIMIT
    check_run_id: int | None = None
    annotated: int = 0

    def send(self, batch: AnnotationBatch) -> None:
        check_run_id = self._ensure_check_run()
        total = self.annotated + len(batch)
        self._request(
            "PATCH",
            f"/check-runs/{check_run_id}",
            {
                "output": {
                    "title": self.check_name,
                    "summary": f"{total} annotation(s)",
                    "annotations": [record.to_payload() for record in batch.records],
                },
            },
        )
        self.annotated = total

    def close(self, *, success: bool) -> None:
        if self.check_run_id is None:
            return
        self._request(
            "PATCH",
            f"/check-runs/{self.check_run_id}",
            {"status": "completed", "conclusion": "success" if success else "failure"},
        )

    def _ensure_check_run(self) -> int:
        if self.check_run_id is not None:
            return self.check_run_id
        body = self._request(
            "POST",
            "/check-runs",
            {"name": self.check_name, "head_sha": self.head_sha, "status": "in_progress"},
        )
        identifier = body.get("id")
        if not isinstance(identifier, int):
            raise TransportError("check run creation returned no id")
        LOGGER.debug("created check run id=%s", identifier)
        self.check_run_id = identifier
        return identifier

    def _request(self, method: str, path: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        url = f"{self.api_url.rstrip('/')}/repos/{self.repository}{path}"
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": _API_VERSION,
        }
        try:
            response = self.session.request(method, url, json=payload, headers=headers, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise TransientTransportError(f"{method} {url} failed: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        status = response.status_code
        if status >= 500 or status == 429 or (status == 403 and response.headers.get(_RATE_LIMIT_HEADER) == "0"):
            raise TransientTransportError(f"{method} {url} returned {status}", status=status)
        if status >= 400:
            raise TransportError(f"{method} {url} returned {status}: {response.text[:200]}", status=status)
        if not response.content:
            return {}
        try:
            data = response.json()
        except requests.JSONDecodeError as exc:
            raise TransportError(f"{method} {url} returned {status} with a non-JSON body", status=status) from exc
        return data if isinstance(data, dict) else {}


__all__ = [
    "CHECKS_API_LIMIT",
    "ChecksApiTransport",
    "MemoryTransport",
    "Transport",
    "WorkflowCommandTransport",
    "escape_data",
    "escape_property",
    "format_workflow_command",
]
