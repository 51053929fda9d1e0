"""Error-tracking sinks that receive every failed remote call."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from rwa_market.logging import get_logger
from rwa_market.resilience.result import RemoteError


class ErrorSink(Protocol):
    def capture(self, error: RemoteError, *, service: str, method: str) -> None: ...


class LoggingErrorSink:
    """Emit each report as a structured ``error_reported`` event."""

    def __init__(self) -> None:
        self._log = get_logger("error_sink")

    def capture(self, error: RemoteError, *, service: str, method: str) -> None:
        self._log.error(
            "error_reported",
            service=service,
            method=method,
            kind=error.kind.value,
            message=error.message,
            code=error.code,
            hint=error.hint,
            status=error.status,
        )


@dataclass(frozen=True)
class ErrorReport:
    service: str
    method: str
    error: RemoteError
    ts: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class RecordingErrorSink:
    """Keep the most recent reports in memory, optionally forwarding them.

    Backs the ``/api/errors`` diagnostics view and the test suite.
    """

    def __init__(self, max_reports: int = 200, forward_to: ErrorSink | None = None) -> None:
        self._reports: deque[ErrorReport] = deque(maxlen=max_reports)
        self._forward_to = forward_to

    def capture(self, error: RemoteError, *, service: str, method: str) -> None:
        self._reports.append(ErrorReport(service=service, method=method, error=error))
        if self._forward_to is not None:
            self._forward_to.capture(error, service=service, method=method)

    @property
    def reports(self) -> list[ErrorReport]:
        return list(self._reports)

    def for_service(self, service: str) -> list[ErrorReport]:
        return [r for r in self._reports if r.service == service]

    def clear(self) -> None:
        self._reports.clear()
