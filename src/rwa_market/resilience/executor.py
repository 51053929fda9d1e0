"""Safe-call executor: the single place a remote result is checked for failure.

Every connector call goes through one of two entry points:

- ``execute(op, fallback)`` for functional reads and advisory writes. Errors
  are logged, reported to the sink, and replaced by ``fallback``. A successful
  call with no payload also yields ``fallback``.
- ``capture(op)`` for health probes and primary writes, where the error
  itself is the datum the caller needs.

Neither performs retries, and neither lets an exception escape.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from rwa_market.logging import get_logger
from rwa_market.resilience.result import CallResult, RemoteError
from rwa_market.resilience.sinks import ErrorSink, LoggingErrorSink

T = TypeVar("T")

Operation = Callable[[], Awaitable[CallResult[T]]]


class SafeCallExecutor:
    """Per-service wrapper; the service name tags logs and error reports."""

    def __init__(self, service: str, sink: ErrorSink | None = None) -> None:
        self.service = service
        self._sink = sink if sink is not None else LoggingErrorSink()
        self._log = get_logger("safe_call", service=service)

    async def execute(self, operation: Operation[T], fallback: T, *, method: str = "query") -> T:
        result = await self._run(operation, method)
        if result.error is not None:
            self.report(result.error, method=method)
            return fallback
        if result.data is None:
            return fallback
        return result.data

    async def capture(
        self,
        operation: Operation[T],
        *,
        method: str = "query",
        report: bool = True,
    ) -> CallResult[T]:
        result = await self._run(operation, method)
        if result.error is not None and report:
            self.report(result.error, method=method)
        return result

    async def _run(self, operation: Operation[T], method: str) -> CallResult[T]:
        try:
            return await operation()
        except Exception as exc:
            self._log.warning("remote_call_raised", method=method, exc_info=True)
            return CallResult.failure(RemoteError.from_exception(exc))

    def report(self, error: RemoteError, *, method: str) -> None:
        """Log a failure and hand it to the error sink."""
        self._log.warning(
            "remote_call_failed",
            method=method,
            kind=error.kind.value,
            error=error.message,
            code=error.code,
        )
        try:
            self._sink.capture(error, service=self.service, method=method)
        except Exception:
            self._log.exception("error_sink_failed", method=method)
