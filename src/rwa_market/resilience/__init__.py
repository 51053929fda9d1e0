"""Failure isolation for remote calls."""

from rwa_market.resilience.executor import SafeCallExecutor
from rwa_market.resilience.result import CallResult, ErrorKind, MappingError, RemoteError
from rwa_market.resilience.sinks import (
    ErrorReport,
    ErrorSink,
    LoggingErrorSink,
    RecordingErrorSink,
)

__all__ = [
    "CallResult",
    "ErrorKind",
    "ErrorReport",
    "ErrorSink",
    "LoggingErrorSink",
    "MappingError",
    "RecordingErrorSink",
    "RemoteError",
    "SafeCallExecutor",
]
