"""Result and error types returned at every connector boundary."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure taxonomy shared by connectors, probes and the assembler."""

    NOT_CONFIGURED = "not_configured"
    TRANSPORT = "transport"
    SCHEMA = "schema"
    PERMISSION = "permission"
    MAPPING = "mapping"
    REMOTE = "remote"


@dataclass(frozen=True)
class RemoteError:
    """A failed remote call, classified where it was produced."""

    message: str
    kind: ErrorKind = ErrorKind.REMOTE
    code: str | None = None
    hint: str | None = None
    status: int | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> RemoteError:
        message = str(exc) or type(exc).__name__
        return cls(message=message, kind=ErrorKind.TRANSPORT)

    @classmethod
    def not_configured(cls, service: str) -> RemoteError:
        return cls(message=f"{service} not configured", kind=ErrorKind.NOT_CONFIGURED)


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """Either ``data`` or ``error``. ``data`` may be None on success."""

    data: T | None = None
    error: RemoteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T | None = None) -> CallResult[T]:
        return cls(data=data)

    @classmethod
    def failure(cls, error: RemoteError) -> CallResult[T]:
        return cls(error=error)


class MappingError(ValueError):
    """A fetched record could not be normalized into the domain model."""

    def __init__(self, record_id: str | None, reason: str) -> None:
        super().__init__(f"record {record_id or '?'}: {reason}")
        self.record_id = record_id
        self.reason = reason
