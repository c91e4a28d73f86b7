"""Typed request failures raised by the backend transport."""

from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    NETWORK = "network"
    TIMEOUT = "timeout"
    HTTP = "http"
    UNKNOWN = "unknown"


class RequestError(Exception):
    """Base class for failures talking to the backend."""

    kind: ErrorKind = ErrorKind.UNKNOWN


class NetworkError(RequestError):
    """The connection could not be established or was dropped."""

    kind = ErrorKind.NETWORK


class RequestTimeout(RequestError):
    """The attempt did not complete within its deadline."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Request timed out after {timeout:g}s")
        self.timeout = timeout


class HttpStatusError(RequestError):
    """The backend answered with a non-2xx status."""

    kind = ErrorKind.HTTP

    def __init__(self, status_code: int, reason: str = "", message: str | None = None) -> None:
        super().__init__(message or f"Server returned {status_code}: {reason}")
        self.status_code = status_code
        self.reason = reason


def error_kind(exc: BaseException) -> ErrorKind:
    if isinstance(exc, RequestError):
        return exc.kind
    return ErrorKind.UNKNOWN


def is_quiet(exc: BaseException) -> bool:
    """Connectivity failures are expected while the backend starts up; keep them out of warnings."""
    return error_kind(exc) in (ErrorKind.NETWORK, ErrorKind.TIMEOUT)


def error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__
