from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

import httpx


class FailureKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    SERVER_ERROR = "server_error"
    HTTP_ERROR = "http_error"
    MALFORMED = "malformed"
    EMPTY = "empty"
    CONFIGURATION = "configuration"

    @property
    def retryable(self) -> bool:
        return self in _TRANSIENT


_TRANSIENT = frozenset({FailureKind.RATE_LIMITED, FailureKind.TIMEOUT, FailureKind.TRANSPORT, FailureKind.SERVER_ERROR})


class ConfigurationError(RuntimeError):
    """Provider name has no payload/extraction mapping."""


@dataclass(slots=True)
class ErrorInfo:
    category: str
    component: str
    kind: FailureKind
    message_signature: str
    http_status: int | None = None

    @property
    def retryable(self) -> bool:
        return self.kind.retryable


def _normalize_message(message: str, max_len: int = 180) -> str:
    msg = message.lower()
    msg = re.sub(r"\s+", " ", msg)
    msg = re.sub(r"\d+", "#", msg)
    return msg.strip()[:max_len]


def _compact_message(message: str, max_len: int = 220) -> str:
    msg = message.lower()
    msg = re.sub(r"\s+", " ", msg)
    return msg.strip()[:max_len]


def classify_status(status_code: int) -> FailureKind | None:
    if 200 <= status_code < 300:
        return None
    if status_code == 429:
        return FailureKind.RATE_LIMITED
    if status_code == 408:
        return FailureKind.TIMEOUT
    if status_code >= 500:
        return FailureKind.SERVER_ERROR
    return FailureKind.HTTP_ERROR


def classify_exception(exc: BaseException) -> FailureKind:
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return FailureKind.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return FailureKind.TRANSPORT
    if isinstance(exc, ConfigurationError):
        return FailureKind.CONFIGURATION
    if isinstance(exc, ValueError):
        # json decode errors and unexpected body shapes
        return FailureKind.MALFORMED
    return FailureKind.TRANSPORT


def classify_error(exc: BaseException, *, category: str, component: str) -> ErrorInfo:
    status = None
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        kind = classify_status(status) or FailureKind.HTTP_ERROR
    else:
        kind = classify_exception(exc)
    return ErrorInfo(
        category=category,
        component=component,
        kind=kind,
        message_signature=_normalize_message(str(exc)),
        http_status=status,
    )


def compact_error_summary(exc: BaseException, max_len: int = 220) -> str:
    return f"{exc.__class__.__name__}: {_compact_message(str(exc), max_len=max_len)}"
