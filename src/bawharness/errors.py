"""Failure taxonomy and classification for BAW API calls."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

import httpx


class ErrorKind(str, Enum):
    NETWORK = "network"
    HTTP = "http"
    UNKNOWN = "unknown"


NETWORK_MESSAGE = (
    "Error de red: La llamada fue bloqueada (Posiblemente CORS o red). Revise la consola."
)
UNKNOWN_MESSAGE = "Ocurrió un error desconocido. Revise la consola."


def http_message(status: int | None, status_text: str | None, detail: str) -> str:
    """Message for a server that answered with a non-success status."""
    return f"Error de API: {status} - {status_text or detail}. Revise la consola."


class ApiCallError(Exception):
    """A failed BAW call, already classified into a user-facing message."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status: int | None = None,
        status_text: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.status = status
        self.status_text = status_text
        super().__init__(message)


class ConfigError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class HarnessInputError(Exception):
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


def classify(exc: BaseException) -> ApiCallError:
    """Map any exception raised while calling BAW onto an ApiCallError."""
    if isinstance(exc, ApiCallError):
        return exc

    if isinstance(exc, httpx.HTTPStatusError):
        resp = exc.response
        return ApiCallError(
            ErrorKind.HTTP,
            http_message(
                resp.status_code,
                resp.reason_phrase,
                f"Request failed with status code {resp.status_code}",
            ),
            status=resp.status_code,
            status_text=resp.reason_phrase or None,
        )

    # Connection refused, DNS, TLS, protocol errors and timeouts
    if isinstance(exc, httpx.TransportError):
        return ApiCallError(ErrorKind.NETWORK, NETWORK_MESSAGE)

    return ApiCallError(ErrorKind.UNKNOWN, UNKNOWN_MESSAGE)


def error_message(exc: BaseException) -> str:
    return classify(exc).message


# ---------------------------------------------------------------------------
# Explicit result type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Success:
    response: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    cause: BaseException | None = None

    @property
    def ok(self) -> bool:
        return False


CallOutcome = Union[Success, Failure]
