"""
Taxonomia de falhas do armazenamento remoto.

Toda exceção vinda da API da planilha é classificada em um FailureKind.
As classes LOCKED, INVALID_SESSION, RATE_LIMITED e TRANSIENT são absorvidas
pelo executor de retry; FATAL é propagada imediatamente.
"""
from enum import Enum

import requests
from google.auth.exceptions import TransportError
from gspread.exceptions import APIError, SpreadsheetNotFound, WorksheetNotFound


class FailureKind(str, Enum):
    LOCKED = "locked"
    INVALID_SESSION = "invalid_session"
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    FATAL = "fatal"

    @property
    def retryable(self) -> bool:
        return self is not FailureKind.FATAL


# Classes que descartam a sessão antes da próxima tentativa
SESSION_RESET_KINDS = frozenset({FailureKind.LOCKED, FailureKind.INVALID_SESSION})

LOCKED_STATUSES = frozenset({409, 423})
INVALID_SESSION_STATUSES = frozenset({401})
RATE_LIMITED_STATUSES = frozenset({429})
TRANSIENT_STATUSES = frozenset({408, 502, 503, 504})

LOCKED_MARKERS = ("itemlocked", "locked", "workbookbusy", "busy", "aborted")
INVALID_SESSION_MARKERS = ("invalidsession", "sessionnotfound", "sessionexpired", "unauthenticated")
RATE_LIMITED_MARKERS = ("ratelimit", "rate limit", "resource_exhausted", "quota")

TRANSIENT_EXCEPTIONS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    TransportError,
    ConnectionError,
    TimeoutError,
)


class RemoteStoreError(Exception):
    """
    Falha classificada do armazenamento remoto.

    Sempre lançada com ``raise ... from`` para preservar a causa original.

    Attributes:
        kind (FailureKind): Classe da falha.
        attempts (int): Quantas tentativas foram feitas antes de desistir.
    """

    def __init__(self, message: str, kind: FailureKind, attempts: int = 1):
        super().__init__(message)
        self.kind = kind
        self.attempts = attempts

    @property
    def retryable(self) -> bool:
        return self.kind.retryable


def _status_code(exception: Exception) -> int | None:
    response = getattr(exception, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(status, int):
        return status
    code = getattr(exception, "code", None)
    if isinstance(code, int) and code > 0:
        return code
    return None


def _error_text(exception: Exception) -> str:
    error = getattr(exception, "error", None)
    if isinstance(error, dict):
        text = f"{error.get('status', '')} {error.get('message', '')}"
    else:
        text = str(exception)
    return text.lower()


def classify_failure(exception: BaseException) -> FailureKind:
    """
    Classifica uma exceção da camada remota.

    Args:
        exception (BaseException): Exceção capturada durante uma chamada remota.

    Returns:
        FailureKind: Classe da falha.
    """
    if isinstance(exception, (SpreadsheetNotFound, WorksheetNotFound)):
        return FailureKind.FATAL

    if isinstance(exception, TRANSIENT_EXCEPTIONS):
        return FailureKind.TRANSIENT

    if not isinstance(exception, APIError):
        return FailureKind.FATAL

    status = _status_code(exception)
    text = _error_text(exception)
    compact = text.replace(" ", "").replace("_", "")

    if status in LOCKED_STATUSES or any(marker in compact for marker in LOCKED_MARKERS):
        return FailureKind.LOCKED

    if (
        status in INVALID_SESSION_STATUSES
        or (status == 404 and "session" in text)
        or any(marker in compact for marker in INVALID_SESSION_MARKERS)
    ):
        return FailureKind.INVALID_SESSION

    if status in RATE_LIMITED_STATUSES or any(marker in text for marker in RATE_LIMITED_MARKERS):
        return FailureKind.RATE_LIMITED

    if status in TRANSIENT_STATUSES:
        return FailureKind.TRANSIENT

    return FailureKind.FATAL
