"""Testes unitários para o módulo errors."""

import pytest
import requests
from google.auth.exceptions import TransportError
from gspread.exceptions import SpreadsheetNotFound, WorksheetNotFound

from helpers import api_error
from pipereg.gateway.errors import (
    SESSION_RESET_KINDS,
    FailureKind,
    RemoteStoreError,
    classify_failure,
)


class TestClassifyFailure:
    """Testes para classify_failure."""

    @pytest.mark.parametrize("status", [409, 423])
    def test_locked_statuses(self, status):
        """409 e 423 indicam recurso bloqueado."""
        assert classify_failure(api_error(status)) is FailureKind.LOCKED

    def test_locked_marker_in_message(self):
        """Mensagens de bloqueio contam como LOCKED mesmo sem o status."""
        error = api_error(400, "The workbook is busy", "ABORTED")
        assert classify_failure(error) is FailureKind.LOCKED

    def test_unauthenticated_is_invalid_session(self):
        """401 indica sessão inválida."""
        error = api_error(401, "Request had invalid authentication credentials.", "UNAUTHENTICATED")
        assert classify_failure(error) is FailureKind.INVALID_SESSION

    def test_404_mentioning_session_is_invalid_session(self):
        """404 que menciona sessão indica sessão inválida."""
        error = api_error(404, "Session not found", "NOT_FOUND")
        assert classify_failure(error) is FailureKind.INVALID_SESSION

    def test_404_without_session_is_fatal(self):
        """404 comum não é falha de sessão."""
        error = api_error(404, "Requested entity was not found.", "NOT_FOUND")
        assert classify_failure(error) is FailureKind.FATAL

    def test_rate_limited(self):
        """429 e mensagens de cota indicam limitação de taxa."""
        assert classify_failure(api_error(429)) is FailureKind.RATE_LIMITED
        error = api_error(403, "Quota exceeded for quota metric 'Read requests'", "RESOURCE_EXHAUSTED")
        assert classify_failure(error) is FailureKind.RATE_LIMITED

    @pytest.mark.parametrize("status", [408, 502, 503, 504])
    def test_transient_statuses(self, status):
        """Timeouts e erros de gateway são transitórios."""
        assert classify_failure(api_error(status)) is FailureKind.TRANSIENT

    @pytest.mark.parametrize("exception", [
        requests.exceptions.ConnectionError("connection reset"),
        requests.exceptions.Timeout("read timed out"),
        TransportError("transport failed"),
        ConnectionError("broken pipe"),
        TimeoutError("timed out"),
    ])
    def test_transport_errors_are_transient(self, exception):
        """Falhas de transporte são transitórias."""
        assert classify_failure(exception) is FailureKind.TRANSIENT

    @pytest.mark.parametrize("status", [400, 403, 500])
    def test_other_statuses_are_fatal(self, status):
        """Qualquer outro status é FATAL."""
        assert classify_failure(api_error(status, "Invalid request")) is FailureKind.FATAL

    def test_not_found_exceptions_are_fatal(self):
        """Planilha ou aba inexistente é FATAL."""
        assert classify_failure(SpreadsheetNotFound("id")) is FailureKind.FATAL
        assert classify_failure(WorksheetNotFound("tubing")) is FailureKind.FATAL

    def test_unknown_exception_is_fatal(self):
        """Exceções desconhecidas são FATAL."""
        assert classify_failure(RuntimeError("boom")) is FailureKind.FATAL


class TestFailureKind:
    """Testes para FailureKind e RemoteStoreError."""

    def test_only_fatal_is_not_retryable(self):
        """Todas as classes exceto FATAL são retentáveis."""
        assert [kind for kind in FailureKind if not kind.retryable] == [FailureKind.FATAL]

    def test_session_reset_kinds(self):
        """Apenas LOCKED e INVALID_SESSION descartam a sessão."""
        assert SESSION_RESET_KINDS == {FailureKind.LOCKED, FailureKind.INVALID_SESSION}

    def test_remote_store_error_carries_kind(self):
        """RemoteStoreError deve expor a classe e as tentativas."""
        error = RemoteStoreError("falhou", FailureKind.RATE_LIMITED, attempts=5)

        assert error.kind is FailureKind.RATE_LIMITED
        assert error.attempts == 5
        assert error.retryable
