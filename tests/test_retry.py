"""Testes unitários para o módulo _retry."""

from unittest.mock import Mock, patch

import pytest
import requests
from gspread.exceptions import WorksheetNotFound

from helpers import api_error, make_session_manager
from pipereg.gateway._retry import (
    NON_RETRYABLE_EXCEPTIONS,
    WRITE_BASE_DELAY,
    WRITE_MAX_DELAY,
    RetryExecutor,
    backoff_delay,
)
from pipereg.gateway.errors import FailureKind, RemoteStoreError


@pytest.fixture
def session():
    return Mock(name="spreadsheet")


@pytest.fixture
def session_manager(session):
    return make_session_manager(session)


class TestBackoffDelay:
    """Testes para backoff_delay."""

    @patch("pipereg.gateway._retry.random.uniform", return_value=1.0)
    def test_linear_growth(self, mock_uniform):
        """O atraso deve crescer linearmente com a tentativa."""
        assert backoff_delay(1, 0.3, 5.0) == pytest.approx(0.3)
        assert backoff_delay(3, 0.3, 5.0) == pytest.approx(0.9)
        mock_uniform.assert_called_with(0.5, 1.5)

    @patch("pipereg.gateway._retry.random.uniform", return_value=1.5)
    def test_capped(self, mock_uniform):
        """O atraso nunca passa do teto."""
        assert backoff_delay(20, 0.6, 8.0) == 8.0

    def test_within_jitter_bounds(self):
        """Sem patch, o atraso fica dentro da faixa do jitter."""
        for attempt in range(1, 6):
            delay = backoff_delay(attempt, 0.3, 5.0)
            assert 0.15 * attempt <= delay <= min(5.0, 0.45 * attempt)


class TestRetryExecutor:
    """Testes para RetryExecutor.run."""

    def test_success_first_attempt(self, session_manager, session):
        """Deve passar a sessão atual para a operação e devolver o resultado."""
        executor = RetryExecutor(session_manager)
        operation = Mock(return_value="ok")

        assert executor.run(operation) == "ok"
        operation.assert_called_once_with(session)

    @patch("pipereg.gateway._retry.time.sleep")
    def test_success_after_transient_failures(self, mock_sleep, session_manager):
        """Deve retentar falhas transitórias até ter sucesso."""
        executor = RetryExecutor(session_manager)
        operation = Mock(side_effect=[api_error(503), requests.exceptions.Timeout("t"), "ok"])

        assert executor.run(operation) == "ok"
        assert operation.call_count == 3
        assert mock_sleep.call_count == 2
        session_manager.invalidate.assert_not_called()

    @patch("pipereg.gateway._retry.time.sleep")
    def test_ceiling_of_five_attempts(self, mock_sleep, session_manager):
        """Deve desistir após 5 tentativas com RemoteStoreError da última classe."""
        executor = RetryExecutor(session_manager)
        operation = Mock(side_effect=api_error(429))

        with pytest.raises(RemoteStoreError) as excinfo:
            executor.run(operation)

        assert operation.call_count == 5
        assert mock_sleep.call_count == 4
        assert excinfo.value.kind is FailureKind.RATE_LIMITED
        assert excinfo.value.attempts == 5
        assert excinfo.value.__cause__ is operation.side_effect

    @patch("pipereg.gateway._retry.time.sleep")
    def test_fatal_attempted_once(self, mock_sleep, session_manager):
        """Falhas FATAL sobem na primeira tentativa, encadeadas à causa."""
        executor = RetryExecutor(session_manager)
        cause = api_error(400, "Unable to parse range")
        operation = Mock(side_effect=cause)

        with pytest.raises(RemoteStoreError) as excinfo:
            executor.run(operation)

        assert operation.call_count == 1
        assert excinfo.value.kind is FailureKind.FATAL
        assert excinfo.value.__cause__ is cause
        mock_sleep.assert_not_called()

    @patch("pipereg.gateway._retry.time.sleep")
    def test_worksheet_not_found_is_fatal(self, mock_sleep, session_manager):
        """Aba inexistente não deve ser retentada."""
        executor = RetryExecutor(session_manager)
        operation = Mock(side_effect=WorksheetNotFound("tubing"))

        with pytest.raises(RemoteStoreError):
            executor.run(operation)

        assert operation.call_count == 1

    @patch("pipereg.gateway._retry.time.sleep")
    def test_session_invalidated_on_locked_and_invalid_session(self, mock_sleep, session_manager):
        """LOCKED e INVALID_SESSION descartam a sessão antes de retentar."""
        executor = RetryExecutor(session_manager)
        operation = Mock(side_effect=[api_error(423), api_error(401), "ok"])

        assert executor.run(operation) == "ok"
        assert operation.call_count == 3
        assert session_manager.invalidate.call_count == 2
        assert session_manager.get_session.call_count == 3

    @patch("pipereg.gateway._retry.time.sleep")
    def test_rate_limit_keeps_session(self, mock_sleep, session_manager):
        """RATE_LIMITED e TRANSIENT não descartam a sessão."""
        executor = RetryExecutor(session_manager)
        operation = Mock(side_effect=[api_error(429), api_error(502), "ok"])

        executor.run(operation)

        session_manager.invalidate.assert_not_called()

    @pytest.mark.parametrize("exception_class", NON_RETRYABLE_EXCEPTIONS)
    def test_caller_errors_not_retried(self, exception_class, session_manager):
        """Erros do chamador sobem sem retry nem reclassificação."""
        executor = RetryExecutor(session_manager)
        operation = Mock(side_effect=exception_class("bad input"))

        with pytest.raises(exception_class):
            executor.run(operation)

        assert operation.call_count == 1

    @patch("pipereg.gateway._retry.random.uniform", return_value=1.0)
    @patch("pipereg.gateway._retry.time.sleep")
    def test_delay_overrides(self, mock_sleep, mock_uniform, session_manager):
        """Atrasos por chamada devem sobrescrever os do executor."""
        executor = RetryExecutor(session_manager)
        operation = Mock(side_effect=[api_error(503), api_error(503), "ok"])

        executor.run(operation, base_delay=WRITE_BASE_DELAY, max_delay=WRITE_MAX_DELAY)

        waits = [call.args[0] for call in mock_sleep.call_args_list]
        assert waits == [pytest.approx(0.6), pytest.approx(1.2)]

    def test_invalid_tries(self, session_manager):
        """O teto de tentativas deve ser positivo."""
        with pytest.raises(ValueError):
            RetryExecutor(session_manager, tries=0)


class TestNestedOperations:
    """Testes de operações aninhadas no mesmo executor."""

    @patch("pipereg.gateway._retry.time.sleep")
    def test_inner_failure_restarts_outer_operation(self, mock_sleep, session_manager):
        """Uma primitiva interna falha uma vez e a operação externa recomeça do início."""
        executor = RetryExecutor(session_manager)
        inner = Mock(side_effect=[api_error(409), "value"])
        steps = []

        def outer(_session):
            steps.append("read")
            return executor.run(inner)

        assert executor.run(outer) == "value"
        assert steps == ["read", "read"]
        assert inner.call_count == 2

    @patch("pipereg.gateway._retry.time.sleep")
    def test_nested_retries_do_not_multiply(self, mock_sleep, session_manager):
        """Com falha persistente, o total de chamadas internas é o teto do laço externo."""
        executor = RetryExecutor(session_manager, tries=5)
        inner = Mock(side_effect=api_error(503))

        with pytest.raises(RemoteStoreError):
            executor.run(lambda _session: executor.run(inner))

        assert inner.call_count == 5

    def test_depth_reset_after_operation(self, session_manager):
        """Após a operação externa, o executor volta a aplicar retry."""
        executor = RetryExecutor(session_manager)

        executor.run(lambda _session: executor.in_operation)

        assert not executor.in_operation
