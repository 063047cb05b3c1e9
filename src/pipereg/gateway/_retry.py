import logging
import random
import threading
import time
from collections.abc import Callable
from typing import TypeVar

from gspread import Spreadsheet

from .connection import SessionManager
from .errors import SESSION_RESET_KINDS, FailureKind, RemoteStoreError, classify_failure

logger = logging.getLogger(__name__)

ReturnType = TypeVar("ReturnType")

# Exceções que NÃO devem passar por retry nem ser reclassificadas (erros lógicos/do chamador)
NON_RETRYABLE_EXCEPTIONS = (
    ValueError,
    KeyError,
    TypeError,
)

DEFAULT_TRIES = 5
READ_BASE_DELAY = 0.3
READ_MAX_DELAY = 5.0
WRITE_BASE_DELAY = 0.6
WRITE_MAX_DELAY = 8.0


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """
    Calcula o atraso antes da próxima tentativa: ``min(cap, base * tentativa * U(0.5, 1.5))``.

    Args:
        attempt (int): Número da tentativa que falhou (1-based).
        base_delay (float): Atraso base em segundos.
        max_delay (float): Teto do atraso em segundos.

    Returns:
        float: Atraso em segundos.
    """
    jitter = random.uniform(0.5, 1.5)
    return min(max_delay, base_delay * attempt * jitter)


class RetryExecutor:
    """
    Ponto único por onde passam todas as chamadas remotas.

    Cada operação recebe a sessão atual. Falhas são classificadas; as
    retentáveis geram espera com backoff e nova tentativa (descartando a sessão
    quando ela é a culpada), até o teto de tentativas. Falhas FATAL sobem na hora.

    Operações aninhadas (uma operação lógica que chama primitivas do gateway)
    executam as primitivas internas uma única vez: a falha sobe até o laço
    externo, que recomeça a operação inteira a partir da leitura.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        tries: int = DEFAULT_TRIES,
        base_delay: float = READ_BASE_DELAY,
        max_delay: float = READ_MAX_DELAY,
    ):
        if tries < 1:
            raise ValueError("O número de tentativas deve ser ao menos 1.")

        self.session_manager = session_manager
        self.tries = tries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._local = threading.local()

    @property
    def in_operation(self) -> bool:
        return getattr(self._local, "depth", 0) > 0

    def run(
        self,
        operation: Callable[[Spreadsheet], ReturnType],
        description: str = "operação remota",
        base_delay: float | None = None,
        max_delay: float | None = None,
    ) -> ReturnType:
        """
        Executa uma operação remota com retry e backoff com jitter.

        Args:
            operation (Callable): Recebe a sessão atual e faz a chamada remota.
            description (str): Nome da operação para os logs.
            base_delay (float | None): Sobrescreve o atraso base do executor.
            max_delay (float | None): Sobrescreve o teto de atraso do executor.

        Returns:
            O resultado da operação, se bem-sucedida.

        Raises:
            RemoteStoreError: Falha FATAL, ou falha retentável após esgotar as tentativas.
        """
        if self.in_operation:
            return operation(self.session_manager.get_session())

        base = self.base_delay if base_delay is None else base_delay
        cap = self.max_delay if max_delay is None else max_delay
        exception: Exception | None = None
        kind = FailureKind.FATAL

        for attempt in range(1, self.tries + 1):
            self._local.depth = 1
            try:
                return operation(self.session_manager.get_session())

            except NON_RETRYABLE_EXCEPTIONS:
                raise

            except RemoteStoreError:
                raise

            except Exception as e:
                exception = e
                kind = classify_failure(e)

                if kind is FailureKind.FATAL:
                    logger.error("Falha fatal em %s: %s", description, str(e))
                    raise RemoteStoreError(
                        f"Falha fatal em {description}: {e}", kind, attempts=attempt
                    ) from e

                if kind in SESSION_RESET_KINDS:
                    self.session_manager.invalidate()

                if attempt == self.tries:
                    logger.error(
                        "Todas as tentativas de %s falharam após %d tentativas (%s): %s",
                        description,
                        self.tries,
                        kind.value,
                        str(e),
                        exc_info=True,
                    )
                    break

                wait = backoff_delay(attempt, base, cap)
                logger.warning(
                    "Tentativa %d/%d de %s falhou (%s): %s. Retentando em %.2f segundos...",
                    attempt,
                    self.tries,
                    description,
                    kind.value,
                    str(e),
                    wait,
                )
                time.sleep(wait)

            finally:
                self._local.depth = 0

        assert exception is not None
        raise RemoteStoreError(
            f"{description} falhou após {self.tries} tentativas ({kind.value}): {exception}",
            kind,
            attempts=self.tries,
        ) from exception
