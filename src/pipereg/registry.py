import logging
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .config import DEFAULT_CLIENT_SHEET, DEFAULT_TUBING_SHEET, DEFAULT_WORK_ORDER_SHEET, Config
from .gateway import (
    WRITE_BASE_DELAY,
    WRITE_MAX_DELAY,
    FieldSpec,
    RangeMeta,
    RemoteStoreError,
    RetryExecutor,
    SessionManager,
    apply_field_updates,
    build_pending_row,
    filled_segments,
    insert_row_at,
    list_worksheet_names,
    locate_row,
    plan_insert_position,
    read_used_range,
    resolve_fields,
    row_address,
    row_to_fields,
    write_range,
)
from .tables.client_table import ClientTable
from .tables.tubing_table import TubingTable
from .tables.work_order_table import WorkOrderTable

logger = logging.getLogger(__name__)


@dataclass
class Table:
    """
    Conteúdo de uma aba: cabeçalho, linhas de dados e limites do intervalo usado.
    """
    header: list[str]
    rows: list[list[str]] = field(default_factory=list)
    meta: RangeMeta | None = None

    def field_map(self, field_specs: Sequence[FieldSpec]) -> dict[str, int]:
        return resolve_fields(self.header, field_specs)

    def records(self, field_specs: Sequence[FieldSpec]) -> list[dict[str, str]]:
        """
        Converte as linhas de dados em dicionários {campo_lógico: valor}.

        Linhas totalmente vazias são ignoradas.
        """
        mapping = self.field_map(field_specs)
        return [
            row_to_fields(row, mapping)
            for row in self.rows
            if any(cell for cell in row)
        ]


@dataclass
class _InsertSlot:
    row_number: int
    start_col: int
    row: list[str]


def _require_sheet_name(sheet_name: str) -> None:
    if not sheet_name or not str(sheet_name).strip():
        raise ValueError("O nome da aba é obrigatório.")


class Registry:
    """
    Registro estruturado sobre a planilha remota.

    Cada instância possui sua própria sessão e seu próprio executor de retry.
    Falhas de contenção que esgotam as tentativas não são lançadas: a operação
    retorna False/None e a falha fica em ``last_failure``, que é guardado por
    thread: cada thread só enxerga a falha da sua última chamada. Falhas FATAL
    e entradas malformadas são lançadas.
    """

    def __init__(
        self,
        config: Config | None = None,
        session_manager: SessionManager | None = None,
        executor: RetryExecutor | None = None,
    ):
        """
        Inicializa a sessão, o executor e as tabelas de domínio.

        Args:
            config (Config | None): Configuração; lida do ambiente se omitida e
                nenhum session_manager for informado.
            session_manager (SessionManager | None): Sessão já construída.
            executor (RetryExecutor | None): Executor já construído.
        """
        if session_manager is None:
            config = config or Config()
            session_manager = SessionManager(config.spreadsheet_id, config.service_account_file)

        self.config: Config | None = config
        self.session_manager: SessionManager = session_manager
        self.executor: RetryExecutor = executor or RetryExecutor(
            session_manager,
            tries=config.retry_tries if config else 5,
        )
        self._local = threading.local()

        self._setup_tables()

    @property
    def last_failure(self) -> RemoteStoreError | None:
        """Última falha de contenção absorvida por uma chamada desta thread."""
        return getattr(self._local, "last_failure", None)

    @last_failure.setter
    def last_failure(self, error: RemoteStoreError | None) -> None:
        self._local.last_failure = error

    def _setup_tables(self) -> None:
        """
        Inicializa as tabelas de domínio com os nomes de aba configurados.
        """
        config = self.config
        self.tubing = TubingTable(self, config.tubing_sheet if config else DEFAULT_TUBING_SHEET)
        self.work_orders = WorkOrderTable(
            self, config.work_order_sheet if config else DEFAULT_WORK_ORDER_SHEET
        )
        self.clients = ClientTable(self, config.client_sheet if config else DEFAULT_CLIENT_SHEET)

    def _absorb(self, error: RemoteStoreError, description: str) -> None:
        """
        Guarda uma falha de contenção esgotada; falhas FATAL são relançadas.
        """
        if not error.retryable:
            raise error
        logger.error(
            "%s indisponível após %d tentativas (%s). Tente novamente em instantes.",
            description,
            error.attempts,
            error.kind.value,
        )
        self.last_failure = error

    def reset_session(self) -> None:
        """Descarta manualmente a sessão atual."""
        self.session_manager.invalidate()

    def list_worksheet_names(self) -> list[str]:
        """
        Lista as abas da planilha.

        Returns:
            list[str]: Nomes das abas (vazia se a planilha estiver indisponível).
        """
        self.last_failure = None
        try:
            return list_worksheet_names(self.executor)
        except RemoteStoreError as e:
            self._absorb(e, "Listagem de abas")
            return []

    def read_table(self, sheet_name: str) -> Table | None:
        """
        Lê o cabeçalho e as linhas de dados de uma aba.

        Args:
            sheet_name (str): Nome lógico da aba.

        Returns:
            Table | None: Conteúdo da aba, ou None se a planilha estiver indisponível.
        """
        _require_sheet_name(sheet_name)
        self.last_failure = None

        try:
            used = read_used_range(self.executor, sheet_name)
        except RemoteStoreError as e:
            self._absorb(e, f"Leitura da aba '{sheet_name}'")
            return None

        return Table(header=list(used.header), rows=[list(row) for row in used.rows], meta=used.meta)

    def _plan_insert_slot(
        self,
        sheet_name: str,
        field_specs: Sequence[FieldSpec],
        group_key: Mapping[str, Any],
        field_values: Mapping[str, Any],
    ) -> _InsertSlot | None:
        """
        Lê a aba, planeja a posição e, se necessário, abre a linha física.
        """
        used = read_used_range(self.executor, sheet_name)
        if used.is_empty:
            logger.warning("Aba '%s' sem cabeçalho. Registro não inserido.", sheet_name)
            return None

        mapping = resolve_fields(used.header, field_specs)
        position = plan_insert_position(used.rows, mapping, group_key)
        row_number = used.absolute_row(position)

        if position <= len(used.rows):
            logger.debug(
                "Posição lógica %d (linha %d) na aba '%s'. Deslocando linhas para baixo.",
                position,
                row_number,
                sheet_name,
            )
            insert_row_at(self.executor, sheet_name, row_number)
        else:
            logger.debug("Acrescentando registro na linha %d da aba '%s'.", row_number, sheet_name)

        row = build_pending_row(mapping, {**group_key, **field_values}, used.width)
        return _InsertSlot(row_number=row_number, start_col=used.meta.start_col, row=row)

    def append_or_insert_grouped_record(
        self,
        sheet_name: str,
        field_specs: Sequence[FieldSpec],
        group_key: Mapping[str, Any],
        field_values: Mapping[str, Any],
    ) -> bool:
        """
        Insere um registro logo abaixo do último registro do mesmo grupo.

        A leitura, o planejamento e a inserção da linha física formam uma única
        unidade de retry (recomeça da leitura). A escrita da linha nova é
        retentada separadamente para que a inserção não seja repetida, e só
        cobre as células preenchidas (fórmulas nas colunas em branco ficam).

        Args:
            sheet_name (str): Nome lógico da aba.
            field_specs (Sequence[FieldSpec]): Tabela de campos da aba.
            group_key (Mapping[str, Any]): Chave de agrupamento ordenada (ex: cliente, WO).
            field_values (Mapping[str, Any]): Valores do registro por campo lógico.

        Returns:
            bool: True se o registro foi gravado.
        """
        _require_sheet_name(sheet_name)
        if not group_key:
            raise ValueError("A chave de agrupamento não pode ser vazia.")
        self.last_failure = None

        try:
            slot = self.executor.run(
                lambda _: self._plan_insert_slot(sheet_name, field_specs, group_key, field_values),
                description=f"inserção agrupada em '{sheet_name}'",
                base_delay=WRITE_BASE_DELAY,
                max_delay=WRITE_MAX_DELAY,
            )
            if slot is None:
                return False

            for offset, values in filled_segments(slot.row):
                address = row_address(None, slot.row_number, slot.start_col + offset, len(values))
                write_range(self.executor, sheet_name, address, [values])

        except RemoteStoreError as e:
            self._absorb(e, f"Inserção na aba '{sheet_name}'")
            return False

        logger.info(
            "Registro %s inserido na linha %d da aba '%s'.",
            list(group_key.values()),
            slot.row_number,
            sheet_name,
        )
        return True

    def _update_once(
        self,
        sheet_name: str,
        field_specs: Sequence[FieldSpec],
        key: Mapping[str, Any],
        field_updates: Mapping[str, Any],
    ) -> bool:
        used = read_used_range(self.executor, sheet_name)
        if used.is_empty:
            logger.warning("Aba '%s' vazia. Nada a atualizar.", sheet_name)
            return False

        mapping = resolve_fields(used.header, field_specs)
        position = locate_row(used.rows, mapping, key)
        if position is None:
            logger.warning(
                "Registro %s não encontrado na aba '%s'.", list(key.values()), sheet_name
            )
            return False

        row = apply_field_updates(used.rows[position - 1], mapping, field_updates, used.width)
        row_number = used.absolute_row(position)
        address = row_address(None, row_number, used.meta.start_col, used.width)
        write_range(self.executor, sheet_name, address, [row])

        logger.info(
            "Registro %s atualizado na linha %d da aba '%s'.",
            list(key.values()),
            row_number,
            sheet_name,
        )
        return True

    def update_record_by_key(
        self,
        sheet_name: str,
        field_specs: Sequence[FieldSpec],
        key: Mapping[str, Any],
        field_updates: Mapping[str, Any],
    ) -> bool:
        """
        Atualiza parcialmente o primeiro registro cuja chave composta corresponde.

        Leitura, localização e escrita formam uma única unidade de retry.
        A linha inteira é regravada com USER_ENTERED a partir dos valores
        formatados lidos: células não alteradas voltam como texto (fórmulas
        viram valores e "007" pode ser interpretado como 7).

        Args:
            sheet_name (str): Nome lógico da aba.
            field_specs (Sequence[FieldSpec]): Tabela de campos da aba.
            key (Mapping[str, Any]): Chave composta {campo: valor}.
            field_updates (Mapping[str, Any]): Novos valores por campo lógico.

        Returns:
            bool: True se o registro foi atualizado; False se não foi encontrado
                ou se a planilha estiver indisponível.
        """
        _require_sheet_name(sheet_name)
        if not key:
            raise ValueError("A chave do registro não pode ser vazia.")
        self.last_failure = None

        try:
            return self.executor.run(
                lambda _: self._update_once(sheet_name, field_specs, key, field_updates),
                description=f"atualização em '{sheet_name}'",
                base_delay=WRITE_BASE_DELAY,
                max_delay=WRITE_MAX_DELAY,
            )
        except RemoteStoreError as e:
            self._absorb(e, f"Atualização na aba '{sheet_name}'")
            return False
