"""
Gerenciador do registro de tubos.

Os lotes ficam agrupados por cliente e work order: um lote novo entra logo
abaixo do último lote da mesma work order (ou do mesmo cliente).
"""
import logging
from collections import Counter
from typing import TYPE_CHECKING

from .tubing_schema import (
    STATUS_INSPECTION_DONE,
    TUBING_FIELDS,
    TUBING_TABLE_NAME,
    InspectionResult,
    LoadOut,
    TubingBatch,
)

if TYPE_CHECKING:
    from ..registry import Registry

logger = logging.getLogger(__name__)


class TubingTable:
    """
    Operações de domínio sobre a aba de lotes de tubos.
    """

    def __init__(self, registry: "Registry", sheet_name: str = TUBING_TABLE_NAME):
        """
        Args:
            registry (Registry): Registro por onde passam as leituras e escritas.
            sheet_name (str): Nome lógico da aba de tubos.
        """
        self.registry = registry
        self.sheet_name = sheet_name

    def add_batch(self, batch: TubingBatch) -> bool:
        """
        Registra um lote novo abaixo dos lotes da mesma work order.

        Args:
            batch (TubingBatch): Lote a registrar. pipe_to é calculado se vier vazio.

        Returns:
            bool: True se o lote foi gravado.
        """
        if not batch.client or not batch.wo_no or not batch.batch:
            raise ValueError("Cliente, WO e lote são obrigatórios.")

        batch.fill_pipe_to()

        added = self.registry.append_or_insert_grouped_record(
            self.sheet_name,
            TUBING_FIELDS,
            {"client": batch.client, "wo_no": batch.wo_no},
            batch.to_fields(),
        )
        if added:
            logger.info(f"Lote registrado: {batch.client} / {batch.wo_no} / {batch.batch}")
        return added

    def update_batch(self, client: str, wo_no: str, batch: str, updates: dict[str, str]) -> bool:
        """
        Atualiza campos arbitrários de um lote identificado por (cliente, WO, lote).

        Args:
            client (str): Cliente.
            wo_no (str): Número da work order.
            batch (str): Identificador do lote.
            updates (dict[str, str]): Novos valores por campo lógico.

        Returns:
            bool: True se o lote foi encontrado e atualizado.
        """
        return self.registry.update_record_by_key(
            self.sheet_name,
            TUBING_FIELDS,
            {"client": client, "wo_no": wo_no, "batch": batch},
            updates,
        )

    def update_inspection(self, client: str, wo_no: str, batch: str, result: InspectionResult) -> bool:
        """Grava o resultado da inspeção de um lote."""
        return self.update_batch(client, wo_no, batch, result.to_updates())

    def update_load_out(self, client: str, wo_no: str, batch: str, load_out: LoadOut) -> bool:
        """Grava os dados de expedição de um lote."""
        return self.update_batch(client, wo_no, batch, load_out.to_updates())

    def list_batches(self) -> list[TubingBatch]:
        """
        Lê todos os lotes da aba.

        Linhas sem cliente, WO ou lote são descartadas.

        Returns:
            list[TubingBatch]: Lotes na ordem da aba (vazia se a planilha estiver indisponível).
        """
        table = self.registry.read_table(self.sheet_name)
        if table is None:
            return []

        batches = []
        for record in table.records(TUBING_FIELDS):
            batch = TubingBatch.from_fields(record)
            if batch.client and batch.wo_no and batch.batch:
                batches.append(batch)
        return batches

    def find_batch(self, client: str, wo_no: str, batch: str) -> TubingBatch | None:
        """Retorna o primeiro lote com a chave informada (comparação sem caixa)."""
        wanted = (client.strip().lower(), wo_no.strip().lower(), batch.strip().lower())
        for candidate in self.list_batches():
            if (candidate.client.lower(), candidate.wo_no.lower(), candidate.batch.lower()) == wanted:
                return candidate
        return None

    def batches_ready_for_load_out(self) -> list[TubingBatch]:
        """Lotes com inspeção concluída e ainda não expedidos."""
        ready = STATUS_INSPECTION_DONE.replace(" ", "").lower()
        return [
            batch for batch in self.list_batches()
            if batch.status.replace(" ", "").lower() == ready
        ]

    def status_summary(self) -> dict[str, int]:
        """
        Conta os lotes por status.

        Returns:
            dict[str, int]: {status: quantidade}; lotes sem status contam como "".
        """
        return dict(Counter(batch.status for batch in self.list_batches()))
