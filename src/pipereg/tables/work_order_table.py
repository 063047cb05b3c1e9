"""
Gerenciador da aba de work orders.
"""
import logging
from typing import TYPE_CHECKING

from .work_order_schema import WORK_ORDER_FIELDS, WORK_ORDER_TABLE_NAME, WorkOrder

if TYPE_CHECKING:
    from ..registry import Registry

logger = logging.getLogger(__name__)


class WorkOrderTable:
    """
    Operações de domínio sobre a aba de work orders, agrupadas por cliente.
    """

    def __init__(self, registry: "Registry", sheet_name: str = WORK_ORDER_TABLE_NAME):
        self.registry = registry
        self.sheet_name = sheet_name

    def create_work_order(self, order: WorkOrder) -> bool:
        """
        Registra uma work order abaixo das demais do mesmo cliente.

        Args:
            order (WorkOrder): Work order a registrar.

        Returns:
            bool: True se foi gravada.
        """
        if not order.client or not order.wo_no:
            raise ValueError("Cliente e número da WO são obrigatórios.")

        created = self.registry.append_or_insert_grouped_record(
            self.sheet_name,
            WORK_ORDER_FIELDS,
            {"client": order.client},
            order.to_fields(),
        )
        if created:
            logger.info(f"Work order criada: {order.client} / {order.wo_no}")
        return created

    def update_work_order(self, client: str, wo_no: str, **updates: str) -> bool:
        """
        Atualiza campos de uma work order identificada por (cliente, WO).

        Returns:
            bool: True se a work order foi encontrada e atualizada.
        """
        return self.registry.update_record_by_key(
            self.sheet_name,
            WORK_ORDER_FIELDS,
            {"client": client, "wo_no": wo_no},
            updates,
        )

    def list_work_orders(self) -> list[WorkOrder]:
        """Todas as work orders com cliente e número, na ordem da aba."""
        table = self.registry.read_table(self.sheet_name)
        if table is None:
            return []

        orders = [WorkOrder.from_fields(record) for record in table.records(WORK_ORDER_FIELDS)]
        return [order for order in orders if order.client and order.wo_no]

    def work_orders_for_client(self, client: str) -> list[str]:
        """
        Números das work orders de um cliente, sem repetição.

        Args:
            client (str): Cliente (comparação sem caixa).

        Returns:
            list[str]: Números na ordem em que aparecem na aba.
        """
        wanted = client.strip().lower()
        numbers: list[str] = []
        for order in self.list_work_orders():
            if order.client.lower() == wanted and order.wo_no not in numbers:
                numbers.append(order.wo_no)
        return numbers

    def get_work_order(self, client: str, wo_no: str) -> WorkOrder | None:
        """Primeira work order com a chave informada, ou None."""
        wanted = (client.strip().lower(), wo_no.strip().lower())
        for order in self.list_work_orders():
            if (order.client.lower(), order.wo_no.lower()) == wanted:
                return order
        return None
