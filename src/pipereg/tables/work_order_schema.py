"""
Definição do schema da aba de work orders (WO).
"""
from dataclasses import dataclass, field
from datetime import date

from ..gateway import field_spec

WORK_ORDER_TABLE_NAME = "wo"

WORK_ORDER_FIELDS = (
    field_spec("client", "client"),
    field_spec("wo_type", "wo type"),
    field_spec("wo_no", "wo", "work order", exclude=("date", "type")),
    field_spec("wo_date", "date"),
    field_spec("type", "type"),
    field_spec("diameter", "diameter", "диаметр"),
    field_spec("coupling_replace", "coupling"),
    field_spec("transport_cost", "transport cost"),
    field_spec("transport", "transport"),
    field_spec("key", "key"),
    field_spec("payer", "payer"),
    field_spec("planned_qty", "qty", "quantity"),
)


@dataclass
class WorkOrder:
    """
    Work order de inspeção de tubos.

    A chave é (client, wo_no).

    Attributes:
        client (str): Cliente.
        wo_no (str): Número da work order.
        wo_date (str): Data de abertura (ISO 8601).
        type (str): Tipo de tubo.
        coupling_replace (str): Troca de luvas ("Yes"/"No").
        planned_qty (str): Quantidade planejada de tubos.
    """
    client: str
    wo_no: str
    wo_date: str = field(default_factory=lambda: date.today().isoformat())
    wo_type: str = ""
    type: str = ""
    diameter: str = ""
    coupling_replace: str = "No"
    transport: str = ""
    transport_cost: str = ""
    key: str = ""
    payer: str = ""
    planned_qty: str = ""

    def to_fields(self) -> dict[str, str]:
        """
        Converte para o dicionário {campo_lógico: valor}.

        Returns:
            dict[str, str]: Valores de todos os campos de WORK_ORDER_FIELDS.
        """
        return {
            "client": self.client,
            "wo_type": self.wo_type,
            "wo_no": self.wo_no,
            "wo_date": self.wo_date,
            "type": self.type,
            "diameter": self.diameter,
            "coupling_replace": self.coupling_replace,
            "transport_cost": self.transport_cost,
            "transport": self.transport,
            "key": self.key,
            "payer": self.payer,
            "planned_qty": self.planned_qty,
        }

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> "WorkOrder":
        """Reconstrói a work order a partir de {campo_lógico: valor}."""
        return cls(
            client=fields.get("client", ""),
            wo_no=fields.get("wo_no", ""),
            wo_date=fields.get("wo_date", ""),
            wo_type=fields.get("wo_type", ""),
            type=fields.get("type", ""),
            diameter=fields.get("diameter", ""),
            coupling_replace=fields.get("coupling_replace", ""),
            transport=fields.get("transport", ""),
            transport_cost=fields.get("transport_cost", ""),
            key=fields.get("key", ""),
            payer=fields.get("payer", ""),
            planned_qty=fields.get("planned_qty", ""),
        )
