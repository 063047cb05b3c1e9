"""
Definição do schema da aba de clientes.
"""
from dataclasses import dataclass

from ..gateway import field_spec

CLIENT_TABLE_NAME = "client"

CLIENT_FIELDS = (
    field_spec("name", "client", "name", exclude=("code",)),
    field_spec("payer", "payer"),
    field_spec("client_code", "code"),
)


@dataclass
class ClientRecord:
    """
    Cliente cadastrado.

    Attributes:
        name (str): Nome do cliente (chave).
        payer (str): Pagador associado.
        client_code (str): Código interno do cliente.
    """
    name: str
    payer: str = ""
    client_code: str = ""

    def to_fields(self) -> dict[str, str]:
        return {"name": self.name, "payer": self.payer, "client_code": self.client_code}

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> "ClientRecord":
        return cls(
            name=fields.get("name", ""),
            payer=fields.get("payer", ""),
            client_code=fields.get("client_code", ""),
        )
