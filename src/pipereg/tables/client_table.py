"""
Gerenciador da aba de clientes.
"""
import logging
from typing import TYPE_CHECKING

from .client_schema import CLIENT_FIELDS, CLIENT_TABLE_NAME, ClientRecord

if TYPE_CHECKING:
    from ..registry import Registry

logger = logging.getLogger(__name__)


class ClientTable:
    """
    Cadastro de clientes.
    """

    def __init__(self, registry: "Registry", sheet_name: str = CLIENT_TABLE_NAME):
        self.registry = registry
        self.sheet_name = sheet_name

    def list_client_records(self) -> list[ClientRecord]:
        """Clientes com nome preenchido, na ordem da aba."""
        table = self.registry.read_table(self.sheet_name)
        if table is None:
            return []

        records = [ClientRecord.from_fields(record) for record in table.records(CLIENT_FIELDS)]
        return [record for record in records if record.name]

    def list_clients(self) -> list[str]:
        """
        Nomes dos clientes, sem repetição (comparação sem caixa).

        Returns:
            list[str]: Nomes na ordem da primeira ocorrência.
        """
        seen: set[str] = set()
        names: list[str] = []
        for record in self.list_client_records():
            folded = record.name.lower()
            if folded not in seen:
                seen.add(folded)
                names.append(record.name)
        return names

    def add_client(self, name: str, payer: str = "", client_code: str = "") -> bool:
        """
        Cadastra um cliente.

        Se já existir um cliente com o mesmo nome, o novo registro entra logo
        abaixo dele.

        Returns:
            bool: True se foi gravado.
        """
        if not name or not name.strip():
            raise ValueError("O nome do cliente é obrigatório.")

        client = ClientRecord(name=name.strip(), payer=payer, client_code=client_code)
        added = self.registry.append_or_insert_grouped_record(
            self.sheet_name,
            CLIENT_FIELDS,
            {"name": client.name},
            client.to_fields(),
        )
        if added:
            logger.info(f"Cliente cadastrado: {client.name}")
        return added

    def update_client(
        self,
        original_name: str,
        name: str | None = None,
        payer: str | None = None,
        client_code: str | None = None,
    ) -> bool:
        """
        Atualiza um cliente pelo nome atual; argumentos None não são alterados.

        Returns:
            bool: True se o cliente foi encontrado e atualizado.
        """
        if name is not None and not name.strip():
            raise ValueError("O novo nome do cliente não pode ser vazio.")

        updates = {
            field_name: value
            for field_name, value in (("name", name), ("payer", payer), ("client_code", client_code))
            if value is not None
        }
        return self.registry.update_record_by_key(
            self.sheet_name,
            CLIENT_FIELDS,
            {"name": original_name},
            updates,
        )
