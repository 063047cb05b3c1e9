"""
Exemplo básico de uso do Pipe Registry.

Este script demonstra o ciclo de um lote de tubos: abertura da work order,
chegada do lote, resultado da inspeção e expedição.
"""

from dotenv import load_dotenv

from pipereg import Config, Registry
from pipereg.tables.tubing_schema import InspectionResult, LoadOut, TubingBatch
from pipereg.tables.work_order_schema import WorkOrder

# Carrega variáveis de ambiente do arquivo .env
load_dotenv()


def main():
    """Função principal."""
    config = Config()
    registry = Registry(config)

    print("=" * 60)
    print(f"📊 Planilha: {config.spreadsheet_id}")
    print(f"🔐 Service Account: {config.service_account_file}")
    print("=" * 60)

    if not registry.clients.add_client("Acme", payer="Acme Holding"):
        print("⚠️  Cliente não cadastrado (planilha ocupada ou sem cabeçalho)")
        return

    order = WorkOrder(client="Acme", wo_no="2024-017", type="Tubing", diameter="73", planned_qty="120")
    registry.work_orders.create_work_order(order)

    batch = TubingBatch(client="Acme", wo_no="2024-017", batch="1", qty="60", pipe_from="1", rack="R2")
    if registry.tubing.add_batch(batch):
        print(f"✅ Lote registrado: tubos {batch.pipe_from} a {batch.pipe_to}")

    result = InspectionResult(
        class_1="52",
        class_2="5",
        scrap_total="3",
        quantities={"rattling": "60", "mpi": "57"},
        scrap={"mpi": "3"},
    )
    registry.tubing.update_inspection("Acme", "2024-017", "1", result)

    for ready in registry.tubing.batches_ready_for_load_out():
        registry.tubing.update_load_out(ready.client, ready.wo_no, ready.batch, LoadOut(act_no_oper="A-88"))
        print(f"🚚 Expedido: {ready.client} / {ready.wo_no} / {ready.batch}")

    if registry.last_failure is not None:
        print(f"❌ Última falha: {registry.last_failure}")


if __name__ == "__main__":
    main()
