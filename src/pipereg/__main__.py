"""Ponto de entrada para execução do módulo como script."""

import logging
import sys

from .config import Config
from .gateway import RemoteStoreError
from .registry import Registry


def main():
    """Mostra as abas da planilha e o resumo de lotes por status."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = Config()
        registry = Registry(config)

        print(f"Planilha: {config.spreadsheet_id}")

        names = registry.list_worksheet_names()
        if registry.last_failure is not None:
            print("Planilha indisponível no momento. Tente novamente em instantes.", file=sys.stderr)
            sys.exit(2)

        print("Abas:")
        for name in names:
            print(f"  - {name}")

        summary = registry.tubing.status_summary()
        print(f"\nLotes por status ({config.tubing_sheet}):")
        for status, count in sorted(summary.items()):
            print(f"  {status or '(sem status)'}: {count}")

    except KeyboardInterrupt:
        print("\nInterrompido.")
        sys.exit(0)
    except (ValueError, RemoteStoreError) as e:
        print(f"Erro fatal: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
