"""
Localização de registros por chave composta e planejamento de inserção agrupada.

Posições lógicas são 1-based e relativas às linhas de dados:
1 é a primeira linha logo abaixo do cabeçalho.
"""
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .fields import ABSENT
from .operations import coerce_cell, normalize_row

logger = logging.getLogger(__name__)


def normalize_key_value(value: Any) -> str:
    """Normaliza um valor de chave para comparação (aparado e em minúsculas)."""
    return coerce_cell(value).lower()


def _key_columns(mapping: Mapping[str, int], key: Mapping[str, Any]) -> list[tuple[int, str]] | None:
    """
    Converte uma chave {campo: valor} em pares (coluna, valor_normalizado).

    Returns:
        list | None: None se algum campo da chave não tiver coluna.
    """
    columns = []
    for name, value in key.items():
        index = mapping.get(name, ABSENT)
        if index == ABSENT:
            return None
        columns.append((index, normalize_key_value(value)))
    return columns


def _validate_key(key: Mapping[str, Any]) -> None:
    if not key:
        raise ValueError("A chave do registro não pode ser vazia.")
    blank = [name for name, value in key.items() if not normalize_key_value(value)]
    if blank:
        raise ValueError(f"Campos da chave sem valor: {', '.join(blank)}")


def _cell(row: Sequence[Any], index: int) -> str:
    return normalize_key_value(row[index]) if index < len(row) else ""


def locate_row(
        rows: Sequence[Sequence[Any]],
        mapping: Mapping[str, int],
        key: Mapping[str, Any],
) -> int | None:
    """
    Encontra a primeira linha cujos campos da chave são iguais aos valores dados.

    A comparação ignora maiúsculas e espaços nas pontas. A unicidade da chave
    não é verificada: havendo duplicatas, apenas a primeira é retornada.

    Args:
        rows (Sequence): Linhas de dados (sem o cabeçalho).
        mapping (Mapping[str, int]): Mapeamento {campo: coluna}.
        key (Mapping[str, Any]): Chave composta {campo: valor}.

    Returns:
        int | None: Posição lógica (1-based) da linha, ou None se não houver correspondência.
    """
    _validate_key(key)

    columns = _key_columns(mapping, key)
    if columns is None:
        logger.warning("Campos da chave sem coluna no cabeçalho: %s", list(key))
        return None

    for position, row in enumerate(rows, start=1):
        if all(_cell(row, index) == value for index, value in columns):
            return position

    return None


def plan_insert_position(
        rows: Sequence[Sequence[Any]],
        mapping: Mapping[str, int],
        group_key: Mapping[str, Any],
) -> int:
    """
    Calcula a posição lógica que o novo registro deve ocupar para manter o agrupamento.

    Procura, de baixo para cima, a última linha com a chave de grupo completa;
    se não houver, tenta prefixos cada vez mais curtos da chave (ex: só o
    cliente). O registro entra logo abaixo da linha encontrada. Sem nenhuma
    correspondência, vai para o final.

    Args:
        rows (Sequence): Linhas de dados (sem o cabeçalho).
        mapping (Mapping[str, int]): Mapeamento {campo: coluna}.
        group_key (Mapping[str, Any]): Chave de agrupamento ordenada, do campo
            mais geral para o mais específico (ex: {"client": ..., "wo_no": ...}).

    Returns:
        int: Posição lógica (1-based) que o novo registro ocupará.
    """
    _validate_key(group_key)

    items = list(group_key.items())

    for length in range(len(items), 0, -1):
        columns = _key_columns(mapping, dict(items[:length]))
        if columns is None:
            continue

        for index in range(len(rows) - 1, -1, -1):
            row = rows[index]
            cells = [_cell(row, column) for column, _ in columns]
            if not any(cells):
                continue
            if all(cell == value for cell, (_, value) in zip(cells, columns)):
                logger.debug(
                    "Última linha do grupo %s na posição %d. Inserindo logo abaixo.",
                    [name for name, _ in items[:length]],
                    index + 1,
                )
                return index + 2

    logger.debug("Nenhuma linha do grupo %s. Inserindo no final.", list(group_key.values()))
    return len(rows) + 1


def build_pending_row(
        mapping: Mapping[str, int],
        field_values: Mapping[str, Any],
        width: int,
) -> list[str]:
    """
    Monta uma linha nova a partir de valores por campo lógico.

    Colunas sem campo correspondente ficam em branco.

    Args:
        mapping (Mapping[str, int]): Mapeamento {campo: coluna}.
        field_values (Mapping[str, Any]): Valores por campo lógico.
        width (int): Largura do intervalo usado.

    Returns:
        list[str]: Linha com exatamente ``width`` células.
    """
    row = [""] * width
    for name, value in field_values.items():
        index = mapping.get(name, ABSENT)
        if index == ABSENT or index >= width:
            logger.debug("Campo '%s' sem coluna no cabeçalho. Ignorado.", name)
            continue
        row[index] = coerce_cell(value)
    return row


def apply_field_updates(
        row: Sequence[Any],
        mapping: Mapping[str, int],
        field_updates: Mapping[str, Any],
        width: int,
) -> list[str]:
    """
    Aplica uma atualização parcial sobre uma linha existente.

    Campos sem coluna são ignorados (a célula não é tocada); valores None
    limpam a célula.

    Args:
        row (Sequence): Linha atual.
        mapping (Mapping[str, int]): Mapeamento {campo: coluna}.
        field_updates (Mapping[str, Any]): Novos valores por campo lógico.
        width (int): Largura do intervalo usado.

    Returns:
        list[str]: Nova linha com exatamente ``width`` células.
    """
    updated = normalize_row(list(row), width)
    for name, value in field_updates.items():
        index = mapping.get(name, ABSENT)
        if index == ABSENT or index >= width:
            logger.debug("Campo '%s' sem coluna no cabeçalho. Não será alterado.", name)
            continue
        updated[index] = coerce_cell(value)
    return updated


def row_to_fields(row: Sequence[Any], mapping: Mapping[str, int]) -> dict[str, str]:
    """Lê os campos lógicos de uma linha ("" para campos sem coluna)."""
    return {
        name: coerce_cell(row[index]) if index != ABSENT and index < len(row) else ""
        for name, index in mapping.items()
    }


def filled_segments(row: Sequence[Any]) -> list[tuple[int, list[str]]]:
    """
    Divide uma linha em trechos contíguos de células preenchidas.

    Usado na inserção para escrever só o que tem valor, preservando fórmulas
    já existentes nas colunas em branco.

    Args:
        row (Sequence): Linha a escrever.

    Returns:
        list[tuple[int, list[str]]]: Pares (índice_inicial, valores) em ordem.
    """
    segments: list[tuple[int, list[str]]] = []
    for index, value in enumerate(row):
        cell = coerce_cell(value)
        if not cell:
            continue
        if segments and segments[-1][0] + len(segments[-1][1]) == index:
            segments[-1][1].append(cell)
        else:
            segments.append((index, [cell]))
    return segments
