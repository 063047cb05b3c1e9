import logging
from dataclasses import dataclass, field
from typing import Any

from gspread import Spreadsheet

from ._retry import WRITE_BASE_DELAY, WRITE_MAX_DELAY, RetryExecutor
from .a1 import RangeMeta, parse_address, quote_sheet_name
from .worksheet import find_worksheet, resolve_sheet_title


logger = logging.getLogger(__name__)


@dataclass
class UsedRange:
    """
    Extensão populada de uma aba: endereço, matriz de valores e limites.

    A primeira linha da matriz é o cabeçalho. Todas as linhas têm a largura
    de ``meta`` (completadas com strings vazias).

    Attributes:
        address (str): Endereço devolvido pela API.
        values (list[list[str]]): Valores por linha.
        meta (RangeMeta): Limites 1-based do intervalo populado.
    """
    address: str
    values: list[list[str]] = field(default_factory=list)
    meta: RangeMeta = field(default_factory=lambda: RangeMeta("", 1, 1, 0, 0))

    @property
    def is_empty(self) -> bool:
        return not self.values

    @property
    def header(self) -> list[str]:
        return self.values[0] if self.values else []

    @property
    def rows(self) -> list[list[str]]:
        return self.values[1:]

    @property
    def width(self) -> int:
        return self.meta.width

    def absolute_row(self, logical_position: int) -> int:
        """
        Converte uma posição lógica (1 = logo após o cabeçalho) em número de linha da aba.
        """
        return self.meta.start_row + logical_position


def coerce_cell(value: Any) -> str:
    """Converte o valor de uma célula em string aparada (None/vazio viram "")."""
    if value is None or value == "":
        return ""
    return str(value).strip()


def normalize_row(row: list[Any] | None, width: int) -> list[str]:
    """
    Ajusta uma linha para exatamente ``width`` colunas e converte as células em string.

    Args:
        row (list | None): Valores da linha.
        width (int): Largura desejada.

    Returns:
        list[str]: Linha completada com "" ou truncada.
    """
    cells = list(row or [])[:width]
    cells.extend([""] * (width - len(cells)))
    return [coerce_cell(cell) for cell in cells]


def _is_blank(cell: Any) -> bool:
    return coerce_cell(cell) == ""


def _populated_extent(sheet_name: str, address: str, values: list[list[Any]]) -> tuple[list[list[str]], RangeMeta]:
    """
    Calcula o menor retângulo que contém alguma célula não vazia.

    Se o endereço não puder ser interpretado, usa como limites a largura da
    primeira linha e a altura da matriz, a partir de A1.
    """
    matrix = [list(row) for row in values]
    parsed = parse_address(address)

    if parsed is None:
        logger.warning("Não foi possível interpretar o endereço do intervalo usado: '%s'", address)
        width = len(matrix[0]) if matrix else 0
        meta = RangeMeta(sheet_name, 1, 1, width, len(matrix))
        return [normalize_row(row, width) for row in matrix], meta

    start_row = parsed.start_row
    start_col = parsed.start_col

    while matrix and all(_is_blank(cell) for cell in matrix[0]):
        matrix.pop(0)
        start_row += 1
    while matrix and all(_is_blank(cell) for cell in matrix[-1]):
        matrix.pop()

    if not matrix:
        return [], RangeMeta(parsed.sheet, start_col, start_row, start_col - 1, start_row - 1)

    filled_columns = [
        index for row in matrix for index, cell in enumerate(row) if not _is_blank(cell)
    ]
    first_column = min(filled_columns)
    last_column = max(filled_columns)
    width = last_column - first_column + 1

    matrix = [normalize_row(row[first_column:], width) for row in matrix]
    start_col += first_column

    meta = RangeMeta(
        sheet=parsed.sheet,
        start_col=start_col,
        start_row=start_row,
        end_col=start_col + width - 1,
        end_row=start_row + len(matrix) - 1,
    )
    return matrix, meta


def read_used_range(executor: RetryExecutor, worksheet_name: str) -> UsedRange:
    """
    Lê a extensão populada de uma aba (apenas valores, sem formatação).

    Args:
        executor (RetryExecutor): Executor por onde a chamada remota passa.
        worksheet_name (str): Nome lógico da aba.

    Returns:
        UsedRange: Endereço, matriz e limites. Matriz vazia se a aba não tiver dados.
    """
    if not worksheet_name or not worksheet_name.strip():
        raise ValueError("O nome da aba é obrigatório.")

    def _read(spreadsheet: Spreadsheet) -> dict:
        title = resolve_sheet_title(spreadsheet, worksheet_name)
        logger.debug("Lendo o intervalo usado da aba '%s'.", title)
        return spreadsheet.values_get(
            quote_sheet_name(title),
            params={"valueRenderOption": "FORMATTED_VALUE"},
        )

    response = executor.run(_read, description=f"leitura da aba '{worksheet_name}'")

    address = response.get("range", "")
    values, meta = _populated_extent(worksheet_name, address, response.get("values", []))

    logger.debug(
        "Intervalo usado da aba '%s': %s (%d linhas x %d colunas)",
        worksheet_name,
        address,
        meta.height,
        meta.width,
    )
    return UsedRange(address=address, values=values, meta=meta)


def write_range(
        executor: RetryExecutor,
        worksheet_name: str,
        address: str,
        values: list[list[Any]],
) -> bool:
    """
    Escreve uma matriz de valores em um intervalo explícito (ex: "B5:H5").

    O nome da aba é resolvido contra as abas existentes antes da escrita.
    Cada linha é ajustada à largura do intervalo e cada célula vira string aparada.

    Args:
        executor (RetryExecutor): Executor por onde a chamada remota passa.
        worksheet_name (str): Nome lógico da aba.
        address (str): Intervalo em notação A1, sem o nome da aba.
        values (list[list]): Linhas a escrever.

    Returns:
        bool: True se a escrita foi concluída.
    """
    if not worksheet_name or not worksheet_name.strip():
        raise ValueError("O nome da aba é obrigatório.")

    bounds = parse_address(f"{quote_sheet_name(worksheet_name)}!{address}")
    if bounds is None:
        raise ValueError(f"Endereço inválido para escrita: '{address}'")

    matrix = [normalize_row(row, bounds.width) for row in values]

    def _write(spreadsheet: Spreadsheet) -> None:
        title = resolve_sheet_title(spreadsheet, worksheet_name)
        full_address = f"{quote_sheet_name(title)}!{address}"
        logger.debug("Escrevendo %d linha(s) em %s", len(matrix), full_address)
        spreadsheet.values_update(
            full_address,
            params={"valueInputOption": "USER_ENTERED"},
            body={"values": matrix},
        )

    executor.run(
        _write,
        description=f"escrita em '{worksheet_name}'!{address}",
        base_delay=WRITE_BASE_DELAY,
        max_delay=WRITE_MAX_DELAY,
    )

    logger.debug("Escrita concluída em '%s'!%s.", worksheet_name, address)
    return True


def insert_row_at(
        executor: RetryExecutor,
        worksheet_name: str,
        row_number: int,
) -> bool:
    """
    Insere uma linha inteira na posição indicada, deslocando as de baixo.

    Args:
        executor (RetryExecutor): Executor por onde a chamada remota passa.
        worksheet_name (str): Nome lógico da aba.
        row_number (int): Número absoluto da linha (1-based) que a nova linha ocupará.

    Returns:
        bool: True se a inserção foi concluída.
    """
    if row_number < 1:
        raise ValueError(f"Número de linha inválido: {row_number}")

    def _insert(spreadsheet: Spreadsheet) -> None:
        worksheet = find_worksheet(spreadsheet, worksheet_name)
        logger.debug("Inserindo linha %d na aba '%s'.", row_number, worksheet.title)
        spreadsheet.batch_update({
            "requests": [
                {
                    "insertDimension": {
                        "range": {
                            "sheetId": worksheet.id,
                            "dimension": "ROWS",
                            "startIndex": row_number - 1,
                            "endIndex": row_number,
                        },
                        "inheritFromBefore": row_number > 1,
                    }
                }
            ]
        })

    executor.run(
        _insert,
        description=f"inserção da linha {row_number} em '{worksheet_name}'",
        base_delay=WRITE_BASE_DELAY,
        max_delay=WRITE_MAX_DELAY,
    )

    logger.debug("Linha %d inserida na aba '%s'.", row_number, worksheet_name)
    return True
