"""
Aritmética de coordenadas no estilo A1.

Funções puras para converter letras de coluna em índices (e vice-versa)
e para interpretar/construir endereços como ``tubing!A1:W999``.
Nenhuma função deste módulo realiza I/O.
"""
import re
from dataclasses import dataclass

_CELL_PATTERN = re.compile(r"^\$?([A-Za-z]+)\$?(\d+)$")


@dataclass(frozen=True)
class RangeMeta:
    """
    Limites de um intervalo retangular (1-based, inclusivos).

    Attributes:
        sheet (str): Nome da aba (sem aspas).
        start_col (int): Primeira coluna.
        start_row (int): Primeira linha.
        end_col (int): Última coluna.
        end_row (int): Última linha.
    """
    sheet: str
    start_col: int
    start_row: int
    end_col: int
    end_row: int

    @property
    def width(self) -> int:
        return max(0, self.end_col - self.start_col + 1)

    @property
    def height(self) -> int:
        return max(0, self.end_row - self.start_row + 1)


def column_index_of(letters: str) -> int:
    """
    Converte letras de coluna em índice 1-based ("A" -> 1, "Z" -> 26, "AA" -> 27).

    A leitura para no primeiro caractere que não for uma letra.

    Args:
        letters (str): Letras da coluna, sem diferenciar maiúsculas.

    Returns:
        int: Índice da coluna (0 se nenhuma letra válida for encontrada).
    """
    index = 0
    for char in letters.upper():
        if not "A" <= char <= "Z":
            break
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index


def letters_of(index: int) -> str:
    """
    Converte um índice de coluna 1-based em letras (base 26 sem dígito zero).

    Args:
        index (int): Índice da coluna (>= 1).

    Returns:
        str: Letras da coluna.
    """
    if index < 1:
        raise ValueError(f"Índice de coluna inválido: {index}")

    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def _parse_cell(cell: str) -> tuple[int, int] | None:
    match = _CELL_PATTERN.match(cell.strip())
    if not match:
        return None
    return column_index_of(match.group(1)), int(match.group(2))


def parse_address(address: str) -> RangeMeta | None:
    """
    Interpreta um endereço ``Aba!C1:C2`` (nome da aba pode estar entre aspas).

    Args:
        address (str): Endereço completo, com aba.

    Returns:
        RangeMeta | None: Limites do intervalo, ou None se o endereço não
            tiver um par coluna+linha dos dois lados.
    """
    if not address or "!" not in address:
        return None

    sheet_part, _, range_part = address.rpartition("!")
    start, separator, end = range_part.partition(":")
    if not separator:
        return None

    start_cell = _parse_cell(start)
    end_cell = _parse_cell(end)
    if start_cell is None or end_cell is None:
        return None

    sheet = sheet_part.strip().strip("'").replace("''", "'")
    return RangeMeta(
        sheet=sheet,
        start_col=start_cell[0],
        start_row=start_cell[1],
        end_col=end_cell[0],
        end_row=end_cell[1],
    )


def quote_sheet_name(sheet: str) -> str:
    """Coloca o nome da aba entre aspas simples, escapando aspas internas."""
    return "'{}'".format(sheet.replace("'", "''"))


def build_address(sheet: str | None, start_col: int, start_row: int, end_col: int, end_row: int) -> str:
    """
    Constrói um endereço A1 a partir de limites numéricos.

    Args:
        sheet (str | None): Nome da aba; se None, o endereço não leva prefixo.
        start_col (int): Primeira coluna (1-based).
        start_row (int): Primeira linha (1-based).
        end_col (int): Última coluna (1-based).
        end_row (int): Última linha (1-based).

    Returns:
        str: Endereço como ``'tubing'!A5:W5``.
    """
    cells = f"{letters_of(start_col)}{start_row}:{letters_of(end_col)}{end_row}"
    if sheet is None:
        return cells
    return f"{quote_sheet_name(sheet)}!{cells}"


def row_address(sheet: str | None, row_number: int, start_col: int, width: int) -> str:
    """Endereço de uma única linha com ``width`` colunas a partir de ``start_col``."""
    return build_address(sheet, start_col, row_number, start_col + width - 1, row_number)
