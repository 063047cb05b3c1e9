"""Utilitários compartilhados pelos testes."""

from unittest.mock import Mock

from gspread.exceptions import APIError

from pipereg.gateway.a1 import parse_address


def api_error(status: int, message: str = "", reason: str = "") -> APIError:
    """
    Constrói um APIError do gspread como a API o devolveria.

    Args:
        status (int): Código HTTP.
        message (str): Mensagem de erro.
        reason (str): Status textual da API (ex: "UNAUTHENTICATED").
    """
    response = Mock(status_code=status, text=message)
    response.json.return_value = {
        "error": {"code": status, "message": message, "status": reason}
    }
    return APIError(response)


def make_worksheet(title: str, sheet_id: int = 0) -> Mock:
    worksheet = Mock()
    worksheet.title = title
    worksheet.id = sheet_id
    return worksheet


def make_spreadsheet(titles=("tubing",), values=None, address=None) -> Mock:
    """
    Constrói um Spreadsheet falso com as abas e a matriz de valores informadas.

    Args:
        titles: Nomes das abas.
        values: Matriz devolvida por values_get (a partir de A1).
        address: Endereço devolvido por values_get (padrão: primeira aba A1:Z1000).
    """
    spreadsheet = Mock()
    spreadsheet.title = "Registry"
    spreadsheet.worksheets.return_value = [
        make_worksheet(title, index) for index, title in enumerate(titles)
    ]
    response = {"range": address or f"{titles[0]}!A1:Z1000"}
    if values is not None:
        response["values"] = values
    spreadsheet.values_get.return_value = response
    return spreadsheet


def make_session_manager(spreadsheet) -> Mock:
    session_manager = Mock()
    session_manager.get_session.return_value = spreadsheet
    return session_manager


class FakeSpreadsheet:
    """
    Planilha em memória que imita as chamadas do gspread usadas pelo gateway.

    ``failures`` mapeia o nome do método para uma lista de exceções a lançar
    nas próximas chamadas desse método (uma por chamada, em ordem).
    """

    def __init__(self, sheets: dict):
        self.title = "Registry"
        self.sheets = {name: [list(row) for row in rows] for name, rows in sheets.items()}
        self.failures: dict[str, list] = {}
        self.calls: list[tuple] = []

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        pending = self.failures.get(method)
        if pending:
            raise pending.pop(0)

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)

    def grid(self, title: str) -> list[list[str]]:
        """Grade da aba sem células e linhas vazias à direita/abaixo."""
        rows = [list(row) for row in self.sheets[title]]
        for row in rows:
            while row and row[-1] in ("", None):
                row.pop()
        while rows and not rows[-1]:
            rows.pop()
        return rows

    def worksheets(self):
        self._record("worksheets")
        return [make_worksheet(title, index) for index, title in enumerate(self.sheets)]

    def values_get(self, range_name, params=None):
        title = range_name.strip("'").replace("''", "'")
        self._record("values_get", title)
        response = {"range": f"'{title}'!A1:Z1000"}
        values = self.grid(title)
        if values:
            response["values"] = values
        return response

    def values_update(self, range_name, params=None, body=None):
        self._record("values_update", range_name)
        meta = parse_address(range_name)
        grid = self.sheets[meta.sheet]
        for row_offset, values in enumerate(body["values"]):
            row_number = meta.start_row + row_offset
            while len(grid) < row_number:
                grid.append([])
            target = grid[row_number - 1]
            for col_offset, value in enumerate(values):
                col_number = meta.start_col + col_offset
                while len(target) < col_number:
                    target.append("")
                target[col_number - 1] = value
        return {"updatedRange": range_name}

    def batch_update(self, body):
        self._record("batch_update")
        request = body["requests"][0]["insertDimension"]["range"]
        title = list(self.sheets)[request["sheetId"]]
        grid = self.sheets[title]
        while len(grid) < request["startIndex"]:
            grid.append([])
        grid.insert(request["startIndex"], [])
        return {}
