"""
Testes unitários para o módulo worksheet.
"""

from unittest.mock import patch

import pytest
from gspread.exceptions import WorksheetNotFound

from helpers import api_error, make_session_manager, make_spreadsheet
from pipereg.gateway._retry import RetryExecutor
from pipereg.gateway.errors import RemoteStoreError
from pipereg.gateway.worksheet import (
    find_worksheet,
    list_worksheet_names,
    resolve_sheet_title,
    resolve_worksheet_name,
)


class TestResolveWorksheetName:
    """Testes para resolve_worksheet_name."""

    def test_exact_match_wins(self):
        """Igualdade exata tem prioridade."""
        assert resolve_worksheet_name("wo", ["WO", "wo", "wo archive"]) == "wo"

    def test_case_insensitive_equality(self):
        """Sem igualdade exata, vale a igualdade sem caixa."""
        assert resolve_worksheet_name("tubing", ["Client", "TUBING"]) == "TUBING"

    def test_substring_either_direction(self):
        """Por fim, substring em qualquer direção."""
        assert resolve_worksheet_name("tubing", ["Client", "Tubing 2024"]) == "Tubing 2024"
        assert resolve_worksheet_name("client list", ["wo", "Client"]) == "Client"

    def test_no_match(self):
        """Deve retornar None quando nada corresponde."""
        assert resolve_worksheet_name("tubing", ["wo", "client"]) is None


class TestFindWorksheet:
    """Testes para find_worksheet e resolve_sheet_title."""

    def test_find_worksheet_tolerant(self):
        """Deve devolver a aba cujo título corresponde ao nome lógico."""
        spreadsheet = make_spreadsheet(titles=("WO", "Tubing"))

        worksheet = find_worksheet(spreadsheet, "tubing")

        assert worksheet.title == "Tubing"
        assert worksheet.id == 1

    def test_find_worksheet_missing_raises(self):
        """Deve lançar WorksheetNotFound quando nada corresponde."""
        spreadsheet = make_spreadsheet(titles=("wo",))

        with pytest.raises(WorksheetNotFound):
            find_worksheet(spreadsheet, "tubing")

    def test_resolve_sheet_title_falls_back_to_given_name(self):
        """Sem correspondência, segue com o nome informado."""
        spreadsheet = make_spreadsheet(titles=("wo",))

        assert resolve_sheet_title(spreadsheet, "tubing") == "tubing"


class TestListWorksheetNames:
    """Testes para list_worksheet_names."""

    def test_lists_titles_in_order(self):
        """Deve devolver os títulos na ordem da planilha."""
        spreadsheet = make_spreadsheet(titles=("tubing", "wo", "client"))
        executor = RetryExecutor(make_session_manager(spreadsheet))

        assert list_worksheet_names(executor) == ["tubing", "wo", "client"]

    @patch("pipereg.gateway._retry.time.sleep")
    def test_retries_through_executor(self, mock_sleep):
        """Falhas transitórias da listagem devem ser retentadas."""
        spreadsheet = make_spreadsheet(titles=("tubing",))
        worksheets = spreadsheet.worksheets.return_value
        spreadsheet.worksheets.side_effect = [api_error(503), worksheets]
        executor = RetryExecutor(make_session_manager(spreadsheet))

        assert list_worksheet_names(executor) == ["tubing"]
        assert spreadsheet.worksheets.call_count == 2

    def test_fatal_failure_raises(self):
        """Falhas FATAL devem subir como RemoteStoreError."""
        spreadsheet = make_spreadsheet()
        spreadsheet.worksheets.side_effect = api_error(403, "The caller does not have permission")
        executor = RetryExecutor(make_session_manager(spreadsheet))

        with pytest.raises(RemoteStoreError):
            list_worksheet_names(executor)
