import logging

from gspread import Spreadsheet, Worksheet, WorksheetNotFound

from ._retry import RetryExecutor

logger = logging.getLogger(__name__)


def resolve_worksheet_name(requested: str, available: list[str]) -> str | None:
    """
    Resolve o nome lógico de uma aba contra os nomes reais da planilha.

    Ordem de preferência: igualdade exata, igualdade sem diferenciar
    maiúsculas e, por fim, substring (em qualquer direção) sem diferenciar
    maiúsculas.

    Args:
        requested (str): Nome pedido pelo chamador (ex: "tubing").
        available (list[str]): Nomes das abas existentes.

    Returns:
        str | None: Nome real da aba, ou None se nada corresponder.
    """
    if requested in available:
        return requested

    wanted = requested.strip().lower()
    for name in available:
        if name.strip().lower() == wanted:
            return name

    for name in available:
        candidate = name.strip().lower()
        if candidate and (wanted in candidate or candidate in wanted):
            return name

    return None


def _list_names(spreadsheet: Spreadsheet) -> list[str]:
    return [worksheet.title for worksheet in spreadsheet.worksheets()]


def find_worksheet(spreadsheet: Spreadsheet, worksheet_name: str) -> Worksheet:
    """
    Obtém a aba cujo nome corresponde (de forma tolerante) ao nome pedido.

    Deve ser chamada dentro de uma operação do executor.

    Args:
        spreadsheet (Spreadsheet): Sessão atual.
        worksheet_name (str): Nome lógico da aba.

    Returns:
        Worksheet: A aba encontrada.

    Raises:
        WorksheetNotFound: Se nenhuma aba corresponder.
    """
    worksheets = spreadsheet.worksheets()
    actual = resolve_worksheet_name(worksheet_name, [ws.title for ws in worksheets])
    if actual is None:
        logger.error("Aba '%s' não encontrada na planilha '%s'.", worksheet_name, spreadsheet.title)
        raise WorksheetNotFound(worksheet_name)

    if actual != worksheet_name:
        logger.debug("Aba '%s' resolvida como '%s'.", worksheet_name, actual)

    return next(ws for ws in worksheets if ws.title == actual)


def resolve_sheet_title(spreadsheet: Spreadsheet, worksheet_name: str) -> str:
    """
    Resolve o nome real da aba; se nada corresponder, segue com o nome pedido.

    Args:
        spreadsheet (Spreadsheet): Sessão atual.
        worksheet_name (str): Nome lógico da aba.

    Returns:
        str: Nome a usar nos endereços.
    """
    actual = resolve_worksheet_name(worksheet_name, _list_names(spreadsheet))
    if actual is None:
        logger.warning(
            "Aba '%s' não encontrada entre as abas existentes. Usando o nome informado.",
            worksheet_name,
        )
        return worksheet_name
    return actual


def list_worksheet_names(executor: RetryExecutor) -> list[str]:
    """
    Lista os nomes das abas da planilha.

    Args:
        executor (RetryExecutor): Executor por onde a chamada remota passa.

    Returns:
        list[str]: Nomes das abas, na ordem da planilha.
    """
    names = executor.run(_list_names, description="listagem de abas")
    logger.debug("Abas disponíveis: %s", names)
    return names
